"""
Contract audit: resolve verified smart-contract source from Etherscan-family
explorers and audit it with an AI model.
"""

from .auditing import AnalysisOrchestrator, AnalysisResult, AnalysisState, CancelToken, analyze_contract
from .chains import ChainConfig, resolve_chain, supported_chains
from .config import AIConfig, EnvConfigStore, JsonConfigStore
from .errors import AnalysisError, ContractAuditError, ProxyPartialError, ResolutionError
from .extraction import resolve_contract
from .models import ContractBundle, SourceFile

__version__ = "0.1.0"

__all__ = [
    "AIConfig",
    "AnalysisError",
    "AnalysisOrchestrator",
    "AnalysisResult",
    "AnalysisState",
    "CancelToken",
    "ChainConfig",
    "ContractAuditError",
    "ContractBundle",
    "EnvConfigStore",
    "JsonConfigStore",
    "ProxyPartialError",
    "ResolutionError",
    "SourceFile",
    "analyze_contract",
    "resolve_chain",
    "resolve_contract",
    "supported_chains",
]
