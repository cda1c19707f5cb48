"""AI audit generation: prompt building, retries and cancellation."""

from .cancellation import CancelToken
from .classification import classify_analysis_error
from .models import AnalysisRequest, AnalysisResult, AnalysisState
from .orchestrator import AnalysisOrchestrator, analyze_contract
from .prompt import build_prompt, select_audit_files

__all__ = [
    "AnalysisOrchestrator",
    "AnalysisRequest",
    "AnalysisResult",
    "AnalysisState",
    "CancelToken",
    "analyze_contract",
    "build_prompt",
    "classify_analysis_error",
    "select_audit_files",
]
