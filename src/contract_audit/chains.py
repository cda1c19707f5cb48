"""
Chain registry: chain identifier -> explorer API endpoint, chain id and key.

- Explorer URLs are the v1 `.../api` endpoints; the explorer client upgrades
  to v2 on its own when an explorer reports v1 as deprecated
- API keys are read from the environment at lookup time
"""

import os
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union

from .errors import ChainNotConfiguredError


@dataclass(frozen=True)
class ChainConfig:
    name: str
    chain_id: int
    explorer_url: str
    api_key_env: str
    aliases: Tuple[str, ...] = ()

    @property
    def api_key(self) -> Optional[str]:
        """Explorer key for this chain, or None so the client sends the public placeholder."""
        return os.getenv(self.api_key_env) or None


@dataclass(frozen=True)
class ExplorerContext:
    """Everything a resolution stage needs to talk to one explorer."""
    base_url: str
    api_key: Optional[str]
    chain_id: Optional[int]

    @classmethod
    def from_chain(cls, chain: ChainConfig, api_key: Optional[str] = None) -> "ExplorerContext":
        return cls(base_url=chain.explorer_url, api_key=api_key or chain.api_key, chain_id=chain.chain_id)


CHAINS: List[ChainConfig] = [
    ChainConfig("ethereum", 1, "https://api.etherscan.io/api", "ETHERSCAN_API_KEY", ("eth", "mainnet")),
    ChainConfig("sepolia", 11155111, "https://api-sepolia.etherscan.io/api", "ETHERSCAN_API_KEY"),
    ChainConfig("bsc", 56, "https://api.bscscan.com/api", "BSCSCAN_API_KEY", ("bnb", "binance")),
    ChainConfig("polygon", 137, "https://api.polygonscan.com/api", "POLYGONSCAN_API_KEY", ("matic",)),
    ChainConfig("arbitrum", 42161, "https://api.arbiscan.io/api", "ARBISCAN_API_KEY", ("arb",)),
    ChainConfig("optimism", 10, "https://api-optimistic.etherscan.io/api", "OPTIMISTIC_ETHERSCAN_API_KEY", ("op",)),
    ChainConfig("base", 8453, "https://api.basescan.org/api", "BASESCAN_API_KEY"),
    ChainConfig("avalanche", 43114, "https://api.snowtrace.io/api", "SNOWTRACE_API_KEY", ("avax",)),
    ChainConfig("fantom", 250, "https://api.ftmscan.com/api", "FTMSCAN_API_KEY", ("ftm",)),
    ChainConfig("gnosis", 100, "https://api.gnosisscan.io/api", "GNOSISSCAN_API_KEY", ("xdai",)),
    ChainConfig("celo", 42220, "https://api.celoscan.io/api", "CELOSCAN_API_KEY"),
    ChainConfig("linea", 59144, "https://api.lineascan.build/api", "LINEASCAN_API_KEY"),
    ChainConfig("scroll", 534352, "https://api.scrollscan.com/api", "SCROLLSCAN_API_KEY"),
    ChainConfig("blast", 81457, "https://api.blastscan.io/api", "BLASTSCAN_API_KEY"),
    ChainConfig("moonbeam", 1284, "https://api-moonbeam.moonscan.io/api", "MOONSCAN_API_KEY"),
]


def _build_index() -> Dict[str, ChainConfig]:
    index: Dict[str, ChainConfig] = {}
    for chain in CHAINS:
        index[chain.name] = chain
        index[str(chain.chain_id)] = chain
        for alias in chain.aliases:
            index[alias] = chain
    return index


_INDEX = _build_index()


def supported_chains() -> List[str]:
    """Registry chain names, in declaration order."""
    return [c.name for c in CHAINS]


def resolve_chain(identifier: Union[str, int]) -> ChainConfig:
    """
    Look up a chain by name, alias or numeric chain id.

    Args:
        identifier: e.g. "ethereum", "BSC", "137" or 137

    Returns:
        ChainConfig

    Raises:
        ChainNotConfiguredError: If the identifier is unknown
    """
    key = str(identifier).strip().lower()
    chain = _INDEX.get(key)
    if chain is None:
        raise ChainNotConfiguredError(
            f"Unsupported chain: {identifier!r} (supported: {', '.join(supported_chains())})"
        )
    return chain
