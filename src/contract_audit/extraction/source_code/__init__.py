"""Source extraction package split by normalize/fetch flows."""

from .fetching import fetch_abi, resolve_contract, resolve_proxy
from .normalizer import normalize_source, parse_compiler_settings, prefix_files

__all__ = [
    "fetch_abi",
    "normalize_source",
    "parse_compiler_settings",
    "prefix_files",
    "resolve_contract",
    "resolve_proxy",
]
