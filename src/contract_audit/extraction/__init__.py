"""Contract source extraction utilities."""

from .source_code import (
    fetch_abi,
    normalize_source,
    parse_compiler_settings,
    resolve_contract,
    resolve_proxy,
)

__all__ = [
    "fetch_abi",
    "normalize_source",
    "parse_compiler_settings",
    "resolve_contract",
    "resolve_proxy",
]
