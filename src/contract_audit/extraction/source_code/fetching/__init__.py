"""Explorer-backed resolution stages: source lookup, proxy split, ABI, bundle."""

from .abi import count_abi_entries, fetch_abi
from .bundle import resolve_contract
from .providers import fetch_source_item
from .proxies import ProxyResolution, implementation_address_of, resolve_proxy

__all__ = [
    "ProxyResolution",
    "count_abi_entries",
    "fetch_abi",
    "fetch_source_item",
    "implementation_address_of",
    "resolve_contract",
    "resolve_proxy",
]
