"""
Proxy/implementation split resolution.

Proxy status comes solely from the explorer-reported `Implementation` field.
Explorers run their own EIP-1967/UUPS/transparent/beacon detection; storage
slots are not read here.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ....chains import ExplorerContext
from ....clients.explorer import ZERO_ADDRESS
from ....errors import ProxyPartialError, ResolutionError
from ....models import ROLE_IMPLEMENTATION, ROLE_PLAIN, ROLE_PROXY, SourceFile
from ..normalizer import normalize_source, prefix_files
from ..shared import logger
from .providers import fetch_source_item


@dataclass
class ProxyResolution:
    is_proxy: bool
    files: List[SourceFile] = field(default_factory=list)
    implementation_address: Optional[str] = None
    partial_error: Optional[ProxyPartialError] = None


def implementation_address_of(result: Dict[str, Any]) -> Optional[str]:
    """
    Normalized implementation address reported by the explorer.

    Args:
        result: `getsourcecode` result object

    Returns:
        The address, or None when missing, blank or the zero address
    """
    implementation = result.get("Implementation")
    if not isinstance(implementation, str):
        return None
    implementation = implementation.strip()
    if not implementation or implementation.lower() == ZERO_ADDRESS:
        return None
    return implementation


async def _implementation_files(address: str, explorer_ctx: ExplorerContext) -> List[SourceFile]:
    item = await fetch_source_item(address, explorer_ctx)
    files = normalize_source(item["SourceCode"], item.get("ContractName") or "")
    return prefix_files(files, ROLE_IMPLEMENTATION)


async def resolve_proxy(result: Dict[str, Any], explorer_ctx: ExplorerContext) -> ProxyResolution:
    """
    Build the role-tagged file set for a `getsourcecode` result.

    Proxy files are prefixed `proxy/`, implementation files `implementation/`,
    always (not only on conflict), so both sets coexist without path collisions.
    A failed implementation lookup keeps the proxy files and records a
    ProxyPartialError instead of failing.

    Args:
        result: Primary `getsourcecode` result object
        explorer_ctx: Explorer endpoint, key and chain id

    Returns:
        ProxyResolution with proxy files first
    """
    contract_name = result.get("ContractName") or ""
    own_files = normalize_source(result.get("SourceCode") or "", contract_name)
    implementation = implementation_address_of(result)

    if implementation is None:
        return ProxyResolution(is_proxy=False, files=prefix_files(own_files, ROLE_PLAIN))

    logger.info(f"Detected proxy via explorer, implementation: {implementation}")
    files = prefix_files(own_files, ROLE_PROXY)

    try:
        implementation_files = await _implementation_files(implementation, explorer_ctx)
    except ResolutionError as e:
        partial = ProxyPartialError(implementation, str(e))
        logger.warning(f"⚠️  {partial} - returning proxy source only")
        return ProxyResolution(
            is_proxy=True,
            files=files,
            implementation_address=implementation,
            partial_error=partial,
        )

    logger.info(f"✓ Resolved {len(files)} proxy file(s) and {len(implementation_files)} implementation file(s)")
    return ProxyResolution(
        is_proxy=True,
        files=files + implementation_files,
        implementation_address=implementation,
    )
