"""Verified-source lookup on Etherscan-family explorers."""

from typing import Any, Dict

from ....chains import ExplorerContext
from ....clients.explorer import fetch_explorer
from ....errors import ExplorerResponseError, SourceNotVerifiedError
from ..shared import logger


async def fetch_source_item(address: str, explorer_ctx: ExplorerContext) -> Dict[str, Any]:
    """
    Fetch the `getsourcecode` record for an address.

    Args:
        address: Contract address
        explorer_ctx: Explorer endpoint, key and chain id

    Returns:
        First result object (SourceCode, ContractName, CompilerVersion,
        OptimizationUsed, Runs, Implementation, ...)

    Raises:
        ExplorerTransportError: Explorer unreachable
        ExplorerResponseError: Failure status or unusable result payload
        SourceNotVerifiedError: The contract has no verified source
    """
    result = await fetch_explorer(
        explorer_ctx.base_url,
        explorer_ctx.api_key,
        explorer_ctx.chain_id,
        {"module": "contract", "action": "getsourcecode", "address": address},
    )

    if not result.ok:
        raise ExplorerResponseError(
            f"Failed to fetch contract source for {address}",
            status=result.status,
            explorer_message=result.message,
            result=result.result if result.raw is None else result.raw,
        )

    items = result.result if isinstance(result.result, list) else []
    item = items[0] if items else None
    if not isinstance(item, dict):
        raise ExplorerResponseError(
            f"Explorer returned no source record for {address}",
            status=result.status,
            explorer_message=result.message,
            result=result.result,
        )

    source_code = item.get("SourceCode")
    if not isinstance(source_code, str) or not source_code.strip():
        raise SourceNotVerifiedError(
            f"Contract source code not verified: {address}",
            status=result.status,
            explorer_message=result.message,
        )

    logger.info(f"Fetched source for {item.get('ContractName') or address} ({len(source_code)} chars)")
    return item
