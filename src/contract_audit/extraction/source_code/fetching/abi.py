"""ABI retrieval. ABI is auxiliary metadata: every failure degrades to []."""

import json
from typing import Any, Dict, List

from ....chains import ExplorerContext
from ....clients.explorer import fetch_explorer
from ....errors import ResolutionError
from ..shared import logger


async def fetch_abi(address: str, explorer_ctx: ExplorerContext) -> List[Dict[str, Any]]:
    """
    Fetch a contract ABI. Never raises.

    Args:
        address: Contract address
        explorer_ctx: Explorer endpoint, key and chain id

    Returns:
        ABI entries, or [] on failure status, transport error or unparseable result
    """
    try:
        result = await fetch_explorer(
            explorer_ctx.base_url,
            explorer_ctx.api_key,
            explorer_ctx.chain_id,
            {"module": "contract", "action": "getabi", "address": address},
        )
    except ResolutionError as e:
        logger.warning(f"⚠️  ABI fetch failed for {address}: {e}")
        return []

    if not result.ok or not isinstance(result.result, str):
        logger.warning(f"⚠️  No ABI for {address}: status={result.status} message={result.message!r}")
        return []

    try:
        abi = json.loads(result.result)
    except json.JSONDecodeError as e:
        logger.warning(f"⚠️  Error parsing ABI for {address}: {e}")
        return []

    if not isinstance(abi, list):
        logger.warning(f"⚠️  ABI for {address} is not a JSON array")
        return []

    logger.info(f"Fetched ABI for {address} ({count_abi_entries(abi)['functions']} functions)")
    return abi


def count_abi_entries(abi: List[Dict[str, Any]]) -> Dict[str, int]:
    """Count functions, events and errors in an ABI."""
    counts = {"functions": 0, "events": 0, "errors": 0}
    for entry in abi:
        if not isinstance(entry, dict):
            continue
        kind = entry.get("type")
        if kind == "function":
            counts["functions"] += 1
        elif kind == "event":
            counts["events"] += 1
        elif kind == "error":
            counts["errors"] += 1
    return counts
