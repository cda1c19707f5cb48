"""Etherscan-compatible explorer client with the one-shot v1 -> v2 upgrade."""

import asyncio
import logging
from typing import Dict, Optional

import requests

from ...errors import ExplorerTransportError
from .constants import EXPLORER_TIMEOUT, STATUS_FAILURE
from .models import ExplorerRequest, ExplorerResult
from .versioning import is_deprecated_v1_error

logger = logging.getLogger(__name__)


def _send(request: ExplorerRequest) -> ExplorerResult:
    """Issue one GET. Each call owns its connection; nothing is pooled."""
    logger.debug(f"GET {request.redacted_url}")
    try:
        response = requests.get(request.base_url, params=list(request.params), timeout=EXPLORER_TIMEOUT)
    except requests.RequestException as e:
        raise ExplorerTransportError(
            f"Explorer unreachable ({request.redacted_url}): {e}"
        ) from e

    return ExplorerResult.from_http(response.text, response.status_code, request)


async def fetch_explorer(
    base_url: str,
    api_key: Optional[str],
    chain_id: Optional[int],
    params: Dict[str, str],
) -> ExplorerResult:
    """
    Query an explorer API, upgrading to v2 once if v1 reports itself deprecated.

    Args:
        base_url: Explorer API base URL (v1 shape)
        api_key: Explorer API key (placeholder used when missing)
        chain_id: Numeric chain id, sent as `chainid` on v2
        params: module/action/address query parameters

    Returns:
        ExplorerResult of the last request issued

    Raises:
        ExplorerTransportError: On network failure (not retried here)
    """
    request = ExplorerRequest.build(base_url, api_key, params)
    logger.info(f"Explorer {params.get('action')} for {params.get('address')} ({request.api_version})")

    result = await asyncio.to_thread(_send, request)

    if result.status == STATUS_FAILURE and is_deprecated_v1_error(result):
        upgraded = request.upgraded(chain_id)
        logger.warning(f"⚠️  Explorer v1 API deprecated, retrying on v2: {upgraded.redacted_url}")
        result = await asyncio.to_thread(_send, upgraded)

    if not result.ok:
        logger.info(f"Explorer returned status={result.status} message={result.message!r}")

    return result
