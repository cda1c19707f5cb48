"""
Explorer API version handling.

Etherscan-family explorers signal a retired v1 surface only through human
readable text, so detection is a substring heuristic. Keep it in this module:
call sites only ever ask `is_deprecated_v1_error()`.
"""

from typing import Any
from urllib.parse import urlsplit, urlunsplit


def is_deprecated_v1_error(result: Any) -> bool:
    """
    Check whether an explorer failure says the v1 endpoint is deprecated.

    Args:
        result: ExplorerResult (or anything exposing `message` and `result`)

    Returns:
        True if the combined result/message text mentions both "deprecated" and "v1"
    """
    text = f"{getattr(result, 'result', '') or ''} {getattr(result, 'message', '') or ''}".lower()
    return "deprecated" in text and "v1" in text


def to_v2_base_url(v1_url: str) -> str:
    """
    Rewrite a v1 explorer URL into its v2 shape.

    Most explorers serve v1 at `.../api` and v2 at `.../v2/api`, so a `v2`
    segment is inserted before the trailing endpoint. URLs already on v2 are
    returned unchanged.

    Args:
        v1_url: Explorer base URL (may carry a query string)

    Returns:
        v2 base URL
    """
    parts = urlsplit(v1_url)
    path = parts.path.rstrip("/")
    if "/v2/" in f"{path}/":
        return v1_url

    head, _, endpoint = path.rpartition("/")
    new_path = f"{head}/v2/{endpoint}" if endpoint else "/v2"
    return urlunsplit((parts.scheme, parts.netloc, new_path, parts.query, parts.fragment))
