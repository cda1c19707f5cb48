"""Etherscan-family explorer client."""

from .client import fetch_explorer
from .constants import PUBLIC_API_KEY_PLACEHOLDER, ZERO_ADDRESS
from .models import ExplorerRequest, ExplorerResult
from .versioning import is_deprecated_v1_error, to_v2_base_url

__all__ = [
    "ExplorerRequest",
    "ExplorerResult",
    "PUBLIC_API_KEY_PLACEHOLDER",
    "ZERO_ADDRESS",
    "fetch_explorer",
    "is_deprecated_v1_error",
    "to_v2_base_url",
]
