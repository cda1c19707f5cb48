"""Request/response envelopes for explorer calls."""

import json
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Tuple

import requests

from .constants import PUBLIC_API_KEY_PLACEHOLDER, STATUS_SUCCESS
from .versioning import to_v2_base_url


@dataclass(frozen=True)
class ExplorerRequest:
    """
    One explorer query. Never mutated: the v2 retry is a new instance.
    """
    base_url: str
    params: Tuple[Tuple[str, str], ...]
    use_v2: bool = False

    @classmethod
    def build(cls, base_url: str, api_key: Optional[str], params: Dict[str, str]) -> "ExplorerRequest":
        """
        Build a v1-style query (module/action/address/apikey).

        Args:
            base_url: Explorer API base URL
            api_key: Explorer API key; blank or None falls back to the public placeholder
            params: Query parameters without the key

        Returns:
            ExplorerRequest
        """
        query = {k: str(v) for k, v in params.items() if k != "apikey"}
        query["apikey"] = api_key.strip() if api_key and api_key.strip() else PUBLIC_API_KEY_PLACEHOLDER
        return cls(base_url=base_url, params=tuple(query.items()))

    def upgraded(self, chain_id: Optional[int]) -> "ExplorerRequest":
        """Same query against the v2 endpoint shape, with `chainid` when known."""
        params = tuple((k, v) for k, v in self.params if k != "chainid")
        if chain_id:
            params = params + (("chainid", str(chain_id)),)
        return replace(self, base_url=to_v2_base_url(self.base_url), params=params, use_v2=True)

    @property
    def api_version(self) -> str:
        return "v2" if self.use_v2 else "v1"

    def param(self, key: str) -> Optional[str]:
        return dict(self.params).get(key)

    @property
    def url(self) -> str:
        """Full query-string URL as it goes on the wire."""
        return requests.Request("GET", self.base_url, params=list(self.params)).prepare().url

    @property
    def redacted_url(self) -> str:
        """URL safe for logs and error messages."""
        params = [(k, "***" if k == "apikey" else v) for k, v in self.params]
        return requests.Request("GET", self.base_url, params=params).prepare().url


@dataclass(frozen=True)
class ExplorerResult:
    """
    Explorer response envelope.

    `raw` keeps the body text when it was not a JSON object, so unexpected
    shapes degrade to diagnostics instead of crashing.
    """
    status: Optional[str]
    message: str
    result: Any
    raw: Optional[str] = None
    request: Optional[ExplorerRequest] = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_SUCCESS

    @classmethod
    def from_http(cls, body: str, http_status: int, request: Optional[ExplorerRequest] = None) -> "ExplorerResult":
        """
        Decode an HTTP body into a result envelope.

        Args:
            body: Response body text
            http_status: HTTP status code
            request: Request that produced the body

        Returns:
            ExplorerResult (never raises on bad payloads)
        """
        try:
            data = json.loads(body)
        except (TypeError, ValueError):
            data = None

        if not isinstance(data, dict):
            return cls(status=None, message=f"HTTP {http_status}", result=None, raw=body, request=request)

        status = data.get("status")
        return cls(
            status=str(status) if status is not None else None,
            message=str(data.get("message") or ""),
            result=data.get("result"),
            request=request,
        )
