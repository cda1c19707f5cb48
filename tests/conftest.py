"""Shared test fixtures: fake explorer over requests.get, fake inference client."""

import os

# No real explorer or inference keys in tests.
for _name in ("ETHERSCAN_API_KEY", "BSCSCAN_API_KEY", "NEVERSIGHT_API_KEY", "AI_MODEL", "AI_LANGUAGE"):
    os.environ.pop(_name, None)

import json
from types import SimpleNamespace
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock, patch

import pytest

from contract_audit.chains import ExplorerContext
from contract_audit.models import CompilerSettings, ContractBundle, SourceFile

PROXY_ADDRESS = "0x" + "a" * 40
IMPLEMENTATION_ADDRESS = "0x" + "b" * 40
PLAIN_ADDRESS = "0x" + "c" * 40

ERC20_ABI = [
    {"type": "function", "name": "transfer", "inputs": [], "outputs": []},
    {"type": "event", "name": "Transfer", "inputs": []},
]


def explorer_body(status: str, message: str, result: Any) -> Dict[str, Any]:
    return {"status": status, "message": message, "result": result}


def source_item(source_code: str, name: str = "Token", implementation: str = "", **extra: Any) -> Dict[str, Any]:
    item = {
        "SourceCode": source_code,
        "ContractName": name,
        "CompilerVersion": "v0.8.20+commit.a1b79de6",
        "OptimizationUsed": "1",
        "Runs": "200",
        "Implementation": implementation,
    }
    item.update(extra)
    return item


def http_response(body: Any, status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = body if isinstance(body, str) else json.dumps(body)
    return response


class FakeExplorer:
    """
    Routes `requests.get` calls by (action, address) to canned bodies and
    records every call.
    """

    def __init__(self):
        self.routes: Dict[tuple, Any] = {}
        self.calls: List[Dict[str, Any]] = []

    def add(self, action: str, address: str, body: Any, status_code: int = 200) -> None:
        self.routes[(action, address.lower())] = (body, status_code)

    def add_source(self, address: str, item: Dict[str, Any]) -> None:
        self.add("getsourcecode", address, explorer_body("1", "OK", [item]))

    def add_abi(self, address: str, abi: Optional[List[Dict[str, Any]]]) -> None:
        if abi is None:
            self.add("getabi", address, explorer_body("0", "NOTOK", "Contract source code not verified"))
        else:
            self.add("getabi", address, explorer_body("1", "OK", json.dumps(abi)))

    def calls_for(self, action: str) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["params"].get("action") == action]

    def __call__(self, url: str, params=None, timeout=None) -> MagicMock:
        query = dict(params or [])
        self.calls.append({"url": url, "params": query, "timeout": timeout})
        key = (query.get("action"), str(query.get("address", "")).lower())
        if key not in self.routes:
            return http_response(explorer_body("0", "NOTOK", "Contract source code not verified"))
        body, status_code = self.routes[key]
        if isinstance(body, Exception):
            raise body
        return http_response(body, status_code)


@pytest.fixture
def fake_explorer():
    explorer = FakeExplorer()
    with patch("contract_audit.clients.explorer.client.requests.get", side_effect=explorer):
        yield explorer


@pytest.fixture
def explorer_ctx() -> ExplorerContext:
    return ExplorerContext(base_url="https://api.etherscan.io/api", api_key="test-key", chain_id=1)


def make_bundle(
    files: Optional[List[SourceFile]] = None,
    is_proxy: bool = False,
    implementation_address: Optional[str] = None,
    **extra: Any,
) -> ContractBundle:
    files = files or [SourceFile(name="Token.sol", path="Token.sol", content="contract Token {}")]
    return ContractBundle(
        address=PLAIN_ADDRESS,
        chain_id=1,
        contract_name="Token",
        compiler_version="v0.8.20+commit.a1b79de6",
        files=tuple(files),
        settings=CompilerSettings(),
        is_proxy=is_proxy,
        implementation_address=implementation_address,
        **extra,
    )


@pytest.fixture
def bundle() -> ContractBundle:
    return make_bundle()


def completion(content: Optional[str]) -> SimpleNamespace:
    """Minimal chat completion shaped like the SDK response."""
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class FakeInferenceClient:
    """
    Stand-in for AsyncOpenAI: `async with` support and a scripted
    `chat.completions.create`.
    """

    def __init__(self, create):
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=create))
        self.closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        self.closed = True
        return False
