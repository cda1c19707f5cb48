"""Tests for proxy detection and the proxy/implementation file split."""

import json

import pytest
import requests

from conftest import IMPLEMENTATION_ADDRESS, source_item
from contract_audit.clients.explorer import ZERO_ADDRESS
from contract_audit.extraction.source_code.fetching import implementation_address_of, resolve_proxy

PROXY_SOURCE = "{" + json.dumps({
    "sources": {
        "contracts/proxy/ERC1967Proxy.sol": {"content": "contract ERC1967Proxy {}"},
        "contracts/proxy/Proxy.sol": {"content": "abstract contract Proxy {}"},
    }
}) + "}"
IMPLEMENTATION_SOURCE = "{" + json.dumps({
    "sources": {
        "contracts/Vault.sol": {"content": "contract Vault {}"},
        "contracts/proxy/Proxy.sol": {"content": "abstract contract Proxy {}"},
        "contracts/Math.sol": {"content": "library Math {}"},
    }
}) + "}"


def test_implementation_address_rules() -> None:
    assert implementation_address_of({"Implementation": IMPLEMENTATION_ADDRESS}) == IMPLEMENTATION_ADDRESS
    assert implementation_address_of({"Implementation": f"  {IMPLEMENTATION_ADDRESS} "}) == IMPLEMENTATION_ADDRESS
    assert implementation_address_of({"Implementation": ""}) is None
    assert implementation_address_of({"Implementation": ZERO_ADDRESS}) is None
    assert implementation_address_of({}) is None


@pytest.mark.asyncio
async def test_plain_contract_keeps_paths(fake_explorer, explorer_ctx) -> None:
    resolution = await resolve_proxy(source_item("contract Token {}", "Token"), explorer_ctx)

    assert resolution.is_proxy is False
    assert [(f.path, f.role) for f in resolution.files] == [("Token.sol", "plain")]
    assert resolution.implementation_address is None
    assert fake_explorer.calls == []


@pytest.mark.asyncio
async def test_zero_address_implementation_is_not_a_proxy(fake_explorer, explorer_ctx) -> None:
    item = source_item("contract Token {}", "Token", implementation=ZERO_ADDRESS)
    resolution = await resolve_proxy(item, explorer_ctx)

    assert resolution.is_proxy is False
    assert fake_explorer.calls == []


@pytest.mark.asyncio
async def test_proxy_and_implementation_files_are_prefixed(fake_explorer, explorer_ctx) -> None:
    fake_explorer.add_source(IMPLEMENTATION_ADDRESS, source_item(IMPLEMENTATION_SOURCE, "Vault"))
    item = source_item(PROXY_SOURCE, "ERC1967Proxy", implementation=IMPLEMENTATION_ADDRESS)

    resolution = await resolve_proxy(item, explorer_ctx)

    assert resolution.is_proxy is True
    assert resolution.implementation_address == IMPLEMENTATION_ADDRESS
    assert resolution.partial_error is None
    assert [f.path for f in resolution.files] == [
        "proxy/contracts/proxy/ERC1967Proxy.sol",
        "proxy/contracts/proxy/Proxy.sol",
        "implementation/contracts/Vault.sol",
        "implementation/contracts/proxy/Proxy.sol",
        "implementation/contracts/Math.sol",
    ]
    assert {f.role for f in resolution.files[:2]} == {"proxy"}
    assert {f.role for f in resolution.files[2:]} == {"implementation"}
    # Same original path on both sides never collides
    assert len({f.path for f in resolution.files}) == len(resolution.files)
    assert len(fake_explorer.calls_for("getsourcecode")) == 1


@pytest.mark.asyncio
async def test_unverified_implementation_returns_proxy_only(fake_explorer, explorer_ctx) -> None:
    fake_explorer.add_source(IMPLEMENTATION_ADDRESS, source_item("", "Vault"))
    item = source_item(PROXY_SOURCE, "ERC1967Proxy", implementation=IMPLEMENTATION_ADDRESS)

    resolution = await resolve_proxy(item, explorer_ctx)

    assert resolution.is_proxy is True
    assert [f.role for f in resolution.files] == ["proxy", "proxy"]
    assert resolution.partial_error is not None
    assert resolution.partial_error.implementation_address == IMPLEMENTATION_ADDRESS
    assert "not verified" in resolution.partial_error.reason


@pytest.mark.asyncio
async def test_unreachable_explorer_for_implementation_is_partial(fake_explorer, explorer_ctx) -> None:
    fake_explorer.add("getsourcecode", IMPLEMENTATION_ADDRESS, requests.Timeout("read timed out"))
    item = source_item("contract Proxy {}", "Proxy", implementation=IMPLEMENTATION_ADDRESS)

    resolution = await resolve_proxy(item, explorer_ctx)

    assert [f.path for f in resolution.files] == ["proxy/Proxy.sol"]
    assert resolution.partial_error is not None
