"""Tests for the chain registry."""

import pytest

from conftest import ERC20_ABI, PLAIN_ADDRESS, source_item
from contract_audit.chains import ExplorerContext, resolve_chain, supported_chains
from contract_audit.clients.explorer import PUBLIC_API_KEY_PLACEHOLDER
from contract_audit.errors import ChainNotConfiguredError
from contract_audit.extraction import resolve_contract


@pytest.mark.parametrize("identifier", ["ethereum", "ETH", " mainnet ", "1", 1])
def test_resolve_ethereum_by_name_alias_or_id(identifier) -> None:
    chain = resolve_chain(identifier)
    assert chain.name == "ethereum"
    assert chain.chain_id == 1
    assert chain.explorer_url == "https://api.etherscan.io/api"


def test_unknown_chain_lists_supported() -> None:
    with pytest.raises(ChainNotConfiguredError) as exc_info:
        resolve_chain("dogechain")
    assert "ethereum" in str(exc_info.value)


def test_supported_chains_are_unique() -> None:
    names = supported_chains()
    assert names[0] == "ethereum"
    assert len(names) == len(set(names))


def test_chain_key_ignores_other_explorers_key(monkeypatch) -> None:
    monkeypatch.delenv("BSCSCAN_API_KEY", raising=False)
    monkeypatch.setenv("ETHERSCAN_API_KEY", "etherscan-secret")
    assert resolve_chain("bsc").api_key is None

    monkeypatch.setenv("BSCSCAN_API_KEY", "bsc-key")
    assert resolve_chain("bsc").api_key == "bsc-key"


@pytest.mark.asyncio
async def test_other_explorer_receives_placeholder_not_etherscan_key(fake_explorer, monkeypatch) -> None:
    monkeypatch.delenv("SNOWTRACE_API_KEY", raising=False)
    monkeypatch.setenv("ETHERSCAN_API_KEY", "etherscan-secret")
    fake_explorer.add_source(PLAIN_ADDRESS, source_item("contract Token {}", "Token"))
    fake_explorer.add_abi(PLAIN_ADDRESS, ERC20_ABI)

    await resolve_contract(PLAIN_ADDRESS, "avalanche")

    assert fake_explorer.calls
    for call in fake_explorer.calls:
        assert call["url"].startswith("https://api.snowtrace.io/")
        assert call["params"]["apikey"] == PUBLIC_API_KEY_PLACEHOLDER


def test_chain_key_missing(monkeypatch) -> None:
    monkeypatch.delenv("POLYGONSCAN_API_KEY", raising=False)
    monkeypatch.delenv("ETHERSCAN_API_KEY", raising=False)
    assert resolve_chain("polygon").api_key is None


def test_explorer_context_prefers_explicit_key(monkeypatch) -> None:
    monkeypatch.setenv("ETHERSCAN_API_KEY", "env-key")
    chain = resolve_chain("ethereum")

    assert ExplorerContext.from_chain(chain).api_key == "env-key"
    ctx = ExplorerContext.from_chain(chain, "explicit")
    assert ctx.api_key == "explicit"
    assert ctx.chain_id == 1
