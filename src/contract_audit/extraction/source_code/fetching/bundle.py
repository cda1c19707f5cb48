"""High-level contract resolution flow: explorer source + proxy + ABI -> ContractBundle."""

import asyncio
from typing import Any, Dict, List, Optional, Union

from web3 import Web3

from ....chains import ChainConfig, ExplorerContext, resolve_chain
from ....errors import ResolutionError
from ....models import ContractBundle
from ..normalizer import parse_compiler_settings
from ..shared import logger
from .abi import fetch_abi
from .providers import fetch_source_item
from .proxies import implementation_address_of, resolve_proxy


async def _implementation_abi(result: Dict[str, Any], explorer_ctx: ExplorerContext) -> List[Dict[str, Any]]:
    implementation = implementation_address_of(result)
    if implementation is None:
        return []
    return await fetch_abi(implementation, explorer_ctx)


async def resolve_contract(
    address: str,
    chain: Union[ChainConfig, str, int],
    api_key: Optional[str] = None,
) -> ContractBundle:
    """
    Resolve verified source, proxy split and ABIs into one bundle.

    Args:
        address: Contract address
        chain: ChainConfig, or a chain name/alias/id for the chain registry
        api_key: Explorer key overriding the chain's configured key

    Returns:
        Complete ContractBundle (possibly flagged partial when the
        implementation source could not be resolved)

    Raises:
        ResolutionError: Unknown chain, invalid address, unreachable explorer,
            failed lookup or unverified source
    """
    chain_config = chain if isinstance(chain, ChainConfig) else resolve_chain(chain)
    address = address.strip()
    if not Web3.is_address(address):
        raise ResolutionError(f"Invalid contract address: {address!r}")

    explorer_ctx = ExplorerContext.from_chain(chain_config, api_key)
    logger.info(f"Resolving {address} on {chain_config.name} (chain {chain_config.chain_id})")

    result = await fetch_source_item(address, explorer_ctx)
    settings = parse_compiler_settings(
        result["SourceCode"],
        result.get("OptimizationUsed"),
        result.get("Runs"),
    )

    resolution, abi, implementation_abi = await asyncio.gather(
        resolve_proxy(result, explorer_ctx),
        fetch_abi(address, explorer_ctx),
        _implementation_abi(result, explorer_ctx),
    )

    bundle = ContractBundle(
        address=address,
        chain_id=chain_config.chain_id,
        contract_name=result.get("ContractName") or "",
        compiler_version=result.get("CompilerVersion") or "",
        files=tuple(resolution.files),
        settings=settings,
        abi=abi,
        implementation_abi=implementation_abi,
        is_proxy=resolution.is_proxy,
        implementation_address=resolution.implementation_address,
        proxy_partial=resolution.partial_error,
    )

    logger.info(f"✓ Resolved {bundle.contract_name or address}: {len(bundle.files)} file(s), proxy={bundle.is_proxy}")
    return bundle
