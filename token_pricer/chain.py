"""
Immutable chain context shared by every pricing component.

Holds the Web3 handle, the router/factory/quoter contract bindings and the
known-pool table. Built once at startup and never mutated afterwards, so
concurrent resolutions can share it without locking.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Callable, FrozenSet, Mapping, Optional

from web3 import Web3

from .abi import ERC20_ABI, FACTORY_V3_ABI, POOL_V3_ABI, QUOTER_V3_ABI, ROUTER_V2_ABI
from .config import PricerConfig
from .exceptions import TransientRemoteFailure


@dataclass(frozen=True)
class ChainContext:
    """
    Read-only bindings to the chain.

    Attributes:
        config: Validated pricer configuration
        w3: Web3 instance connected to the RPC endpoint
        router: V2 router contract
        factory: V3 factory contract
        quoter: V3 QuoterV2 contract
        known_pools: Unordered token pair -> pre-registered V3 pool address
    """

    config: PricerConfig
    w3: Any
    router: Any
    factory: Any
    quoter: Any
    known_pools: Mapping[FrozenSet[str], str]

    @property
    def native(self) -> str:
        return self.config.native.address

    @property
    def stable(self) -> str:
        return self.config.stable.address

    def token_contract(self, address: str):
        return self.w3.eth.contract(address=address, abi=ERC20_ABI)

    def pool_contract(self, address: str):
        return self.w3.eth.contract(address=address, abi=POOL_V3_ABI)

    def label_for(self, address: str) -> Optional[str]:
        """Configured symbol for native, stable and bridge tokens."""
        return self.config.token_labels().get(address)

    async def call(self, build: Callable[[], Any], source: str = "rpc") -> Any:
        """
        Execute a contract read without blocking the event loop.

        The function is bound inside the guarded block, so arguments web3
        rejects (e.g. an amount too large for uint256) fail like a revert.
        The synchronous web3 call runs in the default thread pool. Any error
        (argument encoding, revert, decode failure, transport error) is
        re-raised as TransientRemoteFailure; no retry and no timeout beyond
        the provider's.

        Args:
            build: Zero-argument callable returning a bound contract function
                (anything with a .call() method)
            source: Label used in the failure for diagnostics

        Returns:
            Decoded call result
        """
        loop = asyncio.get_running_loop()
        try:
            fn = build()
            return await loop.run_in_executor(None, fn.call)
        except Exception as e:
            raise TransientRemoteFailure(
                f"{source} call failed: {e}",
                source=source,
                endpoint=self.config.rpc_url,
            ) from e


def build_chain_context(config: PricerConfig, w3: Optional[Any] = None) -> ChainContext:
    """
    Create the chain context for a configuration.

    Args:
        config: Validated pricer configuration
        w3: Existing Web3 instance (default: HTTPProvider on config.rpc_url)

    Returns:
        ChainContext with all contract bindings created
    """
    if w3 is None:
        w3 = Web3(Web3.HTTPProvider(config.rpc_url))

    return ChainContext(
        config=config,
        w3=w3,
        router=w3.eth.contract(address=config.v2.router, abi=ROUTER_V2_ABI),
        factory=w3.eth.contract(address=config.v3.factory, abi=FACTORY_V3_ABI),
        quoter=w3.eth.contract(address=config.v3.quoter, abi=QUOTER_V3_ABI),
        known_pools=config.known_pool_table(),
    )
