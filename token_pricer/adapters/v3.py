"""
PancakeSwap V3 (Uniswap V3 style) price resolution.

Two strategies sit behind the V3PriceSource interface:

- V3PoolResolver reads pool state directly. A pool comes from the known-pool
  table or from probing the factory fee tier by fee tier; its current tick
  gives the price as 1.0001 ** tick (token1 per token0).
- V3QuoterResolver simulates a one-unit exactInputSingle swap on the
  QuoterV2 contract per fee tier.

Both stop at the first fee tier that works.
"""

from decimal import Decimal
from typing import Optional, Protocol, Sequence, runtime_checkable

from ..chain import ChainContext
from ..constants import TICK_BASE, V3_STRATEGY_QUOTER, FeeTier
from ..diagnostics import NULL_DIAGNOSTICS, Diagnostics
from ..exceptions import TransientRemoteFailure
from ..types import PoolState
from ..utils import format_decimal, format_units, parse_units

_TICK_BASE = float(TICK_BASE)


def price_from_tick(
    tick: int, invert: bool = False, decimals0: int = 18, decimals1: int = 18
) -> float:
    """
    Convert a pool tick into a price.

    Formula:
        raw = 1.0001 ** tick              (token1 per token0, raw units)
        price = raw * 10 ** (decimals0 - decimals1)

    Args:
        tick: Current pool tick
        invert: If True, return token0 per token1 (1 / price)
        decimals0: Decimals of token0
        decimals1: Decimals of token1

    Returns:
        Price as float
    """
    price = (_TICK_BASE ** tick) * (10.0 ** (decimals0 - decimals1))
    if invert:
        return 1 / price
    return price


def is_zero_address(address: Optional[str]) -> bool:
    return not address or int(address, 16) == 0


@runtime_checkable
class V3PriceSource(Protocol):
    """Anything that can price token_in in units of token_out on V3."""

    async def find_price(
        self,
        token_in: str,
        token_out: str,
        decimals_in: int = 18,
        decimals_out: int = 18,
    ) -> Optional[str]:
        """Return the price as a decimal string, or None if not found."""
        ...


class V3PoolResolver:
    """
    Resolves a pool for a token pair and prices it from the current tick.

    Known pools bypass the factory. Otherwise fee tiers are probed in the
    configured order and the first non-zero pool wins; no comparison is made
    across tiers. A failing tier is reported and skipped.
    """

    def __init__(
        self,
        chain: ChainContext,
        diagnostics: Optional[Diagnostics] = None,
        fee_tiers: Optional[Sequence[FeeTier]] = None,
    ):
        self.chain = chain
        self.diagnostics = diagnostics or NULL_DIAGNOSTICS
        self.fee_tiers = tuple(fee_tiers or chain.config.v3.fee_tiers)

    async def find_price(
        self,
        token_in: str,
        token_out: str,
        decimals_in: int = 18,
        decimals_out: int = 18,
    ) -> Optional[str]:
        state = await self._known_pool_state(token_in, token_out)
        if state is None:
            state = await self._probe_factory(token_in, token_out)
        if state is None:
            return None

        try:
            price = self.price_for(state, token_in, decimals_in, decimals_out)
            return format_decimal(Decimal(repr(price)), decimals_out)
        except ArithmeticError as e:
            # Out-of-range tick: float overflow, underflow to zero or non-finite price
            self.diagnostics.emit(
                "v3",
                "v3_tier_failed",
                f"Pool {state.address} tick {state.tick} gives no usable price: {e!r}",
                pool=state.address,
                tick=state.tick,
            )
            return None

    @staticmethod
    def price_for(
        state: PoolState, token_in: str, decimals_in: int, decimals_out: int
    ) -> float:
        """Price of token_in in the pool's other token."""
        if token_in == state.token1:
            return price_from_tick(
                state.tick, invert=True, decimals0=decimals_out, decimals1=decimals_in
            )
        return price_from_tick(state.tick, decimals0=decimals_in, decimals1=decimals_out)

    async def read_pool_state(self, pool_address: str) -> PoolState:
        """
        Read token0, token1 and the current tick of a pool.

        Raises:
            TransientRemoteFailure: If any read fails
        """
        pool = self.chain.pool_contract(pool_address)
        token0 = await self.chain.call(pool.functions.token0, source="token0")
        token1 = await self.chain.call(pool.functions.token1, source="token1")
        slot0 = await self.chain.call(pool.functions.slot0, source="slot0")
        return PoolState(
            address=pool_address, token0=token0, token1=token1, tick=int(slot0[1])
        )

    async def _known_pool_state(self, token_in: str, token_out: str) -> Optional[PoolState]:
        pool_address = self.chain.known_pools.get(frozenset((token_in, token_out)))
        if pool_address is None:
            return None

        try:
            state = await self.read_pool_state(pool_address)
            _check_pair(state, token_in, token_out)
        except TransientRemoteFailure as e:
            self.diagnostics.emit(
                "v3",
                "v3_known_pool_failed",
                f"Known pool {pool_address} unusable, probing factory: {e}",
                pool=pool_address,
            )
            return None

        self.diagnostics.emit(
            "v3",
            "v3_pool_found",
            f"Using known pool {pool_address} (tick {state.tick})",
            pool=pool_address,
            fee_tier=None,
            tick=state.tick,
        )
        return state

    async def _probe_factory(self, token_in: str, token_out: str) -> Optional[PoolState]:
        factory = self.chain.factory
        for tier in self.fee_tiers:
            try:
                pool_address = await self.chain.call(
                    lambda: factory.functions.getPool(token_in, token_out, int(tier)),
                    source="getPool",
                )
                if is_zero_address(pool_address):
                    self.diagnostics.emit(
                        "v3",
                        "v3_no_pool",
                        f"No pool at fee tier {int(tier)}",
                        fee_tier=int(tier),
                    )
                    continue
                state = await self.read_pool_state(pool_address)
                _check_pair(state, token_in, token_out)
            except TransientRemoteFailure as e:
                self.diagnostics.emit(
                    "v3",
                    "v3_tier_failed",
                    f"Fee tier {int(tier)} failed: {e}",
                    fee_tier=int(tier),
                )
                continue

            self.diagnostics.emit(
                "v3",
                "v3_pool_found",
                f"Pool {pool_address} at fee tier {int(tier)} (tick {state.tick})",
                pool=pool_address,
                fee_tier=int(tier),
                tick=state.tick,
            )
            return state

        return None


class V3QuoterResolver:
    """Prices token_in by simulating a one-unit swap on the QuoterV2."""

    def __init__(
        self,
        chain: ChainContext,
        diagnostics: Optional[Diagnostics] = None,
        fee_tiers: Optional[Sequence[FeeTier]] = None,
    ):
        self.chain = chain
        self.diagnostics = diagnostics or NULL_DIAGNOSTICS
        self.fee_tiers = tuple(fee_tiers or chain.config.v3.fee_tiers)

    async def find_price(
        self,
        token_in: str,
        token_out: str,
        decimals_in: int = 18,
        decimals_out: int = 18,
    ) -> Optional[str]:
        amount_in = parse_units(1, decimals_in)
        quoter = self.chain.quoter

        for tier in self.fee_tiers:
            params = (token_in, token_out, amount_in, int(tier), 0)
            try:
                result = await self.chain.call(
                    lambda: quoter.functions.quoteExactInputSingle(params),
                    source="quoteExactInputSingle",
                )
            except TransientRemoteFailure as e:
                self.diagnostics.emit(
                    "v3",
                    "v3_tier_failed",
                    f"Quote at fee tier {int(tier)} failed: {e}",
                    fee_tier=int(tier),
                )
                continue

            # QuoterV2 returns (amountOut, sqrtPriceX96After, ticksCrossed, gas)
            amount_out = result[0] if isinstance(result, (list, tuple)) else result
            self.diagnostics.emit(
                "v3",
                "v3_pool_found",
                f"Quoter fee tier {int(tier)} returned {amount_out}",
                fee_tier=int(tier),
            )
            return format_units(int(amount_out), decimals_out)

        return None


def build_v3_source(
    chain: ChainContext, diagnostics: Optional[Diagnostics] = None
) -> V3PriceSource:
    """Create the V3 strategy selected by config.v3.strategy."""
    if chain.config.v3.strategy == V3_STRATEGY_QUOTER:
        return V3QuoterResolver(chain, diagnostics)
    return V3PoolResolver(chain, diagnostics)


def _check_pair(state: PoolState, token_in: str, token_out: str) -> None:
    if {state.token0, state.token1} != {token_in, token_out}:
        raise TransientRemoteFailure(
            f"pool {state.address} holds {state.token0}/{state.token1}, "
            f"not {token_in}/{token_out}",
            source="pool",
        )
