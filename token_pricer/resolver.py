"""
Price resolution orchestration.

Escalates through the price sources in a fixed order, each exhausted before
the next starts and none revisited:

    identity check -> metadata -> V2 router -> V3 pools -> aggregator -> unresolved

Only an invalid input address escapes as an exception; every remote failure
is absorbed by the tier that hit it and simply moves resolution forward.
"""

import logging
from decimal import Decimal, localcontext
from typing import Dict, Optional, Union

from .address import normalize
from .adapters.v2 import V2LiquidityProber
from .adapters.v3 import V3PriceSource, build_v3_source
from .aggregator import ExternalAggregatorClient
from .chain import ChainContext, build_chain_context
from .config import PricerConfig, TokenConfig
from .constants import QuoteCurrency, Venue
from .diagnostics import NULL_DIAGNOSTICS, Diagnostics
from .metadata import TokenMetadataResolver
from .types import Path, PriceQuote, TokenDescriptor
from .utils import format_decimal, format_units


class PriceResolutionOrchestrator:
    """
    Resolves a token's price in the native or stable quote currency.

    All collaborators are built from one read-only ChainContext; a single
    orchestrator can serve any number of sequential or concurrent calls.
    """

    def __init__(
        self,
        chain: ChainContext,
        diagnostics: Optional[Diagnostics] = None,
        v3_source: Optional[V3PriceSource] = None,
        aggregator: Optional[ExternalAggregatorClient] = None,
    ):
        self.chain = chain
        self.config = chain.config
        self.diagnostics = diagnostics or NULL_DIAGNOSTICS
        self.metadata = TokenMetadataResolver(chain, self.diagnostics)
        self.v2 = V2LiquidityProber(chain, self.diagnostics)
        self.v3 = v3_source or build_v3_source(chain, self.diagnostics)
        self.aggregator = aggregator or ExternalAggregatorClient(
            self.config.aggregator, self.diagnostics
        )

    @classmethod
    def from_config(
        cls,
        config: PricerConfig,
        w3=None,
        diagnostics: Optional[Diagnostics] = None,
    ) -> "PriceResolutionOrchestrator":
        """Build the chain context and every component from a config."""
        return cls(build_chain_context(config, w3), diagnostics)

    def quote_token(self, quote: QuoteCurrency) -> TokenConfig:
        if quote is QuoteCurrency.NATIVE:
            return self.config.native
        return self.config.stable

    async def resolve(
        self,
        token_address: str,
        quote: Union[QuoteCurrency, str] = QuoteCurrency.NATIVE,
        try_v3: bool = True,
    ) -> PriceQuote:
        """
        Resolve the price of one whole token.

        Args:
            token_address: Token address in any hex case
            quote: QuoteCurrency or selector ("bnb"/"native", "usdt"/"stable")
            try_v3: Allow the V3 tier for this call

        Returns:
            PriceQuote, or PriceQuote.unresolved() when every tier fails

        Raises:
            InvalidAddress: If token_address is malformed
            InvalidQuoteCurrency: If quote is not a known selector
        """
        quote = QuoteCurrency.parse(quote)
        token = normalize(token_address)

        if token == self.chain.native or (
            token == self.chain.stable and quote is QuoteCurrency.NATIVE
        ):
            return await self._resolve_quote_token(token, quote)

        descriptor = await self.metadata.resolve(token)

        result = await self._resolve_v2(descriptor, quote)
        if result is not None:
            return self._finish(result, descriptor, quote)

        if try_v3 and self.config.v3.enabled:
            self._escalate(descriptor, "v2", "v3")
            result = await self._resolve_v3(descriptor, quote)
            if result is not None:
                return self._finish(result, descriptor, quote)
            self._escalate(descriptor, "v3", "aggregator")
        else:
            self._escalate(descriptor, "v2", "aggregator")

        result = await self._resolve_aggregator(descriptor, quote)
        if result is not None:
            return self._finish(result, descriptor, quote)

        self.diagnostics.emit(
            "resolver",
            "unresolved",
            f"No liquidity for {descriptor.symbol} ({token}) on any source",
            level=logging.WARNING,
            address=token,
            quote=quote.value,
        )
        return PriceQuote.unresolved()

    async def resolve_both(
        self, token_address: str, try_v3: bool = True
    ) -> Dict[QuoteCurrency, PriceQuote]:
        """Resolve a token in NATIVE then STABLE, one after the other."""
        return {
            quote: await self.resolve(token_address, quote, try_v3)
            for quote in (QuoteCurrency.NATIVE, QuoteCurrency.STABLE)
        }

    async def _resolve_quote_token(self, token: str, quote: QuoteCurrency) -> PriceQuote:
        """Native and stable tokens are priced directly, without probing."""
        native = self.config.native
        if token == native.address and quote is QuoteCurrency.NATIVE:
            result = PriceQuote(price="1", venue=Venue.IDENTITY, path=(native.symbol,))
            return self._finish(result, None, quote, token)

        base = native if token == native.address else self.config.stable
        target = self.quote_token(quote)
        path = (base.address, target.address)

        amount_out = await self.v2.quote_path(path, base.decimals)
        if amount_out is None:
            self.diagnostics.emit(
                "resolver",
                "unresolved",
                f"Direct {base.symbol}/{target.symbol} quote failed",
                level=logging.WARNING,
                address=token,
                quote=quote.value,
            )
            return PriceQuote.unresolved()

        result = PriceQuote(
            price=format_units(amount_out, target.decimals),
            venue=Venue.V2,
            path=(base.symbol, target.symbol),
        )
        return self._finish(result, None, quote, token)

    async def _resolve_v2(
        self, descriptor: TokenDescriptor, quote: QuoteCurrency
    ) -> Optional[PriceQuote]:
        target = self.quote_token(quote)
        found = await self.v2.find_liquid_path(
            descriptor.address, target.address, descriptor.decimals
        )
        if found is None:
            return None

        path, amount_out = found
        return PriceQuote(
            price=format_units(amount_out, target.decimals),
            venue=Venue.V2,
            path=self._symbols(path, descriptor),
        )

    async def _resolve_v3(
        self, descriptor: TokenDescriptor, quote: QuoteCurrency
    ) -> Optional[PriceQuote]:
        target = self.quote_token(quote)
        price = await self.v3.find_price(
            descriptor.address, target.address, descriptor.decimals, target.decimals
        )
        if price is not None:
            return PriceQuote(
                price=price, venue=Venue.V3, path=(descriptor.symbol, target.symbol)
            )

        if quote is not QuoteCurrency.STABLE:
            return None

        # No direct stable pool: price through the native token
        native, stable = self.config.native, self.config.stable
        in_native = await self.v3.find_price(
            descriptor.address, native.address, descriptor.decimals, native.decimals
        )
        if in_native is None:
            return None
        native_in_stable = await self.v3.find_price(
            native.address, stable.address, native.decimals, stable.decimals
        )
        if native_in_stable is None:
            return None

        with localcontext() as ctx:
            ctx.prec = 60
            composed = Decimal(in_native) * Decimal(native_in_stable)
        return PriceQuote(
            price=format_decimal(composed, stable.decimals),
            venue=Venue.V3,
            path=(descriptor.symbol, native.symbol, stable.symbol),
        )

    async def _resolve_aggregator(
        self, descriptor: TokenDescriptor, quote: QuoteCurrency
    ) -> Optional[PriceQuote]:
        price = await self.aggregator.fetch_best_price(descriptor.address, quote)
        if price is None:
            return None
        return PriceQuote(
            price=price,
            venue=Venue.AGGREGATOR,
            path=(descriptor.symbol, self.quote_token(quote).symbol),
        )

    def _symbols(self, path: Path, descriptor: TokenDescriptor) -> Path:
        symbols = []
        for address in path:
            if address == descriptor.address:
                symbols.append(descriptor.symbol)
            else:
                symbols.append(self.chain.label_for(address) or address[:6] + "...")
        return tuple(symbols)

    def _escalate(self, descriptor: TokenDescriptor, from_tier: str, to_tier: str) -> None:
        self.diagnostics.emit(
            "resolver",
            "tier_escalation",
            f"No {from_tier} price for {descriptor.symbol}, trying {to_tier}",
            level=logging.INFO,
            address=descriptor.address,
            from_tier=from_tier,
            to_tier=to_tier,
        )

    def _finish(
        self,
        result: PriceQuote,
        descriptor: Optional[TokenDescriptor],
        quote: QuoteCurrency,
        token: Optional[str] = None,
    ) -> PriceQuote:
        address = descriptor.address if descriptor else token
        symbol = descriptor.symbol if descriptor else result.path[0]
        target = self.quote_token(quote).symbol
        self.diagnostics.emit(
            "resolver",
            "resolved",
            f"Price of {symbol} ({address}) in {target}: {result.price} {target} "
            f"via {result.venue.value} [{' -> '.join(result.path)}]",
            level=logging.INFO,
            address=address,
            quote=quote.value,
            venue=result.venue.value,
            price=result.price,
        )
        return result
