"""
External aggregator fallback (DexScreener-compatible REST API).

GET {base_url}/{token_address} returns {"pairs": [...]} where each pair may
carry liquidity.usd, priceNative and priceUsd. The most liquid pair wins.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp

from .config import AggregatorConfig
from .constants import QuoteCurrency
from .diagnostics import NULL_DIAGNOSTICS, Diagnostics
from .exceptions import TransientRemoteFailure

PRICE_FIELDS = {
    QuoteCurrency.NATIVE: "priceNative",
    QuoteCurrency.STABLE: "priceUsd",
}


def _liquidity(pair: Dict[str, Any]) -> float:
    """USD liquidity of a pair record; missing or unparsable counts as zero."""
    liquidity = pair.get("liquidity") or {}
    if not isinstance(liquidity, dict):
        return 0.0
    try:
        return float(liquidity.get("usd") or 0)
    except (TypeError, ValueError):
        return 0.0


def select_best_price(payload: Any, quote: QuoteCurrency) -> Optional[str]:
    """
    Pick the quote-currency price of the highest-liquidity pair.

    Only the top pair is considered: if it lacks the requested price field
    the result is None even when a less liquid pair has one.

    Args:
        payload: Decoded JSON body
        quote: Requested quote currency

    Returns:
        Price string exactly as the API reported it, or None
    """
    if not isinstance(payload, dict):
        return None
    pairs = payload.get("pairs")
    if not isinstance(pairs, list):
        return None

    records = [pair for pair in pairs if isinstance(pair, dict)]
    if not records:
        return None

    best = sorted(records, key=_liquidity, reverse=True)[0]
    price = best.get(PRICE_FIELDS[quote])
    if price is None or price == "":
        return None
    return str(price)


class ExternalAggregatorClient:
    """
    Single-attempt client for the aggregator API.

    One GET per lookup with a fixed total timeout and no retry. Every failure
    (timeout, non-200, bad body, empty result) yields None.
    """

    def __init__(
        self,
        config: AggregatorConfig,
        diagnostics: Optional[Diagnostics] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Args:
            config: Aggregator settings (base URL, timeout, user agent)
            diagnostics: Event emitter
            session: Caller-owned session to reuse; when None a session is
                opened and closed around each request
        """
        self.config = config
        self.diagnostics = diagnostics or NULL_DIAGNOSTICS
        self.session = session
        self.timeout = aiohttp.ClientTimeout(total=config.timeout_sec)
        self.headers = {"Accept": "application/json", "User-Agent": config.user_agent}

    def url_for(self, address: str) -> str:
        return f"{self.config.base_url}/{address}"

    async def fetch_best_price(self, address: str, quote: QuoteCurrency) -> Optional[str]:
        """
        Look up a token's price on the aggregator.

        Args:
            address: Checksummed token address
            quote: Requested quote currency

        Returns:
            Price string of the most liquid pair, or None
        """
        try:
            payload = await self._get_json(self.url_for(address))
        except TransientRemoteFailure as e:
            self.diagnostics.emit(
                "aggregator",
                "aggregator_failed",
                f"Aggregator lookup failed for {address}: {e}",
                level=logging.WARNING,
                address=address,
                status_code=e.status_code,
            )
            return None

        price = select_best_price(payload, quote)
        if price is None:
            self.diagnostics.emit(
                "aggregator",
                "aggregator_failed",
                f"Aggregator has no {PRICE_FIELDS[quote]} for {address}",
                address=address,
            )
            return None

        self.diagnostics.emit(
            "aggregator",
            "aggregator_price",
            f"Aggregator price for {address}: {price}",
            level=logging.INFO,
            address=address,
            price=price,
        )
        return price

    async def _get_json(self, url: str) -> Any:
        if self.session is not None:
            return await self._request(self.session, url)
        async with aiohttp.ClientSession() as session:
            return await self._request(session, url)

    async def _request(self, session: aiohttp.ClientSession, url: str) -> Any:
        try:
            async with session.get(url, headers=self.headers, timeout=self.timeout) as resp:
                if resp.status != 200:
                    raise TransientRemoteFailure(
                        f"API returned status code {resp.status}",
                        source="aggregator",
                        endpoint=url,
                        status_code=resp.status,
                    )
                return await resp.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise TransientRemoteFailure(
                "Request timeout", source="aggregator", endpoint=url
            ) from e
        except aiohttp.ClientError as e:
            raise TransientRemoteFailure(
                f"Request failed: {e}", source="aggregator", endpoint=url
            ) from e
        except ValueError as e:
            raise TransientRemoteFailure(
                f"Error parsing JSON: {e}", source="aggregator", endpoint=url
            ) from e
