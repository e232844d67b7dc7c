"""Tests for the aggregator fallback client."""

import asyncio

import aiohttp
import pytest
from aiohttp import web
from aiohttp import test_utils

from fakes import CAKE
from token_pricer.aggregator import ExternalAggregatorClient, select_best_price
from token_pricer.config import AggregatorConfig
from token_pricer.constants import QuoteCurrency
from token_pricer.diagnostics import Diagnostics

PAIRS = {
    "pairs": [
        {"liquidity": {"usd": 1200.5}, "priceNative": "0.0040", "priceUsd": "2.41"},
        {"liquidity": {"usd": 2500000}, "priceNative": "0.004210", "priceUsd": "2.5311"},
        {"priceNative": "0.0050", "priceUsd": "3.00"},
    ]
}


class TestSelectBestPrice:
    def test_most_liquid_pair_native(self):
        assert select_best_price(PAIRS, QuoteCurrency.NATIVE) == "0.004210"

    def test_most_liquid_pair_stable(self):
        assert select_best_price(PAIRS, QuoteCurrency.STABLE) == "2.5311"

    def test_missing_liquidity_counts_as_zero(self):
        payload = {
            "pairs": [
                {"priceUsd": "9.0"},
                {"liquidity": {"usd": "10"}, "priceUsd": "1.0"},
            ]
        }
        assert select_best_price(payload, QuoteCurrency.STABLE) == "1.0"

    def test_top_pair_without_field(self):
        """Less liquid pairs are not consulted."""
        payload = {
            "pairs": [
                {"liquidity": {"usd": 100}, "priceUsd": "1.0"},
                {"liquidity": {"usd": 500}, "priceNative": "0.002"},
            ]
        }
        assert select_best_price(payload, QuoteCurrency.STABLE) is None

    @pytest.mark.parametrize(
        "payload",
        [None, [], {}, {"pairs": None}, {"pairs": []}, {"pairs": ["junk"]}],
    )
    def test_empty_or_malformed(self, payload):
        assert select_best_price(payload, QuoteCurrency.NATIVE) is None


def _app(handler):
    app = web.Application()
    app.router.add_get("/tokens/{address}", handler)
    return app


async def _serve(handler):
    server = test_utils.TestServer(_app(handler))
    await server.start_server()
    return server


def _client(server, timeout_sec=5.0, session=None):
    config = AggregatorConfig(
        base_url=str(server.make_url("/tokens")), timeout_sec=timeout_sec
    )
    diagnostics, events = Diagnostics.recording()
    return ExternalAggregatorClient(config, diagnostics, session=session), events


class TestExternalAggregatorClient:
    @pytest.mark.asyncio
    async def test_success(self):
        requests = []

        async def handler(request):
            requests.append(request)
            return web.json_response(PAIRS)

        server = await _serve(handler)
        try:
            client, events = _client(server)
            price = await client.fetch_best_price(CAKE, QuoteCurrency.NATIVE)
        finally:
            await server.close()

        assert price == "0.004210"
        assert len(requests) == 1
        assert requests[0].match_info["address"] == CAKE
        assert requests[0].headers["User-Agent"] == "Mozilla/5.0"
        assert [e.kind for e in events] == ["aggregator_price"]

    @pytest.mark.asyncio
    async def test_non_200(self):
        requests = []

        async def handler(request):
            requests.append(request)
            return web.Response(status=404)

        server = await _serve(handler)
        try:
            client, events = _client(server)
            price = await client.fetch_best_price(CAKE, QuoteCurrency.STABLE)
        finally:
            await server.close()

        assert price is None
        assert len(requests) == 1
        assert events[0].kind == "aggregator_failed"
        assert events[0].fields["status_code"] == 404

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        async def handler(request):
            return web.Response(text="<html>rate limited</html>")

        server = await _serve(handler)
        try:
            client, events = _client(server)
            price = await client.fetch_best_price(CAKE, QuoteCurrency.STABLE)
        finally:
            await server.close()

        assert price is None
        assert events[0].kind == "aggregator_failed"

    @pytest.mark.asyncio
    async def test_no_pairs(self):
        async def handler(request):
            return web.json_response({"schemaVersion": "1.0.0", "pairs": None})

        server = await _serve(handler)
        try:
            client, events = _client(server)
            price = await client.fetch_best_price(CAKE, QuoteCurrency.NATIVE)
        finally:
            await server.close()

        assert price is None
        assert [e.kind for e in events] == ["aggregator_failed"]

    @pytest.mark.asyncio
    async def test_timeout_single_attempt(self):
        requests = []

        async def handler(request):
            requests.append(request)
            await asyncio.sleep(0.5)
            return web.json_response(PAIRS)

        server = await _serve(handler)
        try:
            client, events = _client(server, timeout_sec=0.1)
            price = await client.fetch_best_price(CAKE, QuoteCurrency.NATIVE)
        finally:
            await server.close()

        assert price is None
        assert len(requests) == 1
        assert events[0].kind == "aggregator_failed"

    @pytest.mark.asyncio
    async def test_injected_session_is_reused_and_left_open(self):
        async def handler(request):
            return web.json_response(PAIRS)

        server = await _serve(handler)
        try:
            async with aiohttp.ClientSession() as session:
                client, _ = _client(server, session=session)
                first = await client.fetch_best_price(CAKE, QuoteCurrency.NATIVE)
                second = await client.fetch_best_price(CAKE, QuoteCurrency.STABLE)
                assert not session.closed
        finally:
            await server.close()

        assert first == "0.004210"
        assert second == "2.5311"

    @pytest.mark.asyncio
    async def test_unreachable_host(self):
        config = AggregatorConfig(base_url="http://127.0.0.1:9/tokens", timeout_sec=1)
        diagnostics, events = Diagnostics.recording()
        client = ExternalAggregatorClient(config, diagnostics)

        assert await client.fetch_best_price(CAKE, QuoteCurrency.NATIVE) is None
        assert events[0].kind == "aggregator_failed"

    def test_url_for(self):
        config = AggregatorConfig(base_url="https://api.example.org/tokens/")
        client = ExternalAggregatorClient(config)
        assert client.url_for(CAKE) == f"https://api.example.org/tokens/{CAKE}"
