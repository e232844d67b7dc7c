"""Tests for the chain context."""

import dataclasses

import pytest

from token_pricer.chain import ChainContext, build_chain_context
from token_pricer.config import PricerConfig
from token_pricer.exceptions import TransientRemoteFailure

from fakes import BRIDGE_A, CAKE, NATIVE, STABLE


class TestBindings:
    def test_fake_bindings(self, fake_chain):
        ctx = fake_chain.context()

        assert isinstance(ctx, ChainContext)
        assert ctx.router is fake_chain.router
        assert ctx.factory is fake_chain.factory
        assert ctx.quoter is fake_chain.quoter
        assert ctx.native == NATIVE
        assert ctx.stable == STABLE

    def test_real_web3_bindings(self):
        """Contract objects are created without touching the network."""
        config = PricerConfig()
        ctx = build_chain_context(config)

        assert ctx.router.address == config.v2.router
        assert ctx.factory.address == config.v3.factory
        assert ctx.quoter.address == config.v3.quoter
        assert ctx.token_contract(CAKE).address == CAKE

    def test_context_is_frozen(self, fake_chain):
        ctx = fake_chain.context()
        with pytest.raises(dataclasses.FrozenInstanceError):
            ctx.router = None

    def test_label_for(self, fake_chain):
        ctx = fake_chain.context()
        assert ctx.label_for(NATIVE) == "WBNB"
        assert ctx.label_for(BRIDGE_A) == "BUSD"
        assert ctx.label_for(CAKE) is None


class TestCall:
    @pytest.mark.asyncio
    async def test_returns_result(self, fake_chain):
        fake_chain.add_token(CAKE, "Cake")
        ctx = fake_chain.context()

        symbol = await ctx.call(ctx.token_contract(CAKE).functions.symbol)

        assert symbol == "Cake"
        assert fake_chain.calls("symbol") == [("Cake", "symbol", ())]

    @pytest.mark.asyncio
    async def test_revert_becomes_transient_failure(self, fake_chain):
        ctx = fake_chain.context()
        with pytest.raises(TransientRemoteFailure) as exc_info:
            await ctx.call(
                lambda: ctx.router.functions.getAmountsOut(10**18, [CAKE, NATIVE]),
                source="getAmountsOut",
            )

        assert exc_info.value.source == "getAmountsOut"
        assert exc_info.value.endpoint == ctx.config.rpc_url

    @pytest.mark.asyncio
    async def test_transport_error_becomes_transient_failure(self, fake_chain):
        fake_chain.add_token(CAKE, "Cake")
        fake_chain.contracts[CAKE].responses["symbol"] = ConnectionError("reset by peer")
        ctx = fake_chain.context()

        with pytest.raises(TransientRemoteFailure) as exc_info:
            await ctx.call(ctx.token_contract(CAKE).functions.symbol)

        assert isinstance(exc_info.value.__cause__, ConnectionError)

    @pytest.mark.asyncio
    async def test_rejected_arguments_become_transient_failure(self, fake_chain):
        """web3 refuses to encode an amount above uint256 before any request."""
        router = fake_chain.use_real_router()
        ctx = fake_chain.context()

        with pytest.raises(TransientRemoteFailure) as exc_info:
            await ctx.call(
                lambda: router.functions.getAmountsOut(2**256, [CAKE, NATIVE]),
                source="getAmountsOut",
            )

        assert exc_info.value.source == "getAmountsOut"

    @pytest.mark.asyncio
    async def test_builder_error_becomes_transient_failure(self, fake_chain):
        ctx = fake_chain.context()

        def build():
            raise TypeError("bad arguments")

        with pytest.raises(TransientRemoteFailure) as exc_info:
            await ctx.call(build, source="getPool")

        assert isinstance(exc_info.value.__cause__, TypeError)
        assert fake_chain.log == []
