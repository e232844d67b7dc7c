"""Tests for data types and enums."""

import dataclasses

import pytest

from token_pricer.constants import (
    FEE_TIER_ORDER,
    FeeTier,
    QuoteCurrency,
    Venue,
)
from token_pricer.exceptions import InvalidQuoteCurrency
from token_pricer.types import PriceQuote, TokenDescriptor

ADDRESS = "0x0E09FaBB73Bd3Ade0a17ECC321fD13a19e81cE82"


class TestTokenDescriptor:
    def test_placeholder(self):
        token = TokenDescriptor.placeholder(ADDRESS)
        assert token.address == ADDRESS
        assert token.symbol == "UNKNOWN"
        assert token.decimals == 18
        assert token.is_placeholder

    def test_real_token_is_not_placeholder(self):
        token = TokenDescriptor(ADDRESS, "Cake", "PancakeSwap Token", 18)
        assert not token.is_placeholder

    def test_frozen(self):
        token = TokenDescriptor(ADDRESS, "Cake", "PancakeSwap Token", 18)
        with pytest.raises(dataclasses.FrozenInstanceError):
            token.decimals = 6


class TestPriceQuote:
    def test_unresolved(self):
        result = PriceQuote.unresolved()
        assert not result.is_resolved
        assert result.to_dict() == {"price": None, "version": None, "path": None}

    def test_to_dict(self):
        result = PriceQuote(price="0.0042", venue=Venue.V2, path=("Cake", "WBNB"))
        assert result.is_resolved
        assert result.to_dict() == {
            "price": "0.0042",
            "version": "v2",
            "path": ["Cake", "WBNB"],
        }


class TestQuoteCurrency:
    @pytest.mark.parametrize(
        "selector,expected",
        [
            ("bnb", QuoteCurrency.NATIVE),
            ("BNB", QuoteCurrency.NATIVE),
            ("native", QuoteCurrency.NATIVE),
            ("usdt", QuoteCurrency.STABLE),
            (" USDT ", QuoteCurrency.STABLE),
            ("stable", QuoteCurrency.STABLE),
            (QuoteCurrency.STABLE, QuoteCurrency.STABLE),
        ],
    )
    def test_parse(self, selector, expected):
        assert QuoteCurrency.parse(selector) is expected

    @pytest.mark.parametrize("selector", ["eur", "", None, 1])
    def test_parse_rejects_unknown(self, selector):
        with pytest.raises(InvalidQuoteCurrency):
            QuoteCurrency.parse(selector)


class TestFeeTier:
    def test_bps_labels(self):
        assert [tier.bps for tier in FEE_TIER_ORDER] == [1, 5, 25, 100]

    def test_probe_order_is_ascending(self):
        assert list(FEE_TIER_ORDER) == sorted(FeeTier)
        assert [int(tier) for tier in FEE_TIER_ORDER] == [100, 500, 2500, 10000]
