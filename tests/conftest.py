"""Shared fixtures."""

import pytest

from fakes import FakeChain


@pytest.fixture
def fake_chain():
    return FakeChain()


@pytest.fixture
def make_chain():
    """Factory for a FakeChain with a custom PricerConfig."""
    return FakeChain
