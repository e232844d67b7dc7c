"""
DEX adapter modules for the V2 router and V3 pools.
"""

from .v2 import V2LiquidityProber
from .v3 import (
    V3PoolResolver,
    V3PriceSource,
    V3QuoterResolver,
    build_v3_source,
    price_from_tick,
)

__all__ = [
    "V2LiquidityProber",
    "V3PoolResolver",
    "V3PriceSource",
    "V3QuoterResolver",
    "build_v3_source",
    "price_from_tick",
]
