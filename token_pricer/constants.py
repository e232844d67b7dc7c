"""
Constants and enums for the token pricer.

Default addresses describe PancakeSwap on BNB Smart Chain mainnet; every one
of them can be overridden through the YAML config.
"""

from enum import Enum, IntEnum

from .exceptions import InvalidQuoteCurrency


class QuoteCurrency(Enum):
    """Currency a price is expressed in."""

    NATIVE = "native"
    STABLE = "stable"

    @classmethod
    def parse(cls, value) -> "QuoteCurrency":
        """Parse a case-insensitive selector ("bnb"/"native" or "usdt"/"stable")."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            if key in QUOTE_SELECTORS:
                return QUOTE_SELECTORS[key]
        raise InvalidQuoteCurrency(value)


QUOTE_SELECTORS = {
    "native": QuoteCurrency.NATIVE,
    "bnb": QuoteCurrency.NATIVE,
    "stable": QuoteCurrency.STABLE,
    "usdt": QuoteCurrency.STABLE,
}


class Venue(Enum):
    """Source that produced a price."""

    V2 = "v2"
    V3 = "v3"
    AGGREGATOR = "aggregator"
    IDENTITY = "identity"


class FeeTier(IntEnum):
    """PancakeSwap V3 fee tiers in hundredths of a basis point."""

    LOWEST = 100  # 0.01%
    LOW = 500  # 0.05%
    MEDIUM = 2500  # 0.25%
    HIGH = 10000  # 1.00%

    @property
    def bps(self) -> int:
        """Fee in basis points (1, 5, 25 or 100)."""
        return self.value // 100


# Probing order, first pool found wins
FEE_TIER_ORDER = (FeeTier.LOWEST, FeeTier.LOW, FeeTier.MEDIUM, FeeTier.HIGH)

V3_STRATEGY_POOL_STATE = "pool_state"
V3_STRATEGY_QUOTER = "quoter"

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Base of the concentrated-liquidity tick price curve
TICK_BASE = "1.0001"

DEFAULT_DECIMALS = 18
UNKNOWN_SYMBOL = "UNKNOWN"
UNKNOWN_NAME = "Unknown Token"

# BNB Smart Chain mainnet
DEFAULT_RPC_URL = "https://bsc-dataseed.binance.org/"

PANCAKE_ROUTER_V2 = "0x10ED43C718714eb63d5aA57B78B54704E256024E"
PANCAKE_FACTORY_V3 = "0x0BFbCF9fa4f9C56B0F40a671Ad40E0805A091865"
PANCAKE_QUOTER_V3 = "0xB048Bbc1Ee6b733FFfCFb9e9CeF7375518e25997"

WBNB = "0xbb4CdB9CBd36B01bD1cBaEBF2De08d9173bc095c"
USDT = "0x55d398326f99059fF775485246999027B3197955"
BUSD = "0xe9e7CEA3DedcA5984780Bafc599bD69ADd087D56"
USDC = "0x8AC76a51cc950d9822D68b83fE1Ad97B32Cd580d"

DEFAULT_AGGREGATOR_URL = "https://api.dexscreener.com/latest/dex/tokens"
DEFAULT_AGGREGATOR_TIMEOUT_SEC = 5.0
DEFAULT_USER_AGENT = "Mozilla/5.0"

# Sample tokens used by the CLI when none are given
CAKE = "0x0e09fabb73bd3ade0a17ecc321fd13a19e81ce82"
UGO = "0x66a2ed2F04BC7D2a03785DD04261A2FA595a5839"
