"""
Token Pricer.

Resolves the price of a BEP-20 token in WBNB or USDT from PancakeSwap V2,
then PancakeSwap V3, then an external aggregator, taking the first source
that has liquidity.
"""

PROJECT_NAME = "token-pricer"
VERSION = "0.3.0"
__version__ = VERSION

from token_pricer.address import normalize
from token_pricer.chain import ChainContext, build_chain_context
from token_pricer.config import PricerConfig, load_config
from token_pricer.constants import FeeTier, QuoteCurrency, Venue
from token_pricer.diagnostics import DiagnosticEvent, Diagnostics
from token_pricer.exceptions import (
    ConfigError,
    InvalidAddress,
    InvalidQuoteCurrency,
    TokenPricerError,
)
from token_pricer.resolver import PriceResolutionOrchestrator
from token_pricer.types import PoolState, PriceQuote, TokenDescriptor

__all__ = [
    "PROJECT_NAME",
    "VERSION",
    "normalize",
    "ChainContext",
    "build_chain_context",
    "PricerConfig",
    "load_config",
    "FeeTier",
    "QuoteCurrency",
    "Venue",
    "DiagnosticEvent",
    "Diagnostics",
    "ConfigError",
    "InvalidAddress",
    "InvalidQuoteCurrency",
    "TokenPricerError",
    "PriceResolutionOrchestrator",
    "PoolState",
    "PriceQuote",
    "TokenDescriptor",
]
