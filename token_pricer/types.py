"""
Core data types for token price resolution.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .constants import DEFAULT_DECIMALS, UNKNOWN_NAME, UNKNOWN_SYMBOL, Venue

# Ordered token addresses, first is the input token and last the quote token
Path = Tuple[str, ...]


@dataclass(frozen=True)
class TokenDescriptor:
    """
    ERC-20 metadata for a token, fetched fresh for every resolution.

    Attributes:
        address: Checksummed token address
        symbol: Token symbol (e.g., "CAKE")
        name: Token name
        decimals: Decimal precision (0-255, conventionally 18)
    """

    address: str
    symbol: str
    name: str
    decimals: int

    @classmethod
    def placeholder(cls, address: str) -> "TokenDescriptor":
        """Descriptor used when the token contract cannot be read."""
        return cls(
            address=address,
            symbol=UNKNOWN_SYMBOL,
            name=UNKNOWN_NAME,
            decimals=DEFAULT_DECIMALS,
        )

    @property
    def is_placeholder(self) -> bool:
        return self.symbol == UNKNOWN_SYMBOL and self.name == UNKNOWN_NAME


@dataclass(frozen=True)
class PoolState:
    """
    Snapshot of a concentrated-liquidity pool.

    Attributes:
        address: Pool contract address
        token0: Lower of the two token addresses
        token1: Higher of the two token addresses
        tick: Current tick read from slot0
    """

    address: str
    token0: str
    token1: str
    tick: int


@dataclass(frozen=True)
class PriceQuote:
    """
    Result of a price resolution.

    An unresolved quote has price, venue and path all set to None.
    """

    price: Optional[str]
    venue: Optional[Venue]
    path: Optional[Tuple[str, ...]]

    @classmethod
    def unresolved(cls) -> "PriceQuote":
        return cls(price=None, venue=None, path=None)

    @property
    def is_resolved(self) -> bool:
        return self.price is not None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for display (venue as its lower-case version label)."""
        return {
            "price": self.price,
            "version": self.venue.value if self.venue else None,
            "path": list(self.path) if self.path is not None else None,
        }
