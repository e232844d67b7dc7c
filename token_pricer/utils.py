"""
Common helpers for the token pricer.

Unit conversion between raw on-chain integers and decimal strings, plus the
decimal rendering used for every price string.
"""

from decimal import ROUND_DOWN, Decimal, localcontext
from typing import Union


# Unit conversion
def parse_units(amount: Union[str, int, Decimal], decimals: int) -> int:
    """
    Convert a human amount to raw token units.

    Args:
        amount: Amount in whole tokens (e.g., "1" or "0.5")
        decimals: Token decimal precision

    Returns:
        Integer amount in the token's smallest unit

    Raises:
        ValueError: If decimals is negative or the amount has more
            fractional digits than the token supports
    """
    if decimals < 0:
        raise ValueError(f"decimals must be non-negative: {decimals}")
    value = Decimal(str(amount)) * (Decimal(10) ** decimals)
    if value != value.to_integral_value():
        raise ValueError(f"{amount} has more than {decimals} fractional digits")
    return int(value)


def format_units(value: int, decimals: int) -> str:
    """
    Render raw token units as a decimal string.

    Matches ethers.formatUnits: trailing zeros are trimmed but at least one
    fractional digit is kept, so 10**18 with 18 decimals gives "1.0".
    """
    negative = value < 0
    digits = str(abs(int(value))).rjust(decimals + 1, "0")
    if decimals:
        whole, frac = digits[:-decimals], digits[-decimals:]
    else:
        whole, frac = digits, ""
    frac = frac.rstrip("0") or "0"
    return f"{'-' if negative else ''}{whole}.{frac}"


def format_decimal(value: Decimal, places: int = 18) -> str:
    """Render a Decimal truncated to `places` fractional digits, ethers style."""
    with localcontext() as ctx:
        # Enough digits for the whole part plus every fractional place
        ctx.prec = max(80, value.adjusted() + places + 2)
        quantum = Decimal(1).scaleb(-places)
        scaled = value.quantize(quantum, rounding=ROUND_DOWN)
        return format_units(int(scaled.scaleb(places)), places)
