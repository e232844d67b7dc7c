"""
Address validation and EIP-55 checksumming.
"""

import re
from typing import Any

from web3 import Web3

from .exceptions import InvalidAddress

_HEX_ADDRESS = re.compile(r"^0[xX][0-9a-fA-F]{40}$")


def is_valid_address(raw: Any) -> bool:
    """Check that raw is a 0x-prefixed 20-byte hex string (any case)."""
    return isinstance(raw, str) and bool(_HEX_ADDRESS.match(raw))


def normalize(raw: Any) -> str:
    """
    Canonicalize a token address to its checksummed form.

    Case-insensitive: the checksum of mixed-case input is recomputed, never
    verified, so every case variant of the same bytes yields the same result.

    Args:
        raw: Address string, e.g. "0x0e09fabb73bd3ade0a17ecc321fd13a19e81ce82"

    Returns:
        Checksummed address

    Raises:
        InvalidAddress: If raw is not a well-formed 20-byte hex string
    """
    if not is_valid_address(raw):
        raise InvalidAddress(raw)
    return Web3.to_checksum_address("0x" + raw[2:].lower())


def same_address(a: str, b: str) -> bool:
    """Compare two addresses ignoring case."""
    return a.lower() == b.lower()
