"""
ERC-20 metadata resolution with graceful degradation.
"""

import asyncio
import logging
from typing import Optional

from .chain import ChainContext
from .diagnostics import NULL_DIAGNOSTICS, Diagnostics
from .exceptions import MetadataFailure, TransientRemoteFailure
from .types import TokenDescriptor

logger = logging.getLogger(__name__)


class TokenMetadataResolver:
    """
    Reads symbol, name and decimals of a token contract.

    The three reads are issued concurrently and joined. If any of them fails
    the whole descriptor falls back to the placeholder (UNKNOWN, 18 decimals);
    a metadata failure never aborts price resolution.
    """

    def __init__(self, chain: ChainContext, diagnostics: Optional[Diagnostics] = None):
        self.chain = chain
        self.diagnostics = diagnostics or NULL_DIAGNOSTICS

    async def resolve(self, address: str) -> TokenDescriptor:
        """
        Fetch metadata for a checksummed token address.

        Returns:
            TokenDescriptor, or the placeholder descriptor on any failure
        """
        try:
            return await self._fetch(address)
        except MetadataFailure as e:
            self.diagnostics.emit(
                "metadata",
                "metadata_failed",
                f"Metadata unavailable for {address}, using defaults: {e}",
                level=logging.WARNING,
                address=address,
            )
            return TokenDescriptor.placeholder(address)

    async def _fetch(self, address: str) -> TokenDescriptor:
        token = self.chain.token_contract(address)

        try:
            symbol, name, decimals = await asyncio.gather(
                self.chain.call(token.functions.symbol, source="symbol"),
                self.chain.call(token.functions.name, source="name"),
                self.chain.call(token.functions.decimals, source="decimals"),
            )
        except TransientRemoteFailure as e:
            raise MetadataFailure(str(e), address=address) from e

        if not isinstance(decimals, int) or not 0 <= decimals <= 255:
            raise MetadataFailure(f"decimals out of range: {decimals!r}", address=address)

        descriptor = TokenDescriptor(
            address=address, symbol=str(symbol), name=str(name), decimals=decimals
        )
        logger.debug(
            f"Token {address}: symbol={descriptor.symbol} name={descriptor.name} "
            f"decimals={descriptor.decimals}"
        )
        return descriptor
