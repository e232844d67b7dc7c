"""
PancakeSwap V2 (Uniswap V2 style) liquidity probing.

Liquidity is detected by simulating a one-unit swap with the router's
getAmountsOut: the router reverts when any hop has no pair or zero reserves,
so a successful call means the whole path is tradable.
"""

import logging
from typing import List, Optional, Tuple

from ..chain import ChainContext
from ..diagnostics import NULL_DIAGNOSTICS, Diagnostics
from ..exceptions import TransientRemoteFailure
from ..types import Path
from ..utils import parse_units


class V2LiquidityProber:
    """
    Probes a fixed, ordered list of candidate paths on the V2 router.

    Selection is greedy: the first candidate whose quote succeeds wins and
    later candidates are never queried, even if they would quote more.
    """

    def __init__(self, chain: ChainContext, diagnostics: Optional[Diagnostics] = None):
        self.chain = chain
        self.diagnostics = diagnostics or NULL_DIAGNOSTICS

    def candidate_paths(self, token_in: str, quote_token: str) -> List[Path]:
        """
        Candidate paths in probing order.

        Direct, then through the native token, then through each bridge
        stable. The list is the same for both quote currencies.
        """
        bridge_a, bridge_b = (token.address for token in self.chain.config.bridges)
        return [
            (token_in, quote_token),
            (token_in, self.chain.native, quote_token),
            (token_in, bridge_a, quote_token),
            (token_in, bridge_b, quote_token),
        ]

    async def quote_path(self, path: Path, decimals: int) -> Optional[int]:
        """
        Quote one whole input token along a path.

        Args:
            path: Token addresses, input first and output last
            decimals: Input token decimals (sets the one-unit amount)

        Returns:
            Raw output amount of the last token, or None if the path reverts
        """
        amount_in = parse_units(1, decimals)
        router = self.chain.router

        try:
            amounts = await self.chain.call(
                lambda: router.functions.getAmountsOut(amount_in, list(path)),
                source="getAmountsOut",
            )
        except TransientRemoteFailure as e:
            self.diagnostics.emit(
                "v2",
                "v2_candidate_failed",
                f"No liquidity on {_describe(path)}: {e}",
                path=path,
            )
            return None

        if not amounts or len(amounts) != len(path):
            self.diagnostics.emit(
                "v2",
                "v2_candidate_failed",
                f"Malformed quote on {_describe(path)}: {amounts!r}",
                path=path,
            )
            return None

        return int(amounts[-1])

    async def find_liquid_path(
        self, token_in: str, quote_token: str, decimals: int
    ) -> Optional[Tuple[Path, int]]:
        """
        Find the first candidate path with usable liquidity.

        Args:
            token_in: Checksummed input token
            quote_token: Checksummed quote token
            decimals: Input token decimals

        Returns:
            (path, raw amount out) for the first liquid candidate, or None
        """
        for path in self.candidate_paths(token_in, quote_token):
            amount_out = await self.quote_path(path, decimals)
            if amount_out is None:
                continue

            self.diagnostics.emit(
                "v2",
                "v2_path_found",
                f"Liquid path {_describe(path)} quotes {amount_out}",
                level=logging.INFO,
                path=path,
                amount_out=amount_out,
            )
            return path, amount_out

        return None


def _describe(path: Path) -> str:
    return " -> ".join(addr[:8] for addr in path)
