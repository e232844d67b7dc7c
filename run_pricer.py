#!/usr/bin/env python3
"""
Token price lookup CLI.

Resolves each token in WBNB and/or USDT (PancakeSwap V2, then V3, then the
aggregator) and prints the result as a table or JSON.

Usage:
    python3 run_pricer.py
    python3 run_pricer.py 0x0e09fabb73bd3ade0a17ecc321fd13a19e81ce82 --quote usdt
    python3 run_pricer.py <token> --config configs/pricer_bsc.yaml --json
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Dict, List, Optional

from dotenv import load_dotenv
from tabulate import tabulate

import logging_config
from token_pricer.config import load_config
from token_pricer.constants import CAKE, UGO, QuoteCurrency
from token_pricer.diagnostics import Diagnostics
from token_pricer.exceptions import ConfigError, InvalidAddress, InvalidQuoteCurrency
from token_pricer.resolver import PriceResolutionOrchestrator
from token_pricer.types import PriceQuote

EXIT_OK = 0
EXIT_CONFIG = 1
EXIT_INVALID_INPUT = 2

QUOTE_CHOICES = {
    "bnb": (QuoteCurrency.NATIVE,),
    "usdt": (QuoteCurrency.STABLE,),
    "both": (QuoteCurrency.NATIVE, QuoteCurrency.STABLE),
}


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Resolve token prices from PancakeSwap and DexScreener",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Price the sample tokens (CAKE, UGO) in WBNB and USDT
  python3 run_pricer.py

  # One token, USDT only, V2 and aggregator only
  python3 run_pricer.py 0x0e09fabb73bd3ade0a17ecc321fd13a19e81ce82 --quote usdt --no-v3

  # Use the quoter instead of pool ticks for V3
  python3 run_pricer.py <token> --v3-strategy quoter
        """,
    )

    parser.add_argument(
        "tokens",
        nargs="*",
        default=[CAKE, UGO],
        help="Token addresses (default: CAKE and UGO)",
    )
    parser.add_argument(
        "--quote",
        choices=sorted(QUOTE_CHOICES),
        default="both",
        help="Quote currency (default: both)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config YAML file (default: built-in BSC mainnet settings)",
    )
    parser.add_argument("--no-v3", action="store_true", help="Skip the V3 tier")
    parser.add_argument(
        "--v3-strategy",
        choices=["pool_state", "quoter"],
        default=None,
        help="Override the V3 pricing strategy from the config",
    )
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Print every diagnostic event recorded during resolution",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )

    return parser.parse_args(argv)


async def price_tokens(
    orchestrator: PriceResolutionOrchestrator,
    tokens: List[str],
    quotes,
    try_v3: bool,
) -> Dict[str, Dict[QuoteCurrency, PriceQuote]]:
    """Resolve every token in every requested quote currency, sequentially."""
    results: Dict[str, Dict[QuoteCurrency, PriceQuote]] = {}
    for token in tokens:
        results[token] = {}
        for quote in quotes:
            results[token][quote] = await orchestrator.resolve(token, quote, try_v3)
    return results


def render_table(results: Dict[str, Dict[QuoteCurrency, PriceQuote]], config) -> str:
    rows = []
    for token, by_quote in results.items():
        for quote, result in by_quote.items():
            label = config.native.symbol if quote is QuoteCurrency.NATIVE else config.stable.symbol
            rows.append(
                [
                    token,
                    label,
                    result.price or "-",
                    result.venue.value if result.venue else "-",
                    " -> ".join(result.path) if result.path else "-",
                ]
            )
    return tabulate(rows, headers=["Token", "Quote", "Price", "Source", "Path"])


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 success, 1 config error, 2 invalid token or quote)
    """
    args = parse_args(argv)
    load_dotenv()
    logging_config.setup(getattr(logging, args.log_level))

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"❌ Config error: {e}", file=sys.stderr)
        return EXIT_CONFIG

    if args.v3_strategy:
        config = config.model_copy(
            update={"v3": config.v3.model_copy(update={"strategy": args.v3_strategy})}
        )

    if args.trace:
        diagnostics, events = Diagnostics.recording()
    else:
        diagnostics, events = Diagnostics(), []

    orchestrator = PriceResolutionOrchestrator.from_config(config, diagnostics=diagnostics)

    try:
        results = asyncio.run(
            price_tokens(
                orchestrator, args.tokens, QUOTE_CHOICES[args.quote], not args.no_v3
            )
        )
    except (InvalidAddress, InvalidQuoteCurrency) as e:
        print(f"❌ {e}", file=sys.stderr)
        return EXIT_INVALID_INPUT

    if args.json:
        payload = {
            token: {quote.value: result.to_dict() for quote, result in by_quote.items()}
            for token, by_quote in results.items()
        }
        print(json.dumps(payload, indent=2))
    else:
        print(render_table(results, config))

    if args.trace:
        print()
        for event in events:
            print(f"[{event.component}] {event.kind}: {event.message}")

    return EXIT_OK


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
