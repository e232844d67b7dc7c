"""
Logging configuration for the pricer CLI.

Usage:
    import logging_config
    logging_config.setup()
"""

import logging
import sys


def setup(level=logging.INFO):
    """
    Configure root logging with a short, readable format.

    - HH:MM:SS timestamps, level and message only
    - Quiets web3 / urllib3 / aiohttp transport chatter
    """
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(levelname)-7s | %(message)s", datefmt="%H:%M:%S"
        )
    )
    root.addHandler(console)

    # Transport libraries log every request at DEBUG
    transport_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in ("web3", "urllib3", "aiohttp", "asyncio"):
        logging.getLogger(name).setLevel(transport_level)

    logging.getLogger("token_pricer").setLevel(level)


def setup_minimal():
    """Only warnings and errors."""
    setup(level=logging.WARNING)


def setup_debug():
    """
    Verbose logging, including every probe diagnostic and raw RPC traffic.
    """
    setup(level=logging.DEBUG)
