"""
Canister metrics exporter CLI entry point.

Serve the canister health gauges to a Prometheus scraper.

Usage::

    NX_GOV_ENV=test python -m nx_gov_metrics
    NX_GOV_ENV=test python -m nx_gov_metrics --port 9100 --cycles-balance 5000000000000

Options:
    --host            Address to bind to (default: 0.0.0.0)
    --port            Port to listen on (default: 9090)
    --cycles-balance  Static cycles balance reported off the host (default: 0)

Off the host there is no canister runtime to read from, so the exporter only
runs with NX_GOV_ENV=test and reports zero memory usage.
"""

from __future__ import annotations

import argparse
import asyncio
import logging

from nx_gov_metrics.api import ApiServer, ApiServerConfig
from nx_gov_metrics.config import NX_GOV_ENV
from nx_gov_metrics.metrics import CounterReader, select_counter_reader

logger = logging.getLogger(__name__)


class ColoredFormatter(logging.Formatter):
    """Logging formatter with ANSI colors for better readability."""

    # ANSI color codes
    GREY = "\x1b[38;5;244m"
    BLUE = "\x1b[38;5;39m"
    GREEN = "\x1b[38;5;40m"
    YELLOW = "\x1b[38;5;220m"
    RED = "\x1b[38;5;196m"
    BOLD_RED = "\x1b[38;5;196;1m"
    CYAN = "\x1b[38;5;51m"
    RESET = "\x1b[0m"

    LEVEL_COLORS = {
        logging.DEBUG: GREY,
        logging.INFO: GREEN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: BOLD_RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors."""
        # Get color for this level
        color = self.LEVEL_COLORS.get(record.levelno, self.RESET)

        # Format timestamp in cyan
        timestamp = self.formatTime(record, self.datefmt)
        colored_time = f"{self.CYAN}{timestamp}{self.RESET}"

        # Format level name with color
        levelname = f"{color}{record.levelname:8}{self.RESET}"

        # Format logger name in blue
        name = f"{self.BLUE}{record.name}{self.RESET}"

        # Format message
        message = record.getMessage()

        return f"{colored_time} {levelname} {name}: {message}"


def setup_logging(verbose: bool = False, no_color: bool = False) -> None:
    """Configure logging for the exporter with optional colors."""
    level = logging.DEBUG if verbose else logging.INFO

    # Create handler
    handler = logging.StreamHandler()
    handler.setLevel(level)

    # Use colored formatter unless disabled
    formatter: logging.Formatter
    if no_color:
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        formatter = ColoredFormatter(datefmt="%Y-%m-%d %H:%M:%S")

    handler.setFormatter(formatter)

    # Configure root logger
    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)


async def run_exporter(config: ApiServerConfig, reader: CounterReader) -> None:
    """
    Serve the metrics endpoint until interrupted.

    Args:
        config: Bind address and port.
        reader: Counter reader scraped on every request.
    """
    server = ApiServer(config=config, reader_getter=lambda: reader)
    logger.info("Serving canister metrics (env=%s)", NX_GOV_ENV)
    await server.run()


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        description="Canister metrics exporter",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Address to bind to (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=9090,
        help="Port to listen on (default: 9090)",
    )
    parser.add_argument(
        "--cycles-balance",
        type=int,
        default=0,
        help="Static cycles balance reported off the host (default: 0)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored logging output",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.cycles_balance < 0:
        parser.error("--cycles-balance must be non-negative")

    balance = args.cycles_balance
    try:
        reader = select_counter_reader(NX_GOV_ENV, balance_provider=lambda: balance)
    except ValueError as e:
        parser.error(f"{e} (set NX_GOV_ENV=test to serve simulated counters)")

    setup_logging(args.verbose, args.no_color)

    config = ApiServerConfig(host=args.host, port=args.port)
    try:
        asyncio.run(run_exporter(config, reader))
    except KeyboardInterrupt:
        logger.info("Shutting down...")


if __name__ == "__main__":
    main()
