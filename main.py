"""
Ticker - Demo Entry Point
Print the values of a range at a fixed cadence, e.g. 0-9 one per second.

CLI Flags Reference:
| Flag | Default | Description |
|------|---------|-------------|
| `--interval` | `TICKER_INTERVAL` or `1.0` | Seconds between values |
| `--count` | `10` | Values in the range (`0` = count forever) |
| `--limit` | `None` | Stop consuming after N values |
| `--name` | `TICKER_NAME` or `default` | Ticker name for logs and metrics |
| `--async` | `False` | Use AsyncTicker on an event loop |
| `--log-level` | `TICKER_LOG_LEVEL` or `INFO` | Logging level |
| `--log-format` | `TICKER_LOG_FORMAT` or `console` | `console` or `json` |
| `--version` | | Print the version and exit |
"""

import argparse
import asyncio
import itertools
import sys

from config import system as system_config
from config import ticker as ticker_config
from ticker import AsyncTicker, Ticker, ValidationError
from ticker.observability import bind_context, clear_context, configure_logging, get_logger
from ticker.version import get_full_version_string


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Print a sequence at a fixed rate")

    parser.add_argument("--version", action="version", version=get_full_version_string())

    parser.add_argument(
        "--interval",
        type=float,
        default=ticker_config.DEFAULT_INTERVAL_SECONDS,
        help=f"Seconds between values (default: {ticker_config.DEFAULT_INTERVAL_SECONDS})",
    )

    parser.add_argument("--count", type=int, default=10, help="Number of values, 0 for infinite (default: 10)")

    parser.add_argument("--limit", type=int, default=None, help="Stop after N values (default: run to the end)")

    parser.add_argument(
        "--name",
        type=str,
        default=ticker_config.DEFAULT_TICKER_NAME,
        help=f"Ticker name (default: {ticker_config.DEFAULT_TICKER_NAME})",
    )

    parser.add_argument("--async", dest="use_async", action="store_true", help="Use AsyncTicker (default: False)")

    parser.add_argument(
        "--log-level",
        type=str,
        default=system_config.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help=f"Logging level (default: {system_config.LOG_LEVEL})",
    )

    parser.add_argument(
        "--log-format",
        type=str,
        default=system_config.LOG_FORMAT,
        choices=["console", "json"],
        help=f"Log output format (default: {system_config.LOG_FORMAT})",
    )

    return parser.parse_args(argv)


def _source(count: int):
    return range(count) if count > 0 else itertools.count()


def run_blocking(args) -> dict:
    """Consume a Ticker on the current thread."""
    with Ticker(_source(args.count), args.interval, name=args.name) as ticker:
        for n, value in enumerate(ticker, 1):
            print(value, flush=True)
            if args.limit and n >= args.limit:
                break
        return ticker.get_stats()


async def run_async(args) -> dict:
    """Consume an AsyncTicker on the running event loop."""
    async with AsyncTicker(_source(args.count), args.interval, name=args.name) as ticker:
        n = 0
        async for value in ticker:
            n += 1
            print(value, flush=True)
            if args.limit and n >= args.limit:
                break
        return ticker.get_stats()


def main(argv=None) -> int:
    """Main entry point for the demo."""
    args = parse_args(argv)

    configure_logging(log_level=args.log_level, log_format=args.log_format, log_file=system_config.LOG_FILE)
    logger = get_logger("Ticker-Demo")
    bind_context(ticker=args.name)
    logger.info("starting", version=get_full_version_string(), interval=args.interval, count=args.count)

    try:
        if args.use_async:
            stats = asyncio.run(run_async(args))
        else:
            stats = run_blocking(args)
    except ValidationError as e:
        logger.error("invalid_arguments", error=str(e))
        return 2
    except KeyboardInterrupt:
        logger.info("interrupted")
        return 130
    finally:
        clear_context()

    logger.info(
        "finished",
        items=stats["items_yielded"],
        elapsed=round(stats["elapsed_seconds"], 3),
        rate=round(stats["rate"], 3),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
