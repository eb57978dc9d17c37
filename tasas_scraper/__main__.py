"""
CLI entry point for tasas-scraper.

Usage:
    python -m tasas_scraper
    python -m tasas_scraper --banks bbva,itau
    python -m tasas_scraper --fixtures-dir tests/fixtures --output data
"""

import argparse
import asyncio
import logging
import sys

import structlog

# Log level mapping
LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def setup_logging(level: str = "INFO", json_output: bool = False):
    """Configure structured logging."""
    log_level = LOG_LEVELS.get(level.upper(), logging.INFO)

    if json_output:
        processors = [
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    else:
        processors = [
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Colombian mortgage rate aggregator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Update all configured banks
  python -m tasas_scraper

  # Update specific banks
  python -m tasas_scraper --banks bbva,itau

  # Offline run against local fixtures
  python -m tasas_scraper --fixtures-dir tests/fixtures

  # Use custom settings file
  python -m tasas_scraper --config /path/to/settings.yml
        """,
    )

    parser.add_argument(
        "--banks",
        type=str,
        help="Comma-separated list of bank ids to process (default: all configured)",
    )

    parser.add_argument(
        "--output",
        type=str,
        help="Output directory for snapshots (default: settings output.data_dir)",
    )

    parser.add_argument(
        "--fixtures-dir",
        type=str,
        help="Read documents from this fixtures directory instead of fetching",
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to settings.yml config file",
    )

    parser.add_argument(
        "--sequential",
        action="store_true",
        help="Run bank parsers one after another",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Output logs as JSON (for production)",
    )

    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version and exit",
    )

    return parser.parse_args(argv)


def build_settings(args):
    """Load settings and apply command line overrides."""
    from .config.loader import load_settings, parse_bank_ids

    settings = load_settings(args.config)

    if args.banks:
        settings.banks = parse_bank_ids(args.banks.split(","))
    if args.output:
        settings.data_dir = args.output
    if args.fixtures_dir:
        settings.use_fixtures = True
        settings.fixtures_dir = args.fixtures_dir

    return settings


async def main_async(args):
    """Async main function."""
    from .orchestrator import run_updater

    logger = structlog.get_logger(__name__)

    settings = build_settings(args)

    logger.info(
        "starting_tasas_scraper",
        banks=[b.value for b in settings.banks],
        output=settings.data_dir,
        fixtures=settings.use_fixtures,
    )

    result = await run_updater(settings=settings, sequential=args.sequential)

    logger.info(
        "run_complete",
        offers=len(result.dataset.offers),
        scenarios=len(result.rankings.scenarios),
        failed_banks=[b.value for b in result.failed_banks],
        output_dir=settings.data_dir,
    )

    return result


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    # Version check
    if args.version:
        from . import __version__
        print(f"tasas-scraper {__version__}")
        sys.exit(0)

    setup_logging(args.log_level, args.json_logs)

    try:
        asyncio.run(main_async(args))
        sys.exit(0)
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        sys.exit(130)
    except Exception as e:
        logger = structlog.get_logger(__name__)
        logger.exception("fatal_error", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
