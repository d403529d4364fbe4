"""
Command Line Interface for the Theme Crawler.

Usage Examples:
--------------

# Crawl the catalog and analyze the first theme hosted on GitHub
theme-crawler run

# Analyze the first 20 themes
theme-crawler run 20

# Use a settings file and debug logging
theme-crawler -v -c crawler.yaml run 20

# Delete the response cache
theme-crawler clean

Exit codes: 0 success, 1 usage or configuration error, 2 fatal runtime error.
"""

import argparse
import logging
import re
import sys
from pathlib import Path

from .core.pipeline_crawler import ThemeCrawler
from .config.crawler_config import ConfigLoader, validate_config, ConfigurationError
from .fetch.response_cache import ResponseCache
from .exceptions import CrawlerError, InvariantError


EXIT_OK = 0
EXIT_USAGE = 1
EXIT_FATAL = 2

LIMIT_RE = re.compile(r"^[1-9][0-9]*$")


class UsageError(Exception):
    """Raised instead of argparse's own exit on invalid invocations."""
    pass


class CrawlerArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports usage errors with exit status 1."""

    def error(self, message):
        raise UsageError(message)


def positive_limit(value: str) -> int:
    if not LIMIT_RE.match(value):
        raise argparse.ArgumentTypeError(f"limit must be a positive integer: {value!r}")
    return int(value)


def setup_logging(verbose: bool = False):
    """
    Setup logging configuration.

    Args:
        verbose: Enable debug-level logging if True
    """
    level = logging.DEBUG if verbose else logging.INFO

    # Create logs directory if it doesn't exist
    log_dir = Path('logs')
    log_dir.mkdir(exist_ok=True)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_dir / 'theme_crawler.log')
        ]
    )

    # Set third-party loggers to WARNING to reduce noise
    if not verbose:
        logging.getLogger('urllib3').setLevel(logging.WARNING)
        logging.getLogger('requests').setLevel(logging.WARNING)


def load_config(args):
    logger = logging.getLogger(__name__)

    if args.config:
        logger.info(f"Loading configuration from {args.config}")
        config = ConfigLoader.load_from_yaml(args.config)
    else:
        config = ConfigLoader.create_default_config()

    validate_config(config)
    return config


def run_command(args) -> int:
    """
    Execute the run command.

    Args:
        args: Parsed command-line arguments
    """
    logger = logging.getLogger(__name__)
    config = load_config(args)

    crawler = ThemeCrawler(config)
    logger.info(f"Starting crawl of {config.catalog.catalog_url} (limit {args.limit})")
    report = crawler.run(limit=args.limit)

    for entry in report.failed_entries:
        logger.warning(f"WARNING: {entry.name}: {entry.error}")

    if logger.isEnabledFor(logging.DEBUG):
        for entry in crawler.entries:
            logger.debug(f"Entry: {entry.to_dict()}")
        logger.debug(f"Detailed stats: {crawler.get_detailed_stats()}")

    report.print_summary()
    logger.info("Completed")
    return EXIT_OK


def clean_command(args) -> int:
    """
    Execute the clean command.

    Args:
        args: Parsed command-line arguments
    """
    config = load_config(args)
    ResponseCache(config.cache).clear()
    return EXIT_OK


def build_parser() -> CrawlerArgumentParser:
    parser = CrawlerArgumentParser(
        prog='theme-crawler',
        description='Theme Crawler - audits default configs of catalog themes',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s run
  %(prog)s run 20
  %(prog)s -c crawler.yaml run 20
  %(prog)s clean
        """
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose (debug) logging'
    )

    parser.add_argument(
        '-c', '--config',
        metavar='FILE',
        help='Path to YAML configuration file (default: use built-in defaults)'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # ========================================================================
    # RUN COMMAND
    # ========================================================================
    run_parser = subparsers.add_parser(
        'run',
        help='Crawl the catalog and analyze theme configs',
        description='Crawl the catalog and deep-crawl up to LIMIT themes'
    )

    run_parser.add_argument(
        'limit',
        nargs='?',
        type=positive_limit,
        default=1,
        help='Number of themes to deep-crawl (default: 1)'
    )

    run_parser.set_defaults(func=run_command)

    # ========================================================================
    # CLEAN COMMAND
    # ========================================================================
    clean_parser = subparsers.add_parser(
        'clean',
        help='Delete the response cache',
        description='Delete the persisted response cache file'
    )

    clean_parser.set_defaults(func=clean_command)

    return parser


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = build_parser()

    try:
        args = parser.parse_args(argv)
    except UsageError as e:
        parser.print_usage(sys.stderr)
        print(f"error: {e}", file=sys.stderr)
        return EXIT_USAGE

    if not hasattr(args, 'func'):
        parser.print_usage(sys.stderr)
        return EXIT_USAGE

    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        return args.func(args)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_USAGE
    except (CrawlerError, InvariantError) as e:
        logger.error(f"ERROR: fatal: {e}", exc_info=args.verbose)
        return EXIT_FATAL


if __name__ == '__main__':
    sys.exit(main())
