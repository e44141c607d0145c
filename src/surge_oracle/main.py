"""Entry point for the surge oracle application.

Usage:
    surge-oracle --config config/oracle.yaml --prices data/ticks.json
    python -m surge_oracle.main --prices data/ticks.json --dry-run
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from surge_oracle.core.config import OracleConfig, load_config
from surge_oracle.core.controller import OracleController
from surge_oracle.domain.errors import OracleError
from surge_oracle.volatility.loader import PriceTickLoader


def setup_logging(level: str, log_file: str | None = None) -> None:
    """Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional file to write logs to
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        handlers=handlers,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Surge volatility oracle",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--config",
        "-c",
        type=str,
        help="Path to configuration file",
    )

    parser.add_argument(
        "--prices",
        "-p",
        type=str,
        help="Price tick file to replay through the estimator",
    )

    parser.add_argument(
        "--feed-id",
        type=str,
        help="Price feed identifier (overrides config)",
    )

    parser.add_argument(
        "--stats-owner",
        type=str,
        default="replay",
        help="Identity owning the replayed stats object",
    )

    parser.add_argument(
        "--log-level",
        "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )

    parser.add_argument(
        "--log-file",
        type=str,
        help="Log file path",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Load config and validate without replaying",
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> OracleConfig:
    """Build configuration from file and command line args.

    Args:
        args: Parsed command line arguments

    Returns:
        Merged configuration
    """
    config = load_config(args.config)

    if args.feed_id:
        config.feed.feed_id = args.feed_id

    if args.log_level:
        config.log_level = args.log_level

    if args.log_file:
        config.log_file = args.log_file

    return config


def replay(controller: OracleController, prices_path: str, owner: str) -> int:
    """Replay a tick file through a fresh stats object.

    Each tick is submitted with ``now`` equal to its publish time, so
    only feed identity is enforced during replay.

    Args:
        controller: Oracle controller
        prices_path: Tick file path
        owner: Identity owning the stats object

    Returns:
        Number of rejected ticks
    """
    logger = logging.getLogger(__name__)
    loader = PriceTickLoader()
    stats_id = controller.create_stats(owner)

    rejected = 0
    for update in loader.load_ticks(prices_path):
        try:
            controller.submit_price(stats_id, owner, update, now=update.publish_time)
        except OracleError as e:
            rejected += 1
            logger.warning(f"Skipping tick: {e}")

    stats = controller.get_stats(stats_id)
    logger.info(
        f"Replayed {stats.count} ticks ({rejected} rejected): "
        f"annualized volatility {stats.annualized_volatility()}"
    )
    print(json.dumps({"stats_id": stats_id, **stats.to_dict()}, indent=2))
    return rejected


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    # Build configuration
    try:
        config = build_config(args)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return 1

    setup_logging(config.log_level, config.log_file)

    logger = logging.getLogger(__name__)
    logger.info("Surge oracle starting")
    logger.info(f"Feed: {config.feed.feed_id or '<none>'}")
    logger.info(f"Markets: {len(config.markets)}")

    # Dry run - just validate config
    if args.dry_run:
        logger.info("Dry run - configuration valid")
        return 0

    if not args.prices:
        logger.error("No price file specified. Use --prices.")
        return 1

    if not config.feed.feed_id:
        config.feed.feed_id = PriceTickLoader().load_feed_id(args.prices)

    with OracleController(config) as controller:
        try:
            replay(controller, args.prices, args.stats_owner)
        except Exception as e:
            logger.error(f"Fatal error: {e}", exc_info=True)
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
