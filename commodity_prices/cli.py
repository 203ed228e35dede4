"""
Commodity Prices - CLI.

============================================================
USAGE
============================================================
python -m commodity_prices.cli
python -m commodity_prices.cli --commodity corn --commodity wheat-flour
python -m commodity_prices.cli --include-flour --mock kamis --mock tridge
python -m commodity_prices.cli --flour-report --market nairobi

Prints the price report (or flour report) as JSON on stdout.
============================================================
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from commodity_prices.config import PriceConfig
from commodity_prices.exceptions import DataSourceError
from commodity_prices.fetcher import PriceFetcher
from commodity_prices.models import DataSource, FetchRequest


logger = logging.getLogger(__name__)

MOCK_CHOICES = {
    "alpha-vantage": DataSource.ALPHA_VANTAGE,
    "kamis": DataSource.KAMIS,
    "tridge": DataSource.TRIDGE,
    "world-bank": DataSource.WORLD_BANK,
}


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="commodity-prices",
        description="Kenyan wheat, maize and flour prices in USD per metric ton",
    )

    parser.add_argument(
        "--commodity", "-c",
        action="append",
        metavar="NAME",
        help="Commodity to fetch (repeatable; aliases such as CORN or wheat-flour accepted)",
    )

    parser.add_argument(
        "--include-flour",
        action="store_true",
        help="Without --commodity, fetch all four commodities",
    )

    parser.add_argument(
        "--mock",
        action="append",
        choices=sorted(MOCK_CHOICES),
        default=[],
        help="Answer from a source's mock dataset (repeatable)",
    )

    flour_group = parser.add_argument_group("Flour Report")

    flour_group.add_argument(
        "--flour-report",
        action="store_true",
        help="List Kamis flour prices for every market instead",
    )

    flour_group.add_argument(
        "--market",
        type=str,
        help="Market name filter for --flour-report",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: LOG_LEVEL or INFO)",
    )

    return parser


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-5s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


async def run(args: argparse.Namespace, config: PriceConfig) -> dict:
    async with PriceFetcher(config) as fetcher:
        if args.flour_report:
            commodity = args.commodity[0] if args.commodity else None
            prices = await fetcher.fetch_flour_prices(
                commodity=commodity,
                market=args.market,
                use_mock="kamis" in args.mock,
            )
            return {
                "success": True,
                "data": [price.to_dict() for price in prices],
                "source": DataSource.KAMIS.value,
                "exchangeRate": config.kes_to_usd_rate,
            }

        request = FetchRequest(
            commodities=args.commodity,
            include_flour=args.include_flour,
            mock_sources={MOCK_CHOICES[name] for name in args.mock},
        )
        report = await fetcher.fetch_report(request)
        return report.to_dict()


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point."""
    args = create_parser().parse_args(argv)
    config = PriceConfig.from_env()
    setup_logging(args.log_level or config.log_level)

    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        return 2

    try:
        output = asyncio.run(run(args, config))
    except DataSourceError as e:
        print(json.dumps({"success": False, "error": e.message, "details": e.to_dict()}))
        return 1

    print(json.dumps(output, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
