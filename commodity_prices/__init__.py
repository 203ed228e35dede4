"""
Commodity Prices Package - Kenyan grain and flour price aggregation.

Collects wheat, maize, wheat flour and maize flour prices from several
upstream sources, normalizes them to USD per metric ton, and returns the
first available quote per commodity along a fixed source priority chain.

Quick Start:
    from commodity_prices import FetchRequest, PriceConfig, PriceFetcher

    async def main():
        async with PriceFetcher(PriceConfig.from_env()) as fetcher:
            quotes = await fetcher.fetch_prices(FetchRequest(include_flour=True))

            for quote in quotes:
                print(f"{quote.commodity.value}: {quote.price} USD/MT ({quote.source.value})")

Source chain (highest priority first):
    1. Alpha Vantage (grain, needs ALPHA_VANTAGE_KEY)
    2. Kamis market page (flour, then grain)
    3. Tridge directory pages (grain)
    4. World Bank Pink Sheet (grain)
    5. Static fallback table
"""

from commodity_prices.aliases import classify_product_name, resolve_commodity
from commodity_prices.base import BaseQuoteSource
from commodity_prices.config import PriceConfig
from commodity_prices.exceptions import (
    ConfigurationError,
    DataSourceError,
    FetchError,
    InvalidCommodityError,
    NormalizationError,
    ParseError,
)
from commodity_prices.fallback import FALLBACK_PRICES_USD_PER_MT, StaticFallback
from commodity_prices.fetcher import PriceFetcher, default_sources
from commodity_prices.models import (
    Commodity,
    Currency,
    DataSource,
    FetchRequest,
    FlourPrice,
    NormalizedQuote,
    PricePerKg,
    PriceReport,
    ProductType,
    RawQuote,
)
from commodity_prices.normalizer import (
    QuoteNormalizer,
    normalize_quote,
    price_per_kg,
    to_usd_per_mt,
)
from commodity_prices.providers import (
    AlphaVantageQuoteSource,
    KamisQuoteSource,
    TridgeQuoteSource,
    WorldBankQuoteSource,
)


__version__ = "1.0.0"

__all__ = [
    # Fetcher
    "PriceFetcher",
    "default_sources",

    # Models
    "Commodity",
    "Currency",
    "DataSource",
    "FetchRequest",
    "FlourPrice",
    "NormalizedQuote",
    "PricePerKg",
    "PriceReport",
    "ProductType",
    "RawQuote",

    # Config
    "PriceConfig",

    # Aliases
    "classify_product_name",
    "resolve_commodity",

    # Normalizer
    "QuoteNormalizer",
    "normalize_quote",
    "price_per_kg",
    "to_usd_per_mt",

    # Sources
    "BaseQuoteSource",
    "AlphaVantageQuoteSource",
    "KamisQuoteSource",
    "TridgeQuoteSource",
    "WorldBankQuoteSource",
    "StaticFallback",
    "FALLBACK_PRICES_USD_PER_MT",

    # Exceptions
    "DataSourceError",
    "FetchError",
    "ParseError",
    "NormalizationError",
    "ConfigurationError",
    "InvalidCommodityError",
]
