"""
Providers package - Quote source implementations.
"""

from commodity_prices.providers.alpha_vantage import AlphaVantageQuoteSource
from commodity_prices.providers.kamis import KamisQuoteSource
from commodity_prices.providers.tridge import TridgeQuoteSource
from commodity_prices.providers.world_bank import WorldBankQuoteSource


__all__ = [
    "AlphaVantageQuoteSource",
    "KamisQuoteSource",
    "TridgeQuoteSource",
    "WorldBankQuoteSource",
]
