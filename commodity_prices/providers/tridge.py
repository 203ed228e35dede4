"""
Tridge Quote Source - Commodity directory scraper.

One directory page per grain commodity (Kenya country view); the page
shows a single headline price in USD per metric ton.
"""

import logging
from typing import Optional, Sequence

import aiohttp

from commodity_prices.base import BaseQuoteSource
from commodity_prices.config import PriceConfig
from commodity_prices.mocks import get_mock_tridge_price
from commodity_prices.models import (
    Commodity,
    Currency,
    DataSource,
    ProductType,
    RawQuote,
)
from commodity_prices.scraping import (
    detect_currency,
    extract_number,
    find_price_text,
    parse_html,
)


logger = logging.getLogger(__name__)


class TridgeQuoteSource(BaseQuoteSource):
    """Tridge directory price pages, looked up concurrently per commodity."""

    PAGE_URLS = {
        Commodity.WHEAT: "https://dir.tridge.com/prices/wheat/KE",
        Commodity.MAIZE: "https://dir.tridge.com/prices/maize/KE",
    }

    PRICE_SELECTORS = (
        ".price-value",
        ".current-price",
        '[data-testid="price-value"]',
        ".price",
    )

    MARKET = "Kenya"

    def __init__(
        self,
        config: Optional[PriceConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        config = config or PriceConfig()
        super().__init__(config, timeout=config.request_timeout_seconds, session=session)

    @property
    def name(self) -> DataSource:
        return DataSource.TRIDGE

    @property
    def product_types(self) -> frozenset[ProductType]:
        return frozenset({ProductType.GRAIN})

    async def fetch_live(self, commodities: Sequence[Commodity]) -> list[RawQuote]:
        return await self.gather_isolated(commodities, self._fetch_one)

    async def _fetch_one(self, commodity: Commodity) -> Optional[RawQuote]:
        url = self.PAGE_URLS.get(commodity)
        if url is None:
            return None
        html = await self._get_text(url)
        return self.parse_page(html, commodity)

    def parse_page(self, html: str, commodity: Commodity) -> Optional[RawQuote]:
        """Headline price of one directory page, or None if absent."""
        price_text = find_price_text(parse_html(html), self.PRICE_SELECTORS)
        if price_text is None:
            logger.info(f"[{self.name.value}] No price found for {commodity.value}")
            return None

        price = extract_number(price_text)
        if price is None or price <= 0:
            return None

        return RawQuote(
            commodity=commodity,
            price=price,
            currency=detect_currency(price_text, default=Currency.USD),
            market=self.MARKET,
            unit="MT",
            product_type=commodity.product_type,
        )

    def mock_quotes(self, commodities: Sequence[Commodity]) -> list[RawQuote]:
        quotes = [get_mock_tridge_price(commodity) for commodity in commodities]
        return [quote for quote in quotes if quote is not None]
