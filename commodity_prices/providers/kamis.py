"""
Kamis Quote Source - Kenya Agricultural Market Information System scraper.

Scrapes the ministry's market page (https://kamis.kilimo.go.ke/site/market),
which lists prices per commodity and market. Serves both grain and flour
from a single page fetch.

When the page cannot be reached or holds no price table, the source
answers with its fixed mock dataset, every quote flagged `degraded`.
"""

import logging
from typing import Optional, Sequence

import aiohttp
from bs4 import Tag

from commodity_prices.aliases import classify_product_name
from commodity_prices.base import HTML_HEADERS, BaseQuoteSource
from commodity_prices.config import PriceConfig
from commodity_prices.exceptions import DataSourceError, ParseError
from commodity_prices.mocks import get_mock_kamis_flour_prices, get_mock_kamis_prices
from commodity_prices.models import (
    Commodity,
    DataSource,
    ProductType,
    RawQuote,
    utcnow,
)
from commodity_prices.scraping import (
    detect_currency,
    extract_number,
    find_table,
    parse_html,
)


logger = logging.getLogger(__name__)


class KamisQuoteSource(BaseQuoteSource):
    """
    KAMIS market page scraper.

    Typical row layout: Commodity | Market | Price | Unit | Date
    """

    BASE_URL = "https://kamis.kilimo.go.ke"
    MARKET_URL = f"{BASE_URL}/site/market"

    TABLE_SELECTORS = (
        "table.table",
        "table.table-striped",
        "table.market-prices",
        "table#market-data",
        ".market-table table",
        ".table-responsive table",
        "#prices-table",
        "table",
    )

    DEFAULT_MARKET = "Nairobi"
    DEFAULT_UNIT = "KG"

    def __init__(
        self,
        config: Optional[PriceConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        config = config or PriceConfig()
        super().__init__(config, timeout=config.scrape_timeout_seconds, session=session)

    @property
    def name(self) -> DataSource:
        return DataSource.KAMIS

    @property
    def product_types(self) -> frozenset[ProductType]:
        return frozenset({ProductType.GRAIN, ProductType.FLOUR})

    async def fetch_live(self, commodities: Sequence[Commodity]) -> list[RawQuote]:
        html = await self._get_text(
            self.MARKET_URL,
            headers={**HTML_HEADERS, "Referer": self.BASE_URL},
        )
        return self.parse_page(html, commodities)

    def parse_page(self, html: str, commodities: Sequence[Commodity]) -> list[RawQuote]:
        """
        Parse the market table into raw quotes for `commodities`.

        Raises:
            ParseError: If no table with data rows is found
        """
        table = find_table(parse_html(html), self.TABLE_SELECTORS)
        if table is None:
            raise ParseError(
                message="No market table found",
                source_name=self.name.value,
                context={"selectors": list(self.TABLE_SELECTORS)},
            )

        observed_at = utcnow()
        quotes = []
        for row in table.find_all("tr"):
            quote = self._parse_row(row, commodities, observed_at)
            if quote is not None:
                quotes.append(quote)

        logger.info(f"[{self.name.value}] Parsed {len(quotes)} quotes from market table")
        return quotes

    def _parse_row(self, row: Tag, commodities: Sequence[Commodity], observed_at) -> Optional[RawQuote]:
        cells = row.find_all("td")
        if len(cells) < 3:
            return None

        product_name = cells[0].get_text(strip=True)
        market = cells[1].get_text(strip=True)
        price_text = cells[2].get_text(strip=True)

        commodity = classify_product_name(product_name)
        if commodity is None or commodity not in commodities:
            return None

        price = extract_number(price_text)
        if price is None or price <= 0:
            logger.debug(f"[{self.name.value}] Skipping row {product_name!r}: no price in {price_text!r}")
            return None

        unit = self.DEFAULT_UNIT
        if len(cells) >= 4:
            unit = cells[3].get_text(strip=True).upper() or self.DEFAULT_UNIT

        return RawQuote(
            commodity=commodity,
            price=price,
            currency=detect_currency(price_text),
            market=market or self.DEFAULT_MARKET,
            unit=unit,
            product_type=commodity.product_type,
            observed_at=observed_at,
        )

    def mock_quotes(self, commodities: Sequence[Commodity]) -> list[RawQuote]:
        return self._mock_dataset(commodities, degraded=False)

    def on_unavailable(
        self,
        commodities: Sequence[Commodity],
        error: DataSourceError,
    ) -> list[RawQuote]:
        logger.warning(f"[{self.name.value}] {error}; serving substitute dataset (degraded)")
        return self._mock_dataset(commodities, degraded=True)

    def _mock_dataset(self, commodities: Sequence[Commodity], degraded: bool) -> list[RawQuote]:
        return (
            get_mock_kamis_flour_prices(commodities, degraded=degraded)
            + get_mock_kamis_prices(commodities, degraded=degraded)
        )
