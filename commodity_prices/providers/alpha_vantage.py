"""
Alpha Vantage Quote Source - Financial quotes API.

Alpha Vantage has no spot quote endpoint for agricultural commodities, so
in practice this source yields nothing for wheat or maize. It stays at the
head of the chain so a commodity-capable endpoint can be wired in by
changing SYMBOLS and _parse_quote only.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Sequence

import aiohttp

from commodity_prices.base import BaseQuoteSource
from commodity_prices.config import PriceConfig
from commodity_prices.models import (
    Commodity,
    Currency,
    DataSource,
    ProductType,
    RawQuote,
)


logger = logging.getLogger(__name__)


class AlphaVantageQuoteSource(BaseQuoteSource):
    """Alpha Vantage query API; requires an API key."""

    API_URL = "https://www.alphavantage.co/query"

    # Approximate mappings
    SYMBOLS = {
        Commodity.WHEAT: "WHEAT",
        Commodity.MAIZE: "CORN",
    }

    def __init__(
        self,
        config: Optional[PriceConfig] = None,
        api_key: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        config = config or PriceConfig()
        super().__init__(config, timeout=config.request_timeout_seconds, session=session)
        self._api_key = api_key or config.alpha_vantage_api_key

    @property
    def name(self) -> DataSource:
        return DataSource.ALPHA_VANTAGE

    @property
    def product_types(self) -> frozenset[ProductType]:
        return frozenset({ProductType.GRAIN})

    def is_enabled(self) -> bool:
        return bool(self._api_key)

    async def fetch_live(self, commodities: Sequence[Commodity]) -> list[RawQuote]:
        if not self._api_key:
            logger.debug(f"[{self.name.value}] No API key configured")
            return []
        return await self.gather_isolated(commodities, self._fetch_one)

    async def _fetch_one(self, commodity: Commodity) -> Optional[RawQuote]:
        symbol = self.SYMBOLS.get(commodity)
        if symbol is None:
            return None

        payload = await self._get_json(
            self.API_URL,
            params={
                "function": "COMMODITY",
                "symbol": symbol,
                "apikey": self._api_key,
            },
        )
        return self._parse_quote(payload, commodity)

    def _parse_quote(self, payload: Any, commodity: Commodity) -> Optional[RawQuote]:
        if not isinstance(payload, dict):
            return None

        quote = payload.get("Global Quote")
        if not quote:
            return None

        try:
            price = Decimal(str(quote.get("05. price")))
        except InvalidOperation:
            return None
        if not price.is_finite() or price <= 0:
            return None

        return RawQuote(
            commodity=commodity,
            price=price,
            currency=Currency.USD,
            market=None,
            unit="MT",
            product_type=commodity.product_type,
        )

    def mock_quotes(self, commodities: Sequence[Commodity]) -> list[RawQuote]:
        # Mirrors live behaviour: no agricultural quotes from this API
        return []
