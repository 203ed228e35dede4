"""
World Bank Quote Source - Pink Sheet commodity prices.

Reads the most recent monthly value (USD per metric ton) from the World
Bank data API. Global benchmark prices, not Kenya-specific.
"""

import logging
import re
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Sequence

import aiohttp

from commodity_prices.base import BaseQuoteSource
from commodity_prices.config import PriceConfig
from commodity_prices.mocks import get_mock_world_bank_price
from commodity_prices.models import (
    Commodity,
    Currency,
    DataSource,
    ProductType,
    RawQuote,
    utcnow,
)


logger = logging.getLogger(__name__)

_MONTHLY_DATE = re.compile(r"^(\d{4})M(\d{2})$")


def parse_period(value: Any) -> datetime:
    """'2024M11' -> 2024-11-01 UTC; anything unparseable -> now."""
    match = _MONTHLY_DATE.match(str(value or "").strip())
    if not match:
        return utcnow()
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        return utcnow()
    return datetime(year, month, 1, tzinfo=timezone.utc)


class WorldBankQuoteSource(BaseQuoteSource):
    """World Bank commodity data API, one most-recent-value call per commodity."""

    API_URL = "https://api.worldbank.org/v2/sources/40/data"

    COMMODITY_CODES = {
        Commodity.WHEAT: "PWHEAMT",
        Commodity.MAIZE: "PMAIZMT",
    }

    def __init__(
        self,
        config: Optional[PriceConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        config = config or PriceConfig()
        super().__init__(config, timeout=config.request_timeout_seconds, session=session)

    @property
    def name(self) -> DataSource:
        return DataSource.WORLD_BANK

    @property
    def product_types(self) -> frozenset[ProductType]:
        return frozenset({ProductType.GRAIN})

    async def fetch_live(self, commodities: Sequence[Commodity]) -> list[RawQuote]:
        return await self.gather_isolated(commodities, self._fetch_one)

    async def _fetch_one(self, commodity: Commodity) -> Optional[RawQuote]:
        code = self.COMMODITY_CODES.get(commodity)
        if code is None:
            return None

        payload = await self._get_json(
            f"{self.API_URL}/{code}",
            params={
                "format": "json",
                "per_page": 1,
                "date": "MRV",  # Most Recent Value
            },
        )
        return self.parse_payload(payload, commodity)

    def parse_payload(self, payload: Any, commodity: Commodity) -> Optional[RawQuote]:
        """
        Extract the latest value.

        Payload shape: [paging_info, [{"value": ..., "date": ...}, ...]]
        """
        if not isinstance(payload, list) or len(payload) < 2:
            return None

        rows = payload[1]
        if not rows:
            return None

        latest = rows[0]
        try:
            price = Decimal(str(latest.get("value")))
        except (InvalidOperation, AttributeError):
            logger.info(f"[{self.name.value}] Unparseable value for {commodity.value}: {latest!r}")
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
            observed_at=parse_period(latest.get("date")),
        )

    def mock_quotes(self, commodities: Sequence[Commodity]) -> list[RawQuote]:
        quotes = [get_mock_world_bank_price(commodity) for commodity in commodities]
        return [quote for quote in quotes if quote is not None]
