"""
Static fallback prices - last tier of the source chain.
"""

from decimal import Decimal
from typing import Mapping, Optional

from commodity_prices.models import (
    Commodity,
    DataSource,
    NormalizedQuote,
    utcnow,
)


# USD per metric ton. Flour values are the Nairobi 2kg packet prices
# (KES 200 wheat, KES 145 maize) at 154 KES/USD.
FALLBACK_PRICES_USD_PER_MT: dict[Commodity, Decimal] = {
    Commodity.WHEAT: Decimal("280"),
    Commodity.MAIZE: Decimal("220"),
    Commodity.WHEAT_FLOUR: Decimal("649.35"),
    Commodity.MAIZE_FLOUR: Decimal("470.78"),
}


class StaticFallback:
    """Fixed commodity -> USD/MT table."""

    def __init__(self, prices: Optional[Mapping[Commodity, Decimal]] = None) -> None:
        table = FALLBACK_PRICES_USD_PER_MT if prices is None else prices
        self._prices = {commodity: Decimal(str(price)) for commodity, price in table.items()}

    def quote(self, commodity: Commodity) -> Optional[NormalizedQuote]:
        """Fallback quote, or None when the table has no usable entry."""
        price = self._prices.get(commodity)
        if price is None or price <= 0:
            return None
        return NormalizedQuote(
            commodity=commodity,
            price=price.quantize(Decimal("0.01")),
            source=DataSource.FALLBACK,
            product_type=commodity.product_type,
            timestamp=utcnow(),
        )
