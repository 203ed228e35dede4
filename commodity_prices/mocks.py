"""
Mock quote datasets.

Deterministic substitutes for each source, used in development, in tests,
and by the Kamis source when its page cannot be read. Prices reflect
typical Kenyan market levels (December 2024).
"""

from decimal import Decimal
from typing import Optional, Sequence

from commodity_prices.models import (
    Commodity,
    Currency,
    ProductType,
    RawQuote,
    utcnow,
)


# (commodity, price, market, unit)
KAMIS_GRAIN_ROWS = (
    (Commodity.WHEAT, "55", "Nairobi", "KG"),
    (Commodity.MAIZE, "45", "Nairobi", "KG"),
    (Commodity.WHEAT, "5400", "Mombasa", "BAG"),
    (Commodity.MAIZE, "4200", "Kisumu", "BAG"),
)

# Wheat flour 2kg: KES 180-220, maize flour 2kg: KES 130-160
KAMIS_FLOUR_ROWS = (
    (Commodity.WHEAT_FLOUR, "200", "Nairobi", "2KG"),
    (Commodity.WHEAT_FLOUR, "195", "Mombasa", "2KG"),
    (Commodity.WHEAT_FLOUR, "210", "Kisumu", "2KG"),
    (Commodity.WHEAT_FLOUR, "205", "Nakuru", "2KG"),
    (Commodity.MAIZE_FLOUR, "145", "Nairobi", "2KG"),
    (Commodity.MAIZE_FLOUR, "140", "Mombasa", "2KG"),
    (Commodity.MAIZE_FLOUR, "150", "Kisumu", "2KG"),
    (Commodity.MAIZE_FLOUR, "148", "Eldoret", "2KG"),
)

TRIDGE_PRICES_USD = {
    Commodity.WHEAT: Decimal("285.50"),
    Commodity.MAIZE: Decimal("225.75"),
}

WORLD_BANK_PRICES_USD = {
    Commodity.WHEAT: Decimal("274.20"),
    Commodity.MAIZE: Decimal("213.90"),
}


def _kamis_quotes(rows, commodities: Optional[Sequence[Commodity]], degraded: bool) -> list[RawQuote]:
    observed_at = utcnow()
    return [
        RawQuote(
            commodity=commodity,
            price=Decimal(price),
            currency=Currency.KES,
            market=market,
            unit=unit,
            product_type=commodity.product_type,
            observed_at=observed_at,
            degraded=degraded,
        )
        for commodity, price, market, unit in rows
        if commodities is None or commodity in commodities
    ]


def get_mock_kamis_prices(
    commodities: Optional[Sequence[Commodity]] = None,
    degraded: bool = False,
) -> list[RawQuote]:
    """Kamis grain rows (per kg and per 90kg bag)."""
    return _kamis_quotes(KAMIS_GRAIN_ROWS, commodities, degraded)


def get_mock_kamis_flour_prices(
    commodities: Optional[Sequence[Commodity]] = None,
    degraded: bool = False,
) -> list[RawQuote]:
    """Kamis flour rows (2kg packets) across four markets each."""
    return _kamis_quotes(KAMIS_FLOUR_ROWS, commodities, degraded)


def get_mock_tridge_price(commodity: Commodity) -> Optional[RawQuote]:
    price = TRIDGE_PRICES_USD.get(commodity)
    if price is None:
        return None
    return RawQuote(
        commodity=commodity,
        price=price,
        currency=Currency.USD,
        market="Nairobi",
        unit="MT",
        product_type=ProductType.GRAIN,
    )


def get_mock_world_bank_price(commodity: Commodity) -> Optional[RawQuote]:
    price = WORLD_BANK_PRICES_USD.get(commodity)
    if price is None:
        return None
    return RawQuote(
        commodity=commodity,
        price=price,
        currency=Currency.USD,
        market=None,
        unit="MT",
        product_type=ProductType.GRAIN,
    )
