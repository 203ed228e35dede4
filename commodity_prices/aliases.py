"""
Commodity alias table.

One table maps every known spelling to a canonical Commodity. Request
names are resolved by exact lookup; names scraped from market pages are
classified by substring containment.
"""

import re
from typing import Optional

from commodity_prices.exceptions import InvalidCommodityError
from commodity_prices.models import Commodity


FLOUR_ALIASES: dict[Commodity, tuple[str, ...]] = {
    Commodity.WHEAT_FLOUR: (
        "WHEAT FLOUR",
        "UNGA WA NGANO",
        "FLOUR WHEAT",
        "SIFTED WHEAT FLOUR",
    ),
    Commodity.MAIZE_FLOUR: (
        "MAIZE FLOUR",
        "UNGA WA MAHINDI",
        "FLOUR MAIZE",
        "SIFTED MAIZE FLOUR",
        "POSHO",
        "UGALI FLOUR",
    ),
}

GRAIN_ALIASES: dict[Commodity, tuple[str, ...]] = {
    Commodity.WHEAT: ("WHEAT",),
    Commodity.MAIZE: ("MAIZE", "CORN"),
}

COMMODITY_ALIASES: dict[str, Commodity] = {
    alias: commodity
    for table in (GRAIN_ALIASES, FLOUR_ALIASES)
    for commodity, aliases in table.items()
    for alias in aliases
}

_SEPARATORS = re.compile(r"[\s_\-]+")


def normalize_name(name: str) -> str:
    """Upper-case and collapse separators: 'wheat-flour' -> 'WHEAT FLOUR'."""
    return _SEPARATORS.sub(" ", name or "").strip().upper()


def resolve_commodity(name: str) -> Commodity:
    """
    Resolve a caller-supplied name to its canonical commodity.

    Raises:
        InvalidCommodityError: If the name is not a known alias
    """
    if isinstance(name, Commodity):
        return name

    commodity = COMMODITY_ALIASES.get(normalize_name(name))
    if commodity is None:
        raise InvalidCommodityError(
            message=f"Unsupported commodity: {name!r}",
            commodity=name,
            context={"supported": sorted(COMMODITY_ALIASES)},
        )
    return commodity


def classify_product_name(name: str) -> Optional[Commodity]:
    """
    Classify a product name as printed on a market page.

    Exact aliases win; flour aliases then match by containment in either
    direction; grain names match when the product name contains them.
    Returns None for products outside the four commodities.
    """
    key = normalize_name(name)
    if not key:
        return None

    exact = COMMODITY_ALIASES.get(key)
    if exact is not None:
        return exact

    for commodity, aliases in FLOUR_ALIASES.items():
        for alias in aliases:
            if alias in key or key in alias:
                return commodity

    for commodity, aliases in GRAIN_ALIASES.items():
        if any(alias in key for alias in aliases):
            return commodity

    return None
