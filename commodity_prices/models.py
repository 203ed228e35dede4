"""
Commodity Price Models - Quote structures shared by all sources.

Raw quotes carry a source-native price; normalized quotes are always
USD per metric ton.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


class ProductType(Enum):
    """Grain versus milled flour."""
    GRAIN = "grain"
    FLOUR = "flour"


class Commodity(Enum):
    """Canonical commodity identifiers (after alias resolution)."""
    WHEAT = "WHEAT"
    MAIZE = "MAIZE"
    WHEAT_FLOUR = "WHEAT FLOUR"
    MAIZE_FLOUR = "MAIZE FLOUR"

    @property
    def product_type(self) -> ProductType:
        if self in (Commodity.WHEAT_FLOUR, Commodity.MAIZE_FLOUR):
            return ProductType.FLOUR
        return ProductType.GRAIN

    @property
    def is_flour(self) -> bool:
        return self.product_type == ProductType.FLOUR


GRAIN_COMMODITIES = (Commodity.WHEAT, Commodity.MAIZE)
FLOUR_COMMODITIES = (Commodity.WHEAT_FLOUR, Commodity.MAIZE_FLOUR)


class Currency(Enum):
    """Currencies quoted by upstream sources."""
    USD = "USD"
    KES = "KES"


class DataSource(Enum):
    """Named tiers of the source priority chain."""
    ALPHA_VANTAGE = "Alpha Vantage"
    KAMIS = "Kamis"
    TRIDGE = "Tridge"
    WORLD_BANK = "World Bank"
    FALLBACK = "Fallback"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RawQuote:
    """
    A price as one source reported it.

    Produced by a single adapter call and discarded once normalized.
    `degraded` marks quotes taken from a substitute dataset because the
    live upstream could not be read.
    """
    commodity: Commodity
    price: Decimal
    currency: Currency
    market: Optional[str]
    unit: str
    product_type: ProductType
    observed_at: datetime = field(default_factory=utcnow)
    degraded: bool = False


@dataclass(frozen=True)
class NormalizedQuote:
    """
    Normalized quote output - USD per metric ton.

    This is the record every consumer depends on; `to_dict()` is the
    published shape.
    """
    commodity: Commodity
    price: Decimal
    source: DataSource
    product_type: ProductType
    timestamp: datetime
    market: Optional[str] = None
    currency: Currency = Currency.USD
    unit: str = "MT"
    degraded: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "commodity": self.commodity.value,
            "price": float(self.price),
            "currency": self.currency.value,
            "unit": self.unit,
            "source": self.source.value,
            "market": self.market,
            "productType": self.product_type.value,
            "timestamp": self.timestamp.isoformat(),
            "degraded": self.degraded,
        }


@dataclass(frozen=True)
class PricePerKg:
    """Per-kilogram price in the source currency."""
    value: Decimal
    currency: Currency


@dataclass
class FetchRequest:
    """
    Caller request for prices.

    `commodities` holds caller-supplied names (aliases allowed). When it is
    empty the request covers wheat and maize, plus both flours if
    `include_flour` is set. `mock_sources` names sources that should answer
    from their deterministic mock datasets.
    """
    commodities: Optional[list[str]] = None
    include_flour: bool = False
    mock_sources: set[DataSource] = field(default_factory=set)

    def resolve_commodities(self) -> list[Commodity]:
        """
        Resolve requested names to canonical commodities.

        Order follows the request; duplicates (e.g. CORN and MAIZE) collapse.

        Raises:
            InvalidCommodityError: If a name matches no commodity
        """
        from commodity_prices.aliases import resolve_commodity

        if not self.commodities:
            if self.include_flour:
                return list(GRAIN_COMMODITIES + FLOUR_COMMODITIES)
            return list(GRAIN_COMMODITIES)

        resolved: list[Commodity] = []
        for name in self.commodities:
            commodity = resolve_commodity(name)
            if commodity not in resolved:
                resolved.append(commodity)
        return resolved


@dataclass(frozen=True)
class FlourPrice:
    """One market's flour price in the shapes a display layer needs."""
    commodity: Commodity
    market: str
    price_kes: Decimal
    price_per_kg_kes: Decimal
    price_usd: Decimal
    price_per_mt_usd: Decimal
    unit: str
    observed_at: datetime
    degraded: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "commodity": self.commodity.value,
            "market": self.market,
            "priceKES": float(self.price_kes),
            "pricePerKgKES": float(self.price_per_kg_kes),
            "priceUSD": float(self.price_usd),
            "pricePerMtUSD": float(self.price_per_mt_usd),
            "unit": self.unit,
            "date": self.observed_at.isoformat(),
            "degraded": self.degraded,
        }


@dataclass
class PriceReport:
    """Envelope around a fetch: quotes plus the chain that produced them."""
    data: list[NormalizedQuote]
    sources: list[DataSource]
    timestamp: datetime = field(default_factory=utcnow)
    success: bool = True
    note: Optional[str] = None

    @property
    def degraded(self) -> bool:
        """True when any quote came from a substitute dataset."""
        return any(quote.degraded for quote in self.data)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "success": self.success,
            "data": [quote.to_dict() for quote in self.data],
            "timestamp": self.timestamp.isoformat(),
            "sources": [source.value for source in self.sources],
            "degraded": self.degraded,
            "note": self.note,
        }
