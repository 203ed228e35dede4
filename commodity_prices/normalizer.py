"""
Unit/Currency Normalizer - Converts source-native prices to USD per metric ton.

Conversion constants are always passed in; QuoteNormalizer binds them
from a PriceConfig.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

from commodity_prices.config import (
    DEFAULT_BAG_SIZE_KG,
    DEFAULT_FLOUR_PACKET_SIZE_KG,
    DEFAULT_KES_TO_USD_RATE,
    PriceConfig,
)
from commodity_prices.exceptions import NormalizationError
from commodity_prices.models import (
    Currency,
    DataSource,
    NormalizedQuote,
    PricePerKg,
    ProductType,
    RawQuote,
)


KG_PER_MT = Decimal("1000")
CENTS = Decimal("0.01")

KILOGRAM_UNITS = frozenset({"KG", "KILOGRAM"})
TWO_KG_UNITS = frozenset({"2KG", "2 KG"})
PACKET_UNITS = frozenset({"PACKET", "PKT"})
TONNE_UNITS = frozenset({"MT", "TONNE", "TON"})


def to_decimal(value: Any) -> Decimal:
    """Convert int/float/str to Decimal without binary float noise."""
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise NormalizationError(
            message=f"Not a number: {value!r}",
            raw_data=value,
            original_error=e,
        )


def round_price(value: Decimal) -> Decimal:
    """Round half-up to two decimal places."""
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def unit_size_kg(
    unit: Optional[str],
    product_type: ProductType,
    bag_size_kg: Any = DEFAULT_BAG_SIZE_KG,
    flour_packet_size_kg: Any = DEFAULT_FLOUR_PACKET_SIZE_KG,
) -> Optional[Decimal]:
    """
    Kilograms in one unit of sale.

    A bag of flour is a flour packet; a packet of grain is one kilogram.
    Returns None for units that are not recognised (treated as per-MT).
    """
    key = (unit or "KG").strip().upper()
    is_flour = product_type == ProductType.FLOUR

    if key in KILOGRAM_UNITS:
        return Decimal("1")
    if key == "BAG":
        return to_decimal(flour_packet_size_kg if is_flour else bag_size_kg)
    if key in TWO_KG_UNITS:
        return Decimal("2")
    if key in PACKET_UNITS:
        return to_decimal(flour_packet_size_kg) if is_flour else Decimal("1")
    if key in TONNE_UNITS:
        return KG_PER_MT
    return None


def to_usd_per_mt(
    price: Any,
    currency: Currency,
    unit: Optional[str],
    product_type: ProductType,
    exchange_rate: Any = DEFAULT_KES_TO_USD_RATE,
    bag_size_kg: Any = DEFAULT_BAG_SIZE_KG,
    flour_packet_size_kg: Any = DEFAULT_FLOUR_PACKET_SIZE_KG,
) -> Decimal:
    """
    Convert a price to USD per metric ton, rounded to cents.

    Raises:
        NormalizationError: If the price, rate or unit size is not positive
    """
    value = to_decimal(price)
    if value <= 0:
        raise NormalizationError(
            message=f"Price must be positive, got {value}",
            raw_data=price,
            field_name="price",
        )

    if currency == Currency.KES:
        rate = to_decimal(exchange_rate)
        if rate <= 0:
            raise NormalizationError(
                message=f"Exchange rate must be positive, got {rate}",
                raw_data=exchange_rate,
                field_name="exchange_rate",
            )
        value = value / rate

    size = unit_size_kg(unit, product_type, bag_size_kg, flour_packet_size_kg)
    if size is not None:
        if size <= 0:
            raise NormalizationError(
                message=f"Unit size must be positive for {unit}",
                raw_data=unit,
                field_name="unit",
            )
        value = value / size * KG_PER_MT

    return round_price(value)


def normalize_quote(
    raw: RawQuote,
    source: DataSource,
    exchange_rate: Any = DEFAULT_KES_TO_USD_RATE,
    bag_size_kg: Any = DEFAULT_BAG_SIZE_KG,
    flour_packet_size_kg: Any = DEFAULT_FLOUR_PACKET_SIZE_KG,
) -> NormalizedQuote:
    """Build the USD/MT quote for a raw source quote."""
    try:
        price = to_usd_per_mt(
            raw.price,
            raw.currency,
            raw.unit,
            raw.product_type,
            exchange_rate,
            bag_size_kg,
            flour_packet_size_kg,
        )
    except NormalizationError as e:
        e.source_name = source.value
        e.raw_data = raw
        raise

    return NormalizedQuote(
        commodity=raw.commodity,
        price=price,
        source=source,
        product_type=raw.product_type,
        timestamp=raw.observed_at,
        market=raw.market,
        degraded=raw.degraded,
    )


def price_per_kg(
    raw: RawQuote,
    bag_size_kg: Any = DEFAULT_BAG_SIZE_KG,
    flour_packet_size_kg: Any = DEFAULT_FLOUR_PACKET_SIZE_KG,
) -> PricePerKg:
    """Per-kilogram price in the quote's own currency (no conversion)."""
    value = to_decimal(raw.price)
    size = unit_size_kg(raw.unit, raw.product_type, bag_size_kg, flour_packet_size_kg)
    if size:
        value = value / size
    return PricePerKg(value=round_price(value), currency=raw.currency)


class QuoteNormalizer:
    """Normalizer bound to one configuration."""

    def __init__(self, config: Optional[PriceConfig] = None) -> None:
        config = config or PriceConfig()
        self._exchange_rate = to_decimal(config.kes_to_usd_rate)
        self._bag_size_kg = to_decimal(config.bag_size_kg)
        self._flour_packet_size_kg = to_decimal(config.flour_packet_size_kg)

    @property
    def exchange_rate(self) -> Decimal:
        return self._exchange_rate

    def normalize(self, raw: RawQuote, source: DataSource) -> NormalizedQuote:
        return normalize_quote(
            raw,
            source,
            self._exchange_rate,
            self._bag_size_kg,
            self._flour_packet_size_kg,
        )

    def price_per_kg(self, raw: RawQuote) -> PricePerKg:
        return price_per_kg(raw, self._bag_size_kg, self._flour_packet_size_kg)

    def to_usd(self, raw: RawQuote) -> Decimal:
        """Unit price in USD without unit scaling."""
        value = to_decimal(raw.price)
        if raw.currency == Currency.KES:
            value = value / self._exchange_rate
        return round_price(value)
