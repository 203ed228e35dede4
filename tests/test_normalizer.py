"""
Unit/Currency Normalizer Tests.

============================================================
PURPOSE
============================================================
Conversion of source-native prices to USD per metric ton.

TEST CATEGORIES:
- Currency conversion
- Unit scaling (KG, BAG, 2KG, PACKET, MT, unknown)
- Rounding
- Per-kilogram display prices
- Config-bound normalizer

============================================================
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from commodity_prices import (
    Commodity,
    Currency,
    DataSource,
    NormalizationError,
    PriceConfig,
    ProductType,
    QuoteNormalizer,
    RawQuote,
    normalize_quote,
    price_per_kg,
    to_usd_per_mt,
)


def make_raw(
    price,
    unit="KG",
    currency=Currency.KES,
    commodity=Commodity.WHEAT,
    market="Nairobi",
    degraded=False,
) -> RawQuote:
    return RawQuote(
        commodity=commodity,
        price=Decimal(str(price)),
        currency=currency,
        market=market,
        unit=unit,
        product_type=commodity.product_type,
        observed_at=datetime(2024, 12, 1, tzinfo=timezone.utc),
        degraded=degraded,
    )


# ============================================================
# CONVERSION TESTS
# ============================================================

class TestToUsdPerMt:
    """Tests for to_usd_per_mt."""

    def test_kes_per_kg(self):
        """Test KES/kg at 150 KES/USD."""
        price = to_usd_per_mt(55, Currency.KES, "KG", ProductType.GRAIN, exchange_rate=150)

        assert price == Decimal("366.67")

    def test_kilogram_spelled_out(self):
        """Test KILOGRAM is treated like KG."""
        price = to_usd_per_mt(55, Currency.KES, "kilogram", ProductType.GRAIN, exchange_rate=150)

        assert price == Decimal("366.67")

    def test_grain_bag(self):
        """Test a 90kg grain bag."""
        price = to_usd_per_mt(
            5400, Currency.KES, "BAG", ProductType.GRAIN,
            exchange_rate=150, bag_size_kg=90,
        )

        assert price == Decimal("400.00")

    def test_flour_bag_uses_packet_size(self):
        """Test a flour 'bag' is a 2kg packet."""
        price = to_usd_per_mt(
            200, Currency.KES, "BAG", ProductType.FLOUR,
            exchange_rate=154, flour_packet_size_kg=2,
        )

        assert price == Decimal("649.35")

    @pytest.mark.parametrize("unit", ["2KG", "2 KG", "2kg"])
    def test_two_kg_packet(self, unit):
        """Test 2kg flour packets."""
        price = to_usd_per_mt(200, Currency.KES, unit, ProductType.FLOUR, exchange_rate=154)

        assert price == Decimal("649.35")

    def test_packet_flour(self):
        """Test PACKET of flour uses the configured packet size."""
        price = to_usd_per_mt(
            145, Currency.KES, "PKT", ProductType.FLOUR,
            exchange_rate=154, flour_packet_size_kg=2,
        )

        assert price == Decimal("470.78")

    def test_packet_grain_is_one_kg(self):
        """Test PACKET of grain is one kilogram."""
        price = to_usd_per_mt(1.5, Currency.USD, "PACKET", ProductType.GRAIN)

        assert price == Decimal("1500.00")

    def test_usd_is_not_converted(self):
        """Test USD prices skip the exchange rate."""
        price = to_usd_per_mt(0.3, Currency.USD, "KG", ProductType.GRAIN, exchange_rate=154)

        assert price == Decimal("300.00")

    @pytest.mark.parametrize("unit", ["MT", "TONNE", "CRATE"])
    def test_per_ton_and_unknown_units_unscaled(self, unit):
        """Test MT and unknown units are taken as already per ton."""
        price = to_usd_per_mt(285.5, Currency.USD, unit, ProductType.GRAIN)

        assert price == Decimal("285.50")

    def test_rounds_half_up(self):
        """Test rounding to cents rounds halves up."""
        price = to_usd_per_mt("0.123445", Currency.USD, "KG", ProductType.GRAIN)

        assert price == Decimal("123.45")

    def test_custom_bag_size(self):
        """Test bag size is injected, not fixed."""
        price = to_usd_per_mt(
            5000, Currency.KES, "BAG", ProductType.GRAIN,
            exchange_rate=100, bag_size_kg=50,
        )

        assert price == Decimal("1000.00")

    @pytest.mark.parametrize("price", [0, -10])
    def test_non_positive_price_rejected(self, price):
        """Test zero or negative prices raise."""
        with pytest.raises(NormalizationError):
            to_usd_per_mt(price, Currency.KES, "KG", ProductType.GRAIN)

    def test_non_numeric_price_rejected(self):
        """Test unparseable prices raise."""
        with pytest.raises(NormalizationError):
            to_usd_per_mt("n/a", Currency.KES, "KG", ProductType.GRAIN)

    def test_zero_exchange_rate_rejected(self):
        """Test a zero exchange rate raises instead of dividing."""
        with pytest.raises(NormalizationError):
            to_usd_per_mt(55, Currency.KES, "KG", ProductType.GRAIN, exchange_rate=0)


class TestNormalizeQuote:
    """Tests for normalize_quote."""

    def test_builds_normalized_quote(self):
        """Test the normalized quote carries source, market and timestamp."""
        raw = make_raw(55)

        quote = normalize_quote(raw, DataSource.KAMIS, exchange_rate=150)

        assert quote.commodity == Commodity.WHEAT
        assert quote.price == Decimal("366.67")
        assert quote.currency == Currency.USD
        assert quote.unit == "MT"
        assert quote.source == DataSource.KAMIS
        assert quote.market == "Nairobi"
        assert quote.product_type == ProductType.GRAIN
        assert quote.timestamp == raw.observed_at
        assert quote.degraded is False

    def test_degraded_flag_carried(self):
        """Test substitute-data flag survives normalization."""
        quote = normalize_quote(make_raw(55, degraded=True), DataSource.KAMIS)

        assert quote.degraded is True

    def test_error_names_source(self):
        """Test normalization errors carry the source name."""
        with pytest.raises(NormalizationError) as exc_info:
            normalize_quote(make_raw(0), DataSource.TRIDGE)

        assert exc_info.value.source_name == "Tridge"


# ============================================================
# PER-KG TESTS
# ============================================================

class TestPricePerKg:
    """Tests for price_per_kg."""

    def test_two_kg_packet(self):
        """Test 2kg packet halves the price."""
        result = price_per_kg(make_raw(200, unit="2KG", commodity=Commodity.WHEAT_FLOUR))

        assert result.value == Decimal("100.00")
        assert result.currency == Currency.KES

    def test_flour_bag(self):
        """Test flour bag uses packet size."""
        result = price_per_kg(make_raw(145, unit="BAG", commodity=Commodity.MAIZE_FLOUR))

        assert result.value == Decimal("72.50")

    def test_grain_bag(self):
        """Test grain bag uses bag size."""
        result = price_per_kg(make_raw(5400, unit="BAG"), bag_size_kg=90)

        assert result.value == Decimal("60.00")

    def test_kg_unchanged(self):
        """Test per-kg price stays as is, in source currency."""
        result = price_per_kg(make_raw(1.1, currency=Currency.USD))

        assert result.value == Decimal("1.10")
        assert result.currency == Currency.USD


class TestQuoteNormalizer:
    """Tests for the config-bound normalizer."""

    def test_defaults(self):
        """Test default config uses 154 KES/USD."""
        normalizer = QuoteNormalizer()

        assert normalizer.exchange_rate == Decimal("154.0")
        quote = normalizer.normalize(
            make_raw(200, unit="2KG", commodity=Commodity.WHEAT_FLOUR),
            DataSource.KAMIS,
        )
        assert quote.price == Decimal("649.35")

    def test_config_values_used(self):
        """Test exchange rate and bag size come from config."""
        normalizer = QuoteNormalizer(PriceConfig(kes_to_usd_rate=150, bag_size_kg=90))

        assert normalizer.normalize(make_raw(55), DataSource.KAMIS).price == Decimal("366.67")
        assert normalizer.normalize(make_raw(5400, unit="BAG"), DataSource.KAMIS).price == Decimal("400.00")

    def test_to_usd(self):
        """Test unit price conversion without scaling."""
        normalizer = QuoteNormalizer()

        assert normalizer.to_usd(make_raw(200, unit="2KG")) == Decimal("1.30")
