"""
Configuration Tests.
"""

import pytest

from commodity_prices import DataSource, PriceConfig


ENV_VARS = (
    "KES_TO_USD_RATE",
    "KAMIS_BAG_SIZE_KG",
    "KAMIS_FLOUR_BAG_SIZE_KG",
    "ALPHA_VANTAGE_KEY",
    "USE_MOCK_ALPHA_VANTAGE",
    "USE_MOCK_KAMIS",
    "USE_MOCK_TRIDGE",
    "USE_MOCK_WORLD_BANK",
    "REQUEST_TIMEOUT_SECONDS",
    "SCRAPE_TIMEOUT_SECONDS",
    "LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestPriceConfig:
    """Tests for PriceConfig."""

    def test_defaults(self):
        """Test default values."""
        config = PriceConfig()

        assert config.kes_to_usd_rate == 154.0
        assert config.bag_size_kg == 90.0
        assert config.flour_packet_size_kg == 2.0
        assert config.alpha_vantage_api_key is None
        assert config.request_timeout_seconds == 10.0
        assert config.scrape_timeout_seconds == 15.0
        assert config.mock_sources() == set()
        assert config.validate() == []

    def test_from_env_defaults(self, clean_env):
        """Test from_env without variables matches the defaults."""
        assert PriceConfig.from_env() == PriceConfig()

    def test_from_env(self, clean_env):
        """Test values are read from the environment."""
        clean_env.setenv("KES_TO_USD_RATE", "150")
        clean_env.setenv("KAMIS_BAG_SIZE_KG", "50")
        clean_env.setenv("KAMIS_FLOUR_BAG_SIZE_KG", "1")
        clean_env.setenv("ALPHA_VANTAGE_KEY", "demo")
        clean_env.setenv("USE_MOCK_KAMIS", "true")
        clean_env.setenv("USE_MOCK_TRIDGE", "TRUE")
        clean_env.setenv("USE_MOCK_WORLD_BANK", "yes")
        clean_env.setenv("SCRAPE_TIMEOUT_SECONDS", "30")
        clean_env.setenv("LOG_LEVEL", "DEBUG")

        config = PriceConfig.from_env()

        assert config.kes_to_usd_rate == 150.0
        assert config.bag_size_kg == 50.0
        assert config.flour_packet_size_kg == 1.0
        assert config.alpha_vantage_api_key == "demo"
        assert config.scrape_timeout_seconds == 30.0
        assert config.log_level == "DEBUG"
        # Only the literal "true" enables a flag
        assert config.mock_sources() == {DataSource.KAMIS, DataSource.TRIDGE}

    def test_empty_api_key_is_none(self, clean_env):
        """Test an empty key disables the source."""
        clean_env.setenv("ALPHA_VANTAGE_KEY", "")

        assert PriceConfig.from_env().alpha_vantage_api_key is None

    def test_validate_errors(self):
        """Test invalid values are reported."""
        config = PriceConfig(
            kes_to_usd_rate=0,
            bag_size_kg=-1,
            flour_packet_size_kg=0,
            request_timeout_seconds=0,
            log_level="LOUD",
        )

        errors = config.validate()

        assert len(errors) == 5
        assert any("kes_to_usd_rate" in error for error in errors)
        assert any("log_level" in error for error in errors)
