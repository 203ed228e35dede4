"""
Configuration for the price fetcher.

All tunables live on one PriceConfig instance that is handed to the
fetcher, the normalizer and each source at construction time.
"""

import logging
import os
from dataclasses import dataclass
from typing import List, Optional

from dotenv import load_dotenv

from commodity_prices.models import DataSource


DEFAULT_KES_TO_USD_RATE = 154.0
DEFAULT_BAG_SIZE_KG = 90.0
DEFAULT_FLOUR_PACKET_SIZE_KG = 2.0
DEFAULT_REQUEST_TIMEOUT_SECONDS = 10.0
DEFAULT_SCRAPE_TIMEOUT_SECONDS = 15.0


def _env_flag(name: str) -> bool:
    return os.getenv(name, "false").strip().lower() == "true"


@dataclass
class PriceConfig:
    """Settings for conversion, sources and logging."""

    # Conversion
    kes_to_usd_rate: float = DEFAULT_KES_TO_USD_RATE
    """Kenyan shillings per US dollar."""

    bag_size_kg: float = DEFAULT_BAG_SIZE_KG
    """Weight of a standard grain bag."""

    flour_packet_size_kg: float = DEFAULT_FLOUR_PACKET_SIZE_KG
    """Weight of a standard flour packet (also used for flour sold by the bag)."""

    # Sources
    alpha_vantage_api_key: Optional[str] = None
    """Financial API key; without it that tier is skipped."""

    use_mock_alpha_vantage: bool = False
    use_mock_kamis: bool = False
    use_mock_tridge: bool = False
    use_mock_world_bank: bool = False

    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    """Per-call timeout for API requests."""

    scrape_timeout_seconds: float = DEFAULT_SCRAPE_TIMEOUT_SECONDS
    """Per-call timeout for the market page scrape."""

    # Logging
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "PriceConfig":
        """Load configuration from environment variables (and a .env file)."""
        load_dotenv()
        return cls(
            kes_to_usd_rate=float(os.getenv("KES_TO_USD_RATE", str(DEFAULT_KES_TO_USD_RATE))),
            bag_size_kg=float(os.getenv("KAMIS_BAG_SIZE_KG", str(DEFAULT_BAG_SIZE_KG))),
            flour_packet_size_kg=float(
                os.getenv("KAMIS_FLOUR_BAG_SIZE_KG", str(DEFAULT_FLOUR_PACKET_SIZE_KG))
            ),
            alpha_vantage_api_key=os.getenv("ALPHA_VANTAGE_KEY") or None,
            use_mock_alpha_vantage=_env_flag("USE_MOCK_ALPHA_VANTAGE"),
            use_mock_kamis=_env_flag("USE_MOCK_KAMIS"),
            use_mock_tridge=_env_flag("USE_MOCK_TRIDGE"),
            use_mock_world_bank=_env_flag("USE_MOCK_WORLD_BANK"),
            request_timeout_seconds=float(
                os.getenv("REQUEST_TIMEOUT_SECONDS", str(DEFAULT_REQUEST_TIMEOUT_SECONDS))
            ),
            scrape_timeout_seconds=float(
                os.getenv("SCRAPE_TIMEOUT_SECONDS", str(DEFAULT_SCRAPE_TIMEOUT_SECONDS))
            ),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )

    def mock_sources(self) -> set[DataSource]:
        """Sources configured to answer from mock data."""
        flags = {
            DataSource.ALPHA_VANTAGE: self.use_mock_alpha_vantage,
            DataSource.KAMIS: self.use_mock_kamis,
            DataSource.TRIDGE: self.use_mock_tridge,
            DataSource.WORLD_BANK: self.use_mock_world_bank,
        }
        return {source for source, enabled in flags.items() if enabled}

    def validate(self) -> List[str]:
        """Validate configuration, return list of errors."""
        errors = []

        if self.kes_to_usd_rate <= 0:
            errors.append("kes_to_usd_rate must be positive")

        if self.bag_size_kg <= 0:
            errors.append("bag_size_kg must be positive")

        if self.flour_packet_size_kg <= 0:
            errors.append("flour_packet_size_kg must be positive")

        if self.request_timeout_seconds <= 0 or self.scrape_timeout_seconds <= 0:
            errors.append("timeouts must be positive")

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            errors.append(f"unknown log_level: {self.log_level}")

        return errors
