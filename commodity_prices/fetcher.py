"""
Price Fetcher - Source priority chain with per-commodity fallback.

Provides:
- Fixed, ordered chain of quote sources ending in a static table
- Normalization of every quote to USD per metric ton
- First quote wins per commodity; later sources only see what is left
- Failure isolation: a broken source costs its own quotes, nothing else

Usage:
    async with PriceFetcher(PriceConfig.from_env()) as fetcher:
        quotes = await fetcher.fetch_prices(FetchRequest(commodities=["CORN"]))
"""

import logging
from typing import Optional, Sequence

from commodity_prices.aliases import resolve_commodity
from commodity_prices.base import BaseQuoteSource
from commodity_prices.config import PriceConfig
from commodity_prices.exceptions import (
    ConfigurationError,
    InvalidCommodityError,
    NormalizationError,
    ParseError,
)
from commodity_prices.fallback import StaticFallback
from commodity_prices.models import (
    FLOUR_COMMODITIES,
    Commodity,
    Currency,
    DataSource,
    FetchRequest,
    FlourPrice,
    NormalizedQuote,
    PriceReport,
    ProductType,
    RawQuote,
)
from commodity_prices.normalizer import QuoteNormalizer, round_price
from commodity_prices.providers import (
    AlphaVantageQuoteSource,
    KamisQuoteSource,
    TridgeQuoteSource,
    WorldBankQuoteSource,
)


logger = logging.getLogger(__name__)

# Within one source's answer, flour quotes are resolved before grain quotes.
PASS_ORDER = (ProductType.FLOUR, ProductType.GRAIN)


def default_sources(config: PriceConfig) -> list[BaseQuoteSource]:
    """The standard chain, highest priority first."""
    return [
        AlphaVantageQuoteSource(config),
        KamisQuoteSource(config),
        TridgeQuoteSource(config),
        WorldBankQuoteSource(config),
    ]


class PriceFetcher:
    """
    Walks the source chain for the requested commodities.

    Sources are consulted strictly in order because each one only gets the
    commodities its predecessors left unresolved. Whatever is still missing
    at the end comes from the static fallback table, or is omitted when the
    table has no entry.
    """

    def __init__(
        self,
        config: Optional[PriceConfig] = None,
        sources: Optional[Sequence[BaseQuoteSource]] = None,
        fallback: Optional[StaticFallback] = None,
        normalizer: Optional[QuoteNormalizer] = None,
    ) -> None:
        self._config = config or PriceConfig()
        self._sources = list(sources) if sources is not None else default_sources(self._config)
        self._fallback = fallback or StaticFallback()
        self._normalizer = normalizer or QuoteNormalizer(self._config)

    def sources(self) -> list[DataSource]:
        """Chain order, fallback table included."""
        return [source.name for source in self._sources] + [DataSource.FALLBACK]

    def get_source(self, name: DataSource) -> Optional[BaseQuoteSource]:
        for source in self._sources:
            if source.name == name:
                return source
        return None

    async def fetch_prices(self, request: Optional[FetchRequest] = None) -> list[NormalizedQuote]:
        """
        One USD/MT quote per requested commodity, in request order.

        Raises:
            InvalidCommodityError: If the request names an unknown commodity

        Note:
            Source failures never propagate; they only shrink the answer
            of that source.
        """
        request = request or FetchRequest()
        commodities = request.resolve_commodities()
        mock_sources = set(request.mock_sources) | self._config.mock_sources()

        resolved: dict[Commodity, NormalizedQuote] = {}

        for source in self._sources:
            pending = [c for c in commodities if c not in resolved and source.serves(c)]
            if not pending:
                continue

            if not source.is_enabled():
                logger.debug(f"[{source.name.value}] Not configured, skipping")
                continue

            raw_quotes = await self._fetch_from(source, pending, source.name in mock_sources)
            self._resolve(source, raw_quotes, pending, resolved)

        for commodity in commodities:
            if commodity in resolved:
                continue
            quote = self._fallback.quote(commodity)
            if quote is None:
                logger.warning(f"No quote for {commodity.value} from any source, omitting")
                continue
            logger.info(f"[{DataSource.FALLBACK.value}] Using static price for {commodity.value}")
            resolved[commodity] = quote

        return [resolved[c] for c in commodities if c in resolved]

    async def fetch_single_price(self, commodity: str) -> Optional[NormalizedQuote]:
        """Quote for one commodity name (aliases accepted)."""
        quotes = await self.fetch_prices(FetchRequest(commodities=[commodity]))
        return quotes[0] if quotes else None

    async def fetch_report(self, request: Optional[FetchRequest] = None) -> PriceReport:
        """fetch_prices() wrapped with the chain description."""
        quotes = await self.fetch_prices(request)
        report = PriceReport(
            data=quotes,
            sources=self.sources(),
            note="Prices automatically fall back through multiple sources",
        )
        if report.degraded:
            report.note = "Some quotes come from substitute data because a live source was unreadable"
        return report

    async def fetch_flour_prices(
        self,
        commodity: Optional[str] = None,
        market: Optional[str] = None,
        use_mock: bool = False,
    ) -> list[FlourPrice]:
        """
        Every Kamis flour quote across markets.

        Args:
            commodity: 'wheat-flour' or 'maize-flour' (any alias); both if omitted
            market: Case-insensitive substring of the market name
            use_mock: Answer from the Kamis mock dataset

        Raises:
            InvalidCommodityError: If `commodity` is not a flour
            ConfigurationError: If the chain has no Kamis source

        Note:
            A market table without flour rows lists the substitute flour
            dataset instead, flagged degraded.
        """
        targets = list(FLOUR_COMMODITIES)
        if commodity:
            target = resolve_commodity(commodity)
            if not target.is_flour:
                raise InvalidCommodityError(
                    message=f"Not a flour commodity: {commodity!r}",
                    commodity=commodity,
                )
            targets = [target]

        kamis = self.get_source(DataSource.KAMIS)
        if kamis is None:
            raise ConfigurationError(
                message="Flour prices need the Kamis source in the chain",
                source_name=DataSource.KAMIS.value,
            )

        use_mock = use_mock or DataSource.KAMIS in self._config.mock_sources()
        raw_quotes = await self._fetch_from(kamis, targets, use_mock)
        if not any(raw.commodity in targets for raw in raw_quotes):
            raw_quotes = kamis.on_unavailable(
                targets,
                ParseError(
                    message="No flour rows in market table",
                    source_name=kamis.name.value,
                ),
            )

        market_filter = (market or "").strip().lower()
        prices = []
        for raw in raw_quotes:
            if raw.commodity not in targets:
                continue
            if market_filter and market_filter not in (raw.market or "").lower():
                continue
            try:
                prices.append(self._flour_price(raw))
            except NormalizationError as e:
                logger.warning(f"[{kamis.name.value}] Skipping flour quote: {e}")
        return prices

    async def _fetch_from(
        self,
        source: BaseQuoteSource,
        commodities: Sequence[Commodity],
        use_mock: bool,
    ) -> list[RawQuote]:
        try:
            return await source.fetch_quotes(commodities, use_mock=use_mock)
        except Exception as e:
            logger.warning(f"[{source.name.value}] Failed: {e}")
            return []

    def _resolve(
        self,
        source: BaseQuoteSource,
        raw_quotes: Sequence[RawQuote],
        pending: Sequence[Commodity],
        resolved: dict[Commodity, NormalizedQuote],
    ) -> None:
        """Take the first normalizable quote per pending commodity."""
        newly_resolved = []
        for product_type in PASS_ORDER:
            for raw in raw_quotes:
                commodity = raw.commodity
                if commodity.product_type != product_type:
                    continue
                if commodity not in pending or commodity in resolved:
                    continue
                try:
                    resolved[commodity] = self._normalizer.normalize(raw, source.name)
                except NormalizationError as e:
                    logger.warning(
                        f"[{source.name.value}] Skipping {commodity.value} quote "
                        f"(bad {e.field_name or 'value'}): {e.message}"
                    )
                    continue
                newly_resolved.append(commodity.value)

        if newly_resolved:
            logger.info(f"[{source.name.value}] Resolved {newly_resolved}")
        else:
            logger.info(f"[{source.name.value}] No usable quotes for {[c.value for c in pending]}")

    def _flour_price(self, raw: RawQuote) -> FlourPrice:
        rate = self._normalizer.exchange_rate
        per_kg = self._normalizer.price_per_kg(raw)
        price_kes = raw.price
        per_kg_kes = per_kg.value
        if raw.currency == Currency.USD:
            price_kes = raw.price * rate
            per_kg_kes = per_kg.value * rate

        return FlourPrice(
            commodity=raw.commodity,
            market=raw.market or KamisQuoteSource.DEFAULT_MARKET,
            price_kes=round_price(price_kes),
            price_per_kg_kes=round_price(per_kg_kes),
            price_usd=self._normalizer.to_usd(raw),
            price_per_mt_usd=self._normalizer.normalize(raw, DataSource.KAMIS).price,
            unit=raw.unit,
            observed_at=raw.observed_at,
            degraded=raw.degraded,
        )

    async def close(self) -> None:
        """Close all source sessions."""
        for source in self._sources:
            try:
                await source.close()
            except Exception as e:
                logger.error(f"Error closing source {source.name.value}: {e}")

    async def __aenter__(self) -> "PriceFetcher":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
