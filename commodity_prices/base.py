"""
Base Quote Source - Abstract interface for all price providers.

Every provider answers one question: which raw quotes can you give me for
these commodities? Upstream failures are recovered here and turn into an
empty answer; anything unexpected propagates to the fetcher.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Optional, Sequence

import aiohttp

from commodity_prices.config import PriceConfig
from commodity_prices.exceptions import DataSourceError, FetchError
from commodity_prices.models import (
    Commodity,
    DataSource,
    ProductType,
    RawQuote,
)


logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)

HTML_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}


class BaseQuoteSource(ABC):
    """
    Abstract base class for all quote sources.

    Each source implementation must:
    1. Declare `name` and `product_types`
    2. Implement fetch_live() - fetch and parse the upstream
    3. Implement mock_quotes() - deterministic substitute output

    No retries: a failed upstream call is one missed opportunity in the
    fallback chain.
    """

    DEFAULT_TIMEOUT = 10.0

    def __init__(
        self,
        config: Optional[PriceConfig] = None,
        timeout: Optional[float] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self._config = config or PriceConfig()
        self._timeout = timeout if timeout is not None else self.DEFAULT_TIMEOUT
        self._session = session
        self._owns_session = session is None

    @property
    @abstractmethod
    def name(self) -> DataSource:
        """Source identifier, reported on every quote it resolves."""
        pass

    @property
    @abstractmethod
    def product_types(self) -> frozenset[ProductType]:
        """Product types this source can price."""
        pass

    @abstractmethod
    async def fetch_live(self, commodities: Sequence[Commodity]) -> list[RawQuote]:
        """
        Fetch and parse quotes from the upstream.

        Raises:
            DataSourceError: If the upstream cannot be read
        """
        pass

    @abstractmethod
    def mock_quotes(self, commodities: Sequence[Commodity]) -> list[RawQuote]:
        """Deterministic quotes used instead of the network."""
        pass

    def is_enabled(self) -> bool:
        """Whether the source can be queried with the current configuration."""
        return True

    def serves(self, commodity: Commodity) -> bool:
        return commodity.product_type in self.product_types

    async def fetch_quotes(
        self,
        commodities: Sequence[Commodity],
        use_mock: bool = False,
    ) -> list[RawQuote]:
        """
        Fetch raw quotes for the served subset of `commodities` (main entry point).

        Returns:
            Raw quotes, possibly several per commodity, in upstream order

        Note:
            Upstream failures are logged and yield an empty list
        """
        wanted = [c for c in commodities if self.serves(c)]
        if not wanted:
            return []

        if use_mock:
            logger.info(f"[{self.name.value}] Using mock data for {[c.value for c in wanted]}")
            return self.mock_quotes(wanted)

        try:
            return await self.fetch_live(wanted)
        except DataSourceError as e:
            return self.on_unavailable(wanted, e)

    def on_unavailable(
        self,
        commodities: Sequence[Commodity],
        error: DataSourceError,
    ) -> list[RawQuote]:
        """Answer given when the upstream cannot be read."""
        logger.warning(f"[{self.name.value}] Upstream unavailable: {error}")
        return []

    async def gather_isolated(
        self,
        commodities: Sequence[Commodity],
        fetch_one: Callable[[Commodity], Awaitable[Optional[RawQuote]]],
    ) -> list[RawQuote]:
        """
        Run one lookup per commodity concurrently.

        A failing lookup only loses its own commodity; results keep the
        order of `commodities`.
        """
        results = await asyncio.gather(
            *(fetch_one(commodity) for commodity in commodities),
            return_exceptions=True,
        )

        quotes: list[RawQuote] = []
        for commodity, result in zip(commodities, results):
            if isinstance(result, BaseException):
                logger.warning(f"[{self.name.value}] {commodity.value} lookup failed: {result}")
            elif result is None:
                logger.debug(f"[{self.name.value}] No quote for {commodity.value}")
            else:
                quotes.append(result)
        return quotes

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            )
            self._owns_session = True
        return self._session

    async def _request(
        self,
        url: str,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        as_json: bool = False,
    ) -> Any:
        """GET a URL, returning text or decoded JSON."""
        session = await self._get_session()

        start_time = time.time()
        try:
            async with session.get(
                url,
                params=params,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            ) as response:
                latency_ms = (time.time() - start_time) * 1000

                if response.status != 200:
                    raise FetchError(
                        message=f"HTTP {response.status}",
                        source_name=self.name.value,
                        status_code=response.status,
                        request_url=url,
                    )

                if as_json:
                    data = await response.json(content_type=None)
                else:
                    data = await response.text()
                logger.debug(f"[{self.name.value}] {url} completed in {latency_ms:.1f}ms")
                return data

        except aiohttp.ClientError as e:
            raise FetchError(
                message=f"Connection error: {e}",
                source_name=self.name.value,
                request_url=url,
                original_error=e,
            )
        except asyncio.TimeoutError as e:
            raise FetchError(
                message=f"Timed out after {self._timeout}s",
                source_name=self.name.value,
                request_url=url,
                original_error=e,
            )
        except ValueError as e:
            # Undecodable text or malformed JSON
            raise FetchError(
                message=f"Unreadable response body: {e}",
                source_name=self.name.value,
                request_url=url,
                original_error=e,
            )

    async def _get_text(
        self,
        url: str,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> str:
        return await self._request(url, params=params, headers=headers or HTML_HEADERS)

    async def _get_json(
        self,
        url: str,
        params: Optional[dict[str, Any]] = None,
    ) -> Any:
        return await self._request(
            url,
            params=params,
            headers={"Accept": "application/json", "User-Agent": USER_AGENT},
            as_json=True,
        )

    async def close(self) -> None:
        """Close resources."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "BaseQuoteSource":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(name={self.name.value})>"
