"""
Main client for marketlens.

The client wires configuration, the shared HTTP client, the providers and the
domain services together, and exposes every data operation as an async method
returning canonical rows. Each operation runs inside a logging request scope,
so every record it emits (provider fetches included) shares one trace id.
"""

from __future__ import annotations

import asyncio
import functools
from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import Any, TypeVar

import httpx

from marketlens.core.config import MarketLensConfig, get_default_config
from marketlens.core.exceptions import MarketLensError
from marketlens.core.extraction import EmbeddedValueExtractor
from marketlens.core.http import SourceClient, TokenBucket
from marketlens.core.logging import LogConfig, apply_log_config, logger, request_scope
from marketlens.core.providers import FredProvider, StockAnalysisProvider, YahooNewsProvider, YahooQuoteProvider
from marketlens.core.services import FallbackCoordinator, RevisionAnalyzer, ScreeningCriteria
from marketlens.core.services.economy import EconomyDataService
from marketlens.core.services.markets import MarketDataService
from marketlens.core.services.news import NewsDataService
from marketlens.core.services.stocks import StockDataService

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


def operation(func: F) -> F:
    """Run a client method inside a request scope named after it."""

    @functools.wraps(func)
    async def wrapper(self: MarketLensClient, *args: Any, **kwargs: Any) -> Any:
        with request_scope(func.__name__) as scope:
            try:
                result = await func(self, *args, **kwargs)
            except MarketLensError as e:
                logger.bind(error_code=e.error_code.value).info(f"{func.__name__} failed: {e.message}")
                raise
            logger.debug(f"{func.__name__} completed (trace {scope.trace_id})")
            return result

    return wrapper  # type: ignore[return-value]


class MarketLensClient:
    """
    Unified async entry point for quote-page, news and FRED data.

    Args:
        config: Configuration object; defaults to :func:`get_default_config`.
            Credentials are never read from the environment here.
        http_client: Optional pre-built ``httpx.AsyncClient`` (tests pass one
            backed by ``httpx.MockTransport``). It is not closed by the client.
        sleep: Awaitable used for inter-batch delays and rate limiting.
        setup_logging: Install the JSON log sinks described by ``config.logging``.
    """

    def __init__(
        self,
        config: MarketLensConfig | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        setup_logging: bool = False,
    ) -> None:
        self.config = config or get_default_config()
        if setup_logging:
            apply_log_config(
                LogConfig(
                    level=self.config.logging.level,
                    console_output=self.config.logging.console_output,
                    file_path=self.config.logging.file,
                    rotation=self.config.logging.rotation,
                    retention=self.config.logging.retention,
                )
            )

        self.source_client = SourceClient(http_client)
        extractor = EmbeddedValueExtractor(self.config.extraction.plausibility)
        self.yahoo = YahooQuoteProvider(self.source_client, self.config.sources, extractor)
        self.stockanalysis = StockAnalysisProvider(self.source_client, self.config.sources)
        self.yahoo_news = YahooNewsProvider(self.source_client, self.config.sources)
        self.fred = FredProvider(self.source_client, self.config.fred, self.config.sources)

        self.stocks = StockDataService(self.yahoo, self.stockanalysis, self.config.batch, sleep=sleep)
        self.markets = MarketDataService(self.yahoo, self.config.batch, sleep=sleep)
        self.news = NewsDataService(self.yahoo_news)
        self.economy = EconomyDataService(
            self.fred,
            self.yahoo,
            self.config.batch,
            fallback=FallbackCoordinator(),
            rate_limiter=TokenBucket.per_minute(self.config.batch.fred_requests_per_minute, sleep=sleep),
            analyzer=RevisionAnalyzer(),
            sleep=sleep,
        )
        logger.debug("marketlens client initialized")

    async def __aenter__(self) -> MarketLensClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Release the underlying HTTP connections."""
        await self.source_client.close()

    # 个股数据

    @operation
    async def get_profile(self, symbol: str) -> dict[str, Any]:
        return await self.stocks.get_profile(symbol)

    @operation
    async def get_summary(self, symbol: str) -> dict[str, Any]:
        return await self.stocks.get_summary(symbol)

    @operation
    async def get_estimates(self, symbol: str) -> dict[str, Any]:
        return await self.stocks.get_estimates(symbol)

    @operation
    async def get_pricing(self, symbol: str) -> dict[str, Any]:
        return await self.stocks.get_pricing(symbol)

    @operation
    async def get_financials(self, symbol: str) -> dict[str, Any]:
        return await self.stocks.get_financials(symbol)

    @operation
    async def get_dividends(self, symbol: str) -> dict[str, Any]:
        return await self.stocks.get_dividends(symbol)

    @operation
    async def get_technicals(self, symbol: str) -> dict[str, Any]:
        return await self.stocks.get_technicals(symbol)

    @operation
    async def get_esg(self, symbol: str) -> dict[str, Any]:
        return await self.stocks.get_esg(symbol)

    @operation
    async def get_recommendations(self, symbol: str) -> list[dict[str, Any]]:
        return await self.stocks.get_recommendations(symbol)

    @operation
    async def get_revenue_breakdown(self, symbol: str) -> list[dict[str, Any]]:
        return await self.stocks.get_revenue_breakdown(symbol)

    @operation
    async def get_peers(self, symbol: str) -> list[dict[str, Any]]:
        return await self.stocks.get_peers(symbol)

    # 新闻

    @operation
    async def get_stock_news(self, symbol: str) -> list[dict[str, Any]]:
        return await self.news.get_stock_news(symbol)

    @operation
    async def search_news(self, search_term: str) -> list[dict[str, Any]]:
        return await self.news.search_news(search_term)

    # 市场数据

    @operation
    async def get_market_indices(self) -> list[dict[str, Any]]:
        return await self.markets.get_market_indices()

    @operation
    async def screen_stocks(
        self, criteria: ScreeningCriteria | Mapping[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        return await self.markets.screen_stocks(criteria)

    @operation
    async def get_correlation(self, symbols: Iterable[str]) -> list[dict[str, Any]]:
        return await self.markets.get_correlation(symbols)

    # 宏观经济数据 (FRED)

    @operation
    async def get_economic_indicators(self, keys: Iterable[str] | None = None) -> list[dict[str, Any]]:
        return await self.economy.get_economic_indicators(keys)

    @operation
    async def search_series(self, search_text: str, limit: int = 10) -> list[dict[str, Any]]:
        return await self.economy.search_series(search_text, limit)

    @operation
    async def get_series(self, series_id: str, limit: int = 10) -> list[dict[str, Any]]:
        return await self.economy.get_series(series_id, limit)

    @operation
    async def get_vintage_analysis(self, series_id: str, analysis_type: str = "revisions") -> dict[str, Any]:
        return await self.economy.get_vintage_analysis(series_id, analysis_type)

    @operation
    async def get_series_relationships(self, series_id: str) -> dict[str, Any]:
        return await self.economy.get_series_relationships(series_id)

    @operation
    async def get_categories(self, category_id: int | None = None, limit: int = 20) -> list[dict[str, Any]]:
        return await self.economy.get_categories(category_id, limit)

    @operation
    async def get_releases(self, limit: int = 20) -> list[dict[str, Any]]:
        return await self.economy.get_releases(limit)

    @operation
    async def get_series_updates(
        self, limit: int = 20, start_time: str | None = None, end_time: str | None = None
    ) -> list[dict[str, Any]]:
        return await self.economy.get_series_updates(limit, start_time, end_time)
