"""Multi-symbol views: market indices, stock screening and correlation."""

import asyncio
from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import Any

from marketlens.core.config import BatchConfig
from marketlens.core.exceptions import ErrorCode, ExtractionError, PreconditionError
from marketlens.core.extraction import catalog
from marketlens.core.models import FieldSignature, Snapshot, build_row, dump_json, today
from marketlens.core.providers import YahooQuoteProvider
from marketlens.core.services.batch import BatchScheduler
from marketlens.core.services.correlation import METHOD, QuoteMetrics, correlation_matrix
from marketlens.core.services.screening import ScreeningCriteria


def quote_metrics(snapshot: Snapshot) -> QuoteMetrics:
    return QuoteMetrics(
        price=snapshot.primitive("regularMarketPrice"),  # type: ignore[arg-type]
        change=snapshot.primitive("regularMarketChange"),  # type: ignore[arg-type]
        change_percent=snapshot.primitive("regularMarketChangePercent"),  # type: ignore[arg-type]
        beta=snapshot.primitive("beta"),  # type: ignore[arg-type]
        fifty_two_week_low=snapshot.primitive("fiftyTwoWeekLow"),  # type: ignore[arg-type]
        fifty_two_week_high=snapshot.primitive("fiftyTwoWeekHigh"),  # type: ignore[arg-type]
        volume=snapshot.primitive("regularMarketVolume"),  # type: ignore[arg-type]
    )


class MarketDataService:
    """Batched quote page fetches across many symbols."""

    def __init__(
        self,
        yahoo: YahooQuoteProvider,
        batch: BatchConfig | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.yahoo = yahoo
        self.batch = batch or BatchConfig()
        self._sleep = sleep

    def _scheduler(self) -> BatchScheduler:
        return BatchScheduler(
            concurrency=self.batch.concurrency,
            inter_batch_delay=self.batch.inter_batch_delay,
            sleep=self._sleep,
            source_id=self.yahoo.name,
        )

    async def _snapshots(self, symbols: Iterable[str], signatures: tuple[FieldSignature, ...]) -> dict[str, Snapshot]:
        """Non-empty snapshots keyed by symbol; failed or empty pages are left out."""

        async def fetch(symbol: str) -> Snapshot | None:
            snapshot = await self.yahoo.quote_snapshot(
                symbol, signatures, timeout=self.yahoo.sources.batch_page_timeout
            )
            return None if snapshot.is_empty else snapshot

        result = await self._scheduler().run(symbols, fetch)
        return result.present()

    async def get_market_indices(self) -> list[dict[str, Any]]:
        symbols = {symbol: key for key, (symbol, _) in catalog.MARKET_INDICES.items()}
        snapshots = await self._snapshots(symbols, catalog.INDEX_SIGNATURES)
        if not snapshots:
            raise ExtractionError("Could not extract market index data", source=self.yahoo.name)
        report_date = today()
        rows = []
        for key, (symbol, name) in catalog.MARKET_INDICES.items():
            snapshot = snapshots.get(symbol)
            if snapshot is None:
                continue
            row = build_row(snapshot, catalog.INDEX_COLUMNS, index_key=key, symbol=symbol, index_name=name)
            row["last_updated"] = report_date
            row["report_date"] = report_date
            rows.append(row)
        return rows

    async def screen_stocks(self, criteria: ScreeningCriteria | Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        """Screen the first ``criteria.max_results`` symbols of the screening universe.

        Returns an empty list when pages were fetched but no stock matched.
        """
        if criteria is None:
            criteria = ScreeningCriteria()
        elif not isinstance(criteria, ScreeningCriteria):
            criteria = ScreeningCriteria.model_validate(dict(criteria))

        universe = catalog.SCREENER_UNIVERSE[: criteria.max_results]
        snapshots = await self._snapshots(universe, catalog.SCREEN_SIGNATURES)
        if not snapshots:
            raise ExtractionError("Could not fetch any stock for screening", source=self.yahoo.name)

        screen_date = today()
        criteria_used = dump_json(criteria.to_payload())
        rows = []
        for symbol, snapshot in snapshots.items():
            metrics = {key: snapshot.primitive(key) for key in snapshot.keys()}
            if not criteria.passes(metrics):
                continue
            row = build_row(snapshot, catalog.SCREEN_COLUMNS, symbol=symbol, name=metrics.get("longName") or symbol)
            row["screen_date"] = screen_date
            row["criteria_used"] = criteria_used
            rows.append(row)
        return rows

    async def get_correlation(self, symbols: Iterable[str]) -> list[dict[str, Any]]:
        """Pairwise heuristic correlation rows, excluding self pairs."""
        unique = list(dict.fromkeys(s.strip().upper() for s in symbols if isinstance(s, str) and s.strip()))
        if len(unique) < 2:
            raise PreconditionError(
                "Need at least 2 symbols for correlation analysis",
                ErrorCode.INSUFFICIENT_ITEMS,
                argument="symbols",
            )

        snapshots = await self._snapshots(unique, catalog.CORRELATION_SIGNATURES)
        metrics = {s: quote_metrics(snapshots[s]) for s in unique if s in snapshots}
        metrics = {s: m for s, m in metrics.items() if m.is_usable}
        if len(metrics) < 2:
            raise ExtractionError(
                "Could not extract enough quote data for correlation analysis",
                source=self.yahoo.name,
                details={"valid_symbols": list(metrics)},
            )

        matrix = correlation_matrix(metrics)
        analysis_date = today()
        return [
            {
                "symbol_1": first,
                "symbol_2": second,
                "correlation": matrix[first][second],
                "method": METHOD,
                "symbol_1_price": metrics[first].price,
                "symbol_2_price": metrics[second].price,
                "symbol_1_change_percent": metrics[first].change_percent,
                "symbol_2_change_percent": metrics[second].change_percent,
                "analysis_date": analysis_date,
            }
            for first in metrics
            for second in metrics
            if first != second
        ]
