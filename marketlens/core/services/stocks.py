"""Per-symbol quote page data: profile, summary, pricing and related views."""

import asyncio
from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import Any

from loguru import logger

from marketlens.core.config import BatchConfig
from marketlens.core.exceptions import ExtractionError, PreconditionError, SourceUnavailableError
from marketlens.core.extraction import catalog, extract_array, to_typed_value
from marketlens.core.models import FieldSignature, Snapshot, ValueKind, build_row, coalesce, today
from marketlens.core.providers import StockAnalysisProvider, YahooQuoteProvider
from marketlens.core.providers.stockanalysis import BREAKDOWN_TYPES
from marketlens.core.services.batch import BatchScheduler

RECOMMENDATION_COUNTS = (
    ("strong_buy", "strongBuy", 5),
    ("buy", "buy", 4),
    ("hold", "hold", 3),
    ("sell", "sell", 2),
    ("strong_sell", "strongSell", 1),
)


def normalize_symbol(symbol: str) -> str:
    if not isinstance(symbol, str) or not symbol.strip():
        raise PreconditionError("A ticker symbol is required", argument="symbol")
    return symbol.strip().upper()


def _count(value: Any) -> int:
    typed = to_typed_value(value, ValueKind.INTEGER)
    return int(typed.raw) if typed is not None else 0


def recommendation_row(symbol: str, period: Mapping[str, Any], report_date: str) -> dict[str, Any]:
    """One analyst recommendation period with derived totals and a 5..1 weighted consensus."""
    counts = {column: _count(period.get(field)) for column, field, _ in RECOMMENDATION_COUNTS}
    total = sum(counts.values())
    weighted = sum(counts[column] * weight for column, _, weight in RECOMMENDATION_COUNTS)
    return {
        "symbol": symbol,
        "period": period.get("period"),
        **counts,
        "total_analysts": total,
        "positive_ratings": counts["strong_buy"] + counts["buy"],
        "negative_ratings": counts["sell"] + counts["strong_sell"],
        "consensus_score": round(weighted / total, 2) if total else None,
        "report_date": report_date,
    }


class StockDataService:
    """Canonical rows built from a single symbol's pages."""

    def __init__(
        self,
        yahoo: YahooQuoteProvider,
        revenue: StockAnalysisProvider,
        batch: BatchConfig | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.yahoo = yahoo
        self.revenue = revenue
        self.batch = batch or BatchConfig()
        self._sleep = sleep

    async def _quote(self, symbol: str, signatures: Iterable[FieldSignature], what: str) -> Snapshot:
        try:
            return await self.yahoo.quote_snapshot(symbol, signatures)
        except SourceUnavailableError as e:
            raise ExtractionError(
                f"Could not fetch {what} data for {symbol}",
                source=self.yahoo.name,
                details={"symbol": symbol, "cause": e.error_code.value},
            ) from e

    def _require(self, snapshot: Snapshot, symbol: str, what: str, keys: Iterable[str]) -> None:
        if not any(key in snapshot for key in keys):
            raise ExtractionError(f"Could not extract {what} data for {symbol}", source=snapshot.source_id)

    async def get_profile(self, symbol: str) -> dict[str, Any]:
        symbol = normalize_symbol(symbol)
        snapshot = await self._quote(symbol, catalog.PROFILE_SIGNATURES, "profile")
        self._require(snapshot, symbol, "profile", catalog.PROFILE_COLUMNS.values())
        return build_row(snapshot, catalog.PROFILE_COLUMNS, symbol=symbol) | {"report_date": today()}

    async def get_summary(self, symbol: str) -> dict[str, Any]:
        """Key statistics; DOM readings are preferred when plausible."""
        symbol = normalize_symbol(symbol)
        snapshot = await self._quote(symbol, catalog.SUMMARY_SIGNATURES, "summary")
        self._require(snapshot, symbol, "summary", catalog.SUMMARY_COLUMNS.values())
        row = build_row(snapshot, catalog.SUMMARY_COLUMNS, symbol=symbol)
        row["currency"] = snapshot.primitive("currency") or "USD"
        row["report_date"] = today()
        return row

    async def get_estimates(self, symbol: str) -> dict[str, Any]:
        symbol = normalize_symbol(symbol)
        snapshot = await self._quote(symbol, catalog.ESTIMATE_SIGNATURES, "analyst estimates")
        self._require(snapshot, symbol, "analyst estimates", catalog.ESTIMATE_COLUMNS.values())
        row = build_row(snapshot, catalog.ESTIMATE_COLUMNS, symbol=symbol)
        row["currency"] = snapshot.primitive("currency") or "USD"
        row["report_date"] = today()
        return row

    async def get_pricing(self, symbol: str) -> dict[str, Any]:
        symbol = normalize_symbol(symbol)
        snapshot = await self._quote(symbol, catalog.PRICING_SIGNATURES, "pricing")
        price_keys = [*catalog.PRICING_COLUMNS.values(), "currentPrice", "regularMarketPrice"]
        self._require(snapshot, symbol, "pricing", price_keys)
        row: dict[str, Any] = {
            "symbol": symbol,
            "current_price": coalesce(snapshot.primitive("currentPrice"), snapshot.primitive("regularMarketPrice")),
        }
        row.update(build_row(snapshot, catalog.PRICING_COLUMNS))
        row["market_state"] = snapshot.primitive("marketState") or "UNKNOWN"
        row["currency"] = snapshot.primitive("currency") or "USD"
        row["report_date"] = today()
        return row

    async def get_financials(self, symbol: str) -> dict[str, Any]:
        symbol = normalize_symbol(symbol)
        snapshot = await self._quote(symbol, catalog.FINANCIAL_SIGNATURES, "financial")
        self._require(snapshot, symbol, "financial", catalog.FINANCIAL_COLUMNS.values())
        row = build_row(snapshot, catalog.FINANCIAL_COLUMNS, symbol=symbol)
        row["currency"] = coalesce(snapshot.primitive("financialCurrency"), snapshot.primitive("currency"), "USD")
        row["report_date"] = today()
        return row

    async def get_dividends(self, symbol: str) -> dict[str, Any]:
        """Dividend row; a stock that pays no dividend yields an all-None row."""
        symbol = normalize_symbol(symbol)
        snapshot = await self._quote(symbol, catalog.DIVIDEND_SIGNATURES, "dividend")
        if snapshot.is_empty:
            logger.info(f"No dividend data on quote page for {symbol}")
        return build_row(snapshot, catalog.DIVIDEND_COLUMNS, symbol=symbol) | {"report_date": today()}

    async def get_technicals(self, symbol: str) -> dict[str, Any]:
        symbol = normalize_symbol(symbol)
        snapshot = await self._quote(symbol, catalog.TECHNICAL_SIGNATURES, "technical")
        self._require(snapshot, symbol, "technical", catalog.TECHNICAL_COLUMNS.values())
        return build_row(snapshot, catalog.TECHNICAL_COLUMNS, symbol=symbol) | {"report_date": today()}

    async def get_esg(self, symbol: str) -> dict[str, Any]:
        """ESG scores; controversy flags not reported on the page are False."""
        symbol = normalize_symbol(symbol)
        snapshot = await self._quote(symbol, catalog.ESG_SIGNATURES, "ESG")
        if snapshot.is_empty:
            raise ExtractionError(f"Could not extract ESG data for {symbol}", source=snapshot.source_id)
        row = build_row(snapshot, catalog.ESG_SCORE_COLUMNS, symbol=symbol)
        for column, key in catalog.ESG_FLAG_COLUMNS.items():
            row[column] = bool(snapshot.primitive(key))
        row["report_date"] = today()
        return row

    async def get_recommendations(self, symbol: str) -> list[dict[str, Any]]:
        symbol = normalize_symbol(symbol)
        try:
            document = await self.yahoo.fetch_quote(symbol)
        except SourceUnavailableError as e:
            raise ExtractionError(
                f"Could not fetch recommendation data for {symbol}", source=self.yahoo.name
            ) from e
        trend = extract_array(document, "trend", scope="recommendationTrend")
        periods = [period for period in trend or [] if isinstance(period, dict)]
        if not periods:
            raise ExtractionError(f"Could not extract recommendation data for {symbol}", source=self.yahoo.name)
        report_date = today()
        return [recommendation_row(symbol, period, report_date) for period in periods]

    async def get_revenue_breakdown(self, symbol: str) -> list[dict[str, Any]]:
        """Segment and geography revenue rows; one failing page does not discard the other."""
        symbol = normalize_symbol(symbol)
        scheduler = BatchScheduler(
            concurrency=len(BREAKDOWN_TYPES), inter_batch_delay=0, sleep=self._sleep, source_id=self.revenue.name
        )
        result = await scheduler.run(BREAKDOWN_TYPES, lambda kind: self.revenue.revenue_breakdown(symbol, kind))
        rows = [row for kind in BREAKDOWN_TYPES for row in result.present().get(kind, [])]
        if not rows:
            raise ExtractionError(f"Could not extract revenue breakdown for {symbol}", source=self.revenue.name)
        return rows

    async def get_peers(self, symbol: str) -> list[dict[str, Any]]:
        """Target row followed by rows for up to four peers in the same industry."""
        symbol = normalize_symbol(symbol)
        signatures = catalog.PEER_CONTEXT_SIGNATURES + catalog.PEER_METRIC_SIGNATURES
        target = await self._quote(symbol, signatures, "peer comparison")
        industry = target.primitive("industry")
        if industry is None:
            raise ExtractionError(
                f"Could not extract target company data for peer analysis of {symbol}", source=target.source_id
            )
        sector = target.primitive("sector")
        peers = catalog.peers_for(symbol, str(industry))

        async def fetch_peer(peer: str) -> Snapshot | None:
            snapshot = await self.yahoo.quote_snapshot(
                peer, catalog.PEER_METRIC_SIGNATURES, timeout=self.yahoo.sources.peer_page_timeout
            )
            return None if snapshot.is_empty else snapshot

        scheduler = BatchScheduler(
            concurrency=self.batch.concurrency,
            inter_batch_delay=self.batch.peer_delay,
            sleep=self._sleep,
            source_id=self.yahoo.name,
        )
        result = await scheduler.run(peers, fetch_peer)
        report_date = today()

        def row(ticker: str, company_type: str, snapshot: Snapshot) -> dict[str, Any]:
            fixed = {"symbol": ticker, "company_type": company_type, "industry": industry, "sector": sector}
            return build_row(snapshot, catalog.PEER_METRIC_COLUMNS, **fixed) | {"report_date": report_date}

        rows = [row(symbol, "target", target)]
        rows.extend(row(peer, "peer", snapshot) for peer, snapshot in result.present().items())
        return rows
