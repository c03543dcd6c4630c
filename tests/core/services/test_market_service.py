"""Tests for multi-symbol market operations."""

import json

import httpx
import pytest

from marketlens.core.client import MarketLensClient
from marketlens.core.exceptions import ErrorCode, ExtractionError, PreconditionError
from marketlens.core.extraction import EmbeddedValueExtractor
from marketlens.core.extraction.catalog import CORRELATION_SIGNATURES
from marketlens.core.services import ScreeningCriteria
from marketlens.core.services.markets import quote_metrics


@pytest.fixture
def pages(quote_page):
    return {
        "^GSPC": quote_page({
            "regularMarketPrice": {"raw": 5200.5, "fmt": "5,200.50"},
            "regularMarketChange": {"raw": 10.2, "fmt": "10.20"},
            "regularMarketChangePercent": {"raw": 0.2, "fmt": "0.20%"},
            "regularMarketVolume": {"raw": 2100000000, "fmt": "2.1B"},
        }),
        "XLK": quote_page({"regularMarketPrice": {"raw": 210.4, "fmt": "210.40"}}),
        "AAPL": quote_page({
            "longName": "Apple Inc.",
            "sector": "Technology",
            "marketCap": {"raw": 3000000000000, "fmt": "3.00T"},
            "trailingPE": {"raw": 29.5, "fmt": "29.50"},
            "regularMarketPrice": {"raw": 150.0, "fmt": "150.00"},
            "regularMarketChangePercent": {"raw": 1.0, "fmt": "1.00%"},
            "beta": {"raw": 1.2, "fmt": "1.20"},
            "fiftyTwoWeekLow": {"raw": 100.0, "fmt": "100.00"},
            "fiftyTwoWeekHigh": {"raw": 200.0, "fmt": "200.00"},
        }),
        "MSFT": quote_page({
            "longName": "Microsoft Corporation",
            "marketCap": {"raw": 3100000000000, "fmt": "3.10T"},
            "trailingPE": {"raw": 75.0, "fmt": "75.00"},
            "regularMarketPrice": {"raw": 80.0, "fmt": "80.00"},
            "regularMarketChangePercent": {"raw": 2.0, "fmt": "2.00%"},
            "beta": {"raw": 1.0, "fmt": "1.00"},
            "fiftyTwoWeekLow": {"raw": 60.0, "fmt": "60.00"},
            "fiftyTwoWeekHigh": {"raw": 100.0, "fmt": "100.00"},
        }),
        "EMPTY": quote_page({}),
    }


@pytest.fixture
def requests_seen():
    return []


@pytest.fixture
def client(mock_http, recorded_sleep, pages, requests_seen):
    def handler(request: httpx.Request) -> httpx.Response:
        symbol = request.url.params.get("p")
        requests_seen.append(symbol)
        page = pages.get(symbol)
        return httpx.Response(200, text=page) if page is not None else httpx.Response(500)

    return MarketLensClient(http_client=mock_http(handler), sleep=recorded_sleep)


class TestMarketIndices:
    """市场指数测试"""

    @pytest.mark.asyncio
    async def test_indices_batched(self, client, recorded_sleep, requests_seen):
        """测试10个指数分两组获取, 失败的指数被忽略"""
        rows = await client.get_market_indices()

        assert len(requests_seen) == 10
        assert recorded_sleep.calls == [0.5]
        assert [row["symbol"] for row in rows] == ["^GSPC", "XLK"]
        sp500 = rows[0]
        assert sp500["index_key"] == "SP500"
        assert sp500["index_name"] == "S&P 500"
        assert sp500["price"] == 5200.5
        assert sp500["volume"] == 2100000000
        assert sp500["market_cap"] is None

    @pytest.mark.asyncio
    async def test_all_indices_failing(self, client, pages):
        pages.clear()

        with pytest.raises(ExtractionError):
            await client.get_market_indices()


class TestScreening:
    """股票筛选测试"""

    @pytest.mark.asyncio
    async def test_screen(self, client, requests_seen):
        """测试仅获取前 max_results 个股票并按条件过滤"""
        rows = await client.screen_stocks({"maxResults": 3})

        assert sorted(requests_seen) == ["AAPL", "GOOGL", "MSFT"]
        assert [row["symbol"] for row in rows] == ["AAPL"]
        row = rows[0]
        assert row["name"] == "Apple Inc."
        assert row["trailing_pe"] == 29.5
        assert row["market_cap"] == 3e12
        assert json.loads(row["criteria_used"])["maxResults"] == 3

    @pytest.mark.asyncio
    async def test_no_match_is_empty(self, client):
        rows = await client.screen_stocks(ScreeningCriteria(min_market_cap=1e13, max_results=2))

        assert rows == []

    @pytest.mark.asyncio
    async def test_nothing_fetched(self, client, pages):
        pages.clear()

        with pytest.raises(ExtractionError):
            await client.screen_stocks({"maxResults": 2})


class TestCorrelation:
    """相关性分析测试"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("symbols", [["AAPL"], ["aapl", "AAPL "], [], ["", "  "]])
    async def test_needs_two_symbols(self, client, requests_seen, symbols):
        """测试少于2个代码时在任何请求前报错"""
        with pytest.raises(PreconditionError) as exc_info:
            await client.get_correlation(symbols)

        assert exc_info.value.error_code is ErrorCode.INSUFFICIENT_ITEMS
        assert requests_seen == []

    @pytest.mark.asyncio
    async def test_pairs(self, client):
        rows = await client.get_correlation(["AAPL", "msft"])

        assert [(row["symbol_1"], row["symbol_2"]) for row in rows] == [("AAPL", "MSFT"), ("MSFT", "AAPL")]
        assert all(row["method"] == "heuristic_proxy" for row in rows)
        assert rows[0]["correlation"] == pytest.approx(0.84)
        assert rows[0]["symbol_1_price"] == 150.0
        assert rows[0]["symbol_2_change_percent"] == 2.0

    @pytest.mark.asyncio
    async def test_unusable_symbols_excluded(self, client):
        with pytest.raises(ExtractionError) as exc_info:
            await client.get_correlation(["AAPL", "EMPTY", "MISSING"])

        assert exc_info.value.details["valid_symbols"] == ["AAPL"]


def test_quote_metrics_from_snapshot(quote_page):
    snapshot = EmbeddedValueExtractor().extract(
        quote_page({"regularMarketPrice": 12.5, "beta": 0.0}), CORRELATION_SIGNATURES
    )

    metrics = quote_metrics(snapshot)

    assert metrics.price == 12.5
    assert metrics.beta == 0.0
    assert metrics.change_percent is None
