"""Tests for news listing parsers."""

import httpx
import pytest

from marketlens.core.http import SourceClient
from marketlens.core.providers.news import (
    YahooNewsProvider,
    parse_quote_news,
    parse_search_news,
    related_symbols,
    story_type,
    unwrap_redirect,
)

QUOTE_NEWS = """
<html><body>
<section data-testid="recent-news">
  <ul>
    <li data-testid="storyitem">
      <a href="/news/apple-results-123.html"><h3>Apple reports great results and excellent growth</h3></a>
      <p>Revenue rose across every region.</p>
      <div>Reuters • 2 hours ago</div>
    </li>
    <li data-testid="storyitem">
      <a href="https://finance.yahoo.com/video/apple-event-456.html"><h3>Watch the Apple product event recap</h3></a>
      <div>Yahoo Finance Video</div>
      <div>5 minutes ago</div>
    </li>
    <li data-testid="storyitem">
      <a href="/news/short.html"><h3>Short</h3></a>
    </li>
    <li data-testid="storyitem">
      <h3>Story without a link is skipped</h3>
    </li>
    <li data-testid="storyitem">
      <a href="/m/apple-earnings.html"><h3>Apple earnings preview for the quarter</h3></a>
    </li>
  </ul>
</section>
</body></html>
"""

SEARCH_RESULTS = """
<html><body>
<div class="dd algo">
  <h3><a href="https://r.search.yahoo.com/_ylt=abc/RV=2/RE=1/RO=10/RU=https%3a%2f%2fwww.reuters.com%2ftech%2fnvda-story/RK=2/RS=x">
    NVDA and TSLA shares rally after strong results</a></h3>
  <span class="fz-ms">Reuters https://www.reuters.com</span>
  <div class="compText"><p>Chip stocks climbed on Tuesday.</p></div>
</div>
<div class="dd algo">
  <h3><a href="https://www.marketwatch.com/story/markets-today">Markets today: what to watch this week</a></h3>
  <p>A look at the week ahead.</p>
</div>
<div class="dd algo">
  <h3><a href="https://example.com/x">Tiny</a></h3>
</div>
<div class="dd">
  <h3><a href="https://example.com/ad">Sponsored result that is not organic</a></h3>
</div>
</body></html>
"""


class TestQuoteNews:
    """个股新闻解析测试"""

    def test_parses_stories(self):
        stories = parse_quote_news(QUOTE_NEWS, "AAPL")

        assert [s.title for s in stories] == [
            "Apple reports great results and excellent growth",
            "Watch the Apple product event recap",
            "Apple earnings preview for the quarter",
        ]
        first, video, earnings = stories
        assert first.link == "https://finance.yahoo.com/news/apple-results-123.html"
        assert first.publisher == "Reuters"
        assert first.published == "2 hours ago"
        assert first.related_symbols == ("AAPL",)
        assert "Revenue rose" in first.text
        assert video.story_type == "video"
        assert video.publisher == "Yahoo Finance Video"
        assert video.published == "5 minutes ago"
        assert earnings.story_type == "earnings"
        assert earnings.publisher is None

    def test_page_without_news_section(self):
        assert parse_quote_news("<html><body><p>nothing</p></body></html>", "AAPL") == []

    @pytest.mark.parametrize(
        ("title", "link", "expected"),
        [
            ("Apple beats estimates", "/video/x.html", "video"),
            ("Apple Q2 Earnings call", "/news/x.html", "earnings"),
            ("New SEC filing from Apple", "/news/x.html", "sec_filing"),
            ("Apple opens a store", "/news/x.html", "news"),
        ],
    )
    def test_story_type(self, title, link, expected):
        assert story_type(title, link) == expected


class TestSearchNews:
    """搜索新闻解析测试"""

    def test_parses_results(self):
        stories = parse_search_news(SEARCH_RESULTS, "chip stocks")

        assert len(stories) == 2
        first, second = stories
        assert first.title == "NVDA and TSLA shares rally after strong results"
        assert first.link == "https://www.reuters.com/tech/nvda-story"
        assert first.publisher == "Reuters"
        assert first.text == "Chip stocks climbed on Tuesday."
        assert first.related_symbols == ("NVDA", "TSLA")
        assert first.published is None
        assert second.publisher == "marketwatch.com"
        assert second.text == "A look at the week ahead."
        assert second.related_symbols == ("CHIP STOCKS",)

    def test_unwrap_redirect(self):
        assert unwrap_redirect("https://r.search.yahoo.com/a/RU=https%3a%2f%2fx.com%2fy/RK=0") == "https://x.com/y"
        assert unwrap_redirect("https://x.com/y") == "https://x.com/y"

    def test_related_symbols_ignore_unknown_words(self):
        assert related_symbols("THE CEO OF AAPL SPEAKS", "apple") == ("AAPL",)
        assert related_symbols("Stocks drift lower", "fed") == ("FED",)


class TestYahooNewsProvider:
    """新闻数据源请求测试"""

    @pytest.mark.asyncio
    async def test_requests(self, mock_http):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            if request.url.host == "search.yahoo.com":
                return httpx.Response(200, text=SEARCH_RESULTS)
            return httpx.Response(200, text=QUOTE_NEWS)

        provider = YahooNewsProvider(SourceClient(mock_http(handler)))

        stock = await provider.stock_news("aapl")
        general = await provider.search_news("chip stocks")

        assert len(stock) == 3
        assert len(general) == 2
        assert seen[0].url.path == "/quote/AAPL"
        assert seen[0].url.params["p"] == "AAPL"
        assert seen[1].url.params["p"] == "chip stocks news"
        assert seen[1].url.params["ei"] == "UTF-8"
