"""News stories from Yahoo Finance quote pages and Yahoo search."""

import re
from urllib.parse import unquote, urlparse

from bs4 import BeautifulSoup, Tag
from loguru import logger
from pydantic import BaseModel, ConfigDict

from marketlens.core.providers.base import DataProvider

QUOTE_URL = "https://finance.yahoo.com/quote/{symbol}"
FINANCE_BASE = "https://finance.yahoo.com"
SEARCH_URL = "https://search.yahoo.com/search"

MIN_TITLE_LENGTH = 10
MAX_PUBLISHER_LENGTH = 50
EXCERPT_LENGTH = 500
WATCHED_SYMBOLS = frozenset({"TSLA", "BTC", "ETH", "AAPL", "GOOGL", "MSFT", "AMZN", "META", "NVDA"})

_RELATIVE_TIME = re.compile(r"\d+\s+(minute|hour|day)s?\s+ago")
_REDIRECT_TARGET = re.compile(r"RU=([^/]+)")
_WORD = re.compile(r"\b[A-Z]{2,5}\b")


class NewsStory(BaseModel):
    """A story as read from the page, before scoring."""

    model_config = ConfigDict(frozen=True)

    title: str
    link: str
    publisher: str | None = None
    published: str | None = None
    story_type: str = "news"
    text: str = ""
    related_symbols: tuple[str, ...] = ()


def story_type(title: str, link: str) -> str:
    lowered = title.lower()
    if "/video/" in link:
        return "video"
    if "earnings" in lowered:
        return "earnings"
    if "sec filing" in lowered:
        return "sec_filing"
    return "news"


def _publisher_and_time(lines: list[str]) -> tuple[str | None, str | None]:
    """Read ``publisher • time`` or a relative ``N hours ago`` line."""
    for index, line in enumerate(lines[1:], start=1):
        if "•" in line:
            publisher, _, published = line.partition("•")
            return publisher.strip() or None, published.strip() or None
        if _RELATIVE_TIME.search(line):
            previous = lines[index - 1]
            publisher = previous if index > 1 and len(previous) < MAX_PUBLISHER_LENGTH and "http" not in previous else None
            return publisher, line
    return None, None


def parse_quote_news(html: str, symbol: str) -> list[NewsStory]:
    """Stories listed in the news section of a quote page."""
    soup = BeautifulSoup(html, "html.parser")
    stories: list[NewsStory] = []
    seen: set[int] = set()
    for section in soup.select('[data-testid*="news"]'):
        for item in section.select('[data-testid*="story"]'):
            if id(item) in seen:
                continue
            seen.add(id(item))
            anchor = item.find("a", href=True)
            if not isinstance(anchor, Tag):
                continue
            link = str(anchor["href"])
            lines = [line for line in item.get_text("\n", strip=True).split("\n") if line]
            if not lines or len(lines[0]) < MIN_TITLE_LENGTH:
                continue
            title = lines[0]
            publisher, published = _publisher_and_time(lines)
            stories.append(
                NewsStory(
                    title=title,
                    link=link if link.startswith("http") else f"{FINANCE_BASE}{link}",
                    publisher=publisher,
                    published=published,
                    story_type=story_type(title, link),
                    text=" ".join(lines)[:EXCERPT_LENGTH],
                    related_symbols=(symbol,),
                )
            )
    return stories


def unwrap_redirect(link: str) -> str:
    """Target of a ``r.search.yahoo.com`` redirect link."""
    if "r.search.yahoo.com" in link:
        match = _REDIRECT_TARGET.search(link)
        if match:
            return unquote(match.group(1))
    return link


def related_symbols(title: str, search_term: str) -> tuple[str, ...]:
    """Well-known tickers named in ``title``; the search term otherwise."""
    found = [word for word in _WORD.findall(title.upper()) if word in WATCHED_SYMBOLS]
    return tuple(dict.fromkeys(found)) or (search_term.upper(),)


def parse_search_news(html: str, search_term: str) -> list[NewsStory]:
    """Organic results of a Yahoo search page."""
    soup = BeautifulSoup(html, "html.parser")
    stories: list[NewsStory] = []
    for item in soup.select(".dd.algo"):
        anchor = item.select_one("h3 a")
        if anchor is None or not anchor.get("href"):
            continue
        title = anchor.get_text(" ", strip=True)
        if len(title) < MIN_TITLE_LENGTH:
            continue
        link = unwrap_redirect(str(anchor["href"]))

        source = item.select_one(".fz-ms")
        if source is not None:
            publisher = source.get_text(" ", strip=True).split("https://")[0].strip() or None
        else:
            publisher = urlparse(link).hostname
            publisher = publisher.removeprefix("www.") if publisher else None

        snippet_node = item.select_one(".compText") or item.select_one("p")
        snippet = snippet_node.get_text(" ", strip=True) if snippet_node is not None else ""

        lowered = title.lower()
        if "video" in lowered or "video" in link:
            kind = "video"
        elif "earnings" in lowered:
            kind = "earnings"
        else:
            kind = "news"

        stories.append(
            NewsStory(
                title=title,
                link=link,
                publisher=publisher,
                story_type=kind,
                text=(snippet or title)[:EXCERPT_LENGTH],
                related_symbols=related_symbols(title, search_term),
            )
        )
    return stories


class YahooNewsProvider(DataProvider):
    """Fetch news listings and parse them into :class:`NewsStory` items."""

    name = "yahoo_news"

    async def stock_news(self, symbol: str) -> list[NewsStory]:
        symbol = symbol.upper()
        descriptor = self.descriptor(
            QUOTE_URL.format(symbol=symbol),
            params={"p": symbol},
            headers={"User-Agent": self.sources.yahoo_user_agent},
        )
        document = await self.fetch(descriptor)
        stories = parse_quote_news(document.text, symbol)
        logger.bind(provider=self.name).debug(f"Parsed {len(stories)} stories for {symbol}")
        return stories

    async def search_news(self, search_term: str) -> list[NewsStory]:
        descriptor = self.descriptor(
            SEARCH_URL,
            params={"p": f"{search_term} news", "ei": "UTF-8"},
            headers={"User-Agent": self.sources.yahoo_user_agent},
        )
        document = await self.fetch(descriptor)
        stories = parse_search_news(document.text, search_term)
        logger.bind(provider=self.name).debug(f"Parsed {len(stories)} search results for '{search_term}'")
        return stories
