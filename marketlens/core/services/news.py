"""News rows with headline sentiment."""

from typing import Any
from uuid import NAMESPACE_URL, uuid5

from marketlens.core.exceptions import ExtractionError, PreconditionError, SourceUnavailableError
from marketlens.core.models import today
from marketlens.core.providers.news import NewsStory, YahooNewsProvider
from marketlens.core.services.sentiment import SentimentScorer


class NewsDataService:
    """Stock news from the quote page and general news from search."""

    def __init__(self, provider: YahooNewsProvider, scorer: SentimentScorer | None = None):
        self.provider = provider
        self.scorer = scorer or SentimentScorer()

    def _row(self, story: NewsStory, fetch_date: str) -> dict[str, Any]:
        sentiment = self.scorer.score(story.title, story.text)
        return {
            "uuid": uuid5(NAMESPACE_URL, story.link).hex,
            "related_symbols": ", ".join(story.related_symbols),
            "title": story.title,
            "publisher": story.publisher,
            "report_date": story.published,
            "type": story.story_type,
            "link": story.link,
            "summary": story.text or None,
            "sentiment_score": sentiment.score,
            "sentiment_label": sentiment.label,
            "bullish_bearish": sentiment.bullish_bearish,
            "positive_words": ", ".join(sentiment.positive_words),
            "negative_words": ", ".join(sentiment.negative_words),
            "fetch_date": fetch_date,
        }

    def _rows(self, stories: list[NewsStory]) -> list[dict[str, Any]]:
        fetch_date = today()
        rows: dict[str, dict[str, Any]] = {}
        for story in stories:
            row = self._row(story, fetch_date)
            rows.setdefault(row["uuid"], row)
        return list(rows.values())

    async def get_stock_news(self, symbol: str) -> list[dict[str, Any]]:
        """Stories on the quote page of ``symbol``."""
        if not isinstance(symbol, str) or not symbol.strip():
            raise PreconditionError("A ticker symbol is required", argument="symbol")
        symbol = symbol.strip().upper()
        try:
            stories = await self.provider.stock_news(symbol)
        except SourceUnavailableError as e:
            raise ExtractionError(
                f"Could not fetch news for {symbol}",
                source=self.provider.name,
                details={"symbol": symbol, "cause": e.error_code.value},
            ) from e
        if not stories:
            raise ExtractionError(f"No news found for {symbol}", source=self.provider.name)
        return self._rows(stories)

    async def search_news(self, search_term: str) -> list[dict[str, Any]]:
        """Search results for ``search_term``; ``report_date`` is unknown for these."""
        if not isinstance(search_term, str) or not search_term.strip():
            raise PreconditionError("search_term is required", argument="search_term")
        search_term = search_term.strip()
        try:
            stories = await self.provider.search_news(search_term)
        except SourceUnavailableError as e:
            raise ExtractionError(
                f"News search failed for '{search_term}'",
                source=self.provider.name,
                details={"cause": e.error_code.value},
            ) from e
        if not stories:
            raise ExtractionError(f"No news found for '{search_term}'", source=self.provider.name)
        return self._rows(stories)
