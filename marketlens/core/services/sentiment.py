"""Headline sentiment with the VADER lexicon."""

import string

from pydantic import BaseModel, ConfigDict
from vaderSentiment.vaderSentiment import SentimentIntensityAnalyzer

# VADER compound score thresholds
POSITIVE_THRESHOLD = 0.05
NEGATIVE_THRESHOLD = -0.05
TITLE_WEIGHT = 2


class SentimentScore(BaseModel):
    """标题加权后的情绪评分."""

    model_config = ConfigDict(frozen=True)

    score: float
    label: str
    bullish_bearish: str
    positive_words: tuple[str, ...] = ()
    negative_words: tuple[str, ...] = ()


class SentimentScorer:
    """Score a title and its body text, weighting the title twice."""

    def __init__(self, analyzer: SentimentIntensityAnalyzer | None = None):
        self.analyzer = analyzer or SentimentIntensityAnalyzer()

    def _words(self, text: str, positive: bool) -> list[str]:
        words = []
        for token in text.lower().split():
            word = token.strip(string.punctuation)
            valence = self.analyzer.lexicon.get(word)
            if valence and (valence > 0) == positive:
                words.append(word)
        return words

    def score(self, title: str, text: str = "") -> SentimentScore:
        title_score = self.analyzer.polarity_scores(title)["compound"]
        text_score = self.analyzer.polarity_scores(text)["compound"] if text else title_score
        combined = (title_score * TITLE_WEIGHT + text_score) / (TITLE_WEIGHT + 1)

        if combined >= POSITIVE_THRESHOLD:
            label, stance = "positive", "bullish"
        elif combined <= NEGATIVE_THRESHOLD:
            label, stance = "negative", "bearish"
        else:
            label, stance = "neutral", "neutral"

        both = f"{title} {text}"
        return SentimentScore(
            score=round(combined, 3),
            label=label,
            bullish_bearish=stance,
            positive_words=tuple(dict.fromkeys(self._words(both, True))),
            negative_words=tuple(dict.fromkeys(self._words(both, False))),
        )
