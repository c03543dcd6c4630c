"""Heuristic correlation proxy between quoted symbols.

No price history is fetched; similarity of beta, daily change and position
in the 52-week range stands in for a return correlation. Results are
labelled ``heuristic_proxy`` so callers do not mistake them for Pearson
coefficients.
"""

from collections.abc import Mapping
from dataclasses import dataclass

METHOD = "heuristic_proxy"

BASE_CORRELATION = 0.1
MIN_CORRELATION = -0.5
MAX_CORRELATION = 0.95


@dataclass(frozen=True)
class QuoteMetrics:
    """Inputs of the correlation proxy for one symbol."""

    price: float | None = None
    change: float | None = None
    change_percent: float | None = None
    beta: float | None = None
    fifty_two_week_low: float | None = None
    fifty_two_week_high: float | None = None
    volume: int | None = None

    @property
    def relative_position(self) -> float | None:
        """Position of the price within the 52-week range, 0 at the low and 1 at the high."""
        if self.price is None or self.fifty_two_week_low is None or self.fifty_two_week_high is None:
            return None
        span = self.fifty_two_week_high - self.fifty_two_week_low
        if span <= 0:
            return None
        return (self.price - self.fifty_two_week_low) / span

    @property
    def is_usable(self) -> bool:
        return any(v is not None for v in (self.price, self.change_percent, self.beta))


def proxy_correlation(first: QuoteMetrics, second: QuoteMetrics) -> float:
    correlation = BASE_CORRELATION
    if first.beta is not None and second.beta is not None:
        correlation += max(0.0, (2 - abs(first.beta - second.beta)) / 2) * 0.3
    if first.change_percent is not None and second.change_percent is not None:
        correlation += max(0.0, (10 - abs(first.change_percent - second.change_percent)) / 10) * 0.3
    first_position, second_position = first.relative_position, second.relative_position
    if first_position is not None and second_position is not None:
        correlation += max(0.0, 1 - abs(first_position - second_position)) * 0.2
    return round(min(MAX_CORRELATION, max(MIN_CORRELATION, correlation)), 3)


def correlation_matrix(metrics: Mapping[str, QuoteMetrics]) -> dict[str, dict[str, float]]:
    """Symmetric matrix with 1.0 on the diagonal."""
    symbols = list(metrics)
    return {
        a: {b: 1.0 if a == b else proxy_correlation(metrics[a], metrics[b]) for b in symbols}
        for a in symbols
    }
