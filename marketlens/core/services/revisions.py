"""Revision analysis across FRED vintages."""

from collections.abc import Sequence

from marketlens.core.models import Observation, Revision, RevisionAnalysis, Vintage

INSUFFICIENT_DATA = "Insufficient data for revision analysis"
NO_REVISIONS = "No revisions detected in recent data"


def _signed(value: float, digits: int) -> str:
    return f"{'+' if value > 0 else ''}{value:.{digits}f}"


def classify_magnitude(delta_percent: float | None) -> str | None:
    """low ≤ 1 %, moderate ≤ 5 %, high above."""
    if delta_percent is None:
        return None
    size = abs(delta_percent)
    if size <= 1:
        return "low"
    if size <= 5:
        return "moderate"
    return "high"


def classify_trend(delta: float) -> str:
    if delta > 0:
        return "upward"
    if delta < 0:
        return "downward"
    return "unchanged"


def _valid(vintage: Vintage) -> list[Observation]:
    observations = [obs for obs in vintage.observations if obs.value is not None]
    return sorted(observations, key=lambda obs: obs.date, reverse=True)


class RevisionAnalyzer:
    """Compare the two most recent vintages of a series."""

    def analyze(self, vintages: Sequence[Vintage]) -> RevisionAnalysis:
        usable = sorted((v for v in vintages if _valid(v)), key=lambda v: v.vintage_date, reverse=True)
        if len(usable) < 2:
            return RevisionAnalysis(has_revisions=False, vintages_analyzed=len(usable), notes=INSUFFICIENT_DATA)

        latest_vintage, previous_vintage = usable[0], usable[1]
        latest = _valid(latest_vintage)[0]
        previous = next((obs for obs in _valid(previous_vintage) if obs.date == latest.date), None)
        if previous is None:
            return RevisionAnalysis(has_revisions=False, vintages_analyzed=len(usable), notes=NO_REVISIONS)

        assert latest.value is not None and previous.value is not None
        delta = latest.value - previous.value
        delta_percent = delta / previous.value * 100 if previous.value != 0 else None
        revision = Revision(
            observation_date=latest.date,
            previous_value=previous.value,
            latest_value=latest.value,
            delta=delta,
            delta_percent=delta_percent,
            vintage_pair=(previous_vintage.vintage_date, latest_vintage.vintage_date),
        )
        percent_text = f"{_signed(delta_percent, 2)}%" if delta_percent is not None else "n/a"
        return RevisionAnalysis(
            has_revisions=True,
            vintages_analyzed=len(usable),
            revision=revision,
            magnitude=classify_magnitude(delta_percent),
            trend=classify_trend(delta),
            summary=f"Latest revision: {_signed(delta, 3)} ({percent_text})",
        )
