"""FRED-backed economic data: indicator dashboard, series, vintages and metadata."""

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from typing import Any

from loguru import logger

from marketlens.core.config import BatchConfig
from marketlens.core.exceptions import ExtractionError, PreconditionError, SourceUnavailableError
from marketlens.core.extraction.catalog import ECONOMIC_INDICATORS, INDICATORS_BY_KEY, Indicator
from marketlens.core.http import TokenBucket
from marketlens.core.models import Absent, AbsenceReason, Observation, Outcome, Present, Vintage, dump_json, today
from marketlens.core.providers import FredProvider, YahooQuoteProvider
from marketlens.core.providers.fred import notes_excerpt
from marketlens.core.services.batch import BatchScheduler
from marketlens.core.services.fallback import FallbackCoordinator
from marketlens.core.services.revisions import RevisionAnalyzer

VINTAGE_COUNT = 5
VINTAGE_OBSERVATION_LIMIT = 10
VINTAGE_OBSERVATIONS_KEPT = 3
SAMPLE_SERIES_KEPT = 3
RELEASES_WITH_DATES = 10
RECENT_DATES_KEPT = 3
UPDATES_WITH_VALUES = 5
POPULAR_TAG_THRESHOLD = 50


def _require_text(value: str, argument: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise PreconditionError(f"{argument} is required", argument=argument)
    return value.strip()


class EconomyDataService:
    """Economic data rows stamped with ``fetch_date`` (or ``report_date`` for the dashboard)."""

    def __init__(
        self,
        fred: FredProvider,
        yahoo: YahooQuoteProvider,
        batch: BatchConfig | None = None,
        fallback: FallbackCoordinator | None = None,
        rate_limiter: TokenBucket | None = None,
        analyzer: RevisionAnalyzer | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.fred = fred
        self.yahoo = yahoo
        self.batch = batch or BatchConfig()
        self.fallback = fallback or FallbackCoordinator()
        self.rate_limiter = rate_limiter or TokenBucket.per_minute(self.batch.fred_requests_per_minute)
        self.analyzer = analyzer or RevisionAnalyzer()
        self._sleep = sleep

    def _scheduler(self, inter_batch_delay: float | None = None) -> BatchScheduler:
        return BatchScheduler(
            concurrency=self.batch.concurrency,
            inter_batch_delay=self.batch.inter_batch_delay if inter_batch_delay is None else inter_batch_delay,
            rate_limiter=self.rate_limiter,
            sleep=self._sleep,
            source_id=self.fred.name,
        )

    # 经济指标

    async def _primary(self, indicator: Indicator) -> Outcome:
        if not self.fred.has_api_key:
            return Absent(reason=AbsenceReason.UNAVAILABLE, detail="FRED API key not configured")
        try:
            observation = await self.fred.latest_observation(indicator.series_id)
        except SourceUnavailableError as e:
            logger.bind(provider=self.fred.name, error_code=e.error_code.value).warning(
                f"FRED unavailable for {indicator.series_id}: {e.message}"
            )
            return Absent(reason=AbsenceReason.UNAVAILABLE, detail=e.message)
        if observation is None:
            return Absent(reason=AbsenceReason.MISSING, detail=f"no valid observation for {indicator.series_id}")
        return Present(value=observation, source_id=self.fred.name)

    async def _resolve_indicator(self, indicator: Indicator) -> Outcome:
        primary = await self._primary(indicator)
        return await self.fallback.resolve(primary, indicator.key, self.yahoo.fetch_substitute)

    def _indicator_row(self, indicator: Indicator, outcome: Present, report_date: str) -> dict[str, Any]:
        row = {"indicator": indicator.key, "indicator_name": indicator.name}
        if isinstance(outcome.value, Observation):
            row.update(
                value=outcome.value.value,
                unit=indicator.unit,
                date=outcome.value.date,
                series_id=indicator.series_id,
                source=outcome.source_id,
            )
        else:
            substitute = self.fallback.substitute_for(indicator.key)
            row.update(
                value=outcome.value,
                unit=substitute.units if substitute else indicator.unit,
                date=report_date,
                series_id=substitute.symbol if substitute else None,
                source=outcome.source_id,
            )
        row["report_date"] = report_date
        return row

    async def get_economic_indicators(self, keys: Iterable[str] | None = None) -> list[dict[str, Any]]:
        """Latest value of each indicator, falling back to Yahoo for treasury yields."""
        if keys is None:
            indicators = list(ECONOMIC_INDICATORS)
        else:
            keys = list(keys)
            unknown = [key for key in keys if key not in INDICATORS_BY_KEY]
            if unknown:
                raise PreconditionError(f"Unknown economic indicators: {', '.join(unknown)}", argument="keys")
            indicators = [INDICATORS_BY_KEY[key] for key in dict.fromkeys(keys)]
        if not indicators:
            raise PreconditionError("At least one economic indicator is required", argument="keys")

        result = await self._scheduler().run(indicators, self._resolve_indicator, key=lambda i: i.key)
        report_date = today()
        rows = []
        for indicator in indicators:
            outcome = result.outcomes[indicator.key]
            if isinstance(outcome, Present):
                rows.append(self._indicator_row(indicator, outcome, report_date))
        if not rows:
            raise ExtractionError("No economic indicator data available", source=self.fred.name)
        return rows

    # 序列搜索与数据

    async def search_series(self, search_text: str, limit: int = 10) -> list[dict[str, Any]]:
        """Search FRED via the keyless site search, then the keyed API.

        Raises ExtractionError only when neither search could be performed.
        """
        search_text = _require_text(search_text, "search_text")
        search_date = today()
        site_failed = False
        try:
            items = await self.fred.site_search(search_text)
        except SourceUnavailableError as e:
            logger.bind(provider=self.fred.name).warning(f"FRED site search failed: {e.message}")
            items, site_failed = [], True

        if items:
            return [
                {
                    "series_id": item.get("series_id"),
                    "title": item.get("title") or item.get("label"),
                    "units": item.get("units"),
                    "frequency": item.get("frequency"),
                    "seasonal_adjustment": item.get("season"),
                    "start_date": item.get("start"),
                    "end_date": item.get("end"),
                    "popularity": item.get("popularity"),
                    "description": item.get("value") or item.get("label"),
                    "search_terms": search_text,
                    "search_date": search_date,
                    "api_endpoint": "sitesearch",
                }
                for item in items[:limit]
            ]

        if not self.fred.has_api_key:
            if site_failed:
                raise ExtractionError(f"FRED search unavailable for '{search_text}'", source=self.fred.name)
            return []

        try:
            seriess = await self.fred.search(search_text, limit)
        except SourceUnavailableError as e:
            raise ExtractionError(f"FRED search failed for '{search_text}'", source=self.fred.name) from e
        return [
            {
                "series_id": series.get("id"),
                "title": series.get("title"),
                "units": series.get("units"),
                "frequency": series.get("frequency"),
                "seasonal_adjustment": series.get("seasonal_adjustment"),
                "start_date": series.get("observation_start"),
                "end_date": series.get("observation_end"),
                "popularity": series.get("popularity"),
                "description": notes_excerpt(series.get("notes")),
                "search_terms": search_text,
                "search_date": search_date,
                "api_endpoint": "standard",
            }
            for series in seriess[:limit]
        ]

    async def get_series(self, series_id: str, limit: int = 10) -> list[dict[str, Any]]:
        """Observations of ``series_id``; placeholder values are kept as None."""
        series_id = _require_text(series_id, "series_id").upper()
        self.fred.require_api_key("series data")
        try:
            observations = await self.fred.observations(series_id, limit)
        except SourceUnavailableError as e:
            raise ExtractionError(f"Could not fetch FRED series {series_id}", source=self.fred.name) from e
        if not observations:
            raise ExtractionError(f"No data found for FRED series {series_id}", source=self.fred.name)

        try:
            info = await self.fred.series_info(series_id) or {}
        except SourceUnavailableError as e:
            logger.debug(f"Series info for {series_id} unavailable: {e.message}")
            info = {}

        fetch_date = today()
        return [
            {
                "series_id": series_id,
                "date": obs.date,
                "value": obs.value,
                "realtime_start": obs.realtime_start,
                "realtime_end": obs.realtime_end,
                "series_title": info.get("title"),
                "units": info.get("units"),
                "frequency": info.get("frequency"),
                "seasonal_adjustment": info.get("seasonal_adjustment"),
                "last_updated": info.get("last_updated"),
                "fetch_date": fetch_date,
            }
            for obs in observations
        ]

    async def get_vintage_analysis(self, series_id: str, analysis_type: str = "revisions") -> dict[str, Any]:
        """Observations of the latest vintages and the revision between the two newest."""
        series_id = _require_text(series_id, "series_id").upper()
        self.fred.require_api_key("vintage data analysis")
        try:
            vintage_dates = (await self.fred.vintage_dates(series_id))[:VINTAGE_COUNT]
        except SourceUnavailableError as e:
            raise ExtractionError(f"Could not fetch vintage dates for {series_id}", source=self.fred.name) from e
        if not vintage_dates:
            raise ExtractionError(f"No vintage dates available for series {series_id}", source=self.fred.name)

        async def fetch_vintage(vintage_date: str) -> Vintage:
            observations = await self.fred.observations(
                series_id,
                VINTAGE_OBSERVATION_LIMIT,
                vintage_date=vintage_date,
                timeout=self.fred.sources.peer_page_timeout,
            )
            valid = [obs for obs in observations if obs.value is not None][:VINTAGE_OBSERVATIONS_KEPT]
            return Vintage(vintage_date=vintage_date, observations=tuple(valid))

        result = await self._scheduler().run(vintage_dates, fetch_vintage)
        vintages = [
            outcome.value if isinstance(outcome, Present) else Vintage(vintage_date=vintage_date)
            for vintage_date, outcome in result.outcomes.items()
        ]
        analysis = self.analyzer.analyze(vintages)

        fetch_date = today()
        rows = [
            {
                "series_id": series_id,
                "vintage_date": vintage.vintage_date,
                "observation_date": obs.date,
                "value": obs.value,
                "realtime_start": obs.realtime_start,
                "realtime_end": obs.realtime_end,
                "analysis_type": analysis_type,
                "fetch_date": fetch_date,
            }
            for vintage in vintages
            for obs in vintage.observations
        ]
        if not rows:
            raise ExtractionError(f"No vintage data found for FRED series {series_id}", source=self.fred.name)
        return {"rows": rows, "analysis": analysis.to_dict()}

    # 元数据

    async def get_categories(self, category_id: int | None = None, limit: int = 20) -> list[dict[str, Any]]:
        """Child categories with up to three popular sample series each."""
        self.fred.require_api_key("categories data")
        try:
            categories = (await self.fred.categories(category_id))[:limit]
        except SourceUnavailableError as e:
            raise ExtractionError("Could not fetch FRED categories", source=self.fred.name) from e
        if not categories:
            raise ExtractionError(f"No FRED categories found under {category_id or 0}", source=self.fred.name)

        samples = await self._scheduler(inter_batch_delay=0.2).run(
            categories, lambda cat: self.fred.category_series(cat["id"]), key=lambda cat: cat.get("id")
        )
        fetch_date = today()
        rows = []
        for category in categories:
            outcome = samples.outcomes.get(category.get("id"))
            series = outcome.value[:SAMPLE_SERIES_KEPT] if isinstance(outcome, Present) else []
            ids = [s.get("id") for s in series if s.get("id")]
            rows.append({
                "category_id": category.get("id"),
                "category_name": category.get("name"),
                "parent_id": category.get("parent_id"),
                "description": category.get("notes") or None,
                "sample_series_count": len(ids),
                "sample_series": ", ".join(ids),
                "fetch_date": fetch_date,
            })
        return rows

    async def get_releases(self, limit: int = 20) -> list[dict[str, Any]]:
        """Recently updated releases; the first ten carry their latest release dates."""
        self.fred.require_api_key("releases data")
        try:
            releases = await self.fred.releases(limit)
        except SourceUnavailableError as e:
            raise ExtractionError("Could not fetch FRED releases", source=self.fred.name) from e
        if not releases:
            raise ExtractionError("No FRED releases available", source=self.fred.name)

        dated = await self._scheduler(inter_batch_delay=0.2).run(
            releases[:RELEASES_WITH_DATES],
            lambda release: self.fred.release_dates(release["id"]),
            key=lambda release: release.get("id"),
        )
        fetch_date = today()
        rows = []
        for release in releases:
            outcome = dated.outcomes.get(release.get("id"))
            dates = outcome.value[:RECENT_DATES_KEPT] if isinstance(outcome, Present) else []
            press_release = release.get("press_release")
            rows.append({
                "release_id": release.get("id"),
                "release_name": release.get("name"),
                "has_press_release": press_release is True or str(press_release).lower() == "true",
                "link": release.get("link"),
                "description": release.get("notes") or None,
                "realtime_start": release.get("realtime_start"),
                "realtime_end": release.get("realtime_end"),
                "recent_dates": ", ".join(dates),
                "fetch_date": fetch_date,
            })
        return rows

    async def get_series_updates(
        self, limit: int = 20, start_time: str | None = None, end_time: str | None = None
    ) -> list[dict[str, Any]]:
        """Recently updated series; the first five carry their latest value and change."""
        self.fred.require_api_key("series updates")
        try:
            updates = await self.fred.series_updates(limit, start_time, end_time)
        except SourceUnavailableError as e:
            raise ExtractionError("Could not fetch FRED series updates", source=self.fred.name) from e
        if not updates:
            raise ExtractionError("No FRED series updates available", source=self.fred.name)

        async def latest_values(series: dict[str, Any]) -> dict[str, Any] | None:
            observations = await self.fred.observations(
                series["id"], 3, timeout=self.fred.sources.batch_page_timeout
            )
            valid = [obs for obs in observations if obs.value is not None]
            if not valid:
                return None
            latest = valid[0]
            change = None
            if len(valid) > 1 and valid[1].value:
                change = (latest.value - valid[1].value) / valid[1].value * 100  # type: ignore[operator]
            return {"latest_value": latest.value, "latest_date": latest.date, "change_percent": change}

        values = await self._scheduler(inter_batch_delay=0.2).run(
            updates[:UPDATES_WITH_VALUES], latest_values, key=lambda series: series.get("id")
        )
        latest = values.present()
        update_date = today()
        empty = {"latest_value": None, "latest_date": None, "change_percent": None}
        return [
            {
                "series_id": series.get("id"),
                "series_title": series.get("title"),
                "frequency": series.get("frequency"),
                "units": series.get("units"),
                "last_updated": series.get("last_updated"),
                **latest.get(series.get("id"), empty),
                "observation_start": series.get("observation_start"),
                "observation_end": series.get("observation_end"),
                "seasonal_adjustment": series.get("seasonal_adjustment"),
                "popularity": series.get("popularity"),
                "description": notes_excerpt(series.get("notes")),
                "update_date": update_date,
            }
            for series in updates
        ]

    async def get_series_relationships(self, series_id: str) -> dict[str, Any]:
        """Metadata of ``series_id`` with its categories, release and concept tags.

        The series itself is required; each related lookup that fails leaves
        its columns empty.
        """
        series_id = _require_text(series_id, "series_id").upper()
        self.fred.require_api_key("series relationships")
        try:
            series = await self.fred.series_info(series_id)
        except SourceUnavailableError as e:
            raise ExtractionError(f"Could not fetch FRED series {series_id}", source=self.fred.name) from e
        if not series:
            raise ExtractionError(f"Series {series_id} not found", source=self.fred.name)

        lookups = {
            "categories": self.fred.series_categories,
            "release": self.fred.series_release,
            "tags": self.fred.series_tags,
        }
        related = (
            await self._scheduler(inter_batch_delay=0.2).run(lookups, lambda name: lookups[name](series_id))
        ).present()
        categories = related.get("categories") or []
        release = related.get("release")
        tags = related.get("tags") or []

        popular = sorted(
            (tag for tag in tags if (tag.get("popularity") or 0) > POPULAR_TAG_THRESHOLD),
            key=lambda tag: tag.get("popularity") or 0,
            reverse=True,
        )
        press_release = release.get("press_release") if release else None
        return {
            "series_id": series.get("id") or series_id,
            "series_title": series.get("title"),
            "units": series.get("units"),
            "frequency": series.get("frequency"),
            "seasonal_adjustment": series.get("seasonal_adjustment"),
            "observation_start": series.get("observation_start"),
            "observation_end": series.get("observation_end"),
            "last_updated": series.get("last_updated"),
            "description": series.get("notes") or None,
            "categories": dump_json(
                [{"id": c.get("id"), "name": c.get("name"), "parent_id": c.get("parent_id")} for c in categories]
            ),
            "total_categories": len(categories),
            "has_release": release is not None,
            "release_id": release.get("id") if release else None,
            "release_name": release.get("name") if release else None,
            "release_link": release.get("link") if release else None,
            "has_press_release": press_release is True or str(press_release).lower() == "true",
            "tags": ", ".join(tag["name"] for tag in tags if tag.get("name")),
            "popular_tags": ", ".join(tag["name"] for tag in popular if tag.get("name")),
            "total_tags": len(tags),
            "analysis_date": today(),
        }
