"""FRED (Federal Reserve Economic Data) REST API."""

from typing import Any

from marketlens.core.config import FredConfig, SourceConfig
from marketlens.core.exceptions import MissingCredentialError, ResponseFormatError
from marketlens.core.extraction.decoding import PLACEHOLDERS
from marketlens.core.http import SourceClient
from marketlens.core.models import Observation
from marketlens.core.providers.base import DataProvider

NOTES_EXCERPT = 200


def parse_value(raw: Any) -> float | None:
    """FRED observation value; the ``"."`` placeholder becomes None."""
    if raw is None:
        return None
    if isinstance(raw, str):
        if raw.strip() in PLACEHOLDERS:
            return None
        try:
            return float(raw)
        except ValueError:
            return None
    if isinstance(raw, int | float) and not isinstance(raw, bool):
        return float(raw)
    return None


def parse_observation(item: dict[str, Any]) -> Observation:
    return Observation(
        date=item.get("date", ""),
        value=parse_value(item.get("value")),
        realtime_start=item.get("realtime_start"),
        realtime_end=item.get("realtime_end"),
    )


def notes_excerpt(notes: str | None) -> str | None:
    if not notes:
        return None
    return notes[:NOTES_EXCERPT] + "..." if len(notes) > NOTES_EXCERPT else notes


class FredProvider(DataProvider):
    """Thin typed access to the FRED endpoints used by the economy pipeline."""

    name = "FRED"

    def __init__(self, client: SourceClient, fred: FredConfig | None = None, sources: SourceConfig | None = None):
        super().__init__(client, sources)
        self.config = fred or FredConfig()

    @property
    def has_api_key(self) -> bool:
        return bool(self.config.api_key)

    def require_api_key(self, operation: str) -> str:
        """Return the API key or raise before any request is made."""
        if not self.config.api_key:
            raise MissingCredentialError(f"A FRED API key is required for {operation}", self.name)
        return self.config.api_key

    async def api(self, path: str, params: dict[str, Any] | None = None, timeout: float | None = None) -> dict[str, Any]:
        """GET ``{base_url}/{path}`` with the API key and JSON output."""
        api_key = self.require_api_key(path)
        descriptor = self.descriptor(
            f"{self.config.base_url}/{path}",
            params={**(params or {}), "api_key": api_key, "file_type": "json"},
            headers={"User-Agent": self.sources.fred_user_agent},
            timeout=timeout or self.sources.fred_timeout,
            expect="json",
        )
        document = await self.fetch(descriptor)
        if not isinstance(document.payload, dict):
            raise ResponseFormatError(f"Unexpected FRED response for {path}", self.name)
        return document.payload

    async def observations(
        self,
        series_id: str,
        limit: int | None = None,
        vintage_date: str | None = None,
        timeout: float | None = None,
    ) -> list[Observation]:
        """Most recent observations first."""
        params: dict[str, Any] = {
            "series_id": series_id,
            "limit": limit or self.config.observation_limit,
            "sort_order": "desc",
        }
        if vintage_date:
            params["vintage_dates"] = vintage_date
        payload = await self.api("series/observations", params, timeout)
        return [parse_observation(item) for item in payload.get("observations") or []]

    async def latest_observation(self, series_id: str) -> Observation | None:
        """First observation carrying a value."""
        for observation in await self.observations(series_id):
            if observation.value is not None:
                return observation
        return None

    async def series_info(self, series_id: str) -> dict[str, Any] | None:
        payload = await self.api("series", {"series_id": series_id}, timeout=self.sources.peer_page_timeout)
        seriess = payload.get("seriess") or []
        return seriess[0] if seriess else None

    async def vintage_dates(self, series_id: str, limit: int = 20) -> list[str]:
        payload = await self.api("series/vintagedates", {"series_id": series_id, "limit": limit, "sort_order": "desc"})
        return list(payload.get("vintage_dates") or [])

    async def site_search(self, text: str) -> list[dict[str, Any]]:
        """Keyless search on the FRED website; empty when the site reports no match."""
        terms = "".join(text.lower().split())
        descriptor = self.descriptor(
            f"{self.config.site_url}/graph/api/series/sitesearch/{terms}",
            headers={"User-Agent": self.sources.fred_user_agent, "Accept": "application/json"},
            timeout=self.sources.fred_timeout,
            expect="json",
        )
        payload = (await self.fetch(descriptor)).payload
        if not isinstance(payload, dict) or str(payload.get("status")).lower() != "true":
            return []
        return list(payload.get("items") or [])

    async def search(self, text: str, limit: int) -> list[dict[str, Any]]:
        payload = await self.api(
            "series/search",
            {"search_text": text, "limit": limit, "sort_order": "desc", "order_by": "popularity"},
        )
        return list(payload.get("seriess") or [])

    async def categories(self, category_id: int | None = None) -> list[dict[str, Any]]:
        """Children of ``category_id``; the root category (0) when omitted."""
        payload = await self.api("category/children", {"category_id": category_id or 0})
        return list(payload.get("categories") or [])

    async def category_series(self, category_id: int, limit: int = 5) -> list[dict[str, Any]]:
        payload = await self.api(
            "category/series",
            {"category_id": category_id, "limit": limit, "sort_order": "desc", "order_by": "popularity"},
            timeout=self.sources.peer_page_timeout,
        )
        return list(payload.get("seriess") or [])

    async def releases(self, limit: int) -> list[dict[str, Any]]:
        payload = await self.api("releases", {"limit": limit, "sort_order": "desc", "order_by": "last_updated"})
        return list(payload.get("releases") or [])

    async def release_dates(self, release_id: int, limit: int = 5) -> list[str]:
        payload = await self.api(
            "release/dates",
            {"release_id": release_id, "limit": limit, "sort_order": "desc"},
            timeout=self.sources.batch_page_timeout,
        )
        return [item.get("date") for item in payload.get("release_dates") or [] if item.get("date")]

    async def series_updates(
        self, limit: int, start_time: str | None = None, end_time: str | None = None
    ) -> list[dict[str, Any]]:
        params: dict[str, Any] = {"limit": limit, "sort_order": "desc"}
        if start_time:
            params["start_time"] = start_time
        if end_time:
            params["end_time"] = end_time
        payload = await self.api("series/updates", params)
        return list(payload.get("seriess") or [])

    async def series_categories(self, series_id: str) -> list[dict[str, Any]]:
        payload = await self.api("series/categories", {"series_id": series_id}, timeout=self.sources.peer_page_timeout)
        return list(payload.get("categories") or [])

    async def series_release(self, series_id: str) -> dict[str, Any] | None:
        payload = await self.api("series/release", {"series_id": series_id}, timeout=self.sources.peer_page_timeout)
        releases = payload.get("releases") or []
        return releases[0] if releases else None

    async def series_tags(self, series_id: str, limit: int = 20) -> list[dict[str, Any]]:
        payload = await self.api(
            "series/tags", {"series_id": series_id, "limit": limit}, timeout=self.sources.peer_page_timeout
        )
        return list(payload.get("tags") or [])
