"""Base class for upstream data providers."""

from typing import Any

from marketlens.core.config import SourceConfig
from marketlens.core.http import RawDocument, SourceClient, SourceDescriptor


class DataProvider:
    """A named upstream source fetched through a shared :class:`SourceClient`."""

    name: str = "provider"

    def __init__(self, client: SourceClient, sources: SourceConfig | None = None):
        self.client = client
        self.sources = sources or SourceConfig()

    def descriptor(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        expect: str = "text",
    ) -> SourceDescriptor:
        return SourceDescriptor(
            url=url,
            source_id=self.name,
            params=params or {},
            headers=headers or {},
            timeout=timeout or self.sources.page_timeout,
            expect=expect,  # type: ignore[arg-type]
        )

    async def fetch(self, descriptor: SourceDescriptor) -> RawDocument:
        return await self.client.fetch(descriptor)
