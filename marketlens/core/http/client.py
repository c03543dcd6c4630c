"""
Source client for upstream HTTP fetches.

Every call performs a single GET with its own timeout. Transport failures
are mapped to the ``SourceUnavailableError`` family; nothing is retried.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal

import httpx
from loguru import logger

from marketlens.core.exceptions import (
    HttpStatusError,
    NetworkError,
    RateLimitError,
    ResponseFormatError,
    SourceTimeoutError,
)


@dataclass(frozen=True)
class SourceDescriptor:
    """Everything needed to fetch one document."""

    url: str
    source_id: str
    params: dict[str, Any] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    timeout: float = 15.0
    expect: Literal["text", "json"] = "text"

    def __post_init__(self) -> None:
        if not self.url:
            raise ValueError("url cannot be empty")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")


@dataclass(frozen=True)
class RawDocument:
    """A fetched response body."""

    source_id: str
    url: str
    status_code: int
    text: str
    payload: Any = None
    fetched_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class SourceClient:
    """Thin wrapper over ``httpx.AsyncClient`` returning :class:`RawDocument`."""

    def __init__(self, client: httpx.AsyncClient | None = None, follow_redirects: bool = True):
        self._client = client
        self._owns_client = client is None
        self._follow_redirects = follow_redirects

    async def __aenter__(self) -> SourceClient:
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(follow_redirects=self._follow_redirects)
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        """Close the underlying client if this instance created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def fetch(self, descriptor: SourceDescriptor) -> RawDocument:
        """Fetch ``descriptor`` once.

        Raises:
            SourceTimeoutError: the request exceeded ``descriptor.timeout``
            NetworkError: connection-level failure
            RateLimitError: HTTP 429
            HttpStatusError: any other non-2xx status
            ResponseFormatError: ``expect="json"`` and the body is not JSON
        """
        client = self._ensure_client()
        source = descriptor.source_id
        try:
            response = await client.get(
                descriptor.url,
                params=descriptor.params or None,
                headers=descriptor.headers or None,
                timeout=httpx.Timeout(descriptor.timeout),
            )
        except httpx.TimeoutException as e:
            logger.bind(provider=source).warning(f"Request to {descriptor.url} timed out after {descriptor.timeout}s")
            raise SourceTimeoutError(
                f"Request timed out: {descriptor.url}", source, timeout=descriptor.timeout
            ) from e
        except httpx.HTTPError as e:
            logger.bind(provider=source).warning(f"Request to {descriptor.url} failed: {type(e).__name__}")
            raise NetworkError(
                f"Network error fetching {descriptor.url}: {e}", source, details={"error_type": type(e).__name__}
            ) from e

        status = response.status_code
        if status == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(
                f"Rate limited by {source}",
                source,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
            )
        if not 200 <= status < 300:
            raise HttpStatusError(f"HTTP {status} from {descriptor.url}", source, status)

        text = response.text
        payload = None
        if descriptor.expect == "json":
            try:
                payload = json.loads(text)
            except json.JSONDecodeError as e:
                raise ResponseFormatError(f"Response from {descriptor.url} is not valid JSON", source) from e

        logger.bind(provider=source).debug(f"Fetched {descriptor.url} ({status}, {len(text)} chars)")
        return RawDocument(source_id=source, url=str(response.url), status_code=status, text=text, payload=payload)
