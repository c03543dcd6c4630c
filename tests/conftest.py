"""Pytest configuration for marketlens test suite."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line options for controlling integration tests."""

    parser.addoption(
        "--marketlens-run-integration",
        action="store_true",
        default=False,
        help="Run marketlens integration tests that require network access.",
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register the integration marker for marketlens tests."""

    config.addinivalue_line(
        "markers",
        "integration: marks marketlens tests requiring network or external services",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip integration tests unless explicitly requested."""

    if config.getoption("--marketlens-run-integration"):
        return

    marketlens_skip_integration = pytest.mark.skip(
        reason="integration tests require --marketlens-run-integration",
    )
    for marketlens_item in items:
        if "integration" in marketlens_item.keywords:
            marketlens_item.add_marker(marketlens_skip_integration)


def build_quote_page(data: dict[str, Any], body: str = "") -> str:
    """Quote page with ``data`` serialised as an escaped JSON string inside a script."""
    escaped = json.dumps(json.dumps(data))[1:-1]
    return (
        "<html><head><title>Quote</title></head><body>"
        f"{body}"
        f'<script>root.App.main = "{escaped}";</script>'
        "</body></html>"
    )


class SleepRecorder:
    """Awaitable stand-in for ``asyncio.sleep`` that records requested delays."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.calls.append(delay)


@pytest.fixture
def quote_page() -> Callable[..., str]:
    return build_quote_page


@pytest.fixture
def recorded_sleep() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def mock_http() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    """Factory for ``httpx.AsyncClient`` instances served by a request handler."""

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return factory
