"""Tests for the MarketLensClient facade and the package entry points."""

import httpx
import pytest

import marketlens
from marketlens.core.client import MarketLensClient
from marketlens.core.config import BatchConfig, ExtractionConfig, FredConfig, MarketLensConfig


@pytest.fixture
def reset_global_client(monkeypatch):
    monkeypatch.setattr(marketlens, "_client", None)
    for name in ("MARKETLENS_FRED_API_KEY", "FRED_API_KEY", "MARKETLENS_BATCH_CONCURRENCY"):
        monkeypatch.delenv(name, raising=False)


class TestMarketLensClient:
    """客户端测试"""

    def test_wiring_follows_config(self):
        config = MarketLensConfig(
            batch=BatchConfig(concurrency=2),
            fred=FredConfig(api_key="abc"),
            extraction=ExtractionConfig(plausibility={"trailingPE": 3.0}),
        )

        client = MarketLensClient(config)

        assert client.config is config
        assert client.fred.has_api_key is True
        assert client.economy.batch.concurrency == 2
        assert client.markets.batch is config.batch
        assert client.yahoo.extractor.plausibility == {"trailingPE": 3.0}

    def test_default_config_has_no_credentials(self, monkeypatch):
        """测试客户端不从环境变量读取密钥"""
        monkeypatch.setenv("FRED_API_KEY", "from-env")

        client = MarketLensClient()

        assert client.fred.has_api_key is False

    @pytest.mark.asyncio
    async def test_context_manager_keeps_external_client_open(self, mock_http):
        http_client = mock_http(lambda request: httpx.Response(200))

        async with MarketLensClient(http_client=http_client) as client:
            assert isinstance(client, MarketLensClient)

        assert http_client.is_closed is False
        await http_client.aclose()

    @pytest.mark.asyncio
    async def test_close_owned_client(self):
        client = MarketLensClient()
        http_client = client.source_client._ensure_client()

        await client.close()

        assert http_client.is_closed is True


class TestPackage:
    """包入口测试"""

    def test_version(self):
        assert marketlens.__version__ == "0.1.0"
        assert "get_client" in marketlens.__all__

    def test_get_client_is_singleton(self, reset_global_client):
        first = marketlens.get_client()

        assert marketlens.get_client() is first
        assert first.fred.has_api_key is False

    def test_get_client_reads_environment(self, reset_global_client, monkeypatch):
        monkeypatch.setenv("FRED_API_KEY", "from-env")
        monkeypatch.setenv("MARKETLENS_BATCH_CONCURRENCY", "4")

        client = marketlens.get_client()

        assert client.fred.config.api_key == "from-env"
        assert client.config.batch.concurrency == 4
