"""Tests for the heuristic correlation proxy."""

import pytest

from marketlens.core.services import QuoteMetrics, correlation_matrix, proxy_correlation

TECH = QuoteMetrics(price=150.0, change_percent=1.0, beta=1.2, fifty_two_week_low=100.0, fifty_two_week_high=200.0)
PEER = QuoteMetrics(price=80.0, change_percent=2.0, beta=1.0, fifty_two_week_low=60.0, fifty_two_week_high=100.0)


class TestQuoteMetrics:
    """行情指标测试"""

    def test_relative_position(self):
        assert TECH.relative_position == pytest.approx(0.5)
        assert QuoteMetrics(price=10.0).relative_position is None
        assert QuoteMetrics(price=10.0, fifty_two_week_low=10.0, fifty_two_week_high=10.0).relative_position is None

    def test_is_usable(self):
        assert TECH.is_usable
        assert QuoteMetrics(beta=0.0).is_usable
        assert not QuoteMetrics(volume=1000).is_usable


class TestProxyCorrelation:
    """相关性代理测试"""

    def test_all_terms(self):
        """测试 beta, 涨跌幅与区间位置三项"""
        assert proxy_correlation(TECH, PEER) == pytest.approx(0.84)

    def test_base_only_when_metrics_missing(self):
        assert proxy_correlation(QuoteMetrics(), QuoteMetrics(beta=1.0)) == pytest.approx(0.1)

    def test_zero_values_count_as_known(self):
        """测试数值为0时仍参与计算"""
        flat = QuoteMetrics(change_percent=0.0, beta=0.0)

        assert proxy_correlation(flat, flat) == pytest.approx(0.7)

    def test_identical_metrics(self):
        assert proxy_correlation(TECH, TECH) == pytest.approx(0.9)

    def test_symmetric(self):
        assert proxy_correlation(TECH, PEER) == proxy_correlation(PEER, TECH)


def test_correlation_matrix():
    matrix = correlation_matrix({"AAPL": TECH, "MSFT": PEER})

    assert matrix["AAPL"]["AAPL"] == 1.0
    assert matrix["AAPL"]["MSFT"] == matrix["MSFT"]["AAPL"] == pytest.approx(0.84)
