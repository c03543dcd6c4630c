"""Tests for screening criteria."""

import pytest
from pydantic import ValidationError

from marketlens.core.services import ScreeningCriteria

LARGE_CAP = {
    "marketCap": 3e12,
    "trailingPE": 29.5,
    "beta": 1.2,
    "debtToEquity": 150.0,
    "dividendYield": 0.005,
    "returnOnEquity": 1.5,
    "revenueGrowth": 0.06,
    "sector": "Technology",
}


class TestScreeningCriteria:
    """筛选条件测试"""

    def test_defaults(self):
        criteria = ScreeningCriteria()

        assert criteria.min_market_cap == 1e9
        assert criteria.max_pe == 50
        assert criteria.max_results == 20

    def test_aliases(self):
        """测试驼峰别名"""
        criteria = ScreeningCriteria.model_validate({"minMarketCap": 5e9, "maxPE": 30, "maxResults": 5})

        assert criteria.min_market_cap == 5e9
        assert criteria.max_pe == 30
        assert criteria.max_results == 5
        assert criteria.to_payload()["minMarketCap"] == 5e9

    def test_max_results_must_be_positive(self):
        with pytest.raises(ValidationError):
            ScreeningCriteria(max_results=0)

    def test_default_criteria_pass_large_cap(self):
        assert ScreeningCriteria().passes(LARGE_CAP)

    def test_small_cap_rejected(self):
        assert not ScreeningCriteria().passes({**LARGE_CAP, "marketCap": 5e8})

    def test_high_pe_rejected(self):
        assert not ScreeningCriteria().passes({**LARGE_CAP, "trailingPE": 75.0})

    def test_unknown_bounded_metrics_do_not_reject(self):
        """测试上限类指标缺失时不淘汰"""
        assert ScreeningCriteria(max_beta=1.5, max_debt_to_equity=100).passes({"marketCap": 2e9})

    def test_floor_metrics_reject_when_missing(self):
        """测试下限类指标缺失时淘汰"""
        criteria = ScreeningCriteria(min_dividend_yield=0.01)

        assert not criteria.passes({"marketCap": 2e9})
        assert not criteria.passes(LARGE_CAP)
        assert criteria.passes({**LARGE_CAP, "dividendYield": 0.02})

    def test_roe_and_growth_floors(self):
        assert not ScreeningCriteria(min_roe=2.0).passes(LARGE_CAP)
        assert ScreeningCriteria(min_revenue_growth=0.05).passes(LARGE_CAP)

    def test_beta_and_debt_bounds(self):
        assert not ScreeningCriteria(max_beta=1.0).passes(LARGE_CAP)
        assert not ScreeningCriteria(min_beta=1.5).passes(LARGE_CAP)
        assert not ScreeningCriteria(max_debt_to_equity=100).passes(LARGE_CAP)

    def test_sectors_case_insensitive(self):
        assert ScreeningCriteria(sectors=("technology",)).passes(LARGE_CAP)
        assert not ScreeningCriteria(sectors=("Energy",)).passes(LARGE_CAP)
        assert not ScreeningCriteria(sectors=("Energy",)).passes({"marketCap": 2e9})
