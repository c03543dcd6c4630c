"""Stock screening criteria."""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ScreeningCriteria(BaseModel):
    """筛选条件.

    Upper bounds and the P/E and beta floors only reject a stock whose metric
    is known; the dividend yield, ROE and revenue growth floors also reject a
    stock whose metric is missing.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    min_market_cap: float | None = Field(default=1e9, alias="minMarketCap")
    max_market_cap: float | None = Field(default=None, alias="maxMarketCap")
    max_pe: float | None = Field(default=50, alias="maxPE")
    min_pe: float | None = Field(default=None, alias="minPE")
    min_dividend_yield: float | None = Field(default=None, alias="minDividendYield")
    max_debt_to_equity: float | None = Field(default=None, alias="maxDebtToEquity")
    min_roe: float | None = Field(default=None, alias="minROE")
    min_revenue_growth: float | None = Field(default=None, alias="minRevenueGrowth")
    max_beta: float | None = Field(default=None, alias="maxBeta")
    min_beta: float | None = Field(default=None, alias="minBeta")
    sectors: tuple[str, ...] = ()
    max_results: int = Field(default=20, ge=1, alias="maxResults")

    def passes(self, metrics: Mapping[str, Any]) -> bool:
        """Whether a metrics mapping keyed by quote field names satisfies every criterion."""
        market_cap = metrics.get("marketCap")
        pe = metrics.get("trailingPE")
        beta = metrics.get("beta")
        debt = metrics.get("debtToEquity")

        if _above(market_cap, self.max_market_cap) or _below(market_cap, self.min_market_cap):
            return False
        if _above(pe, self.max_pe) or _below(pe, self.min_pe):
            return False
        if _above(debt, self.max_debt_to_equity):
            return False
        if _above(beta, self.max_beta) or _below(beta, self.min_beta):
            return False
        for field, floor in (
            ("dividendYield", self.min_dividend_yield),
            ("returnOnEquity", self.min_roe),
            ("revenueGrowth", self.min_revenue_growth),
        ):
            if floor is not None and (metrics.get(field) is None or metrics[field] < floor):
                return False
        if self.sectors:
            sector = metrics.get("sector")
            wanted = {s.lower() for s in self.sectors}
            if not isinstance(sector, str) or sector.lower() not in wanted:
                return False
        return True

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


def _above(value: float | None, limit: float | None) -> bool:
    return value is not None and limit is not None and value > limit


def _below(value: float | None, limit: float | None) -> bool:
    return value is not None and limit is not None and value < limit
