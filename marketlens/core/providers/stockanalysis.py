"""Revenue breakdown tables from stockanalysis.com."""

from typing import Any

from marketlens.core.extraction import DomIndex, decode_formatted_number
from marketlens.core.providers.base import DataProvider

BREAKDOWN_URL = "https://stockanalysis.com/stocks/{symbol}/metrics/revenue-by-{kind}/"
BREAKDOWN_TYPES = ("segment", "geography")

PAGE_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}


def parse_breakdown_table(html: str, symbol: str, breakdown_type: str) -> list[dict[str, Any]]:
    """Rows for the most recent period of the first table on the page.

    The first table row holds the item names, the second the latest period,
    whose first cell is the period date.
    """
    tables = DomIndex(html).tables()
    if not tables or len(tables[0]) < 2:
        return []
    headers, latest = tables[0][0], tables[0][1]
    report_date = latest[0]
    rows = []
    for name, text in zip(headers[1:], latest[1:], strict=False):
        if not name or not text or name == report_date:
            continue
        rows.append({
            "symbol": symbol.upper(),
            "breakdown_type": breakdown_type,
            "report_date": report_date,
            "item_name": name,
            "item_value": decode_formatted_number(text),
        })
    return rows


class StockAnalysisProvider(DataProvider):
    """Fetch revenue-by-segment and revenue-by-geography pages."""

    name = "stockanalysis"

    async def revenue_breakdown(self, symbol: str, breakdown_type: str) -> list[dict[str, Any]]:
        if breakdown_type not in BREAKDOWN_TYPES:
            raise ValueError(f"breakdown_type must be one of {BREAKDOWN_TYPES}")
        descriptor = self.descriptor(
            BREAKDOWN_URL.format(symbol=symbol.lower(), kind=breakdown_type),
            headers={"User-Agent": self.sources.desktop_user_agent, **PAGE_HEADERS},
            timeout=self.sources.page_timeout,
        )
        document = await self.fetch(descriptor)
        return parse_breakdown_table(document.text, symbol, breakdown_type)
