"""DOM scanning with BeautifulSoup."""

from bs4 import BeautifulSoup, Tag


class DomIndex:
    """Parsed page offering attribute and table lookups."""

    def __init__(self, html: str):
        self._soup = BeautifulSoup(html, "html.parser")

    def field_values(self, field: str, symbol: str | None = None) -> list[str]:
        """Text readings of elements with ``data-field=field``.

        ``data-value`` is preferred over the element text. When ``symbol`` is
        given only elements with a matching ``data-symbol`` are read.
        """
        readings = []
        for element in self._soup.find_all(attrs={"data-field": field}):
            if symbol is not None and (element.get("data-symbol") or "").upper() != symbol.upper():
                continue
            value = element.get("data-value")
            if value is None or not str(value).strip():
                value = element.get_text(strip=True)
            if value:
                readings.append(str(value).strip())
        return readings

    def tables(self) -> list[list[list[str]]]:
        """Every ``<table>`` as rows of stripped cell texts."""
        result = []
        for table in self._soup.find_all("table"):
            rows = []
            for tr in table.find_all("tr"):
                cells = [cell.get_text(" ", strip=True) for cell in tr.find_all(["th", "td"]) if isinstance(cell, Tag)]
                if cells:
                    rows.append(cells)
            if rows:
                result.append(rows)
        return result
