"""Tests for DOM attribute scanning."""

from marketlens.core.extraction import DomIndex

PAGE = """
<html><body>
  <fin-streamer data-field="regularMarketPrice" data-symbol="AAPL" data-value="189.95">189.95</fin-streamer>
  <fin-streamer data-field="regularMarketPrice" data-symbol="MSFT" data-value="410.10">410.10</fin-streamer>
  <fin-streamer data-field="marketCap" data-symbol="AAPL">2.95T</fin-streamer>
  <span data-field="trailingEps" data-value="">6.42</span>
  <table>
    <tr><th>Date</th><th>iPhone</th><th>Services</th></tr>
    <tr><td>2024-09-28</td><td>201.18B</td><td>96.17B</td></tr>
  </table>
</body></html>
"""


class TestDomIndex:
    """DOM索引测试"""

    def test_symbol_filter(self):
        """测试按 data-symbol 过滤"""
        dom = DomIndex(PAGE)

        assert dom.field_values("regularMarketPrice", "AAPL") == ["189.95"]
        assert dom.field_values("regularMarketPrice", "msft") == ["410.10"]
        assert dom.field_values("regularMarketPrice") == ["189.95", "410.10"]

    def test_text_used_when_data_value_missing_or_blank(self):
        dom = DomIndex(PAGE)

        assert dom.field_values("marketCap", "AAPL") == ["2.95T"]
        assert dom.field_values("trailingEps") == ["6.42"]

    def test_unknown_field(self):
        assert DomIndex(PAGE).field_values("dividendRate") == []

    def test_tables(self):
        """测试表格解析"""
        tables = DomIndex(PAGE).tables()

        assert tables == [[["Date", "iPhone", "Services"], ["2024-09-28", "201.18B", "96.17B"]]]
