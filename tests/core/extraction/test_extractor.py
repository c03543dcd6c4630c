"""Tests for the embedded-value extractor."""

from marketlens.core.extraction import EmbeddedValueExtractor, extract_array
from marketlens.core.extraction.catalog import SUMMARY_SIGNATURES
from marketlens.core.http import RawDocument
from marketlens.core.models import ValueKind, dom_field, json_field


def _pe_dom(value: str) -> str:
    return f'<fin-streamer data-field="trailingPE" data-symbol="AAPL" data-value="{value}">{value}</fin-streamer>'


PE_SIGNATURES = (dom_field("trailingPE", match_symbol=True), json_field("trailingPE"))


class TestEmbeddedValueExtractor:
    """内嵌值提取器测试"""

    def test_formatted_dom_value_is_scaled(self):
        """测试 "3.00T" 解码为 3e12"""
        html = '<fin-streamer data-field="marketCap" data-symbol="AAPL">3.00T</fin-streamer>'

        snapshot = EmbeddedValueExtractor().extract(html, (dom_field("marketCap", match_symbol=True),), symbol="AAPL")

        assert snapshot.primitive("marketCap") == 3e12
        assert snapshot.get("marketCap").formatted == "3.00T"

    def test_embedded_json_values(self, quote_page):
        page = quote_page({
            "price": {"regularMarketPrice": {"raw": 189.95, "fmt": "189.95"}},
            "assetProfile": {"sector": "Technology", "fullTimeEmployees": 164000},
        })
        signatures = (json_field("regularMarketPrice"), json_field("sector", ValueKind.STRING),
                      json_field("fullTimeEmployees", ValueKind.INTEGER))

        snapshot = EmbeddedValueExtractor().extract(page, signatures)

        assert snapshot.primitive("regularMarketPrice") == 189.95
        assert snapshot.primitive("sector") == "Technology"
        assert snapshot.primitive("fullTimeEmployees") == 164000
        assert list(snapshot.keys()) == ["regularMarketPrice", "sector", "fullTimeEmployees"]

    def test_conflicting_occurrences_are_missing(self, quote_page):
        """测试多处取值冲突视为缺失"""
        page = quote_page({"a": {"beta": 1.1}, "b": {"beta": 1.3}})

        snapshot = EmbeddedValueExtractor().extract(page, (json_field("beta"),))

        assert "beta" not in snapshot
        assert snapshot.is_empty

    def test_agreeing_occurrences_are_present(self, quote_page):
        page = quote_page({"a": {"beta": 1.1}, "b": {"beta": {"raw": 1.1, "fmt": "1.10"}}})

        snapshot = EmbeddedValueExtractor().extract(page, (json_field("beta"),))

        assert snapshot.primitive("beta") == 1.1

    def test_implausible_dom_value_loses_to_json(self, quote_page):
        """测试DOM值未通过合理性检查时使用JSON值"""
        page = quote_page({"trailingPE": {"raw": 28.5, "fmt": "28.50"}}, body=_pe_dom("5.2"))

        snapshot = EmbeddedValueExtractor().extract(page, PE_SIGNATURES, symbol="AAPL")

        assert snapshot.primitive("trailingPE") == 28.5

    def test_plausible_dom_value_wins(self, quote_page):
        page = quote_page({"trailingPE": {"raw": 28.5, "fmt": "28.50"}}, body=_pe_dom("30.1"))

        snapshot = EmbeddedValueExtractor().extract(page, PE_SIGNATURES, symbol="AAPL")

        assert snapshot.primitive("trailingPE") == 30.1

    def test_dom_value_kept_without_json_alternative(self):
        snapshot = EmbeddedValueExtractor().extract(_pe_dom("5.2"), PE_SIGNATURES, symbol="AAPL")

        assert snapshot.primitive("trailingPE") == 5.2

    def test_plausibility_is_configurable(self, quote_page):
        """测试合理性阈值可配置"""
        page = quote_page({"trailingPE": 28.5}, body=_pe_dom("5.2"))

        snapshot = EmbeddedValueExtractor(plausibility={}).extract(page, PE_SIGNATURES, symbol="AAPL")

        assert snapshot.primitive("trailingPE") == 5.2

    def test_placeholder_dom_text_is_absent(self):
        html = '<fin-streamer data-field="forwardPE" data-symbol="AAPL">--</fin-streamer>'

        snapshot = EmbeddedValueExtractor().extract(html, (dom_field("forwardPE", match_symbol=True),), symbol="AAPL")

        assert "forwardPE" not in snapshot

    def test_symbol_bound_signature_needs_symbol(self):
        html = _pe_dom("30.1")

        snapshot = EmbeddedValueExtractor().extract(html, (dom_field("trailingPE", match_symbol=True),))

        assert snapshot.is_empty

    def test_malformed_page_gives_empty_snapshot(self):
        """测试畸形页面返回空快照而不抛出异常"""
        snapshot = EmbeddedValueExtractor().extract('<div data-field="beta"><<< "marketCap": {{{', SUMMARY_SIGNATURES)

        assert snapshot.is_empty

    def test_source_id_taken_from_document(self, quote_page):
        document = RawDocument(
            source_id="yahoo_finance", url="https://example.test", status_code=200, text=quote_page({"beta": 1.2})
        )

        snapshot = EmbeddedValueExtractor().extract(document, (json_field("beta"),))

        assert snapshot.source_id == "yahoo_finance"
        assert snapshot.primitive("beta") == 1.2

    def test_extraction_is_repeatable(self, quote_page):
        """测试同一文档重复提取得到相同快照"""
        page = quote_page(
            {
                "price": {"regularMarketPrice": {"raw": 189.95, "fmt": "189.95"}},
                "summaryDetail": {"trailingPE": {"raw": 28.5}, "beta": {"raw": 1.29}},
                "assetProfile": {"website": "https://www.apple.com/"},
            },
            body=_pe_dom("30.1"),
        )
        document = RawDocument(source_id="yahoo_finance", url="https://example.test", status_code=200, text=page)
        extractor = EmbeddedValueExtractor()

        first = extractor.extract(document, SUMMARY_SIGNATURES, symbol="AAPL")
        second = extractor.extract(document, SUMMARY_SIGNATURES, symbol="AAPL")

        assert first == second
        assert list(first.keys()) == list(second.keys())
        assert first.fetched_at == document.fetched_at
        assert not first.is_empty


class TestExtractArray:
    """数组提取测试"""

    def test_scoped_array(self, quote_page):
        trend = [{"period": "0m", "buy": 20}, {"period": "-1m", "buy": 18}]
        page = quote_page({"recommendationTrend": {"trend": trend}, "earningsTrend": {"trend": [{"period": "0q"}]}})

        assert extract_array(page, "trend", scope="recommendationTrend") == trend

    def test_conflicting_arrays_are_missing(self, quote_page):
        page = quote_page({"a": {"trend": [1]}, "b": {"trend": [2]}})

        assert extract_array(page, "trend") is None

    def test_non_array_is_missing(self, quote_page):
        assert extract_array(quote_page({"trend": "up"}), "trend") is None
