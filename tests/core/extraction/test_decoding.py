"""Tests for value decoding."""

import math

import pytest

from marketlens.core.extraction.decoding import decode_formatted_number, epoch_seconds, to_typed_value
from marketlens.core.models import ValueKind


class TestDecodeFormattedNumber:
    """格式化数字解码测试"""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("3.00T", 3e12),
            ("1.5B", 1.5e9),
            ("2.5G", 2.5e9),
            ("450.2M", 450.2e6),
            ("12K", 12e3),
            ("1,234.5", 1234.5),
            ("-0.52%", -0.52),
            ("$189.95", 189.95),
            ("(12.5)", -12.5),
            ("1.2e3", 1200.0),
        ],
    )
    def test_decodes_display_text(self, text, expected):
        """测试显示文本解码"""
        assert decode_formatted_number(text) == pytest.approx(expected)

    @pytest.mark.parametrize("text", ["--", "N/A", "", "  ", ".", "null", None])
    def test_placeholders_are_absent_not_zero(self, text):
        """测试占位符解码为None而非0"""
        assert decode_formatted_number(text) is None

    def test_garbage_is_absent(self):
        assert decode_formatted_number("abc") is None
        assert decode_formatted_number("12 apples") is None


class TestToTypedValue:
    """类型化值转换测试"""

    def test_raw_fmt_object(self):
        """测试 {raw, fmt} 对象"""
        value = to_typed_value({"raw": 0.0055, "fmt": "0.55%"}, ValueKind.PERCENT)

        assert value is not None
        assert value.raw == 0.0055
        assert value.formatted == "0.55%"
        assert value.kind is ValueKind.PERCENT

    def test_fmt_only_object_is_decoded(self):
        value = to_typed_value({"fmt": "3.00T"}, ValueKind.NUMBER)

        assert value is not None
        assert value.raw == 3e12
        assert value.formatted == "3.00T"

    def test_empty_object_is_absent(self):
        assert to_typed_value({}, ValueKind.NUMBER) is None
        assert to_typed_value({"raw": None}, ValueKind.NUMBER) is None

    def test_integer_kind_truncates(self):
        value = to_typed_value(164000.0, ValueKind.INTEGER)

        assert value is not None
        assert value.raw == 164000
        assert isinstance(value.raw, int)

    def test_boolean_kind(self):
        assert to_typed_value(True, ValueKind.BOOLEAN).raw is True
        assert to_typed_value("false", ValueKind.BOOLEAN).raw is False
        assert to_typed_value(1, ValueKind.BOOLEAN) is None

    def test_string_kind_rejects_placeholders(self):
        assert to_typed_value("Technology", ValueKind.STRING).raw == "Technology"
        assert to_typed_value("  ", ValueKind.STRING) is None
        assert to_typed_value("N/A", ValueKind.STRING) is None
        assert to_typed_value(12, ValueKind.STRING) is None

    def test_numeric_kind_rejects_bool_and_non_finite(self):
        """测试数值类型拒绝布尔值与非有限数"""
        assert to_typed_value(True, ValueKind.NUMBER) is None
        assert to_typed_value(math.nan, ValueKind.NUMBER) is None
        assert to_typed_value(math.inf, ValueKind.NUMBER) is None

    def test_timestamp_becomes_iso_date(self):
        """测试时间戳转换为ISO日期"""
        value = to_typed_value({"raw": 1700000000, "fmt": "Nov 14, 2023"}, ValueKind.TIMESTAMP)

        assert value is not None
        assert value.raw == 1700000000
        assert value.primitive() == "2023-11-14"

    def test_millisecond_timestamp_is_normalized(self):
        """测试毫秒时间戳按秒处理"""
        value = to_typed_value({"raw": 1700000000000, "fmt": "Nov 14, 2023"}, ValueKind.TIMESTAMP)

        assert value is not None
        assert value.raw == 1700000000
        assert value.primitive() == "2023-11-14"

    def test_unrepresentable_timestamp_is_absent(self):
        assert to_typed_value(1e20, ValueKind.TIMESTAMP) is None
        assert to_typed_value(-1e20, ValueKind.TIMESTAMP) is None


class TestEpochSeconds:
    """时间戳归一化测试"""

    @pytest.mark.parametrize(
        ("number", "expected"),
        [
            (1700000000, 1700000000),
            (1700000000.9, 1700000000),
            (1700000000000, 1700000000),
            (0, 0),
        ],
    )
    def test_seconds_and_milliseconds(self, number, expected):
        assert epoch_seconds(number) == expected

    def test_out_of_range(self):
        assert epoch_seconds(1e18) is None
