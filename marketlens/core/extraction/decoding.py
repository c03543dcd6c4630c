"""Decode upstream values into typed values."""

import math
import re
from datetime import UTC, datetime
from typing import Any

from marketlens.core.models import TypedValue, ValueKind

PLACEHOLDERS = frozenset({"", "--", "-", "N/A", "n/a", "NaN", "null", "."})

SUFFIX_SCALE = {
    "K": 1e3,
    "M": 1e6,
    "B": 1e9,
    "G": 1e9,
    "T": 1e12,
}

# 1e11 秒约为公元5138年, 更大的值按毫秒处理
MILLISECOND_THRESHOLD = 1e11

_NUMBER_RE = re.compile(r"^([+-]?(?:\d+\.?\d*|\.\d+)(?:E[+-]?\d+)?)\s*([KMBGT])?$")


def decode_formatted_number(text: str | None) -> float | None:
    """Decode display text such as ``"3.00T"``, ``"1,234.5"`` or ``"-0.52%"``.

    Placeholders decode to None, never to 0.
    """
    if text is None:
        return None
    cleaned = text.strip()
    if cleaned in PLACEHOLDERS:
        return None
    cleaned = cleaned.replace(",", "").replace("$", "").rstrip("%").strip()
    if cleaned.startswith("(") and cleaned.endswith(")"):
        cleaned = "-" + cleaned[1:-1]
    match = _NUMBER_RE.match(cleaned.upper())
    if match is None:
        return None
    number = float(match.group(1))
    suffix = match.group(2)
    if suffix:
        number *= SUFFIX_SCALE[suffix]
    return number if math.isfinite(number) else None


def _numeric(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = float(value)
        return number if math.isfinite(number) else None
    if isinstance(value, str):
        return decode_formatted_number(value)
    return None


def epoch_seconds(number: float) -> int | None:
    """Epoch seconds for a timestamp given in seconds or milliseconds.

    Values above ``MILLISECOND_THRESHOLD`` are read as milliseconds. Returns
    None when the result is not a representable date.
    """
    if abs(number) > MILLISECOND_THRESHOLD:
        number /= 1000
    seconds = int(number)
    try:
        datetime.fromtimestamp(seconds, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None
    return seconds


def _finish_number(number: float, kind: ValueKind) -> int | float | None:
    if kind is ValueKind.TIMESTAMP:
        return epoch_seconds(number)
    if kind is ValueKind.INTEGER:
        return int(number)
    return number


def to_typed_value(value: Any, kind: ValueKind) -> TypedValue | None:
    """Convert a decoded JSON value or DOM text to a :class:`TypedValue`.

    Accepts Yahoo style ``{"raw": ..., "fmt": ...}`` objects. Returns None
    when the value is empty, a placeholder, not of the requested kind, or a
    timestamp that is not a representable date.
    """
    formatted: str | None = None
    if isinstance(value, dict):
        formatted = value.get("fmt") if isinstance(value.get("fmt"), str) else None
        if "raw" in value:
            value = value["raw"]
        elif formatted is not None:
            value = formatted
        else:
            return None
    if value is None:
        return None

    if kind is ValueKind.BOOLEAN:
        if isinstance(value, bool):
            return TypedValue(raw=value, formatted=formatted, kind=kind)
        if isinstance(value, str) and value.strip().lower() in ("true", "false"):
            return TypedValue(raw=value.strip().lower() == "true", formatted=formatted or value, kind=kind)
        return None

    if kind is ValueKind.STRING:
        if isinstance(value, str):
            text = value.strip()
            if text and text not in PLACEHOLDERS:
                return TypedValue(raw=text, formatted=formatted, kind=kind)
        return None

    number = _numeric(value)
    if number is None:
        return None
    raw = _finish_number(number, kind)
    if raw is None:
        return None
    if formatted is None and isinstance(value, str):
        formatted = value.strip()
    return TypedValue(raw=raw, formatted=formatted, kind=kind)
