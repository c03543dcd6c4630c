"""Canonical row helpers.

A canonical row is a flat ``dict`` of primitives; ``None`` marks an
unavailable value.
"""

import json
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from marketlens.core.models.values import Snapshot


def today() -> str:
    """Current UTC date as ``YYYY-MM-DD``."""
    return datetime.now(UTC).date().isoformat()


def build_row(snapshot: Snapshot, columns: Mapping[str, str], **fixed: Any) -> dict[str, Any]:
    """Project ``snapshot`` onto output columns.

    Args:
        snapshot: 提取结果
        columns: 输出列名 -> 快照键
        **fixed: 追加的固定列 (在映射列之前)

    Returns:
        dict: 规范行, 缺失的键为 None
    """
    row: dict[str, Any] = dict(fixed)
    for column, key in columns.items():
        row[column] = snapshot.primitive(key)
    return row


def coalesce(*values: Any) -> Any:
    """First value that is not None."""
    for value in values:
        if value is not None:
            return value
    return None


def dump_json(value: Any) -> str:
    return json.dumps(value, sort_keys=True, default=str)
