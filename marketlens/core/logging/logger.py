"""JSON-line logging on top of loguru.

Client operations run inside a :func:`request_scope`. Every record emitted
while the scope is active carries its ``trace_id`` and ``operation``,
including records from batched source fetches, since tasks inherit the
context they are created in.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

from loguru import logger

from marketlens.core.logging.config import LogConfig

# 顶层字段, 其余 extra 放入 "fields"
TOP_LEVEL_KEYS = ("trace_id", "operation", "provider", "error_code")


@dataclass(frozen=True)
class RequestScope:
    """Identity shared by the records of one client operation."""

    trace_id: str
    operation: str | None = None
    fields: dict[str, Any] = field(default_factory=dict)


_SCOPE: ContextVar[RequestScope | None] = ContextVar("marketlens_request_scope", default=None)


@contextmanager
def request_scope(operation: str | None = None, *, trace_id: str | None = None, **fields: Any) -> Iterator[RequestScope]:
    """Open a scope for the current task and the tasks it spawns.

    A nested scope inherits the outer trace id, operation and fields unless
    they are given explicitly.
    """
    outer = _SCOPE.get()
    scope = RequestScope(
        trace_id=trace_id or (outer.trace_id if outer else uuid4().hex),
        operation=operation or (outer.operation if outer else None),
        fields={**(outer.fields if outer else {}), **fields},
    )
    token = _SCOPE.set(scope)
    try:
        with logger.contextualize(**scope.fields, trace_id=scope.trace_id, operation=scope.operation):
            yield scope
    finally:
        _SCOPE.reset(token)


def _to_json(record: dict[str, Any]) -> str:
    extra = record["extra"]
    payload: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
    }
    payload.update((key, extra.get(key)) for key in TOP_LEVEL_KEYS)
    fields = {k: v for k, v in extra.items() if k not in TOP_LEVEL_KEYS and not k.startswith("_")}
    if fields:
        payload["fields"] = fields
    exception = record["exception"]
    if exception is not None and exception.type is not None:
        payload["exception"] = f"{exception.type.__name__}: {exception.value}"
    return json.dumps(payload, default=str, ensure_ascii=False)


def _json_line(record: dict[str, Any]) -> str:
    # loguru 格式化函数: 预先序列化, 避免JSON中的花括号被当作格式占位符
    record["extra"]["_json"] = _to_json(record)
    return "{extra[_json]}\n"


def apply_log_config(config: LogConfig) -> None:
    """Replace the loguru handlers with JSON-line sinks described by ``config``."""
    handlers: list[dict[str, Any]] = []
    if config.console_output:
        handlers.append(
            {
                "sink": config.console_stream or sys.stdout,
                "level": config.level,
                "format": _json_line,
                "colorize": False,
            }
        )
    if config.file_path:
        handlers.append(
            {
                "sink": config.file_path,
                "level": config.level,
                "format": _json_line,
                "rotation": config.rotation,
                "retention": config.retention,
                "encoding": "utf-8",
            }
        )
    logger.configure(handlers=handlers, extra=dict(config.extra))


__all__ = [
    "RequestScope",
    "apply_log_config",
    "logger",
    "request_scope",
]
