"""Logging options."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class LogConfig(BaseModel):
    """Options accepted by :func:`apply_log_config`.

    ``file_path`` enables the file sink; ``rotation`` and ``retention`` are
    passed to loguru unchanged (e.g. ``"10 MB"``, ``"7 days"``).
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    level: str = "INFO"
    console_output: bool = True
    console_stream: Any = None
    file_path: str | None = None
    rotation: str | None = None
    retention: str | None = None
    extra: dict[str, Any] = Field(default_factory=dict)


__all__ = ["LogConfig"]
