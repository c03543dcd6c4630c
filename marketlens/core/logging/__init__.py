"""Structured logging helpers."""

from marketlens.core.logging.config import LogConfig
from marketlens.core.logging.logger import RequestScope, apply_log_config, logger, request_scope

__all__ = [
    "LogConfig",
    "RequestScope",
    "apply_log_config",
    "logger",
    "request_scope",
]
