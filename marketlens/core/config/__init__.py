"""Configuration management."""

from marketlens.core.config.settings import (
    BatchConfig,
    ConfigManager,
    ExtractionConfig,
    FredConfig,
    LoggingConfig,
    MarketLensConfig,
    SourceConfig,
    get_default_config,
    load_config_from_env,
)

__all__ = [
    "BatchConfig",
    "ConfigManager",
    "ExtractionConfig",
    "FredConfig",
    "LoggingConfig",
    "MarketLensConfig",
    "SourceConfig",
    "get_default_config",
    "load_config_from_env",
]
