"""marketlens 核心模块"""

from marketlens.core.client import MarketLensClient
from marketlens.core.config.settings import ConfigManager, MarketLensConfig
from marketlens.core.services.screening import ScreeningCriteria

__all__ = [
    "MarketLensClient",
    "ConfigManager",
    "MarketLensConfig",
    "ScreeningCriteria",
]
