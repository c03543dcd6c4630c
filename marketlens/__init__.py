"""marketlens - 金融与宏观经济数据提取库

从行情页面内嵌的JSON与FRED统计接口获取数据, 统一转换为扁平的行字典.
内置分批调度、回退链与修订(vintage)分析.
"""

from marketlens.core.client import MarketLensClient
from marketlens.core.config import MarketLensConfig, load_config_from_env
from marketlens.core.exceptions import ExtractionError, MarketLensError, MissingCredentialError, PreconditionError
from marketlens.core.services.screening import ScreeningCriteria

# 创建全局客户端实例
_client: MarketLensClient | None = None


def get_client() -> MarketLensClient:
    """获取全局marketlens客户端实例

    全局实例使用环境变量中的配置 (见 :func:`load_config_from_env`).

    Examples:
        >>> import asyncio
        >>> import marketlens
        >>>
        >>> async def main():
        ...     rows = await marketlens.get_client().get_market_indices()
        ...     print(rows[0]["symbol"])
        >>>
        >>> asyncio.run(main())
    """
    global _client
    if _client is None:
        _client = MarketLensClient(MarketLensConfig.from_dict(load_config_from_env()))
    return _client


# 版本信息
__version__ = "0.1.0"
__author__ = "marketlens team"

__all__ = [
    "MarketLensClient",
    "MarketLensConfig",
    "ScreeningCriteria",
    "MarketLensError",
    "PreconditionError",
    "MissingCredentialError",
    "ExtractionError",
    "get_client",
    "load_config_from_env",
]
