"""配置管理模块 - 处理marketlens客户端的配置"""

import os
import tomllib
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger

YAHOO_USER_AGENT = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 14_7 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/14.1.2 Mobile/15E148 Safari/604.1"
)
DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
FRED_USER_AGENT = "Mozilla/5.0 (compatible; marketlens/0.1)"


@dataclass
class SourceConfig:
    """上游数据源配置"""

    yahoo_user_agent: str = YAHOO_USER_AGENT
    desktop_user_agent: str = DESKTOP_USER_AGENT
    fred_user_agent: str = FRED_USER_AGENT
    page_timeout: float = 15.0
    batch_page_timeout: float = 8.0
    peer_page_timeout: float = 10.0
    fred_timeout: float = 15.0

    def __post_init__(self) -> None:
        for name in ("page_timeout", "batch_page_timeout", "peer_page_timeout", "fred_timeout"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")


@dataclass
class BatchConfig:
    """批处理配置"""

    concurrency: int = 5
    inter_batch_delay: float = 0.5
    peer_delay: float = 0.5
    fred_requests_per_minute: int = 120

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        if self.inter_batch_delay < 0:
            raise ValueError("inter_batch_delay must be non-negative")
        if self.peer_delay < 0:
            raise ValueError("peer_delay must be non-negative")
        if self.fred_requests_per_minute < 1:
            raise ValueError("fred_requests_per_minute must be at least 1")


@dataclass
class FredConfig:
    """FRED配置"""

    api_key: str | None = None
    base_url: str = "https://api.stlouisfed.org/fred"
    site_url: str = "https://fred.stlouisfed.org"
    observation_limit: int = 5


@dataclass
class ExtractionConfig:
    """提取配置

    ``plausibility`` maps a field key to the minimum value a DOM reading must
    reach before it is preferred over the embedded JSON value.
    """

    plausibility: dict[str, float] = field(default_factory=lambda: {"trailingPE": 10.0})


@dataclass
class LoggingConfig:
    """日志配置"""

    level: str = "INFO"
    console_output: bool = True
    file: str | None = None
    rotation: str | None = None
    retention: str | None = None


@dataclass
class MarketLensConfig:
    """marketlens主配置"""

    sources: SourceConfig = field(default_factory=SourceConfig)
    batch: BatchConfig = field(default_factory=BatchConfig)
    fred: FredConfig = field(default_factory=FredConfig)
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "MarketLensConfig":
        """从字典创建配置"""
        return cls(
            sources=SourceConfig(**config_dict.get("sources", {})),
            batch=BatchConfig(**config_dict.get("batch", {})),
            fred=FredConfig(**config_dict.get("fred", {})),
            extraction=ExtractionConfig(**config_dict.get("extraction", {})),
            logging=LoggingConfig(**config_dict.get("logging", {})),
        )

    def to_dict(self) -> dict[str, Any]:
        """转换为字典"""
        return {
            "sources": asdict(self.sources),
            "batch": asdict(self.batch),
            "fred": asdict(self.fred),
            "extraction": asdict(self.extraction),
            "logging": asdict(self.logging),
        }


class ConfigManager:
    """配置管理器"""

    def __init__(self, config_path: Path | None = None):
        """初始化配置管理器

        Args:
            config_path: 配置文件路径，如果为None则使用默认路径
        """
        self.config_path = config_path or Path.home() / ".marketlens" / "config.toml"
        self.config = self._load_config()

    def _load_config(self) -> MarketLensConfig:
        if not self.config_path.exists():
            return MarketLensConfig()

        try:
            with open(self.config_path, "rb") as f:
                config_dict = tomllib.load(f)
            return MarketLensConfig.from_dict(config_dict)
        except (OSError, tomllib.TOMLDecodeError, TypeError, ValueError) as e:
            logger.warning(f"Failed to load config from {self.config_path}: {e}")
            return MarketLensConfig()

    def get_config(self) -> MarketLensConfig:
        """获取当前配置"""
        return self.config

    def update_config(self, **updates: Any) -> None:
        """更新配置, 嵌套字典按节合并"""
        config_dict = self.config.to_dict()

        def deep_update(d: dict[str, Any], u: dict[str, Any]) -> dict[str, Any]:
            for k, v in u.items():
                if isinstance(v, dict) and isinstance(d.get(k), dict) and k != "plausibility":
                    d[k] = deep_update(d[k], v)
                else:
                    d[k] = v
            return d

        deep_update(config_dict, updates)
        self.config = MarketLensConfig.from_dict(config_dict)


def get_default_config() -> MarketLensConfig:
    """获取默认配置"""
    return MarketLensConfig()


def load_config_from_env() -> dict[str, Any]:
    """从环境变量加载配置"""
    config: dict[str, Any] = {}

    # 数据源配置
    source_config: dict[str, Any] = {}
    page_timeout = os.getenv("MARKETLENS_PAGE_TIMEOUT")
    if page_timeout is not None:
        source_config["page_timeout"] = float(page_timeout)
    fred_timeout = os.getenv("MARKETLENS_FRED_TIMEOUT")
    if fred_timeout is not None:
        source_config["fred_timeout"] = float(fred_timeout)
    if source_config:
        config["sources"] = source_config

    # 批处理配置
    batch_config: dict[str, Any] = {}
    concurrency = os.getenv("MARKETLENS_BATCH_CONCURRENCY")
    if concurrency is not None:
        batch_config["concurrency"] = int(concurrency)
    delay = os.getenv("MARKETLENS_BATCH_DELAY")
    if delay is not None:
        batch_config["inter_batch_delay"] = float(delay)
    rpm = os.getenv("MARKETLENS_FRED_RPM")
    if rpm is not None:
        batch_config["fred_requests_per_minute"] = int(rpm)
    if batch_config:
        config["batch"] = batch_config

    # FRED配置
    api_key = os.getenv("MARKETLENS_FRED_API_KEY") or os.getenv("FRED_API_KEY")
    if api_key:
        config["fred"] = {"api_key": api_key}

    # 日志配置
    logging_config: dict[str, Any] = {}
    level = os.getenv("MARKETLENS_LOGGING_LEVEL")
    if level is not None:
        logging_config["level"] = level
    log_file = os.getenv("MARKETLENS_LOGGING_FILE")
    if log_file is not None:
        logging_config["file"] = log_file
    if logging_config:
        config["logging"] = logging_config

    return config
