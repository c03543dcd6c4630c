"""标准化错误代码."""

from enum import Enum


class ErrorCode(str, Enum):
    """错误代码枚举."""

    GENERAL_ERROR = "GENERAL_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # 提供商 / 传输
    PROVIDER_ERROR = "PROVIDER_ERROR"
    SOURCE_UNAVAILABLE = "SOURCE_UNAVAILABLE"
    NETWORK_ERROR = "NETWORK_ERROR"
    PROVIDER_TIMEOUT = "PROVIDER_TIMEOUT"
    HTTP_ERROR = "HTTP_ERROR"
    RATE_LIMIT_ERROR = "RATE_LIMIT_ERROR"
    DATA_FORMAT_ERROR = "DATA_FORMAT_ERROR"

    # 调用前置条件
    PRECONDITION_FAILED = "PRECONDITION_FAILED"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    INSUFFICIENT_ITEMS = "INSUFFICIENT_ITEMS"
    API_KEY_MISSING = "API_KEY_MISSING"

    # 提取
    EXTRACTION_FAILED = "EXTRACTION_FAILED"
    DATA_NOT_FOUND = "DATA_NOT_FOUND"
