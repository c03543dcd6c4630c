"""marketlens核心异常类."""

from typing import Any

from marketlens.core.exceptions.codes import ErrorCode


class MarketLensError(Exception):
    """marketlens基础异常类."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.GENERAL_ERROR,
        details: dict[str, Any] | None = None,
    ):
        """初始化异常.

        Args:
            message: 错误消息
            error_code: 错误代码
            details: 额外详情
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_payload(self) -> dict[str, Any]:
        """Return a serializable payload representing the error."""

        return {
            "code": self.error_code.value,
            "message": self.message,
            "details": dict(self.details),
        }


class ProviderError(MarketLensError):
    """数据源相关异常."""

    def __init__(
        self,
        message: str,
        provider_name: str,
        error_code: ErrorCode = ErrorCode.PROVIDER_ERROR,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        super_details.setdefault("provider", provider_name)
        super().__init__(message, error_code, super_details)
        self.provider_name = provider_name


class SourceUnavailableError(ProviderError):
    """数据源不可用. 调用方应视为"本次不可用", 而非致命错误."""

    def __init__(
        self,
        message: str,
        provider_name: str,
        error_code: ErrorCode = ErrorCode.SOURCE_UNAVAILABLE,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, provider_name, error_code, details)


class NetworkError(SourceUnavailableError):
    """网络异常."""

    def __init__(self, message: str, provider_name: str, details: dict[str, Any] | None = None):
        super().__init__(message, provider_name, ErrorCode.NETWORK_ERROR, details)


class SourceTimeoutError(SourceUnavailableError):
    """请求超时."""

    def __init__(
        self,
        message: str,
        provider_name: str,
        timeout: float | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if timeout is not None:
            super_details["timeout"] = timeout
        super().__init__(message, provider_name, ErrorCode.PROVIDER_TIMEOUT, super_details)
        self.timeout = timeout


class HttpStatusError(SourceUnavailableError):
    """非2xx响应."""

    def __init__(
        self,
        message: str,
        provider_name: str,
        status_code: int,
        error_code: ErrorCode = ErrorCode.HTTP_ERROR,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        super_details["status_code"] = status_code
        super().__init__(message, provider_name, error_code, super_details)
        self.status_code = status_code


class RateLimitError(HttpStatusError):
    """速率限制异常 (HTTP 429)."""

    def __init__(
        self,
        message: str,
        provider_name: str,
        retry_after: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if retry_after is not None:
            super_details["retry_after"] = retry_after
        super().__init__(message, provider_name, 429, ErrorCode.RATE_LIMIT_ERROR, super_details)
        self.retry_after = retry_after


class ResponseFormatError(SourceUnavailableError):
    """响应内容与期望格式不符."""

    def __init__(self, message: str, provider_name: str, details: dict[str, Any] | None = None):
        super().__init__(message, provider_name, ErrorCode.DATA_FORMAT_ERROR, details)


class PreconditionError(MarketLensError):
    """调用参数不满足前置条件, 在任何I/O之前抛出."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.PRECONDITION_FAILED,
        argument: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if argument:
            super_details["argument"] = argument
        super().__init__(message, error_code, super_details)
        self.argument = argument


class MissingCredentialError(PreconditionError):
    """缺少必需的API密钥."""

    def __init__(self, message: str, provider_name: str, details: dict[str, Any] | None = None):
        super_details = details or {}
        super_details["provider"] = provider_name
        super().__init__(message, ErrorCode.API_KEY_MISSING, None, super_details)
        self.provider_name = provider_name


class ExtractionError(MarketLensError):
    """没有提取到任何可用数据."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if source:
            super_details["source"] = source
        super().__init__(message, ErrorCode.EXTRACTION_FAILED, super_details)
        self.source = source
