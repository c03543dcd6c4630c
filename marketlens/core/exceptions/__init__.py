"""Exception handling module."""

from marketlens.core.exceptions.base import (
    ExtractionError,
    HttpStatusError,
    MarketLensError,
    MissingCredentialError,
    NetworkError,
    PreconditionError,
    ProviderError,
    RateLimitError,
    ResponseFormatError,
    SourceTimeoutError,
    SourceUnavailableError,
)
from marketlens.core.exceptions.codes import ErrorCode

__all__ = [
    "MarketLensError",
    "ProviderError",
    "SourceUnavailableError",
    "NetworkError",
    "SourceTimeoutError",
    "HttpStatusError",
    "RateLimitError",
    "ResponseFormatError",
    "PreconditionError",
    "MissingCredentialError",
    "ExtractionError",
    "ErrorCode",
]
