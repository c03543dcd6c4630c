"""Tests for the marketlens error hierarchy."""

import pytest

from marketlens.core.exceptions import (
    ErrorCode,
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


def test_base_error_payload() -> None:
    error = MarketLensError("something failed", details={"symbol": "AAPL"})

    assert str(error) == "something failed"
    assert error.to_payload() == {
        "code": "GENERAL_ERROR",
        "message": "something failed",
        "details": {"symbol": "AAPL"},
    }


@pytest.mark.parametrize(
    ("error", "code"),
    [
        (NetworkError("down", "FRED"), ErrorCode.NETWORK_ERROR),
        (SourceTimeoutError("slow", "FRED", timeout=15.0), ErrorCode.PROVIDER_TIMEOUT),
        (HttpStatusError("bad", "FRED", 503), ErrorCode.HTTP_ERROR),
        (RateLimitError("throttled", "FRED", retry_after=30), ErrorCode.RATE_LIMIT_ERROR),
        (ResponseFormatError("garbled", "FRED"), ErrorCode.DATA_FORMAT_ERROR),
    ],
)
def test_transport_errors_are_unavailability(error: SourceUnavailableError, code: ErrorCode) -> None:
    """传输类错误均视为数据源暂不可用"""
    assert isinstance(error, SourceUnavailableError)
    assert isinstance(error, ProviderError)
    assert error.error_code is code
    assert error.details["provider"] == "FRED"


def test_transport_details() -> None:
    assert SourceTimeoutError("slow", "yahoo_finance", timeout=8.0).details["timeout"] == 8.0
    assert HttpStatusError("bad", "yahoo_finance", 502).status_code == 502

    rate_limited = RateLimitError("throttled", "yahoo_finance", retry_after=30)
    assert rate_limited.status_code == 429
    assert rate_limited.details == {"provider": "yahoo_finance", "status_code": 429, "retry_after": 30}


def test_precondition_errors() -> None:
    error = PreconditionError("symbol is required", argument="symbol")

    assert error.error_code is ErrorCode.PRECONDITION_FAILED
    assert error.details == {"argument": "symbol"}
    assert not isinstance(error, SourceUnavailableError)


def test_missing_credential() -> None:
    error = MissingCredentialError("A FRED API key is required", "FRED")

    assert isinstance(error, PreconditionError)
    assert error.error_code is ErrorCode.API_KEY_MISSING
    assert error.provider_name == "FRED"
    assert error.to_payload()["details"] == {"provider": "FRED"}


def test_extraction_error() -> None:
    error = ExtractionError("No data", source="yahoo_finance", details={"symbol": "AAPL"})

    assert error.error_code is ErrorCode.EXTRACTION_FAILED
    assert error.details == {"symbol": "AAPL", "source": "yahoo_finance"}
    assert not isinstance(error, ProviderError)


def test_error_codes_are_strings() -> None:
    assert ErrorCode.HTTP_ERROR == "HTTP_ERROR"
    assert ErrorCode("API_KEY_MISSING") is ErrorCode.API_KEY_MISSING
