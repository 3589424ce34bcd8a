"""Core exception classes."""

from typing import Any

from .codes import ErrorCode


class AuxidienError(Exception):
    """Base exception for auxidien."""

    def __init__(
        self,
        message: str,
        error_code: str = ErrorCode.GENERAL_ERROR.value,
        details: dict[str, Any] | None = None,
    ):
        """Initialize the exception.

        Args:
            message: Human readable message
            error_code: Error code (an ``ErrorCode`` value)
            details: Extra structured details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ConfigurationError(AuxidienError):
    """Required settings are missing or invalid at process start."""

    def __init__(
        self,
        message: str,
        missing: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if missing:
            super_details["missing"] = list(missing)
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR.value, super_details)
        self.missing = list(missing or [])


class UpstreamFetchError(AuxidienError):
    """Retrieving one asset's spot price from the upstream source failed."""

    def __init__(
        self,
        message: str,
        symbol: str,
        status_code: int | None = None,
        body: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        super_details["symbol"] = symbol
        if status_code is not None:
            super_details["status_code"] = status_code
        if body:
            super_details["body"] = body
        super().__init__(message, ErrorCode.UPSTREAM_FETCH_ERROR.value, super_details)
        self.symbol = symbol
        self.status_code = status_code
        self.body = body


class RecordUnavailableError(AuxidienError):
    """The authoritative record could not be reached."""

    def __init__(self, message: str, endpoint: str | None = None, details: dict[str, Any] | None = None):
        super_details = details or {}
        if endpoint:
            super_details["endpoint"] = endpoint
        super().__init__(message, ErrorCode.RECORD_UNAVAILABLE.value, super_details)
        self.endpoint = endpoint


class AdmissionError(AuxidienError):
    """A proposal or admin call was rejected by the price record.

    The record never raises these; they travel inside ``UpdateResult``.
    """

    code: ErrorCode = ErrorCode.GENERAL_ERROR

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, self.code.value, details)


class AuthorizationError(AdmissionError):
    """Caller lacks the role required for the operation."""

    code = ErrorCode.AUTHORIZATION_ERROR


class ValidationError(AdmissionError):
    """Proposed value is malformed (non-positive price, out-of-range config)."""

    code = ErrorCode.VALIDATION_ERROR


class RateLimitError(AdmissionError):
    """Proposal arrived before the minimum update interval elapsed."""

    code = ErrorCode.RATE_LIMIT_ERROR

    def __init__(self, message: str, retry_after: int | None = None, details: dict[str, Any] | None = None):
        super_details = details or {}
        if retry_after is not None:
            super_details["retry_after"] = retry_after
        super().__init__(message, super_details)
        self.retry_after = retry_after


class MagnitudeError(AdmissionError):
    """Proposed change exceeds the configured bound relative to the stored price."""

    code = ErrorCode.MAGNITUDE_ERROR
