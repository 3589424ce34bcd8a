"""Exception handling module."""

from auxidien.core.exceptions.base import (
    AdmissionError,
    AuthorizationError,
    AuxidienError,
    ConfigurationError,
    MagnitudeError,
    RateLimitError,
    RecordUnavailableError,
    UpstreamFetchError,
    ValidationError,
)
from auxidien.core.exceptions.codes import ErrorCode
from auxidien.core.exceptions.handler import ErrorHandler, error_handler, format_error_response

__all__ = [
    "AuxidienError",
    "AdmissionError",
    "AuthorizationError",
    "ConfigurationError",
    "MagnitudeError",
    "RateLimitError",
    "RecordUnavailableError",
    "UpstreamFetchError",
    "ValidationError",
    "ErrorCode",
    "ErrorHandler",
    "error_handler",
    "format_error_response",
]
