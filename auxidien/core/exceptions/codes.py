"""Standardized error codes."""

from enum import Enum


class ErrorCode(str, Enum):
    """Standardized error codes for auxidien exceptions."""

    # General errors
    GENERAL_ERROR = "GENERAL_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # Configuration errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Upstream price source errors
    UPSTREAM_FETCH_ERROR = "UPSTREAM_FETCH_ERROR"

    # Record admission errors
    AUTHORIZATION_ERROR = "AUTHORIZATION_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    RATE_LIMIT_ERROR = "RATE_LIMIT_ERROR"
    MAGNITUDE_ERROR = "MAGNITUDE_ERROR"

    # Record transport errors
    RECORD_UNAVAILABLE = "RECORD_UNAVAILABLE"


__all__ = ["ErrorCode"]
