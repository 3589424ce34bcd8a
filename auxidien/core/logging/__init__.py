"""Logging utilities for monitoring and debugging."""

from auxidien.core.logging.config import LogConfig
from auxidien.core.logging.logger import (
    StructuredLogger,
    configure_logging,
    log_context,
    logger,
)

__all__ = [
    "LogConfig",
    "StructuredLogger",
    "configure_logging",
    "log_context",
    "logger",
]
