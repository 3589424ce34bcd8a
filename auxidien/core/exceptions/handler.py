"""Error logging and response formatting."""

import traceback
from datetime import UTC, datetime
from typing import Any

from loguru import logger

from .base import AuxidienError
from .codes import ErrorCode


class ErrorHandler:
    """Unified error handler shared by the tick loop and the web service."""

    def log_error(
        self,
        error: Exception | AuxidienError,
        context: dict[str, Any] | None = None,
        level: str = "ERROR",
    ) -> None:
        """Log an error with its code, details and caller context.

        Args:
            error: Exception instance
            context: Extra context (operation, metal, ...)
            level: Log level name
        """
        error_context: dict[str, Any] = {
            "error_type": type(error).__name__,
            "timestamp": datetime.now(UTC).isoformat(),
            **(context or {}),
        }

        if isinstance(error, AuxidienError):
            error_context.update({"error_code": error.error_code, "details": error.details})
        elif error.__traceback__ is not None:
            error_context["stack_trace"] = "".join(traceback.format_exception(error))

        logger.opt(depth=1).log(
            level,
            "{error_message} | context={context}",
            error_message=str(error),
            context=error_context,
        )

    def create_error_response(self, error: Exception, **kwargs: Any) -> dict[str, Any]:
        """Build a serializable error payload."""
        if isinstance(error, AuxidienError):
            return format_error_response(error.error_code, error.message, {**error.details, **kwargs})
        return format_error_response(ErrorCode.INTERNAL_ERROR.value, str(error), kwargs)


def format_error_response(code: str, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    """Return the standard ``{"error": {...}}`` payload."""

    payload: dict[str, Any] = {"code": code, "message": message}
    if details:
        payload["details"] = {key: _jsonable(value) for key, value in details.items()}
    return {"error": payload}


def _jsonable(value: Any) -> Any:
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    return str(value)


error_handler = ErrorHandler()
