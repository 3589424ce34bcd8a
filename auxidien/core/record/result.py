"""Outcome of a record operation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from auxidien.core.exceptions import AdmissionError

from .events import RecordEvent, event_payload


@dataclass(frozen=True)
class UpdateResult:
    """Accepted with the events it emitted, or rejected with the reason.

    Rejections are values, not raised exceptions; ``raise_for_rejection``
    converts one for callers that prefer exceptions.
    """

    accepted: bool
    error: AdmissionError | None = None
    events: tuple[RecordEvent, ...] = field(default_factory=tuple)

    @classmethod
    def ok(cls, *events: RecordEvent) -> "UpdateResult":
        return cls(accepted=True, events=tuple(events))

    @classmethod
    def reject(cls, error: AdmissionError) -> "UpdateResult":
        return cls(accepted=False, error=error)

    @property
    def reason(self) -> str | None:
        """Rejection variant name, e.g. ``"MagnitudeError"``."""
        return type(self.error).__name__ if self.error is not None else None

    def raise_for_rejection(self) -> None:
        if self.error is not None:
            raise self.error

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"accepted": self.accepted}
        if self.error is not None:
            payload["reason"] = self.reason
            payload["error_code"] = self.error.error_code
            payload["message"] = self.error.message
            payload["details"] = dict(self.error.details)
        if self.events:
            payload["events"] = [event_payload(event) for event in self.events]
        return payload


__all__ = ["UpdateResult"]
