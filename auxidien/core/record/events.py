"""Notifications emitted by the price record on state change."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import asdict, dataclass
from typing import Any, Union


@dataclass(frozen=True)
class PriceUpdated:
    price: int
    timestamp: int
    updater: str

    name = "price_updated"


@dataclass(frozen=True)
class ConstituentsRecorded:
    gold: int
    silver: int
    platinum: int
    palladium: int
    timestamp: int

    name = "constituents_recorded"


@dataclass(frozen=True)
class IntervalChanged:
    old: int
    new: int

    name = "interval_changed"


@dataclass(frozen=True)
class MaxChangeRateChanged:
    old: int
    new: int

    name = "max_change_rate_changed"


RecordEvent = Union[PriceUpdated, ConstituentsRecorded, IntervalChanged, MaxChangeRateChanged]
EventListener = Callable[[RecordEvent], None]


def event_payload(event: RecordEvent) -> dict[str, Any]:
    """Serializable ``{"event": name, **fields}`` view of an event."""
    return {"event": event.name, **asdict(event)}


_EVENT_TYPES: dict[str, type] = {
    cls.name: cls for cls in (PriceUpdated, ConstituentsRecorded, IntervalChanged, MaxChangeRateChanged)
}


def event_from_payload(payload: dict[str, Any]) -> RecordEvent:
    """Inverse of :func:`event_payload`."""
    fields = dict(payload)
    name = fields.pop("event")
    try:
        event_type = _EVENT_TYPES[name]
    except KeyError:
        raise ValueError(f"unknown record event {name!r}") from None
    return event_type(**fields)


__all__ = [
    "ConstituentsRecorded",
    "EventListener",
    "IntervalChanged",
    "MaxChangeRateChanged",
    "PriceUpdated",
    "RecordEvent",
    "event_from_payload",
    "event_payload",
]
