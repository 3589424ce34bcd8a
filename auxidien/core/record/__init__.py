"""Authoritative price record and its admission-control protocol."""

from .events import (
    ConstituentsRecorded,
    IntervalChanged,
    MaxChangeRateChanged,
    PriceUpdated,
    RecordEvent,
    event_from_payload,
    event_payload,
)
from .fixedpoint import DECIMALS, MAX_PRICE, SCALE, from_fixed, max_change, to_fixed
from .journal import DuckDBEventJournal
from .price_record import (
    DEFAULT_MAX_CHANGE_RATE_BPS,
    DEFAULT_MIN_UPDATE_INTERVAL,
    ConstituentSnapshot,
    PriceReading,
    PriceRecord,
    RecordState,
)
from .result import UpdateResult
from .roles import Role

__all__ = [
    "ConstituentSnapshot",
    "ConstituentsRecorded",
    "DECIMALS",
    "DEFAULT_MAX_CHANGE_RATE_BPS",
    "DEFAULT_MIN_UPDATE_INTERVAL",
    "DuckDBEventJournal",
    "MAX_PRICE",
    "IntervalChanged",
    "MaxChangeRateChanged",
    "PriceReading",
    "PriceRecord",
    "PriceUpdated",
    "RecordEvent",
    "RecordState",
    "Role",
    "SCALE",
    "UpdateResult",
    "event_from_payload",
    "event_payload",
    "from_fixed",
    "max_change",
    "to_fixed",
]
