"""
Request and response models for the record web service.
"""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

from auxidien.core.models import Metal
from auxidien.core.record import MAX_PRICE


def _utcnow() -> datetime:
    return datetime.now(UTC)


class APIResponse(BaseModel):
    """Standard success envelope."""

    success: bool = Field(..., description="Whether the request succeeded")
    data: Any | None = Field(None, description="Response payload")
    message: str | None = Field(None, description="Human readable message")
    timestamp: datetime = Field(default_factory=_utcnow, description="Response timestamp")
    request_id: str | None = Field(None, description="Request id for tracing")


class PriceUpdateRequest(BaseModel):
    """Proposed index price, optionally with the constituent prices it was computed from."""

    price: int = Field(..., le=MAX_PRICE, description="Index price in fixed point (scale 10^6)")
    constituents: dict[Metal, int] | None = Field(
        None, description="Per-gram metal prices in fixed point, keyed XAU/XAG/XPT/XPD"
    )


class IntervalRequest(BaseModel):
    seconds: int = Field(..., description="Minimum seconds between accepted updates")


class MaxChangeRateRequest(BaseModel):
    bps: int = Field(..., description="Maximum change per update in basis points")
