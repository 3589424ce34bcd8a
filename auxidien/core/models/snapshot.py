"""Quote and snapshot models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .market import Metal


class SpotQuote(BaseModel):
    """Spot price returned by the upstream lookup, per troy ounce."""

    model_config = ConfigDict(extra="ignore")

    price: float
    symbol: str
    currency: str = "USD"
    timestamp: int = Field(0, description="Unix seconds reported by the upstream")

    @field_validator("symbol")
    @classmethod
    def _upper_symbol(cls, value: str) -> str:
        return value.strip().upper()


@dataclass(frozen=True)
class PricePoint:
    """One (timestamp, price) sample of an asset series."""

    timestamp: float
    price: float


@dataclass(frozen=True)
class IndexSnapshot:
    """Everything one tick computed; consumed by the publication step."""

    timestamp: datetime
    prices: Mapping[Metal, float]
    volatilities: Mapping[Metal, float]
    regime: str
    target_weights: Mapping[Metal, float]
    weights: Mapping[Metal, float]
    index_value: float
    overshoot: Mapping[Metal, float] = field(default_factory=dict)

    @property
    def overshoots_bounds(self) -> bool:
        return any(value > 0.0 for value in self.overshoot.values())


__all__ = ["IndexSnapshot", "PricePoint", "SpotQuote"]
