"""Volatility regime detection."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

from auxidien.core.models import Metal

TRADING_DAYS_PER_YEAR = 252

# Gold-anchored composite; gold is the least volatile and most liquid leg.
COMPOSITE_WEIGHTS: dict[Metal, float] = {
    Metal.XAU: 0.5,
    Metal.XAG: 0.2,
    Metal.XPT: 0.2,
    Metal.XPD: 0.1,
}


class Regime(str, Enum):
    """Market volatility bucket."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    EXTREME = "EXTREME"


@dataclass(frozen=True)
class RegimePolicy:
    """Intended looseness and cadence for a regime.

    Advisory only. The price record enforces its own bound.
    """

    max_change_fraction: float
    cadence_multiplier: float
    description: str

    @property
    def max_change_bps(self) -> int:
        return round(self.max_change_fraction * 10_000)


REGIME_POLICIES: dict[Regime, RegimePolicy] = {
    Regime.LOW: RegimePolicy(0.05, 1.0, "Normal market conditions"),
    Regime.MEDIUM: RegimePolicy(0.03, 1.0, "Elevated market activity"),
    Regime.HIGH: RegimePolicy(0.02, 0.5, "High volatility - increased caution"),
    Regime.EXTREME: RegimePolicy(0.01, 0.25, "Extreme volatility - maximum caution"),
}

# Upper bounds on daily volatility, checked in order.
_THRESHOLDS: tuple[tuple[float, Regime], ...] = (
    (0.01, Regime.LOW),
    (0.03, Regime.MEDIUM),
    (0.06, Regime.HIGH),
)


@dataclass(frozen=True)
class RegimeReading:
    regime: Regime
    composite: float
    daily: float

    @property
    def policy(self) -> RegimePolicy:
        return REGIME_POLICIES[self.regime]


class RegimeClassifier:
    """Maps annualized per-asset volatilities to a :class:`Regime`."""

    def __init__(self, weights: Mapping[Metal, float] | None = None) -> None:
        self.weights = dict(COMPOSITE_WEIGHTS if weights is None else weights)

    def composite(self, volatilities: Mapping[Metal, float]) -> float:
        return sum(volatilities[asset] * weight for asset, weight in self.weights.items())

    def read(self, volatilities: Mapping[Metal, float]) -> RegimeReading:
        composite = self.composite(volatilities)
        daily = composite / math.sqrt(TRADING_DAYS_PER_YEAR)
        for bound, regime in _THRESHOLDS:
            if daily < bound:
                return RegimeReading(regime, composite, daily)
        return RegimeReading(Regime.EXTREME, composite, daily)

    def classify(self, volatilities: Mapping[Metal, float]) -> Regime:
        return self.read(volatilities).regime


def policy_consistent_with(max_change_rate_bps: int) -> dict[Regime, bool]:
    """Whether a record configured with ``max_change_rate_bps`` admits each regime's intended change.

    A ``False`` entry means the record will reject moves the regime policy
    still considers normal, so publication lags until prices converge.
    """

    return {
        regime: policy.max_change_bps <= max_change_rate_bps
        for regime, policy in REGIME_POLICIES.items()
    }


__all__ = [
    "COMPOSITE_WEIGHTS",
    "REGIME_POLICIES",
    "Regime",
    "RegimeClassifier",
    "RegimePolicy",
    "RegimeReading",
    "policy_consistent_with",
]
