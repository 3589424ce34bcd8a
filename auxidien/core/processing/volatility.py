"""Log-return volatility estimation."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence

from auxidien.core.models import Metal

from .history import HistoryStore

MIN_SAMPLES = 12
# Fewer valid returns than this after skipping bad prices falls back to the generic default.
MIN_RETURNS = 5
FALLBACK_VOLATILITY = 0.15
VOLATILITY_FLOOR = 0.05
VOLATILITY_CAP = 0.80

SECONDS_PER_DAY = 86_400
DAYS_PER_YEAR = 365

# Long-run annualized volatilities, used until enough history accumulates.
DEFAULT_VOLATILITIES: dict[Metal, float] = {
    Metal.XAU: 0.12,
    Metal.XAG: 0.22,
    Metal.XPT: 0.18,
    Metal.XPD: 0.30,
}


def log_returns(prices: Sequence[float]) -> list[float]:
    """``ln(P_t / P_{t-1})`` for adjacent pairs where both prices are positive."""

    returns: list[float] = []
    for previous, current in zip(prices, prices[1:]):
        if previous > 0 and current > 0:
            returns.append(math.log(current / previous))
    return returns


def periods_per_year(sampling_interval_seconds: float) -> float:
    """Number of samples per year at the nominal sampling interval.

    The 300 s default gives 288 per day and 105120 per year.
    """
    if sampling_interval_seconds <= 0:
        raise ValueError("sampling interval must be positive")
    return SECONDS_PER_DAY / sampling_interval_seconds * DAYS_PER_YEAR


def annualized_volatility(returns: Sequence[float], periods: float) -> float:
    """Population standard deviation of ``returns`` scaled by ``sqrt(periods)``."""

    mean = sum(returns) / len(returns)
    variance = sum((value - mean) ** 2 for value in returns) / len(returns)
    return math.sqrt(variance) * math.sqrt(periods)


def clamp_volatility(value: float) -> float:
    return max(VOLATILITY_FLOOR, min(VOLATILITY_CAP, value))


class VolatilityEstimator:
    """Annualized volatility per asset from a :class:`HistoryStore`."""

    def __init__(
        self,
        history: HistoryStore,
        sampling_interval_seconds: float = 300.0,
        defaults: Mapping[Metal, float] | None = None,
        min_samples: int = MIN_SAMPLES,
    ) -> None:
        self.history = history
        self.periods_per_year = periods_per_year(sampling_interval_seconds)
        self.defaults = dict(DEFAULT_VOLATILITIES if defaults is None else defaults)
        self.min_samples = min_samples

    def estimate(self, asset: Metal) -> float:
        if self.history.count(asset) < self.min_samples:
            return self.defaults.get(asset, FALLBACK_VOLATILITY)

        returns = log_returns(self.history.prices(asset))
        if len(returns) < MIN_RETURNS:
            return FALLBACK_VOLATILITY

        return clamp_volatility(annualized_volatility(returns, self.periods_per_year))

    def estimate_all(self) -> dict[Metal, float]:
        return {asset: self.estimate(asset) for asset in self.history.assets()}

    def is_warm(self, asset: Metal) -> bool:
        """True once ``estimate`` uses observed history instead of the default."""
        return self.history.count(asset) >= self.min_samples


__all__ = [
    "DEFAULT_VOLATILITIES",
    "FALLBACK_VOLATILITY",
    "MIN_SAMPLES",
    "VolatilityEstimator",
    "annualized_volatility",
    "clamp_volatility",
    "log_returns",
    "periods_per_year",
]
