"""Bounded inverse-volatility weighting with smooth transitions.

Target weights are inverse volatility, normalized, clamped to per-asset
bounds and then divided by the clamped sum. The published vector moves
toward the target by an exponential moving average with factor
``lambda_``, again followed by clamp and normalize.

Neither path clamps a second time after the final division, so a weight
that was clamped to a bound can land slightly outside it. ``overshoot``
measures that distance and ``max_overshoot_bound`` gives the worst case
the bounds allow.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from auxidien.core.models import Metal

DEFAULT_LAMBDA = 0.08
SUM_TOLERANCE = 1e-9


@dataclass(frozen=True)
class WeightBounds:
    """Closed interval a single weight is clamped into."""

    min: float
    max: float

    def __post_init__(self) -> None:
        if not 0.0 <= self.min <= self.max <= 1.0:
            raise ValueError(f"invalid weight bounds [{self.min}, {self.max}]")

    def clamp(self, value: float) -> float:
        return max(self.min, min(self.max, value))

    @property
    def midpoint(self) -> float:
        return (self.min + self.max) / 2


DEFAULT_BOUNDS: dict[Metal, WeightBounds] = {
    Metal.XAU: WeightBounds(0.35, 0.55),
    Metal.XAG: WeightBounds(0.15, 0.30),
    Metal.XPT: WeightBounds(0.10, 0.25),
    Metal.XPD: WeightBounds(0.05, 0.15),
}

# Bound midpoints, with palladium lifted so the seed sums to 1.
INITIAL_WEIGHTS: dict[Metal, float] = {
    Metal.XAU: 0.45,
    Metal.XAG: 0.22,
    Metal.XPT: 0.18,
    Metal.XPD: 0.15,
}


def _normalize(values: Mapping[Metal, float]) -> dict[Metal, float]:
    total = sum(values.values())
    if total <= 0:
        raise ValueError("cannot normalize weights with a non-positive sum")
    return {asset: value / total for asset, value in values.items()}


class WeightEngine:
    """Pure weight arithmetic over a fixed set of bounds."""

    def __init__(
        self,
        bounds: Mapping[Metal, WeightBounds] | None = None,
        lambda_: float = DEFAULT_LAMBDA,
    ) -> None:
        if not 0.0 < lambda_ <= 1.0:
            raise ValueError("lambda must be in (0, 1]")
        self.bounds = dict(DEFAULT_BOUNDS if bounds is None else bounds)
        self.lambda_ = lambda_

    def clamp_and_normalize(self, values: Mapping[Metal, float]) -> dict[Metal, float]:
        clamped = {asset: self.bounds[asset].clamp(value) for asset, value in values.items()}
        return _normalize(clamped)

    def target_weights(self, volatilities: Mapping[Metal, float]) -> dict[Metal, float]:
        """Inverse-volatility weights, bounded then renormalized."""
        inverse: dict[Metal, float] = {}
        for asset, volatility in volatilities.items():
            if volatility <= 0:
                raise ValueError(f"volatility for {asset.value} must be positive, got {volatility}")
            inverse[asset] = 1.0 / volatility
        return self.clamp_and_normalize(_normalize(inverse))

    def smooth(
        self,
        current: Mapping[Metal, float],
        target: Mapping[Metal, float],
        lambda_: float | None = None,
    ) -> dict[Metal, float]:
        """Move ``current`` toward ``target``: ``w = w * (1 - lambda) + target * lambda``."""
        factor = self.lambda_ if lambda_ is None else lambda_
        blended = {
            asset: weight * (1.0 - factor) + target[asset] * factor
            for asset, weight in current.items()
        }
        return self.clamp_and_normalize(blended)

    def overshoot(self, weights: Mapping[Metal, float]) -> dict[Metal, float]:
        """Distance of each weight outside its bound, 0.0 when inside."""
        distances: dict[Metal, float] = {}
        for asset, weight in weights.items():
            bounds = self.bounds[asset]
            distances[asset] = max(0.0, weight - bounds.max, bounds.min - weight)
        return distances

    def max_overshoot_bound(self) -> dict[Metal, float]:
        """Worst-case ``overshoot`` clamp-then-normalize can produce per asset.

        Above the upper bound: the asset sits at ``max`` while every other
        asset sits at its ``min``, giving ``max / (max + sum(other mins))``.
        Below the lower bound mirrors that with the other maxima.
        """
        result: dict[Metal, float] = {}
        for asset, bounds in self.bounds.items():
            other_mins = sum(b.min for other, b in self.bounds.items() if other != asset)
            other_maxes = sum(b.max for other, b in self.bounds.items() if other != asset)
            above = bounds.max / (bounds.max + other_mins) - bounds.max if bounds.max > 0 else 0.0
            below = bounds.min - bounds.min / (bounds.min + other_maxes) if bounds.min > 0 else 0.0
            result[asset] = max(0.0, above, below)
        return result

    def within_bounds(self, weights: Mapping[Metal, float], tolerance: float = SUM_TOLERANCE) -> bool:
        return all(value <= tolerance for value in self.overshoot(weights).values())

    def initial_weights(self) -> dict[Metal, float]:
        if set(self.bounds) == set(INITIAL_WEIGHTS):
            return dict(INITIAL_WEIGHTS)
        return _normalize({asset: bounds.midpoint for asset, bounds in self.bounds.items()})


def weights_sum(weights: Mapping[Metal, float]) -> float:
    return sum(weights.values())


__all__ = [
    "DEFAULT_BOUNDS",
    "DEFAULT_LAMBDA",
    "INITIAL_WEIGHTS",
    "SUM_TOLERANCE",
    "WeightBounds",
    "WeightEngine",
    "weights_sum",
]
