"""Index value calculation."""

from __future__ import annotations

from collections.abc import Mapping

from auxidien.core.models import Metal


def contributions(prices: Mapping[Metal, float], weights: Mapping[Metal, float]) -> dict[Metal, float]:
    """Per-asset ``weight * price`` terms."""
    missing = set(weights) - set(prices)
    if missing:
        names = ", ".join(sorted(asset.value for asset in missing))
        raise KeyError(f"missing prices for: {names}")
    return {asset: weight * prices[asset] for asset, weight in weights.items()}


def compute_index(prices: Mapping[Metal, float], weights: Mapping[Metal, float]) -> float:
    """Weighted basket value, ``sum(weight_i * price_i)``."""
    return sum(contributions(prices, weights).values())


__all__ = ["compute_index", "contributions"]
