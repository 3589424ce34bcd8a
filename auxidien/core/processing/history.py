"""Bounded per-asset price history."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable

from auxidien.core.models import BASKET, Metal, PricePoint

# 24 hours of samples at the nominal 5 minute cadence.
DEFAULT_CAPACITY = 288


class AssetSeries:
    """Time-ordered samples of one asset, oldest evicted on overflow."""

    def __init__(self, symbol: str, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self.symbol = symbol
        self.capacity = capacity
        self._points: deque[PricePoint] = deque(maxlen=capacity)

    def append(self, price: float, timestamp: float) -> None:
        self._points.append(PricePoint(timestamp=timestamp, price=price))

    @property
    def points(self) -> tuple[PricePoint, ...]:
        return tuple(self._points)

    def prices(self) -> list[float]:
        return [point.price for point in self._points]

    def latest(self) -> PricePoint | None:
        return self._points[-1] if self._points else None

    def __len__(self) -> int:
        return len(self._points)

    def __repr__(self) -> str:
        return f"AssetSeries(symbol={self.symbol!r}, len={len(self)}, capacity={self.capacity})"


class HistoryStore:
    """Per-asset bounded buffers fed once per tick by the gateway.

    Append-only: ``record`` is the only mutator and samples are never
    reordered, so callers must record in time order.
    """

    def __init__(self, assets: Iterable[Metal] = BASKET, capacity: int = DEFAULT_CAPACITY) -> None:
        self.capacity = capacity
        self._series: dict[Metal, AssetSeries] = {
            asset: AssetSeries(asset.value, capacity) for asset in assets
        }

    def record(self, asset: Metal, price: float, timestamp: float) -> None:
        """Append a sample, evicting the oldest when the buffer is full."""
        series = self._series.get(asset)
        if series is None:
            series = self._series[asset] = AssetSeries(asset.value, self.capacity)
        series.append(price, timestamp)

    def series(self, asset: Metal) -> AssetSeries:
        series = self._series.get(asset)
        if series is None:
            raise KeyError(f"No history for {asset.value}")
        return series

    def prices(self, asset: Metal) -> list[float]:
        return self.series(asset).prices()

    def count(self, asset: Metal) -> int:
        series = self._series.get(asset)
        return len(series) if series is not None else 0

    def assets(self) -> tuple[Metal, ...]:
        return tuple(self._series)


__all__ = ["AssetSeries", "DEFAULT_CAPACITY", "HistoryStore"]
