"""
Mock spot price providers for testing and development.

These simulate the upstream lookup without network access: fixed quotes,
scripted price paths that advance once per tick, and an outage.
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Mapping

from auxidien.core.exceptions import UpstreamFetchError
from auxidien.core.models import Metal, SpotQuote

from .base import SpotPriceProvider

# Rough per-ounce USD levels, used when no prices are given.
REFERENCE_PRICES: dict[Metal, float] = {
    Metal.XAU: 2350.0,
    Metal.XAG: 29.5,
    Metal.XPT: 980.0,
    Metal.XPD: 1010.0,
}


def _quote(metal: Metal, price: float) -> SpotQuote:
    return SpotQuote(price=price, symbol=metal.value, currency="USD", timestamp=int(time.time()))


class StaticSpotPriceProvider(SpotPriceProvider):
    """Returns the same quote for a metal on every call."""

    def __init__(self, prices: Mapping[Metal, float] | None = None, name: str = "static") -> None:
        self._prices = dict(prices or REFERENCE_PRICES)
        self._name = name
        self.calls: list[Metal] = []

    @property
    def name(self) -> str:
        return self._name

    def set_price(self, metal: Metal, price: float) -> None:
        self._prices[metal] = price

    async def fetch(self, metal: Metal) -> SpotQuote:
        self.calls.append(metal)
        if metal not in self._prices:
            raise UpstreamFetchError(f"no mock price for {metal.value}", symbol=metal.value, status_code=404)
        return _quote(metal, self._prices[metal])


class ScriptedSpotPriceProvider(SpotPriceProvider):
    """Replays a price path per metal; the last price repeats once a path runs out."""

    def __init__(self, paths: Mapping[Metal, Iterable[float]], name: str = "scripted") -> None:
        self._paths = {metal: list(path) for metal, path in paths.items()}
        self._positions = {metal: 0 for metal in self._paths}
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    async def fetch(self, metal: Metal) -> SpotQuote:
        path = self._paths.get(metal)
        if not path:
            raise UpstreamFetchError(f"no scripted prices for {metal.value}", symbol=metal.value, status_code=404)
        position = self._positions[metal]
        self._positions[metal] = position + 1
        return _quote(metal, path[min(position, len(path) - 1)])


class FailingSpotPriceProvider(SpotPriceProvider):
    """Fails for the given metals (all metals by default), otherwise delegates."""

    def __init__(
        self,
        failing: Iterable[Metal] | None = None,
        status_code: int = 503,
        body: str = '{"error": "service unavailable"}',
        fallback: SpotPriceProvider | None = None,
    ) -> None:
        self._failing = set(failing) if failing is not None else set(Metal)
        self._status_code = status_code
        self._body = body
        self._fallback = fallback or StaticSpotPriceProvider()

    @property
    def name(self) -> str:
        return "failing"

    async def fetch(self, metal: Metal) -> SpotQuote:
        if metal in self._failing:
            raise UpstreamFetchError(
                f"mock upstream error for {metal.value}: {self._status_code}",
                symbol=metal.value,
                status_code=self._status_code,
                body=self._body,
            )
        return await self._fallback.fetch(metal)


__all__ = [
    "FailingSpotPriceProvider",
    "REFERENCE_PRICES",
    "ScriptedSpotPriceProvider",
    "StaticSpotPriceProvider",
]
