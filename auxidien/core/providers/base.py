"""Spot price provider interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from auxidien.core.models import Metal, SpotQuote


class SpotPriceProvider(ABC):
    """Per-metal USD spot price lookup.

    Implementations raise :class:`~auxidien.core.exceptions.UpstreamFetchError`
    on any transport or API failure.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name identifier."""

    @abstractmethod
    async def fetch(self, metal: Metal) -> SpotQuote:
        """Return the current spot quote per troy ounce for ``metal``."""

    async def aclose(self) -> None:
        """Release transport resources."""

    async def __aenter__(self) -> "SpotPriceProvider":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()


__all__ = ["SpotPriceProvider"]
