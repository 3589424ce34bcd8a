"""Upstream spot price providers."""

from .base import SpotPriceProvider
from .goldapi import DEFAULT_BASE_URL, GoldApiProvider
from .mock import (
    REFERENCE_PRICES,
    FailingSpotPriceProvider,
    ScriptedSpotPriceProvider,
    StaticSpotPriceProvider,
)

__all__ = [
    "DEFAULT_BASE_URL",
    "FailingSpotPriceProvider",
    "GoldApiProvider",
    "REFERENCE_PRICES",
    "ScriptedSpotPriceProvider",
    "SpotPriceProvider",
    "StaticSpotPriceProvider",
]
