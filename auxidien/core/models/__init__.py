"""Domain models."""

from .market import BASKET, OUNCE_TO_GRAM, Metal, parse_metal
from .snapshot import IndexSnapshot, PricePoint, SpotQuote

__all__ = [
    "BASKET",
    "IndexSnapshot",
    "Metal",
    "OUNCE_TO_GRAM",
    "PricePoint",
    "SpotQuote",
    "parse_metal",
]
