"""Basket constituents and unit constants."""

from enum import Enum

# Grams per troy ounce; upstream quotes are per ounce, the index is per gram.
OUNCE_TO_GRAM = 31.1035


class Metal(str, Enum):
    """Precious metals in the index basket."""

    XAU = "XAU"  # gold
    XAG = "XAG"  # silver
    XPT = "XPT"  # platinum
    XPD = "XPD"  # palladium

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    Metal.XAU: "gold",
    Metal.XAG: "silver",
    Metal.XPT: "platinum",
    Metal.XPD: "palladium",
}

# Canonical order: fetch order, wire order of constituent prices, log order.
BASKET: tuple[Metal, ...] = (Metal.XAU, Metal.XAG, Metal.XPT, Metal.XPD)


def parse_metal(value: str) -> Metal:
    """Resolve ``XAU``, ``xau``, ``XAUUSD`` or ``gold`` to a :class:`Metal`."""

    cleaned = value.strip().upper()
    if cleaned.endswith("USD") and len(cleaned) == 6:
        cleaned = cleaned[:3]
    for metal in Metal:
        if cleaned in (metal.value, metal.display_name.upper()):
            return metal
    raise ValueError(f"Unknown metal: {value!r}")


__all__ = ["BASKET", "Metal", "OUNCE_TO_GRAM", "parse_metal"]
