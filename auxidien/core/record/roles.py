"""Capability roles checked by the price record."""

from enum import Enum


class Role(str, Enum):
    """Roles an account can hold on the record."""

    ADMIN = "ADMIN"
    UPDATER = "UPDATER"


__all__ = ["Role"]
