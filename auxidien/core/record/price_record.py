"""Authoritative index price record with admission control.

The record is a two-state machine. It starts UNINITIALIZED and becomes
LIVE with the first accepted update, whatever the clock reads at that
moment; every later acceptance re-enters LIVE.

A proposal is checked in a fixed order and rejected at the first failing
step, leaving state untouched:

1. the caller holds ``Role.UPDATER``
2. the price is an integer in (0, 2**256 - 1] (and a constituent
   snapshot, when given, carries all four metals as uint256 integers)
3. LIVE with a positive interval: ``now >= last_update_at + min_update_interval``
4. LIVE: ``|new - stored| <= stored * max_change_rate_bps // 10000``

Steps 3 and 4 are skipped for the first update. Acceptance commits price,
timestamp and constituents together under one lock, so concurrent
proposers are serialized and the slower one sees a rate-limit rejection.
Listeners are notified before the next commit can start, so they observe
events in commit order.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from loguru import logger

from auxidien.core.exceptions import (
    AdmissionError,
    AuthorizationError,
    MagnitudeError,
    RateLimitError,
    ValidationError,
    error_handler,
)
from auxidien.core.models import BASKET, Metal

from .events import (
    ConstituentsRecorded,
    EventListener,
    IntervalChanged,
    MaxChangeRateChanged,
    PriceUpdated,
    RecordEvent,
)
from .fixedpoint import BPS_DENOMINATOR, DECIMALS, MAX_PRICE, max_change
from .result import UpdateResult
from .roles import Role

DEFAULT_MIN_UPDATE_INTERVAL = 300
# Admits the loosest regime policy (LOW, 5%).
DEFAULT_MAX_CHANGE_RATE_BPS = 500


class RecordState(str, Enum):
    UNINITIALIZED = "UNINITIALIZED"
    LIVE = "LIVE"


@dataclass(frozen=True)
class PriceReading:
    price: int
    updated_at: int
    decimals: int = DECIMALS


@dataclass(frozen=True)
class ConstituentSnapshot:
    gold: int
    silver: int
    platinum: int
    palladium: int
    timestamp: int

    def as_mapping(self) -> dict[Metal, int]:
        return {
            Metal.XAU: self.gold,
            Metal.XAG: self.silver,
            Metal.XPT: self.platinum,
            Metal.XPD: self.palladium,
        }


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class PriceRecord:
    """In-process authoritative record; the single source of truth for the index price."""

    def __init__(
        self,
        admin: str,
        *,
        min_update_interval: int = DEFAULT_MIN_UPDATE_INTERVAL,
        max_change_rate_bps: int = DEFAULT_MAX_CHANGE_RATE_BPS,
        updaters: Iterable[str] = (),
        clock: Callable[[], int] | None = None,
    ) -> None:
        if not _is_int(min_update_interval) or min_update_interval < 0:
            raise ValueError("min_update_interval must be a non-negative integer")
        if not _is_int(max_change_rate_bps) or not 0 < max_change_rate_bps <= BPS_DENOMINATOR:
            raise ValueError("max_change_rate_bps must be in (0, 10000]")

        self._clock = clock or (lambda: int(time.time()))
        self._lock = threading.Lock()
        # Held across commit and dispatch so listeners see events in commit order.
        self._publish_lock = threading.RLock()
        self._listeners: list[EventListener] = []

        self._price = 0
        self._last_update_at = 0
        self._live = False
        self._min_update_interval = min_update_interval
        self._max_change_rate_bps = max_change_rate_bps
        self._constituents: ConstituentSnapshot | None = None
        self._roles: dict[str, set[Role]] = {admin: {Role.ADMIN}}
        for account in updaters:
            self._roles.setdefault(account, set()).add(Role.UPDATER)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def subscribe(self, listener: EventListener) -> None:
        self._listeners.append(listener)

    def _dispatch(self, events: Iterable[RecordEvent]) -> None:
        for event in events:
            for listener in self._listeners:
                try:
                    listener(event)
                except Exception as exc:
                    # The state change is already committed; a failing listener cannot undo it.
                    error_handler.log_error(exc, {"operation": "dispatch", "event": event.name})

    # ------------------------------------------------------------------
    # Price updates
    # ------------------------------------------------------------------

    def propose_update(
        self,
        caller: str,
        new_price: int,
        constituents: Mapping[Metal, int] | None = None,
    ) -> UpdateResult:
        """Validate and commit a new index price."""
        with self._publish_lock:
            with self._lock:
                result = self._admit(caller, new_price, constituents)
            if result.accepted:
                self._dispatch(result.events)
        if result.accepted:
            logger.debug("Record accepted price {} from {}", new_price, caller)
        else:
            logger.debug("Record rejected price {} from {}: {}", new_price, caller, result.reason)
        return result

    def set_price(self, caller: str, price: int) -> UpdateResult:
        return self.propose_update(caller, price)

    def set_price_with_constituents(
        self,
        caller: str,
        price: int,
        gold: int,
        silver: int,
        platinum: int,
        palladium: int,
    ) -> UpdateResult:
        constituents = {Metal.XAU: gold, Metal.XAG: silver, Metal.XPT: platinum, Metal.XPD: palladium}
        return self.propose_update(caller, price, constituents)

    def _admit(
        self,
        caller: str,
        new_price: int,
        constituents: Mapping[Metal, int] | None,
    ) -> UpdateResult:
        if not self._has_role(caller, Role.UPDATER):
            return UpdateResult.reject(
                AuthorizationError(f"{caller} does not hold the {Role.UPDATER.value} role", {"caller": caller})
            )

        if not _is_int(new_price) or not 0 < new_price <= MAX_PRICE:
            return UpdateResult.reject(
                ValidationError("price must be a positive integer no larger than 2**256 - 1", {"price": new_price})
            )

        if constituents is not None:
            problem = _constituent_problem(constituents)
            if problem is not None:
                return UpdateResult.reject(problem)

        now = self._clock()
        if self._live:
            if self._min_update_interval > 0:
                earliest = self._last_update_at + self._min_update_interval
                if now < earliest:
                    return UpdateResult.reject(
                        RateLimitError(
                            "update interval has not elapsed",
                            retry_after=earliest - now,
                            details={"last_update_at": self._last_update_at, "now": now},
                        )
                    )

            allowed = max_change(self._price, self._max_change_rate_bps)
            change = abs(new_price - self._price)
            if change > allowed:
                return UpdateResult.reject(
                    MagnitudeError(
                        "price change too large",
                        {
                            "stored_price": self._price,
                            "proposed_price": new_price,
                            "change": change,
                            "max_change": allowed,
                        },
                    )
                )

        self._price = new_price
        self._last_update_at = now
        self._live = True
        events: list[RecordEvent] = [PriceUpdated(price=new_price, timestamp=now, updater=caller)]
        if constituents is not None:
            self._constituents = ConstituentSnapshot(
                gold=constituents[Metal.XAU],
                silver=constituents[Metal.XAG],
                platinum=constituents[Metal.XPT],
                palladium=constituents[Metal.XPD],
                timestamp=now,
            )
            events.append(
                ConstituentsRecorded(
                    gold=self._constituents.gold,
                    silver=self._constituents.silver,
                    platinum=self._constituents.platinum,
                    palladium=self._constituents.palladium,
                    timestamp=now,
                )
            )
        return UpdateResult.ok(*events)

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def grant_updater(self, caller: str, account: str) -> UpdateResult:
        with self._lock:
            denied = self._require_admin(caller)
            if denied is not None:
                return denied
            self._roles.setdefault(account, set()).add(Role.UPDATER)
        logger.info("Granted {} to {}", Role.UPDATER.value, account)
        return UpdateResult.ok()

    def revoke_updater(self, caller: str, account: str) -> UpdateResult:
        with self._lock:
            denied = self._require_admin(caller)
            if denied is not None:
                return denied
            self._roles.get(account, set()).discard(Role.UPDATER)
        logger.info("Revoked {} from {}", Role.UPDATER.value, account)
        return UpdateResult.ok()

    def set_min_update_interval(self, caller: str, seconds: int) -> UpdateResult:
        with self._publish_lock:
            with self._lock:
                denied = self._require_admin(caller)
                if denied is not None:
                    return denied
                if not _is_int(seconds) or seconds < 0:
                    return UpdateResult.reject(
                        ValidationError("interval must be a non-negative integer", {"seconds": seconds})
                    )
                event = IntervalChanged(old=self._min_update_interval, new=seconds)
                self._min_update_interval = seconds
            self._dispatch([event])
        return UpdateResult.ok(event)

    def set_max_change_rate(self, caller: str, bps: int) -> UpdateResult:
        with self._publish_lock:
            with self._lock:
                denied = self._require_admin(caller)
                if denied is not None:
                    return denied
                if not _is_int(bps) or not 0 < bps <= BPS_DENOMINATOR:
                    return UpdateResult.reject(
                        ValidationError("max change rate must be between 1 and 10000 bps", {"bps": bps})
                    )
                event = MaxChangeRateChanged(old=self._max_change_rate_bps, new=bps)
                self._max_change_rate_bps = bps
            self._dispatch([event])
        return UpdateResult.ok(event)

    def _require_admin(self, caller: str) -> UpdateResult | None:
        if self._has_role(caller, Role.ADMIN):
            return None
        return UpdateResult.reject(
            AuthorizationError(f"{caller} does not hold the {Role.ADMIN.value} role", {"caller": caller})
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _has_role(self, account: str, role: Role) -> bool:
        return role in self._roles.get(account, ())

    def has_role(self, account: str, role: Role) -> bool:
        return self._has_role(account, role)

    @property
    def state(self) -> RecordState:
        return RecordState.LIVE if self._live else RecordState.UNINITIALIZED

    @property
    def min_update_interval(self) -> int:
        return self._min_update_interval

    @property
    def max_change_rate_bps(self) -> int:
        return self._max_change_rate_bps

    def price(self) -> int:
        return self._price

    def latest(self) -> PriceReading:
        return PriceReading(price=self._price, updated_at=self._last_update_at)

    def constituents(self) -> ConstituentSnapshot | None:
        return self._constituents

    def is_stale(self, max_age: int) -> bool:
        if not _is_int(max_age) or max_age < 0:
            raise ValueError("max_age must be a non-negative integer")
        if not self._live:
            return True
        return self._clock() > self._last_update_at + max_age

    def status(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "price": self._price,
            "updated_at": self._last_update_at,
            "decimals": DECIMALS,
            "min_update_interval": self._min_update_interval,
            "max_change_rate_bps": self._max_change_rate_bps,
        }


def _constituent_problem(constituents: Mapping[Metal, int]) -> AdmissionError | None:
    keys = set(constituents)
    if keys != set(BASKET):
        return ValidationError(
            "constituents must include exactly XAU, XAG, XPT and XPD",
            {"received": sorted(str(getattr(key, "value", key)) for key in keys)},
        )
    for metal in BASKET:
        value = constituents[metal]
        if not _is_int(value) or not 0 <= value <= MAX_PRICE:
            return ValidationError(
                "constituent prices must be integers within uint256", {"metal": metal.value, "value": value}
            )
    return None


__all__ = [
    "ConstituentSnapshot",
    "DEFAULT_MAX_CHANGE_RATE_BPS",
    "DEFAULT_MIN_UPDATE_INTERVAL",
    "PriceReading",
    "PriceRecord",
    "RecordState",
]
