"""Tests for price record admission control."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from auxidien.core.exceptions import (
    AuthorizationError,
    MagnitudeError,
    RateLimitError,
    ValidationError,
)
from auxidien.core.models import Metal
from auxidien.core.record import (
    MAX_PRICE,
    ConstituentsRecorded,
    PriceRecord,
    PriceUpdated,
    RecordState,
    Role,
)

CONSTITUENTS = {Metal.XAU: 75_553_000, Metal.XAG: 948_000, Metal.XPT: 31_508_000, Metal.XPD: 32_472_000}


def test_starts_uninitialized(record: PriceRecord) -> None:
    assert record.state is RecordState.UNINITIALIZED
    assert record.price() == 0
    assert record.latest().updated_at == 0
    assert record.latest().decimals == 6
    assert record.constituents() is None
    assert record.min_update_interval == 300
    assert record.max_change_rate_bps == 500


def test_first_update_skips_rate_and_magnitude_checks(record: PriceRecord, clock) -> None:
    result = record.set_price("watcher", 42_000_000)

    assert result.accepted
    assert record.state is RecordState.LIVE
    assert record.latest().price == 42_000_000
    assert record.latest().updated_at == clock.now
    assert result.events == (PriceUpdated(price=42_000_000, timestamp=1000, updater="watcher"),)


def test_caller_without_updater_role_is_rejected(record: PriceRecord) -> None:
    result = record.set_price("admin", 42_000_000)

    assert not result.accepted
    assert isinstance(result.error, AuthorizationError)
    assert result.reason == "AuthorizationError"
    assert record.state is RecordState.UNINITIALIZED


@pytest.mark.parametrize("price", [0, -1, 1.5, True])
def test_price_must_be_a_positive_integer(record: PriceRecord, price: object) -> None:
    result = record.set_price("watcher", price)  # type: ignore[arg-type]

    assert isinstance(result.error, ValidationError)
    assert record.price() == 0


def test_role_check_precedes_price_validation(record: PriceRecord) -> None:
    result = record.set_price("stranger", 0)

    assert isinstance(result.error, AuthorizationError)


def test_interval_boundary(record: PriceRecord, clock) -> None:
    assert record.set_price("watcher", 1_000_000).accepted

    clock.now = 1299
    early = record.set_price("watcher", 1_010_000)
    assert isinstance(early.error, RateLimitError)
    assert early.error.retry_after == 1
    assert record.price() == 1_000_000

    clock.now = 1300
    assert record.set_price("watcher", 1_010_000).accepted
    assert record.latest().updated_at == 1300


def test_zero_interval_disables_rate_limit(clock) -> None:
    record = PriceRecord("admin", min_update_interval=0, updaters=["watcher"], clock=clock)

    assert record.set_price("watcher", 1_000_000).accepted
    assert record.set_price("watcher", 1_000_001).accepted


@pytest.fixture
def live_record(clock) -> PriceRecord:
    record = PriceRecord("admin", min_update_interval=0, updaters=["watcher"], clock=clock)
    assert record.set_price("watcher", 1_000_000).accepted
    return record


def test_magnitude_exact_bound_accepted(live_record: PriceRecord) -> None:
    assert live_record.set_price("watcher", 1_050_000).accepted


def test_magnitude_one_past_bound_rejected(live_record: PriceRecord) -> None:
    result = live_record.set_price("watcher", 1_050_001)

    assert isinstance(result.error, MagnitudeError)
    assert result.error.details["max_change"] == 50_000
    assert result.error.details["change"] == 50_001
    assert live_record.price() == 1_000_000


def test_magnitude_applies_downward(live_record: PriceRecord) -> None:
    assert isinstance(live_record.set_price("watcher", 949_999).error, MagnitudeError)
    assert live_record.set_price("watcher", 950_000).accepted


def test_magnitude_bound_is_floored(clock) -> None:
    record = PriceRecord("admin", min_update_interval=0, updaters=["watcher"], clock=clock)
    record.set_price("watcher", 1_000_001)

    # 1_000_001 * 500 / 10_000 = 50_000.05, floored to 50_000
    assert isinstance(record.set_price("watcher", 1_050_002).error, MagnitudeError)
    assert record.set_price("watcher", 1_050_001).accepted


def test_rate_limit_checked_before_magnitude(record: PriceRecord, clock) -> None:
    record.set_price("watcher", 1_000_000)
    clock.advance(10)

    result = record.set_price("watcher", 5_000_000)

    assert isinstance(result.error, RateLimitError)


def test_is_stale_boundary(record: PriceRecord, clock) -> None:
    assert record.is_stale(900)

    record.set_price("watcher", 1_000_000)
    clock.now = 1900
    assert not record.is_stale(900)
    clock.now = 1901
    assert record.is_stale(900)


def test_constituents_committed_with_price(record: PriceRecord, clock) -> None:
    result = record.set_price_with_constituents("watcher", 40_000_000, 75_553_000, 948_000, 31_508_000, 32_472_000)

    assert result.accepted
    snapshot = record.constituents()
    assert snapshot is not None
    assert snapshot.as_mapping() == CONSTITUENTS
    assert snapshot.timestamp == clock.now
    assert result.events[1] == ConstituentsRecorded(
        gold=75_553_000, silver=948_000, platinum=31_508_000, palladium=32_472_000, timestamp=1000
    )


@pytest.mark.parametrize(
    "constituents",
    [
        {Metal.XAU: 1, Metal.XAG: 2, Metal.XPT: 3},
        {Metal.XAU: 1, Metal.XAG: 2, Metal.XPT: 3, Metal.XPD: 4.5},
        {Metal.XAU: 1, Metal.XAG: 2, Metal.XPT: 3, Metal.XPD: 4, "XRH": 5},
    ],
)
def test_malformed_constituents_rejected_without_state_change(record: PriceRecord, constituents: dict) -> None:
    result = record.propose_update("watcher", 40_000_000, constituents)

    assert isinstance(result.error, ValidationError)
    assert record.state is RecordState.UNINITIALIZED
    assert record.constituents() is None


def test_price_only_update_keeps_previous_constituents(clock) -> None:
    record = PriceRecord("admin", min_update_interval=0, updaters=["watcher"], clock=clock)
    record.propose_update("watcher", 40_000_000, CONSTITUENTS)
    clock.advance(5)

    record.set_price("watcher", 40_100_000)

    assert record.constituents().timestamp == 1000
    assert record.latest().updated_at == 1005


def test_listeners_receive_events_after_commit(record: PriceRecord) -> None:
    seen: list[tuple[object, int]] = []
    record.subscribe(lambda event: seen.append((event, record.price())))

    record.propose_update("watcher", 40_000_000, CONSTITUENTS)

    assert [type(event) for event, _ in seen] == [PriceUpdated, ConstituentsRecorded]
    assert all(price == 40_000_000 for _, price in seen)


def test_failing_listener_does_not_undo_update(record: PriceRecord) -> None:
    def broken(event: object) -> None:
        raise RuntimeError("listener down")

    received: list[object] = []
    record.subscribe(broken)
    record.subscribe(received.append)

    result = record.set_price("watcher", 40_000_000)

    assert result.accepted
    assert record.price() == 40_000_000
    assert len(received) == 1


def test_rejection_emits_no_events(record: PriceRecord) -> None:
    received: list[object] = []
    record.subscribe(received.append)

    result = record.set_price("stranger", 40_000_000)

    assert result.events == ()
    assert received == []


def test_concurrent_proposals_admit_exactly_one(record: PriceRecord, clock) -> None:
    record.set_price("watcher", 1_000_000)
    clock.now = 1300

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda price: record.set_price("watcher", price), range(1_000_001, 1_000_017)))

    accepted = [result for result in results if result.accepted]
    assert len(accepted) == 1
    assert all(isinstance(result.error, RateLimitError) for result in results if not result.accepted)


def test_raise_for_rejection(record: PriceRecord) -> None:
    result = record.set_price("stranger", 1)

    with pytest.raises(AuthorizationError):
        result.raise_for_rejection()
    record.set_price("watcher", 1).raise_for_rejection()


def test_result_to_dict(record: PriceRecord) -> None:
    rejected = record.set_price("watcher", 0).to_dict()
    accepted = record.set_price("watcher", 7).to_dict()

    assert rejected["accepted"] is False
    assert rejected["reason"] == "ValidationError"
    assert rejected["error_code"] == "VALIDATION_ERROR"
    assert accepted == {
        "accepted": True,
        "events": [{"event": "price_updated", "price": 7, "timestamp": 1000, "updater": "watcher"}],
    }


def test_roles(record: PriceRecord) -> None:
    assert record.has_role("admin", Role.ADMIN)
    assert not record.has_role("admin", Role.UPDATER)
    assert record.has_role("watcher", Role.UPDATER)
    assert not record.has_role("nobody", Role.UPDATER)


@pytest.mark.parametrize(("interval", "bps"), [(-1, 500), (300, 0), (300, 10_001)])
def test_constructor_validates_parameters(interval: int, bps: int) -> None:
    with pytest.raises(ValueError):
        PriceRecord("admin", min_update_interval=interval, max_change_rate_bps=bps)


def test_price_above_uint256_is_rejected(record: PriceRecord) -> None:
    result = record.set_price("watcher", MAX_PRICE + 1)

    assert isinstance(result.error, ValidationError)
    assert record.state is RecordState.UNINITIALIZED
    assert record.set_price("watcher", MAX_PRICE).accepted


def test_constituent_above_uint256_is_rejected(record: PriceRecord) -> None:
    result = record.propose_update("watcher", 40_000_000, {**CONSTITUENTS, Metal.XPD: MAX_PRICE + 1})

    assert isinstance(result.error, ValidationError)
    assert result.error.details["metal"] == "XPD"


@pytest.mark.parametrize("max_age", [-1, 1.5])
def test_is_stale_rejects_invalid_max_age(record: PriceRecord, max_age: object) -> None:
    with pytest.raises(ValueError):
        record.is_stale(max_age)  # type: ignore[arg-type]


def test_first_commit_at_time_zero_goes_live() -> None:
    record = PriceRecord("admin", updaters=["watcher"], clock=lambda: 0)

    assert record.set_price("watcher", 1_000_000).accepted
    assert record.state is RecordState.LIVE
    assert not record.is_stale(0)

    early = record.set_price("watcher", 1_000_001)
    assert isinstance(early.error, RateLimitError)
    assert early.error.retry_after == 300
