"""Tests for one publication tick against an in-process record."""

from __future__ import annotations

import pytest

from auxidien.core.exceptions import MagnitudeError, RateLimitError, UpstreamFetchError
from auxidien.core.gateway import LocalRecordClient, PublicationGateway
from auxidien.core.models import BASKET, OUNCE_TO_GRAM, Metal
from auxidien.core.monitoring import MetricsCollector
from auxidien.core.processing import INITIAL_WEIGHTS, ProcessorState, Regime, compute_index
from auxidien.core.providers import (
    REFERENCE_PRICES,
    FailingSpotPriceProvider,
    StaticSpotPriceProvider,
)
from auxidien.core.record import PriceRecord, RecordState, to_fixed


class SleepRecorder:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def sleeps() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def provider() -> StaticSpotPriceProvider:
    return StaticSpotPriceProvider()


@pytest.fixture
def gateway(provider, record: PriceRecord, clock, metrics: MetricsCollector, sleeps) -> PublicationGateway:
    return PublicationGateway(
        provider,
        LocalRecordClient(record, "watcher"),
        metrics=metrics,
        sleep=sleeps,
        clock=lambda: float(clock.now),
    )


@pytest.mark.asyncio
async def test_first_tick_publishes_index(gateway, record: PriceRecord, metrics, sleeps) -> None:
    state = ProcessorState.initial()

    report = await gateway.run_tick(state)

    assert report.published
    assert report.regime.regime is Regime.MEDIUM
    assert state.ticks == 1
    assert state.published == 1
    assert all(state.history.count(metal) == 1 for metal in BASKET)
    assert sum(state.weights.values()) == pytest.approx(1.0, abs=1e-9)
    assert state.weights != dict(INITIAL_WEIGHTS)

    per_gram = {metal: REFERENCE_PRICES[metal] / OUNCE_TO_GRAM for metal in BASKET}
    assert report.snapshot.prices == pytest.approx(per_gram)
    assert report.snapshot.index_value == pytest.approx(compute_index(per_gram, state.weights))
    assert report.fixed_price == to_fixed(report.snapshot.index_value)
    assert report.fixed_constituents[Metal.XAU] == to_fixed(per_gram[Metal.XAU])

    assert record.state is RecordState.LIVE
    assert record.price() == report.fixed_price
    assert record.constituents().as_mapping() == report.fixed_constituents
    assert report.record.price == report.fixed_price
    assert report.record.updated_at == 1000

    assert sleeps.delays == [1.5, 1.5, 1.5]
    assert metrics.registry.get_sample_value("auxidien_ticks_total", {"outcome": "published"}) == 1.0
    assert metrics.registry.get_sample_value("auxidien_record_price") == report.fixed_price


@pytest.mark.asyncio
async def test_summary_is_json_ready(gateway) -> None:
    report = await gateway.run_tick(ProcessorState.initial())

    summary = report.summary()

    assert summary["regime"] == "MEDIUM"
    assert summary["fixed_price"] == report.fixed_price
    assert summary["result"]["accepted"] is True
    assert set(summary["weights"]) == {"XAU", "XAG", "XPT", "XPD"}
    assert summary["timestamp"].startswith("1970-01-01T00:16:40")


@pytest.mark.asyncio
async def test_fetch_failure_leaves_state_untouched(record: PriceRecord, metrics, sleeps) -> None:
    gateway = PublicationGateway(
        FailingSpotPriceProvider(failing=[Metal.XPT]),
        LocalRecordClient(record, "watcher"),
        metrics=metrics,
        sleep=sleeps,
    )
    state = ProcessorState.initial()
    weights_before = dict(state.weights)

    with pytest.raises(UpstreamFetchError):
        await gateway.run_tick(state)

    assert state.ticks == 0
    assert state.weights == weights_before
    assert all(state.history.count(metal) == 0 for metal in BASKET)
    assert record.state is RecordState.UNINITIALIZED
    assert metrics.registry.get_sample_value("auxidien_ticks_total", {"outcome": "fetch_failed"}) == 1.0
    assert metrics.registry.get_sample_value("auxidien_fetch_failures_total", {"metal": "XPT"}) == 1.0


@pytest.mark.asyncio
async def test_rate_limited_tick_keeps_advanced_weights(gateway, record: PriceRecord) -> None:
    state = ProcessorState.initial()
    first = await gateway.run_tick(state)
    weights_after_first = dict(state.weights)

    second = await gateway.run_tick(state)

    assert not second.published
    assert isinstance(second.result.error, RateLimitError)
    assert second.result.error.retry_after == 300
    assert state.ticks == 2
    assert state.rejected == 1
    assert state.last_rejection == "RateLimitError"
    assert state.weights != weights_after_first
    assert record.price() == first.fixed_price
    assert second.record.price == first.fixed_price


@pytest.mark.asyncio
async def test_large_move_is_rejected_as_magnitude(gateway, provider, record: PriceRecord, clock, metrics) -> None:
    state = ProcessorState.initial()
    first = await gateway.run_tick(state)

    clock.advance(300)
    for metal, price in REFERENCE_PRICES.items():
        provider.set_price(metal, price * 1.2)
    report = await gateway.run_tick(state)

    assert isinstance(report.result.error, MagnitudeError)
    assert report.result.error.details["stored_price"] == first.fixed_price
    assert record.price() == first.fixed_price
    assert metrics.registry.get_sample_value("auxidien_rejections_total", {"reason": "MagnitudeError"}) == 1.0


@pytest.mark.asyncio
async def test_small_move_after_interval_is_accepted(gateway, provider, record: PriceRecord, clock) -> None:
    state = ProcessorState.initial()
    await gateway.run_tick(state)

    clock.advance(300)
    provider.set_price(Metal.XAU, REFERENCE_PRICES[Metal.XAU] * 1.01)
    report = await gateway.run_tick(state)

    assert report.published
    assert record.price() == report.fixed_price
    assert state.published == 2


@pytest.mark.asyncio
async def test_unauthorized_caller_is_rejected(provider, record: PriceRecord, metrics, sleeps) -> None:
    gateway = PublicationGateway(provider, LocalRecordClient(record, "stranger"), metrics=metrics, sleep=sleeps)
    state = ProcessorState.initial()

    report = await gateway.run_tick(state)

    assert report.result.reason == "AuthorizationError"
    assert state.rejected == 1
    assert report.record.price == 0


@pytest.mark.asyncio
async def test_no_courtesy_delay_when_disabled(provider, record: PriceRecord, metrics, sleeps) -> None:
    gateway = PublicationGateway(
        provider, LocalRecordClient(record, "watcher"), metrics=metrics, sleep=sleeps, courtesy_delay=0
    )

    await gateway.run_tick(ProcessorState.initial())

    assert sleeps.delays == []
    assert provider.calls == list(BASKET)
