"""Tests for the tick scheduler."""

from __future__ import annotations

import asyncio

import pytest

from auxidien.core.exceptions import ConfigurationError, RecordUnavailableError
from auxidien.core.gateway import LocalRecordClient, PublicationGateway, TickScheduler
from auxidien.core.models import BASKET
from auxidien.core.processing import ProcessorState, Regime, RegimeClassifier
from auxidien.core.providers import FailingSpotPriceProvider, StaticSpotPriceProvider
from auxidien.core.record import PriceRecord


async def _no_sleep(delay: float) -> None:
    return None


def _gateway(record: PriceRecord, metrics, provider=None, **kwargs) -> PublicationGateway:
    return PublicationGateway(
        provider or StaticSpotPriceProvider(),
        LocalRecordClient(record, "watcher"),
        metrics=metrics,
        sleep=_no_sleep,
        **kwargs,
    )


async def _wait_until(predicate, timeout: float = 2.0) -> None:
    async def poll() -> None:
        while not predicate():
            await asyncio.sleep(0.001)

    await asyncio.wait_for(poll(), timeout)


class BrokenGateway(PublicationGateway):
    def __init__(self, error: Exception, **kwargs) -> None:
        super().__init__(**kwargs)
        self.error = error

    async def run_tick(self, state: ProcessorState):
        raise self.error


def test_interval_must_be_positive(record, metrics) -> None:
    with pytest.raises(ValueError):
        TickScheduler(_gateway(record, metrics), ProcessorState.initial(), interval_seconds=0)


@pytest.mark.asyncio
async def test_run_stops_after_max_ticks(record, metrics) -> None:
    record.set_min_update_interval("admin", 0)
    scheduler = TickScheduler(_gateway(record, metrics), ProcessorState.initial(), interval_seconds=0.001)

    state = await scheduler.run(max_ticks=3)

    assert state.ticks == 3
    assert state.published == 3
    assert scheduler.last_report is not None
    assert not scheduler.running


@pytest.mark.asyncio
async def test_failed_ticks_do_not_stop_the_loop(record, metrics) -> None:
    gateway = _gateway(record, metrics, provider=FailingSpotPriceProvider())
    scheduler = TickScheduler(gateway, ProcessorState.initial(), interval_seconds=0.001)

    state = await scheduler.run(max_ticks=2)

    assert state.ticks == 0
    assert scheduler.last_report is None
    assert metrics.registry.get_sample_value("auxidien_ticks_total", {"outcome": "fetch_failed"}) == 2.0
    assert metrics.registry.get_sample_value("auxidien_ticks_total", {"outcome": "failed"}) is None


@pytest.mark.asyncio
async def test_record_outage_is_counted_as_failed_tick(metrics) -> None:
    gateway = BrokenGateway(
        RecordUnavailableError("record down"),
        provider=StaticSpotPriceProvider(),
        client=LocalRecordClient(PriceRecord("admin"), "watcher"),
        metrics=metrics,
    )
    scheduler = TickScheduler(gateway, ProcessorState.initial())

    assert await scheduler.tick() is None
    assert metrics.registry.get_sample_value("auxidien_ticks_total", {"outcome": "failed"}) == 1.0


@pytest.mark.asyncio
async def test_configuration_error_propagates(metrics) -> None:
    gateway = BrokenGateway(
        ConfigurationError("bad credentials", missing=["AUXIDIEN_GOLDAPI_KEY"]),
        provider=StaticSpotPriceProvider(),
        client=LocalRecordClient(PriceRecord("admin"), "watcher"),
        metrics=metrics,
    )
    scheduler = TickScheduler(gateway, ProcessorState.initial())

    with pytest.raises(ConfigurationError):
        await scheduler.run()

    assert not scheduler.running


@pytest.mark.asyncio
async def test_stop_interrupts_the_wait(record, metrics) -> None:
    scheduler = TickScheduler(_gateway(record, metrics), ProcessorState.initial(), interval_seconds=60.0)

    task = asyncio.create_task(scheduler.run())
    await _wait_until(lambda: scheduler.last_report is not None)
    scheduler.stop()
    state = await asyncio.wait_for(task, timeout=2.0)

    assert state.ticks == 1
    assert not scheduler.running


@pytest.mark.asyncio
async def test_run_is_not_reentrant(record, metrics) -> None:
    scheduler = TickScheduler(_gateway(record, metrics), ProcessorState.initial(), interval_seconds=60.0)

    task = asyncio.create_task(scheduler.run())
    await _wait_until(lambda: scheduler.running)
    with pytest.raises(RuntimeError):
        await scheduler.run()
    scheduler.stop()
    await asyncio.wait_for(task, timeout=2.0)


@pytest.mark.asyncio
async def test_next_delay_follows_regime_cadence(record, metrics) -> None:
    # Unit composite weights push default volatilities into the HIGH band.
    classifier = RegimeClassifier({metal: 1.0 for metal in BASKET})
    scheduler = TickScheduler(
        _gateway(record, metrics, classifier=classifier), ProcessorState.initial(), interval_seconds=300.0
    )

    assert scheduler.next_delay() == 300.0
    report = await scheduler.tick()

    assert report is not None
    assert report.regime.regime is Regime.HIGH
    assert scheduler.next_delay() == 150.0
