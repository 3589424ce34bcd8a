"""Pytest configuration for the auxidien test suite."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from loguru import logger
from prometheus_client import CollectorRegistry

from auxidien.core.monitoring import MetricsCollector, configure_metrics_collector
from auxidien.core.record import PriceRecord


class FakeClock:
    """Settable integer clock for the price record."""

    def __init__(self, now: int = 1000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line options for controlling integration tests."""

    parser.addoption(
        "--auxidien-run-integration",
        action="store_true",
        default=False,
        help="Run auxidien integration tests that require external services.",
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register the integration marker."""

    config.addinivalue_line(
        "markers",
        "integration: marks tests requiring network or external services",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip integration tests unless explicitly requested."""

    if config.getoption("--auxidien-run-integration"):
        return

    skip_integration = pytest.mark.skip(reason="integration tests require --auxidien-run-integration")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(1000)


@pytest.fixture
def record(clock: FakeClock) -> PriceRecord:
    """Record with an ``admin`` account and a ``watcher`` updater."""

    return PriceRecord("admin", updaters=["watcher"], clock=clock)


@pytest.fixture
def metrics() -> Iterator[MetricsCollector]:
    """Isolated metrics collector installed as the global one for the test."""

    collector = MetricsCollector(registry=CollectorRegistry())
    configure_metrics_collector(collector)
    yield collector
    configure_metrics_collector(None)


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Drop sinks a test installed; they may point at streams that are closed afterwards."""

    yield
    logger.remove()
