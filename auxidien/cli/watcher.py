"""Watcher commands: ``run`` the tick loop or execute a single ``tick``."""

from __future__ import annotations

import asyncio

import typer
from loguru import logger

from auxidien.core.config import WatcherSettings, load_watcher_settings
from auxidien.core.exceptions import (
    AuxidienError,
    ConfigurationError,
    RecordUnavailableError,
    UpstreamFetchError,
)
from auxidien.core.gateway import (
    HttpRecordClient,
    LocalRecordClient,
    PublicationGateway,
    RecordClient,
    TickScheduler,
)
from auxidien.core.processing import ProcessorState, WeightEngine
from auxidien.core.providers import GoldApiProvider, SpotPriceProvider
from auxidien.core.record import PriceRecord

from .constants import (
    CONFIGURATION_EXIT_CODE,
    RECORD_EXIT_CODE,
    SYSTEM_EXIT_CODE,
    UPSTREAM_EXIT_CODE,
)
from .utils import emit_error, emit_json

LOCAL_ADMIN = "admin"


def register(app: typer.Typer) -> None:
    """Register watcher commands on the provided application."""

    app.command("run")(run_command)
    app.command("tick")(tick_command)


def get_settings() -> WatcherSettings:
    """Factory hook for obtaining validated watcher settings."""

    return load_watcher_settings().require_publishing()


def get_provider(settings: WatcherSettings) -> SpotPriceProvider:
    """Factory hook for the upstream spot price provider."""

    return GoldApiProvider(
        settings.goldapi_key or "",
        base_url=settings.goldapi_base_url,
        timeout=settings.request_timeout,
    )


def get_record_client(settings: WatcherSettings) -> RecordClient:
    """Factory hook for the record client named by ``record_mode``."""

    if settings.record_mode == "local":
        record = PriceRecord(LOCAL_ADMIN, updaters=[settings.local_caller])
        logger.info("Publishing to an in-process record as {}", settings.local_caller)
        return LocalRecordClient(record, settings.local_caller)
    return HttpRecordClient(settings.record_url or "", settings.signing_key or "", timeout=settings.request_timeout)


def build_gateway(settings: WatcherSettings) -> tuple[PublicationGateway, ProcessorState]:
    engine = WeightEngine(lambda_=settings.smoothing_lambda)
    gateway = PublicationGateway(
        get_provider(settings),
        get_record_client(settings),
        engine=engine,
        sampling_interval_seconds=settings.poll_interval_seconds,
        courtesy_delay=settings.courtesy_delay_seconds,
    )
    return gateway, ProcessorState.initial(engine, capacity=settings.history_capacity)


async def _close(gateway: PublicationGateway) -> None:
    await gateway.provider.aclose()
    await gateway.client.aclose()


def _load_settings() -> WatcherSettings:
    try:
        return get_settings()
    except ConfigurationError as error:
        emit_error(error.message, error.error_code, details=error.details)
        raise typer.Exit(code=CONFIGURATION_EXIT_CODE) from error


def run_command(
    max_ticks: int | None = typer.Option(
        None, "--max-ticks", min=1, help="Stop after this many ticks (default: run until interrupted)."
    ),
) -> None:
    """Run the tick loop until SIGINT/SIGTERM."""

    settings = _load_settings()
    gateway, state = build_gateway(settings)
    scheduler = TickScheduler(gateway, state, interval_seconds=settings.poll_interval_seconds)

    async def _run() -> ProcessorState:
        try:
            return await scheduler.run(max_ticks=max_ticks)
        finally:
            await _close(gateway)

    try:
        final = asyncio.run(_run())
    except ConfigurationError as error:
        emit_error(error.message, error.error_code, details=error.details)
        raise typer.Exit(code=CONFIGURATION_EXIT_CODE) from error
    emit_json(
        {
            "ticks": final.ticks,
            "published": final.published,
            "rejected": final.rejected,
            "weights": final.weights_summary(),
        }
    )


def tick_command() -> None:
    """Run a single tick and print its report."""

    settings = _load_settings()
    gateway, state = build_gateway(settings)

    async def _tick():
        try:
            return await gateway.run_tick(state)
        finally:
            await _close(gateway)

    try:
        report = asyncio.run(_tick())
    except UpstreamFetchError as error:
        emit_error(error.message, error.error_code, details=error.details)
        raise typer.Exit(code=UPSTREAM_EXIT_CODE) from error
    except RecordUnavailableError as error:
        emit_error(error.message, error.error_code, details=error.details)
        raise typer.Exit(code=RECORD_EXIT_CODE) from error
    except AuxidienError as error:
        emit_error(error.message, error.error_code, details=error.details)
        raise typer.Exit(code=SYSTEM_EXIT_CODE) from error
    emit_json(report.summary())


__all__ = ["build_gateway", "get_provider", "get_record_client", "get_settings", "register"]
