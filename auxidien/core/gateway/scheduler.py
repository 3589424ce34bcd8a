"""Tick loop for the publication gateway."""

from __future__ import annotations

import asyncio
import signal
import time

from loguru import logger

from auxidien.core.exceptions import ConfigurationError, UpstreamFetchError, error_handler
from auxidien.core.processing import ProcessorState

from .publication import PublicationGateway, TickReport


class TickScheduler:
    """Runs ticks one at a time on an asyncio loop.

    After each tick the next one is due ``interval_seconds`` times the
    current regime's cadence multiplier after the previous one started.
    A tick that overruns its slot is followed immediately by the next;
    ticks never overlap.
    """

    def __init__(
        self,
        gateway: PublicationGateway,
        state: ProcessorState,
        interval_seconds: float = 300.0,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.gateway = gateway
        self.state = state
        self.interval_seconds = interval_seconds
        self.last_report: TickReport | None = None
        self._stop = asyncio.Event()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def next_delay(self) -> float:
        """Seconds between tick starts under the current regime."""
        multiplier = 1.0
        if self.last_report is not None:
            multiplier = self.last_report.regime.policy.cadence_multiplier
        return self.interval_seconds * multiplier

    async def tick(self) -> TickReport | None:
        """Run one tick. Failures other than configuration errors are logged and yield ``None``."""
        try:
            report = await self.gateway.run_tick(self.state)
        except ConfigurationError:
            raise
        except Exception as exc:
            error_handler.log_error(exc, {"operation": "tick", "tick": self.state.ticks})
            if not isinstance(exc, UpstreamFetchError):
                self.gateway.metrics.record_tick("failed")
            return None
        self.last_report = report
        return report

    async def run(self, max_ticks: int | None = None) -> ProcessorState:
        """Tick until :meth:`stop` is called (or ``max_ticks`` ticks have run)."""
        if self._running:
            raise RuntimeError("scheduler is already running")
        self._running = True
        self._stop.clear()
        installed = self._install_signal_handlers()
        logger.info("Scheduler started: interval {}s", self.interval_seconds)
        completed = 0
        try:
            while not self._stop.is_set():
                started = time.monotonic()
                await self.tick()
                completed += 1
                if max_ticks is not None and completed >= max_ticks:
                    break
                delay = max(0.0, started + self.next_delay() - time.monotonic())
                if delay == 0.0:
                    logger.warning("Tick overran its {:.1f}s slot; starting next tick now", self.next_delay())
                    continue
                logger.debug("Next tick in {:.1f}s", delay)
                try:
                    await asyncio.wait_for(self._stop.wait(), timeout=delay)
                except asyncio.TimeoutError:
                    pass
        finally:
            self._remove_signal_handlers(installed)
            self._running = False
            logger.info("Scheduler stopped after {} ticks; final weights: {}", completed, self.state.weights_summary())
        return self.state

    def stop(self) -> None:
        """Stop scheduling; an in-flight tick runs to completion."""
        if not self._stop.is_set():
            logger.info("Stop requested")
        self._stop.set()

    def _install_signal_handlers(self) -> list[signal.Signals]:
        loop = asyncio.get_running_loop()
        installed: list[signal.Signals] = []
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.stop)
            except (NotImplementedError, RuntimeError, ValueError):
                # Windows event loops and non-main threads cannot install handlers.
                continue
            installed.append(sig)
        return installed

    def _remove_signal_handlers(self, installed: list[signal.Signals]) -> None:
        loop = asyncio.get_running_loop()
        for sig in installed:
            loop.remove_signal_handler(sig)


__all__ = ["TickScheduler"]
