"""
One publication tick: fetch, estimate, weight, index, publish.

The gateway owns no state between ticks. It receives the
:class:`ProcessorState`, mutates it (history appends and the smoothed
weight vector), and reports what happened in a :class:`TickReport`.
All four spot prices are fetched before the state is touched, so an
upstream failure leaves the state exactly as it was.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from loguru import logger

from auxidien.core.exceptions import MagnitudeError, UpstreamFetchError
from auxidien.core.logging import log_context
from auxidien.core.models import BASKET, OUNCE_TO_GRAM, IndexSnapshot, Metal
from auxidien.core.monitoring import MetricsCollector, get_metrics_collector
from auxidien.core.processing import (
    ProcessorState,
    RegimeClassifier,
    RegimeReading,
    VolatilityEstimator,
    WeightEngine,
    compute_index,
    contributions,
)
from auxidien.core.providers import SpotPriceProvider
from auxidien.core.record import PriceReading, UpdateResult, to_fixed

from .clients import RecordClient

DEFAULT_COURTESY_DELAY = 1.5


@dataclass(frozen=True)
class TickReport:
    """Outcome of one tick."""

    snapshot: IndexSnapshot
    regime: RegimeReading
    fixed_price: int
    fixed_constituents: dict[Metal, int]
    result: UpdateResult
    record: PriceReading

    @property
    def published(self) -> bool:
        return self.result.accepted

    def summary(self) -> dict[str, object]:
        return {
            "timestamp": self.snapshot.timestamp.isoformat(),
            "regime": self.regime.regime.value,
            "index": round(self.snapshot.index_value, 6),
            "fixed_price": self.fixed_price,
            "weights": {metal.value: round(w, 6) for metal, w in self.snapshot.weights.items()},
            "result": self.result.to_dict(),
            "record_price": self.record.price,
            "record_updated_at": self.record.updated_at,
        }


class PublicationGateway:
    """Runs ticks against a spot price provider and a record client."""

    def __init__(
        self,
        provider: SpotPriceProvider,
        client: RecordClient,
        *,
        engine: WeightEngine | None = None,
        classifier: RegimeClassifier | None = None,
        sampling_interval_seconds: float = 300.0,
        courtesy_delay: float = DEFAULT_COURTESY_DELAY,
        metrics: MetricsCollector | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.provider = provider
        self.client = client
        self.engine = engine or WeightEngine()
        self.classifier = classifier or RegimeClassifier()
        self.sampling_interval_seconds = sampling_interval_seconds
        self.courtesy_delay = courtesy_delay
        self.metrics = metrics or get_metrics_collector()
        self._sleep = sleep
        self._clock = clock

    async def fetch_prices(self) -> dict[Metal, float]:
        """Per-gram USD prices for the whole basket, fetched in basket order."""
        prices: dict[Metal, float] = {}
        for position, metal in enumerate(BASKET):
            if position and self.courtesy_delay > 0:
                await self._sleep(self.courtesy_delay)
            started = time.perf_counter()
            try:
                quote = await self.provider.fetch(metal)
            except UpstreamFetchError:
                self.metrics.observe_fetch(metal, time.perf_counter() - started, success=False)
                raise
            self.metrics.observe_fetch(metal, time.perf_counter() - started)
            prices[metal] = quote.price / OUNCE_TO_GRAM
            logger.info(
                "{} ({}): ${:.4f}/oz, ${:.6f}/g", metal.value, metal.display_name, quote.price, prices[metal]
            )
        return prices

    async def run_tick(self, state: ProcessorState) -> TickReport:
        """Run one tick, mutating ``state`` in place.

        Raises:
            UpstreamFetchError: a spot price could not be fetched; ``state`` is untouched.
            RecordUnavailableError: the record could not be reached after the
                weights were already advanced.
        """
        with log_context(tick=state.ticks + 1):
            try:
                prices = await self.fetch_prices()
            except UpstreamFetchError:
                self.metrics.record_tick("fetch_failed")
                raise

            now = self._clock()
            state.ticks += 1
            for metal, price in prices.items():
                state.history.record(metal, price, now)

            estimator = VolatilityEstimator(state.history, self.sampling_interval_seconds)
            volatilities = estimator.estimate_all()
            reading = self.classifier.read(volatilities)
            logger.info(
                "Volatilities: {} | regime {} (daily {:.4f}, {})",
                {metal.value: round(vol, 4) for metal, vol in volatilities.items()},
                reading.regime.value,
                reading.daily,
                reading.policy.description,
            )

            target = self.engine.target_weights(volatilities)
            state.weights = self.engine.smooth(state.weights, target)
            overshoot = self.engine.overshoot(state.weights)
            if any(value > 0 for value in overshoot.values()):
                logger.warning(
                    "Weights outside bounds after renormalization: {}",
                    {metal.value: round(value, 6) for metal, value in overshoot.items() if value > 0},
                )
            logger.info("Weights: {}", state.weights_summary())

            index_value = compute_index(prices, state.weights)
            logger.debug(
                "Contributions: {}",
                {metal.value: round(term, 6) for metal, term in contributions(prices, state.weights).items()},
            )
            snapshot = IndexSnapshot(
                timestamp=datetime.fromtimestamp(now, UTC),
                prices=prices,
                volatilities=volatilities,
                regime=reading.regime.value,
                target_weights=target,
                weights=dict(state.weights),
                index_value=index_value,
                overshoot=overshoot,
            )
            self.metrics.set_index(index_value, state.weights)

            fixed_price = to_fixed(index_value)
            fixed_constituents = {metal: to_fixed(prices[metal]) for metal in BASKET}
            logger.info("Index value: ${:.6f}/g (fixed {})", index_value, fixed_price)

            result = await self.client.propose_update(fixed_price, fixed_constituents)
            self._log_result(state, result)

            record = await self.client.latest()
            self.metrics.set_record_price(record.price)
            logger.info("Record price: {} (updated_at {})", record.price, record.updated_at)

            return TickReport(
                snapshot=snapshot,
                regime=reading,
                fixed_price=fixed_price,
                fixed_constituents=fixed_constituents,
                result=result,
                record=record,
            )

    def _log_result(self, state: ProcessorState, result: UpdateResult) -> None:
        if result.accepted:
            state.published += 1
            self.metrics.record_tick("published")
            logger.info("Record accepted update")
            return

        state.rejected += 1
        state.last_rejection = result.reason
        self.metrics.record_tick("rejected")
        self.metrics.record_rejection(result.reason or "unknown")
        if isinstance(result.error, MagnitudeError):
            # Expected while the index converges toward a large move.
            logger.info("Record rejected update as too large; converging: {}", result.error.details)
        else:
            logger.warning("Record rejected update: {} ({})", result.reason, result.error.message)


__all__ = ["DEFAULT_COURTESY_DELAY", "PublicationGateway", "TickReport"]
