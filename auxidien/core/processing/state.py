"""Processor state owned by the tick loop."""

from __future__ import annotations

from dataclasses import dataclass, field

from auxidien.core.models import Metal

from .history import DEFAULT_CAPACITY, HistoryStore
from .weights import WeightEngine


@dataclass
class ProcessorState:
    """History buffers and the published weight vector.

    One instance per process, handed to each tick by the scheduler and
    returned from it. Only the tick that holds it may mutate it.
    """

    history: HistoryStore
    weights: dict[Metal, float]
    ticks: int = 0
    published: int = 0
    rejected: int = 0
    last_rejection: str | None = field(default=None)

    @classmethod
    def initial(cls, engine: WeightEngine | None = None, capacity: int = DEFAULT_CAPACITY) -> "ProcessorState":
        engine = engine or WeightEngine()
        return cls(
            history=HistoryStore(engine.bounds.keys(), capacity=capacity),
            weights=engine.initial_weights(),
        )

    def weights_summary(self) -> dict[str, float]:
        return {asset.value: round(weight, 6) for asset, weight in self.weights.items()}


__all__ = ["ProcessorState"]
