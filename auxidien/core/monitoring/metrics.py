"""Prometheus metrics for the watcher and the record service."""

from __future__ import annotations

from collections.abc import Mapping

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, generate_latest

from auxidien.core.models import Metal


class MetricsCollector:
    """Collects and exposes tick, fetch and record metrics."""

    def __init__(self, *, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry()
        self.fetch_latency_seconds = Histogram(
            "auxidien_fetch_latency_seconds",
            "Latency distribution for upstream spot price lookups.",
            ("metal",),
            buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, float("inf")),
            registry=self.registry,
        )
        self.fetch_failures_total = Counter(
            "auxidien_fetch_failures_total",
            "Total count of failed upstream spot price lookups.",
            ("metal",),
            registry=self.registry,
        )
        self.ticks_total = Counter(
            "auxidien_ticks_total",
            "Ticks by outcome.",
            ("outcome",),
            registry=self.registry,
        )
        self.rejections_total = Counter(
            "auxidien_rejections_total",
            "Record rejections grouped by reason.",
            ("reason",),
            registry=self.registry,
        )
        self.index_value = Gauge(
            "auxidien_index_value",
            "Last computed index value (USD per gram basket).",
            registry=self.registry,
        )
        self.weight = Gauge(
            "auxidien_weight",
            "Current smoothed weight per metal.",
            ("metal",),
            registry=self.registry,
        )
        self.record_price = Gauge(
            "auxidien_record_price",
            "Stored record price in fixed point (scale 10^6).",
            registry=self.registry,
        )

    def observe_fetch(self, metal: Metal, latency_seconds: float, *, success: bool = True) -> None:
        """Record an upstream lookup."""

        self.fetch_latency_seconds.labels(metal=metal.value).observe(latency_seconds)
        if not success:
            self.fetch_failures_total.labels(metal=metal.value).inc()

    def record_tick(self, outcome: str) -> None:
        label = outcome if outcome in _ALLOWED_TICK_OUTCOMES else "__other__"
        self.ticks_total.labels(outcome=label).inc()

    def record_rejection(self, reason: str) -> None:
        self.rejections_total.labels(reason=reason).inc()

    def set_index(self, value: float, weights: Mapping[Metal, float]) -> None:
        self.index_value.set(value)
        for metal, weight in weights.items():
            self.weight.labels(metal=metal.value).set(weight)

    def set_record_price(self, price: int) -> None:
        self.record_price.set(price)

    def render(self) -> bytes:
        """Render metrics in Prometheus exposition format."""

        return generate_latest(self.registry)


_DEFAULT_COLLECTOR: MetricsCollector | None = None


def get_metrics_collector() -> MetricsCollector:
    """Return the global metrics collector instance."""

    global _DEFAULT_COLLECTOR
    if _DEFAULT_COLLECTOR is None:
        _DEFAULT_COLLECTOR = MetricsCollector()
    return _DEFAULT_COLLECTOR


def configure_metrics_collector(collector: MetricsCollector | None) -> None:
    """Override the global metrics collector for application wiring or tests."""

    global _DEFAULT_COLLECTOR
    _DEFAULT_COLLECTOR = collector


_ALLOWED_TICK_OUTCOMES = {
    "published",
    "rejected",
    "fetch_failed",
    "failed",
}
