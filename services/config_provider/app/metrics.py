"""Prometheus metrics for the config provider."""

from __future__ import annotations

import time

from prometheus_client import Counter, Gauge, Histogram

config_requests_total = Counter(
    "config_provider_requests_total",
    "Configuration requests served, by endpoint and outcome",
    ["endpoint", "outcome"],
)

config_reloads_total = Counter(
    "config_provider_reloads_total",
    "Outcome of configuration reload attempts",
    ["outcome"],
)

_RELOAD_LATENCY_SECONDS = Histogram(
    "config_provider_reload_latency_seconds",
    "Time spent loading, hashing and publishing a new index",
    buckets=(
        0.005,
        0.01,
        0.05,
        0.1,
        0.25,
        0.5,
        1.0,
        2.5,
        5.0,
    ),
)

config_sources_loaded = Gauge(
    "config_provider_sources_loaded",
    "Configuration sources in the published index",
)

config_index_generation = Gauge(
    "config_provider_index_generation",
    "Generation number of the published index",
)


def record_request(endpoint: str, outcome: str) -> None:
    config_requests_total.labels(endpoint=endpoint, outcome=outcome).inc()


class TimedReload:
    """Context manager timing a reload and counting its outcome."""

    def __enter__(self) -> TimedReload:
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: D401
        _RELOAD_LATENCY_SECONDS.observe(time.perf_counter() - self._start)
        config_reloads_total.labels(outcome="failure" if exc_type else "success").inc()

    @staticmethod
    def published(source_count: int, generation: int) -> None:
        config_sources_loaded.set(source_count)
        config_index_generation.set(generation)
