"""
Metrics Collection
Prometheus metrics for cache namespaces
"""

import time
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, Histogram, generate_latest


class MetricsCollector:
    """
    Collects and exposes Prometheus metrics for cache instances.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None) -> None:
        self.registry = registry if registry is not None else REGISTRY

        self.operations_total = Counter(
            "nscache_operations_total",
            "Cache operations by outcome",
            ["namespace", "operation", "result"],
            registry=self.registry,
        )
        self.evictions_total = Counter(
            "nscache_evictions_total",
            "Expired entries removed",
            ["namespace", "reason"],
            registry=self.registry,
        )
        self.sweep_errors_total = Counter(
            "nscache_sweep_errors_total",
            "Keys the sweep failed to check or remove",
            ["namespace"],
            registry=self.registry,
        )
        self.sweep_duration = Histogram(
            "nscache_sweep_duration_seconds",
            "Duration of one expiry sweep",
            ["namespace"],
            buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
            registry=self.registry,
        )
        self.tracked_keys = Gauge(
            "nscache_tracked_keys",
            "Storage keys tracked by a cache instance",
            ["namespace"],
            registry=self.registry,
        )

    def record_operation(self, namespace: str, operation: str, result: str) -> None:
        """Record a get/set/remove/clear call."""
        self.operations_total.labels(namespace=namespace, operation=operation, result=result).inc()

    def record_eviction(self, namespace: str, reason: str, count: int = 1) -> None:
        """Record expired entries removed on read or by the sweep."""
        if count > 0:
            self.evictions_total.labels(namespace=namespace, reason=reason).inc(count)

    def record_sweep_error(self, namespace: str) -> None:
        self.sweep_errors_total.labels(namespace=namespace).inc()

    def set_tracked_keys(self, namespace: str, count: int) -> None:
        self.tracked_keys.labels(namespace=namespace).set(count)

    @contextmanager
    def measure_sweep(self, namespace: str) -> Iterator[None]:
        """Time a sweep."""
        with self.measure_duration(self.sweep_duration.labels(namespace=namespace).observe):
            yield

    @contextmanager
    def measure_duration(self, callback: Callable[[float], None]) -> Iterator[None]:
        """Context manager to measure operation duration."""
        start = time.perf_counter()
        try:
            yield
        finally:
            callback(time.perf_counter() - start)

    def get_metrics(self) -> bytes:
        """Get metrics in Prometheus format."""
        return generate_latest(self.registry)


# Global metrics collector instance
metrics_collector = MetricsCollector()
