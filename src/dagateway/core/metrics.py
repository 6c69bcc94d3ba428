"""
Prometheus metrics for the DA gateway.

Metrics live on a registry owned by the ``DaMetrics`` instance, which is
handed to the components that record into it. Nothing registers on the
process-wide default registry, so several gateways (or tests) can coexist
in one process.
"""

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, start_http_server

LATENCY_BUCKETS = (0.001, 0.005, 0.025, 0.1, 0.25, 1.0, 5.0, 30.0, 120.0)


class DaMetrics:
    """Counters and histograms recorded by the DA service."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or CollectorRegistry()

        self.dispatched_blobs = Counter(
            "da_dispatched_blobs",
            "Number of blobs dispatched",
            registry=self.registry,
        )
        self.inclusion_queries = Counter(
            "da_inclusion_queries",
            "Number of inclusion queries",
            registry=self.registry,
        )
        self.dispatch_latency = Histogram(
            "da_dispatch_latency_seconds",
            "Dispatch latency in seconds",
            buckets=LATENCY_BUCKETS,
            registry=self.registry,
        )

    def value(self, name: str, labels: Optional[dict] = None) -> Optional[float]:
        """Current value of a sample, e.g. ``da_dispatched_blobs_total``."""
        return self.registry.get_sample_value(name, labels or {})

    def serve(self, port: int, addr: str = "0.0.0.0"):
        """Expose the registry over HTTP on ``addr:port``."""
        return start_http_server(port, addr=addr, registry=self.registry)
