"""Prometheus metrics for the QAT plugin."""

from __future__ import annotations

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    Info,
    start_http_server,
    REGISTRY,
    CollectorRegistry,
)


class MetricsRegistry:
    """Registry of all QAT plugin metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        self.scan_cycles_total = Counter(
            "qat_scan_cycles_total",
            "Total scan cycles",
            ["status"],  # success, error
            registry=self._registry,
        )

        self.scan_duration_seconds = Histogram(
            "qat_scan_duration_seconds",
            "Duration of one scan cycle in seconds",
            buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
            registry=self._registry,
        )

        self.devices_online = Gauge(
            "qat_devices_online",
            "Accelerator instances reported up by the driver",
            registry=self._registry,
        )

        self.catalog_units = Gauge(
            "qat_catalog_units",
            "Schedulable units per resource type",
            ["device_type"],
            registry=self._registry,
        )

        self.topology_failures_total = Counter(
            "qat_topology_failures_total",
            "Catalog builds that fell back to no topology",
            registry=self._registry,
        )

        self.info = Info(
            "qat_plugin",
            "QAT device plugin information",
            registry=self._registry,
        )


_metrics: MetricsRegistry | None = None


def setup_metrics(port: int = 8010, registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """Set up Prometheus metrics server."""
    global _metrics
    _metrics = MetricsRegistry(registry)

    from qat_plugin import __version__
    _metrics.info.info({"version": __version__})

    start_http_server(port, registry=registry or REGISTRY)
    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
