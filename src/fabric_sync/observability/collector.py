# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Metrics collector for reconciliation passes and reservations.

UnifiedMetricsCollector keeps every series in plain dicts, which is what
tests and ``ReconciliationDriver.get_metrics()`` read, and mirrors each
update into prometheus_client so a scrape endpoint sees the same numbers.

Series are keyed by a canonical "k=v,k=v" label string. Each metric admits
at most MAX_LABEL_COMBINATIONS distinct label strings; updates for further
combinations are dropped with a warning.

Usage:
    >>> from fabric_sync.observability.collector import get_metrics_collector
    >>> collector = get_metrics_collector()
    >>> collector.inc_counter('fabric_sync_passes_total', labels={'mode': 'enabled'})
    >>> collector.get_counter('fabric_sync_passes_total', {'mode': 'enabled'})
    1
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Any, ClassVar

from prometheus_client import (
    REGISTRY,
    Counter,
    Gauge,
    Histogram,
    start_http_server,
)

from .constants import (
    NODE_TRANSITIONS_TOTAL,
    PASS_DURATION_BUCKETS,
    PASS_DURATION_SECONDS,
    PASS_FAILURES_TOTAL,
    PASSES_TOTAL,
    RESERVATION_FAILURES_TOTAL,
    RESERVATION_RELEASES_TOTAL,
    RESERVATIONS_ACTIVE,
    RESERVATIONS_CREATED_TOTAL,
    UNKNOWN_NODES_TOTAL,
    VESTIGIAL_RESERVATIONS_TOTAL,
)

logger = logging.getLogger(__name__)


@dataclass
class MetricDefinition:
    """
    Schema for one metric: its kind, help text, label names and, for
    histograms, bucket boundaries.
    """

    name: str
    metric_type: str  # counter | gauge | histogram
    description: str
    label_names: tuple[str, ...] = ()
    buckets: list[float] | None = None


METRIC_DEFINITIONS: dict[str, MetricDefinition] = {
    PASSES_TOTAL: MetricDefinition(
        PASSES_TOTAL, "counter", "Reconciliation passes completed", ("mode",)
    ),
    PASS_FAILURES_TOTAL: MetricDefinition(
        PASS_FAILURES_TOTAL,
        "counter",
        "Reconciliation passes abandoned after an allocator failure",
        ("mode",),
    ),
    PASS_DURATION_SECONDS: MetricDefinition(
        PASS_DURATION_SECONDS,
        "histogram",
        "Wall-clock duration of completed reconciliation passes",
        ("mode",),
        buckets=PASS_DURATION_BUCKETS,
    ),
    NODE_TRANSITIONS_TOTAL: MetricDefinition(
        NODE_TRANSITIONS_TOTAL,
        "counter",
        "Nodes forced DOWN by reconciliation",
        ("defect",),
    ),
    UNKNOWN_NODES_TOTAL: MetricDefinition(
        UNKNOWN_NODES_TOTAL, "counter", "Allocator node facts with no local node"
    ),
    RESERVATIONS_CREATED_TOTAL: MetricDefinition(
        RESERVATIONS_CREATED_TOTAL, "counter", "Reservations created", ("mode",)
    ),
    RESERVATION_FAILURES_TOTAL: MetricDefinition(
        RESERVATION_FAILURES_TOTAL, "counter", "Reserve calls the allocator failed"
    ),
    RESERVATION_RELEASES_TOTAL: MetricDefinition(
        RESERVATION_RELEASES_TOTAL,
        "counter",
        "Reservation releases by allocator outcome",
        ("outcome",),
    ),
    VESTIGIAL_RESERVATIONS_TOTAL: MetricDefinition(
        VESTIGIAL_RESERVATIONS_TOTAL,
        "counter",
        "Allocator reservations released because no job held them",
    ),
    RESERVATIONS_ACTIVE: MetricDefinition(
        RESERVATIONS_ACTIVE, "gauge", "ACTIVE reservations currently tracked"
    ),
}

_PROM_TYPES: dict[str, Any] = {
    "counter": Counter,
    "gauge": Gauge,
    "histogram": Histogram,
}


def _series_key(labels: dict[str, str] | None) -> str:
    if not labels:
        return ""
    return ",".join(f"{key}={labels[key]}" for key in sorted(labels))


class UnifiedMetricsCollector:
    """
    Dict-backed metrics with an optional Prometheus mirror.

    Thread Safety:
        Dict updates happen under a reentrant lock. prometheus_client does
        its own locking, so the mirror update runs outside it.

    Example:
        >>> collector = UnifiedMetricsCollector(enable_prometheus=False)
        >>> collector.inc_counter('fabric_sync_passes_total', labels={'mode': 'enabled'})
        >>> collector.get_metrics()["counters"]
        {'fabric_sync_passes_total': {'mode=enabled': 1}}
    """

    MAX_LABEL_COMBINATIONS: ClassVar[int] = 1000
    HISTOGRAM_WINDOW: ClassVar[int] = 5000

    def __init__(
        self,
        enable_prometheus: bool = True,
        registry: Any | None = None,
    ) -> None:
        """
        Args:
            enable_prometheus: Mirror updates into prometheus_client
            registry: CollectorRegistry to register into; the process-wide
                default registry when None. Tests pass their own.
        """
        self._enable_prometheus = enable_prometheus
        self._registry = registry if registry is not None else REGISTRY

        self._counters: dict[str, dict[str, int]] = defaultdict(dict)
        self._gauges: dict[str, dict[str, float]] = defaultdict(dict)
        self._histograms: dict[str, dict[str, deque[float]]] = defaultdict(dict)
        self._admitted: dict[str, set[str]] = defaultdict(set)
        self._lock = threading.RLock()

        self._prom_metrics: dict[str, Any] = {}
        self._server_running = False

        logger.debug(
            "UnifiedMetricsCollector created (prometheus=%s)", enable_prometheus
        )

    def _admit(self, name: str, key: str) -> bool:
        """Return False once a metric has hit its label combination cap."""
        seen = self._admitted[name]
        if key in seen:
            return True
        if len(seen) >= self.MAX_LABEL_COMBINATIONS:
            logger.warning(
                "Cardinality limit (%d) reached for %s, dropping series %r",
                self.MAX_LABEL_COMBINATIONS,
                name,
                key,
            )
            return False
        seen.add(key)
        return True

    # ==========================================================================
    # Prometheus mirror
    # ==========================================================================

    def _prom_metric(self, name: str, metric_type: str) -> Any | None:
        if not self._enable_prometheus:
            return None
        metric = self._prom_metrics.get(name)
        if metric is not None:
            return metric

        defn = METRIC_DEFINITIONS.get(name)
        kwargs: dict[str, Any] = {"registry": self._registry}
        if metric_type == "histogram":
            kwargs["buckets"] = (defn.buckets if defn else None) or PASS_DURATION_BUCKETS
        try:
            metric = _PROM_TYPES[metric_type](
                name,
                defn.description if defn else name,
                list(defn.label_names) if defn else [],
                **kwargs,
            )
        except ValueError as e:
            # Another collector already registered this name in the registry
            logger.warning("Prometheus %s %s not registered: %s", metric_type, name, e)
            return None
        self._prom_metrics[name] = metric
        return metric

    def _mirror(
        self,
        name: str,
        metric_type: str,
        method: str,
        value: float,
        labels: dict[str, str] | None,
    ) -> None:
        metric = self._prom_metric(name, metric_type)
        if metric is None:
            return
        try:
            series = metric.labels(**labels) if labels else metric
            getattr(series, method)(value)
        except ValueError as e:
            logger.debug("Prometheus update of %s failed: %s", name, e)

    # ==========================================================================
    # Updates
    # ==========================================================================

    def inc_counter(
        self,
        name: str,
        value: int = 1,
        labels: dict[str, str] | None = None,
    ) -> None:
        """
        Add ``value`` to a counter series.

        Raises:
            ValueError: If value is negative
        """
        if value < 0:
            raise ValueError("Counter increment must be non-negative")
        key = _series_key(labels)
        with self._lock:
            if not self._admit(name, key):
                return
            series = self._counters[name]
            series[key] = series.get(key, 0) + value
        self._mirror(name, "counter", "inc", value, labels)

    def set_gauge(
        self,
        name: str,
        value: float,
        labels: dict[str, str] | None = None,
    ) -> None:
        key = _series_key(labels)
        with self._lock:
            if not self._admit(name, key):
                return
            self._gauges[name][key] = value
        self._mirror(name, "gauge", "set", value, labels)

    def observe_histogram(
        self,
        name: str,
        value: float,
        labels: dict[str, str] | None = None,
    ) -> None:
        """Record one observation; only the last HISTOGRAM_WINDOW are kept in the dict view."""
        key = _series_key(labels)
        with self._lock:
            if not self._admit(name, key):
                return
            window = self._histograms[name].get(key)
            if window is None:
                window = deque(maxlen=self.HISTOGRAM_WINDOW)
                self._histograms[name][key] = window
            window.append(value)
        self._mirror(name, "histogram", "observe", value, labels)

    # ==========================================================================
    # Reads
    # ==========================================================================

    def get_counter(self, name: str, labels: dict[str, str] | None = None) -> int:
        """Return the current value of one counter series (0 if unseen)."""
        with self._lock:
            return self._counters.get(name, {}).get(_series_key(labels), 0)

    def get_metrics(self) -> dict[str, Any]:
        """
        Copy every series into a JSON-friendly dict.

        Histograms are summarized as count/sum/min/max over the retained
        window; the full distribution lives in Prometheus.
        """
        with self._lock:
            counters = {name: dict(series) for name, series in self._counters.items()}
            gauges = {name: dict(series) for name, series in self._gauges.items()}
            histograms = {
                name: {
                    key: {
                        "count": len(window),
                        "sum": sum(window),
                        "min": min(window),
                        "max": max(window),
                    }
                    for key, window in series.items()
                    if window
                }
                for name, series in self._histograms.items()
            }
        return {"counters": counters, "gauges": gauges, "histograms": histograms}

    def reset(self) -> None:
        """Forget every dict series. Prometheus metrics stay registered."""
        with self._lock:
            self._counters.clear()
            self._gauges.clear()
            self._histograms.clear()
            self._admitted.clear()
        logger.debug("Metrics collector reset")

    # ==========================================================================
    # Scrape endpoint
    # ==========================================================================

    def start_http_server(self, host: str = "127.0.0.1", port: int = 9090) -> bool:
        """
        Serve this collector's registry for Prometheus scraping.

        Returns:
            False if the port could not be bound; True otherwise, including
            when the server was already running.
        """
        if self._server_running:
            logger.warning("Prometheus server already running")
            return True
        try:
            start_http_server(port, addr=host, registry=self._registry)
        except OSError as e:
            logger.error("Failed to start Prometheus server on %s:%d: %s", host, port, e)
            return False
        self._server_running = True
        logger.info("Prometheus metrics server listening on %s:%d", host, port)
        return True

    @property
    def prometheus_enabled(self) -> bool:
        return self._enable_prometheus

    @property
    def server_running(self) -> bool:
        return self._server_running


# =============================================================================
# Process-wide collector
# =============================================================================

_global_collector: UnifiedMetricsCollector | None = None
_collector_lock = threading.Lock()


def get_metrics_collector(enable_prometheus: bool = True) -> UnifiedMetricsCollector:
    """
    Return the process-wide collector, creating it on first use.

    ``enable_prometheus`` only has an effect on that first call.
    """
    global _global_collector
    if _global_collector is None:
        with _collector_lock:
            if _global_collector is None:
                _global_collector = UnifiedMetricsCollector(
                    enable_prometheus=enable_prometheus
                )
    return _global_collector


def reset_metrics_collector() -> None:
    """Drop the process-wide collector so the next call builds a fresh one (tests)."""
    global _global_collector
    with _collector_lock:
        if _global_collector is not None:
            _global_collector.reset()
        _global_collector = None


__all__ = [
    "METRIC_DEFINITIONS",
    "MetricDefinition",
    "UnifiedMetricsCollector",
    "get_metrics_collector",
    "reset_metrics_collector",
]
