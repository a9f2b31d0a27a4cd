# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Unit tests for the observability collector module.

Tests cover:
- MetricDefinition and the predefined reconciliation metrics
- Counter, Gauge, and Histogram operations
- Label cardinality protection
- Prometheus integration and HTTP server
- Singleton pattern: get_metrics_collector, reset_metrics_collector
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
from prometheus_client import CollectorRegistry

from fabric_sync.observability import (
    METRIC_DEFINITIONS,
    METRIC_PREFIX,
    NODE_TRANSITIONS_TOTAL,
    PASS_DURATION_SECONDS,
    PASSES_TOTAL,
    RESERVATIONS_ACTIVE,
    MetricsCollectorProtocol,
    UnifiedMetricsCollector,
    get_metrics_collector,
    reset_metrics_collector,
)


@pytest.fixture
def collector() -> UnifiedMetricsCollector:
    return UnifiedMetricsCollector(enable_prometheus=False)


class TestMetricDefinitions:
    """Tests for the predefined metric table."""

    def test_every_metric_uses_prefix(self) -> None:
        """Verify every metric name carries the library prefix."""
        for name, defn in METRIC_DEFINITIONS.items():
            assert name.startswith(f"{METRIC_PREFIX}_")
            assert defn.name == name

    def test_counters_end_with_total(self) -> None:
        """Verify counter names end in _total."""
        for defn in METRIC_DEFINITIONS.values():
            if defn.metric_type == "counter":
                assert defn.name.endswith("_total")

    def test_pass_duration_has_buckets(self) -> None:
        """Verify the pass duration histogram declares buckets."""
        defn = METRIC_DEFINITIONS[PASS_DURATION_SECONDS]
        assert defn.metric_type == "histogram"
        assert defn.buckets

    def test_collector_satisfies_protocol(self, collector: UnifiedMetricsCollector) -> None:
        """Verify the collector is a MetricsCollectorProtocol."""
        assert isinstance(collector, MetricsCollectorProtocol)


class TestCounterOperations:
    """Tests for counter updates and reads."""

    def test_inc_counter_accumulates(self, collector: UnifiedMetricsCollector) -> None:
        """Verify increments add up per label set."""
        collector.inc_counter(PASSES_TOTAL, labels={"mode": "enabled"})
        collector.inc_counter(PASSES_TOTAL, value=2, labels={"mode": "enabled"})
        collector.inc_counter(PASSES_TOTAL, labels={"mode": "disabled"})

        assert collector.get_counter(PASSES_TOTAL, {"mode": "enabled"}) == 3
        assert collector.get_counter(PASSES_TOTAL, {"mode": "disabled"}) == 1

    def test_unseen_counter_is_zero(self, collector: UnifiedMetricsCollector) -> None:
        assert collector.get_counter("fabric_sync_nothing_total") == 0

    def test_negative_value_raises(self, collector: UnifiedMetricsCollector) -> None:
        """Verify a negative increment raises ValueError."""
        with pytest.raises(ValueError, match="non-negative"):
            collector.inc_counter(PASSES_TOTAL, value=-1)

    def test_label_order_does_not_matter(self, collector: UnifiedMetricsCollector) -> None:
        """Verify label order does not split a series."""
        collector.inc_counter("x_total", labels={"a": "1", "b": "2"})
        collector.inc_counter("x_total", labels={"b": "2", "a": "1"})
        assert collector.get_metrics()["counters"]["x_total"] == {"a=1,b=2": 2}


class TestGaugeAndHistogram:
    """Tests for gauge and histogram updates."""

    def test_set_gauge_overwrites(self, collector: UnifiedMetricsCollector) -> None:
        """Verify set_gauge keeps only the latest value."""
        collector.set_gauge(RESERVATIONS_ACTIVE, 4.0)
        collector.set_gauge(RESERVATIONS_ACTIVE, 2.0)
        assert collector.get_metrics()["gauges"][RESERVATIONS_ACTIVE] == {"": 2.0}

    def test_histogram_summary(self, collector: UnifiedMetricsCollector) -> None:
        """Verify histograms summarize count, sum, min and max."""
        for value in (0.1, 0.3, 0.2):
            collector.observe_histogram(PASS_DURATION_SECONDS, value, labels={"mode": "enabled"})

        summary = collector.get_metrics()["histograms"][PASS_DURATION_SECONDS]["mode=enabled"]
        assert summary["count"] == 3
        assert summary["min"] == 0.1
        assert summary["max"] == 0.3
        assert summary["sum"] == pytest.approx(0.6)

    def test_histogram_memory_limit(self, collector: UnifiedMetricsCollector) -> None:
        """Verify histogram windows stay bounded."""
        for _ in range(10001):
            collector.observe_histogram(PASS_DURATION_SECONDS, 0.01)
        assert len(collector._histograms[PASS_DURATION_SECONDS][""]) == 5000


class TestCardinalityProtection:
    """Tests for the per-metric label combination cap."""

    def test_limit_blocks_new_combinations(self, caplog: pytest.LogCaptureFixture) -> None:
        """Verify new label sets past the cap are dropped with a warning."""
        collector = UnifiedMetricsCollector(enable_prometheus=False)
        collector.MAX_LABEL_COMBINATIONS = 2

        for defect in ("status", "role", "capacity"):
            collector.inc_counter(NODE_TRANSITIONS_TOTAL, labels={"defect": defect})

        counters = collector.get_metrics()["counters"][NODE_TRANSITIONS_TOTAL]
        assert "defect=capacity" not in counters
        assert "Cardinality limit" in caplog.text

        # Existing combinations keep counting
        collector.inc_counter(NODE_TRANSITIONS_TOTAL, labels={"defect": "status"})
        assert collector.get_counter(NODE_TRANSITIONS_TOTAL, {"defect": "status"}) == 2


class TestPrometheusIntegration:
    """Tests for the Prometheus mirror and scrape endpoint."""

    def test_counter_exported(self) -> None:
        """Verify counters reach the Prometheus registry."""
        registry = CollectorRegistry()
        collector = UnifiedMetricsCollector(enable_prometheus=True, registry=registry)

        collector.inc_counter(PASSES_TOTAL, labels={"mode": "enabled"})

        assert registry.get_sample_value(PASSES_TOTAL, {"mode": "enabled"}) == 1.0

    def test_gauge_and_histogram_exported(self) -> None:
        """Verify gauges and histograms reach the Prometheus registry."""
        registry = CollectorRegistry()
        collector = UnifiedMetricsCollector(enable_prometheus=True, registry=registry)

        collector.set_gauge(RESERVATIONS_ACTIVE, 3.0)
        collector.observe_histogram(PASS_DURATION_SECONDS, 0.2, labels={"mode": "enabled"})

        assert registry.get_sample_value(RESERVATIONS_ACTIVE) == 3.0
        assert (
            registry.get_sample_value(f"{PASS_DURATION_SECONDS}_count", {"mode": "enabled"})
            == 1.0
        )

    def test_duplicate_registration_keeps_dict_metrics(self) -> None:
        """Verify a name clash in the registry does not break dict metrics."""
        registry = CollectorRegistry()
        first = UnifiedMetricsCollector(enable_prometheus=True, registry=registry)
        second = UnifiedMetricsCollector(enable_prometheus=True, registry=registry)

        first.inc_counter(PASSES_TOTAL, labels={"mode": "enabled"})
        second.inc_counter(PASSES_TOTAL, labels={"mode": "enabled"})

        assert second.get_counter(PASSES_TOTAL, {"mode": "enabled"}) == 1
        assert registry.get_sample_value(PASSES_TOTAL, {"mode": "enabled"}) == 1.0

    def test_disabled_prometheus_registers_nothing(self) -> None:
        """Verify nothing is registered when Prometheus is disabled."""
        registry = CollectorRegistry()
        collector = UnifiedMetricsCollector(enable_prometheus=False, registry=registry)
        collector.inc_counter(PASSES_TOTAL, labels={"mode": "enabled"})
        assert registry.get_sample_value(PASSES_TOTAL, {"mode": "enabled"}) is None
        assert not collector.prometheus_enabled

    def test_start_http_server(self) -> None:
        """Verify the scrape server starts once and reports running."""
        registry = CollectorRegistry()
        collector = UnifiedMetricsCollector(enable_prometheus=True, registry=registry)

        with patch("fabric_sync.observability.collector.start_http_server") as start:
            assert collector.start_http_server(port=9999) is True
            assert collector.start_http_server(port=9999) is True

        start.assert_called_once_with(9999, addr="127.0.0.1", registry=registry)
        assert collector.server_running

    def test_start_http_server_failure(self) -> None:
        """Verify a bind failure returns False."""
        collector = UnifiedMetricsCollector(enable_prometheus=True, registry=CollectorRegistry())

        with patch(
            "fabric_sync.observability.collector.start_http_server",
            side_effect=OSError("address in use"),
        ):
            assert collector.start_http_server() is False
        assert not collector.server_running


class TestSingleton:
    """Tests for the process-wide collector accessors."""

    def setup_method(self) -> None:
        reset_metrics_collector()

    def teardown_method(self) -> None:
        reset_metrics_collector()

    def test_same_instance(self) -> None:
        assert get_metrics_collector() is get_metrics_collector()

    def test_reset_creates_new_instance(self) -> None:
        """Verify reset drops the instance and its values."""
        first = get_metrics_collector(enable_prometheus=False)
        first.inc_counter(PASSES_TOTAL)
        reset_metrics_collector()

        second = get_metrics_collector(enable_prometheus=False)
        assert second is not first
        assert second.get_counter(PASSES_TOTAL) == 0

    def test_reset_without_instance(self) -> None:
        """Verify reset is safe when no collector exists."""
        reset_metrics_collector()
        reset_metrics_collector()


class TestReset:
    """Tests for UnifiedMetricsCollector.reset."""

    def test_reset_clears_everything(self, collector: UnifiedMetricsCollector) -> None:
        collector.inc_counter(PASSES_TOTAL)
        collector.set_gauge(RESERVATIONS_ACTIVE, 1.0)
        collector.observe_histogram(PASS_DURATION_SECONDS, 0.5)

        collector.reset()

        assert collector.get_metrics() == {"counters": {}, "gauges": {}, "histograms": {}}
