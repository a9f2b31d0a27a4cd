# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Metrics for reconciliation passes, node transitions and reservations.

``get_metrics_collector()`` returns the process-wide UnifiedMetricsCollector
the driver falls back to when ``SyncConfig.metrics_enabled`` is set. Any
object satisfying MetricsCollectorProtocol can be passed instead.
"""

from .collector import (
    METRIC_DEFINITIONS,
    MetricDefinition,
    UnifiedMetricsCollector,
    get_metrics_collector,
    reset_metrics_collector,
)
from .constants import (
    METRIC_PREFIX,
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
from .protocols import MetricsCollectorProtocol

__all__ = [
    "METRIC_DEFINITIONS",
    "METRIC_PREFIX",
    # Node metrics
    "NODE_TRANSITIONS_TOTAL",
    # Pass metrics
    "PASSES_TOTAL",
    "PASS_DURATION_BUCKETS",
    "PASS_DURATION_SECONDS",
    "PASS_FAILURES_TOTAL",
    # Reservation metrics
    "RESERVATIONS_ACTIVE",
    "RESERVATIONS_CREATED_TOTAL",
    "RESERVATION_FAILURES_TOTAL",
    "RESERVATION_RELEASES_TOTAL",
    "UNKNOWN_NODES_TOTAL",
    "VESTIGIAL_RESERVATIONS_TOTAL",
    "MetricDefinition",
    # Protocols
    "MetricsCollectorProtocol",
    # Unified collector
    "UnifiedMetricsCollector",
    "get_metrics_collector",
    "reset_metrics_collector",
]
