# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Names of every metric fabric-sync emits.

Counters end in ``_total`` and the one timing histogram ends in
``_seconds``. Labels stay low-cardinality: ``mode`` (enabled/disabled),
``defect`` (status/role/capacity/identity) and ``outcome`` (ok/failed).
Node names, job ids and reservation ids are never labels.
"""


# =============================================================================
# Global Prefix
# =============================================================================

METRIC_PREFIX = "fabric_sync"
"""Prefix for all Prometheus metrics in this library."""


# =============================================================================
# Pass Metrics (reconcile/driver.py)
# =============================================================================

PASSES_TOTAL = f"{METRIC_PREFIX}_passes_total"
"""Total reconciliation passes completed."""

PASS_FAILURES_TOTAL = f"{METRIC_PREFIX}_pass_failures_total"
"""Total reconciliation passes aborted by an allocator failure."""

PASS_DURATION_SECONDS = f"{METRIC_PREFIX}_pass_duration_seconds"
"""Duration of completed reconciliation passes."""


# =============================================================================
# Node Metrics (reconcile/nodes.py)
# =============================================================================

NODE_TRANSITIONS_TOTAL = f"{METRIC_PREFIX}_node_transitions_total"
"""Total nodes forced DOWN by reconciliation."""

UNKNOWN_NODES_TOTAL = f"{METRIC_PREFIX}_unknown_nodes_total"
"""Total allocator node facts with no matching local node."""


# =============================================================================
# Reservation Metrics (reservation/manager.py)
# =============================================================================

RESERVATIONS_CREATED_TOTAL = f"{METRIC_PREFIX}_reservations_created_total"
"""Total reservations created."""

RESERVATION_FAILURES_TOTAL = f"{METRIC_PREFIX}_reservation_failures_total"
"""Total reserve calls rejected or failed at the allocator."""

RESERVATION_RELEASES_TOTAL = f"{METRIC_PREFIX}_reservation_releases_total"
"""Total reservation releases."""

VESTIGIAL_RESERVATIONS_TOTAL = f"{METRIC_PREFIX}_vestigial_reservations_total"
"""Total orphaned reservations found and released."""

RESERVATIONS_ACTIVE = f"{METRIC_PREFIX}_reservations_active"
"""Number of currently tracked ACTIVE reservations."""


# =============================================================================
# Histogram Buckets
# =============================================================================

PASS_DURATION_BUCKETS = [0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0]
"""Buckets for pass duration histograms (seconds)."""


__all__ = [
    "METRIC_PREFIX",
    "NODE_TRANSITIONS_TOTAL",
    "PASSES_TOTAL",
    "PASS_DURATION_BUCKETS",
    "PASS_DURATION_SECONDS",
    "PASS_FAILURES_TOTAL",
    "RESERVATIONS_ACTIVE",
    "RESERVATIONS_CREATED_TOTAL",
    "RESERVATION_FAILURES_TOTAL",
    "RESERVATION_RELEASES_TOTAL",
    "UNKNOWN_NODES_TOTAL",
    "VESTIGIAL_RESERVATIONS_TOTAL",
]
