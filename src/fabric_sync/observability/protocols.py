# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Structural type for whatever records fabric-sync metrics.

The reconciler, reservation manager and driver only ever call the methods
below, so tests can hand them a Mock and deployments can plug in their own
sink without subclassing UnifiedMetricsCollector.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class MetricsCollectorProtocol(Protocol):
    """
    Sink for counters, gauges and histograms keyed by name and labels.

    fabric-sync uses counters for passes, node transitions and reservation
    outcomes, one gauge for active reservations, and one histogram for pass
    duration.

    Example:
        >>> class NullCollector:
        ...     def inc_counter(self, name, value=1, labels=None): pass
        ...     def set_gauge(self, name, value, labels=None): pass
        ...     def observe_histogram(self, name, value, labels=None): pass
        ...     def get_metrics(self): return {}
        ...     def reset(self): pass
        >>> isinstance(NullCollector(), MetricsCollectorProtocol)
        True
    """

    def inc_counter(
        self,
        name: str,
        value: int = 1,
        labels: dict[str, str] | None = None,
    ) -> None:
        """Add a non-negative amount to a counter; negative values raise ValueError."""
        ...

    def set_gauge(
        self,
        name: str,
        value: float,
        labels: dict[str, str] | None = None,
    ) -> None: ...

    def observe_histogram(
        self,
        name: str,
        value: float,
        labels: dict[str, str] | None = None,
    ) -> None: ...

    def get_metrics(self) -> dict[str, Any]:
        """
        Snapshot of every series as
        ``{"counters": {...}, "gauges": {...}, "histograms": {...}}``,
        each mapping metric name to a dict keyed by label string.
        """
        ...

    def reset(self) -> None: ...


__all__ = ["MetricsCollectorProtocol"]
