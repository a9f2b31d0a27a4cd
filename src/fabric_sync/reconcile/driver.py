# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Reconciliation driver.

ReconciliationDriver is the entry point the manager uses. It runs a pass
once at startup and then periodically, and it exposes reserve/release for
the scheduling path. Every entry point holds ClusterState.lock for its
whole duration, so reconciliation never interleaves with scheduling
decisions that read the same tables.
"""

import asyncio
import contextlib
import logging
import time
from typing import Any

from typing_extensions import Self

from ..allocator.base import BaseAllocatorClient
from ..allocator.disabled import DisabledAllocatorClient
from ..config import SyncConfig, SyncMode
from ..exceptions import AllocatorTransportError, ConfigurationError, FabricSyncError
from ..observability.collector import get_metrics_collector
from ..observability.constants import (
    PASS_DURATION_SECONDS,
    PASS_FAILURES_TOTAL,
    PASSES_TOTAL,
)
from ..observability.protocols import MetricsCollectorProtocol
from ..protocols.job import JobProtocol
from ..reservation.manager import ReservationManager
from ..state.cluster import ClusterState
from .modes import create_pass_strategy
from .nodes import NodeReconciler
from .report import PassReport

logger = logging.getLogger(__name__)


class ReconciliationDriver:
    """
    Orchestrates reconciliation passes against the external allocator.

    The driver is responsible for:
    - Creating the pass strategy for the configured mode
    - Serializing passes and reservation calls behind the cluster lock
    - Running the startup pass and the periodic pass loop
    - Recording pass metrics

    Example:
        >>> driver = create_driver(cluster, client=allocator)
        >>> async with driver:
        ...     await driver.reserve(job)
    """

    def __init__(
        self,
        client: BaseAllocatorClient,
        cluster: ClusterState,
        config: SyncConfig,
        metrics_collector: MetricsCollectorProtocol | None = None,
    ) -> None:
        """
        Initialize the driver.

        Args:
            client: Allocator client matching config.mode
            cluster: Manager-owned tables and lock
            config: Sync configuration
            metrics_collector: Optional metrics collector; the global
                collector is used when metrics are enabled and none is given

        Raises:
            ConfigurationError: If the client does not match config.mode
        """
        self.client = client
        self.cluster = cluster
        self.config = config

        if metrics_collector is None and config.metrics_enabled:
            metrics_collector = get_metrics_collector()
        self._metrics_collector = metrics_collector

        self.reconciler = NodeReconciler(cluster, config, metrics_collector)
        self.reservations = ReservationManager(
            client, cluster, config, metrics_collector
        )
        self.pass_strategy = create_pass_strategy(
            config.mode, client, config, self.reconciler, self.reservations
        )

        self._loop_task: asyncio.Task[None] | None = None
        self._running = False
        self.last_report: PassReport | None = None

        logger.info(
            "ReconciliationDriver initialized (mode=%s, client=%s, strict=%s)",
            config.mode.value,
            client.name,
            config.strict_validation,
        )

    # ==========================================================================
    # Exposed Operations
    # ==========================================================================

    async def query(self) -> PassReport:
        """
        Run one full reconciliation pass.

        Returns:
            PassReport describing the pass

        Raises:
            AllocatorTransportError: If the allocator query failed. The pass
                is abandoned and will run again next interval.
        """
        mode = self.config.mode.value
        async with self.cluster.lock:
            started = time.monotonic()
            try:
                report = await self.pass_strategy.run_pass()
            except AllocatorTransportError as e:
                logger.error("allocator query error, pass abandoned: %s", e)
                self._count(PASS_FAILURES_TOTAL, {"mode": mode})
                raise
            report.duration = time.monotonic() - started

        self.last_report = report
        self._count(PASSES_TOTAL, {"mode": mode})
        if self._metrics_collector is not None:
            self._metrics_collector.observe_histogram(
                PASS_DURATION_SECONDS, report.duration, labels={"mode": mode}
            )
        logger.info(
            "reconciliation pass complete (mode=%s, nodes=%d, transitions=%d, purged=%d, last_res_id=%d)",
            mode,
            report.nodes_reported,
            len(report.transitions),
            len(report.purged_reservations),
            report.last_reservation_number,
        )
        return report

    async def reserve(self, job: JobProtocol) -> str:
        """
        Create a reservation for a job; the id is also written onto the job.

        Raises:
            ReservationError: If the allocator could not make the reservation.
        """
        async with self.cluster.lock:
            return await self.reservations.reserve(job)

    async def release(self, reservation_id: str) -> bool:
        """
        Release a reservation.

        Returns:
            False if the allocator release failed. Local bookkeeping is
            cleared either way.
        """
        async with self.cluster.lock:
            return await self.reservations.release(reservation_id)

    # ==========================================================================
    # Lifecycle
    # ==========================================================================

    async def start(self) -> PassReport:
        """
        Run the startup pass, then start the periodic pass loop.

        Returns:
            The startup PassReport

        Raises:
            AllocatorTransportError: If the startup pass failed. The loop is
                not started in that case.
        """
        if self._running:
            raise FabricSyncError("ReconciliationDriver is already running")

        report = await self.query()
        self._running = True
        self._loop_task = asyncio.create_task(self._reconcile_loop())
        logger.info(
            "ReconciliationDriver started (interval=%.1fs)", self.config.query_interval
        )
        return report

    async def stop(self) -> None:
        """Stop the periodic pass loop."""
        if not self._running:
            return

        self._running = False
        if self._loop_task:
            self._loop_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._loop_task
            self._loop_task = None
        logger.info("ReconciliationDriver stopped")

    def is_running(self) -> bool:
        return self._running

    async def _reconcile_loop(self) -> None:
        """Background task that runs a pass every query_interval seconds."""
        while self._running:
            try:
                await asyncio.sleep(self.config.query_interval)
                if self._running:
                    await self.query()
            except asyncio.CancelledError:
                break
            except FabricSyncError as e:
                # Already logged by query(); retry cadence is the next interval
                logger.debug("reconciliation pass failed: %s", e)
            except Exception as e:
                logger.exception("Unexpected error in reconciliation loop: %s", e)

    async def __aenter__(self) -> Self:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        await self.stop()

    # ==========================================================================
    # Metrics
    # ==========================================================================

    def _count(self, name: str, labels: dict[str, str] | None = None) -> None:
        if self._metrics_collector is not None:
            self._metrics_collector.inc_counter(name, labels=labels)

    def get_metrics(self) -> dict[str, Any]:
        """Return driver state plus the collector snapshot, if any."""
        metrics: dict[str, Any] = {
            "mode": self.config.mode.value,
            "client": self.client.name,
            "running": self._running,
            "last_node_update": self.cluster.last_node_update,
            "last_reservation_number": self.reservations.last_reservation_number,
            "active_reservations": self.reservations.tracker.active_count,
        }
        if self._metrics_collector is not None:
            metrics["collector"] = self._metrics_collector.get_metrics()
        return metrics


def create_driver(
    cluster: ClusterState,
    mode: str | None = None,
    config: SyncConfig | None = None,
    client: BaseAllocatorClient | None = None,
    metrics_collector: MetricsCollectorProtocol | None = None,
) -> ReconciliationDriver:
    """
    Factory function to create a ReconciliationDriver.

    Args:
        cluster: Manager-owned tables and lock
        mode: "enabled" or "disabled". If None, uses config.mode
        config: Optional sync config (a default is created if not provided)
        client: Allocator client. Required for ENABLED; DISABLED defaults
            to DisabledAllocatorClient
        metrics_collector: Optional metrics collector

    Returns:
        Configured ReconciliationDriver

    Raises:
        ConfigurationError: If mode is unknown, or the client is missing or
            does not match the mode
    """
    if config is None:
        config = SyncConfig()

    if mode is not None:
        try:
            config.mode = SyncMode(mode.lower())
        except ValueError as e:
            raise ConfigurationError(f"Unknown sync mode: {mode}") from e

    if client is None:
        if config.mode == SyncMode.ENABLED:
            raise ConfigurationError("ENABLED mode requires an allocator client")
        client = DisabledAllocatorClient()

    return ReconciliationDriver(
        client=client,
        cluster=cluster,
        config=config,
        metrics_collector=metrics_collector,
    )


__all__ = ["ReconciliationDriver", "create_driver"]
