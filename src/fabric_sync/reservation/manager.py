# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Reservation lifecycle management.

ReservationManager creates, releases and purges reservations. With an
active allocator it forwards reserve/release calls and removes vestigial
reservations found in allocator snapshots. In degraded mode it issues
reservation ids locally from a counter that is bootstrapped from the ids
jobs already hold, so a restarted manager never reuses an id.

Callers must hold ClusterState.lock. The driver's public reserve/release
take it; the manager's methods assume it is held.
"""

import logging

from ..allocator.base import BaseAllocatorClient
from ..config import SyncConfig
from ..exceptions import AllocatorTransportError, ReservationError
from ..observability.constants import (
    RESERVATION_FAILURES_TOTAL,
    RESERVATION_RELEASES_TOTAL,
    RESERVATIONS_ACTIVE,
    RESERVATIONS_CREATED_TOTAL,
    VESTIGIAL_RESERVATIONS_TOTAL,
)
from ..observability.protocols import MetricsCollectorProtocol
from ..protocols.job import JobProtocol
from ..state.cluster import ClusterState
from ..types.snapshot import AllocatorSnapshot
from .tracker import ReservationTracker

logger = logging.getLogger(__name__)


class ReservationManager:
    """
    Creates, validates and purges reservations for jobs.

    Attributes:
        client: Allocator client; its ``degraded`` flag selects the mode
        cluster: Manager-owned node and job tables
        config: Sync configuration (id prefix and separator)
        tracker: Reservation records for this process
    """

    def __init__(
        self,
        client: BaseAllocatorClient,
        cluster: ClusterState,
        config: SyncConfig,
        metrics_collector: MetricsCollectorProtocol | None = None,
        tracker: ReservationTracker | None = None,
    ) -> None:
        self.client = client
        self.cluster = cluster
        self.config = config
        self.tracker = tracker or ReservationTracker()
        self._metrics_collector = metrics_collector

        # Highest locally generated (or observed) reservation number. Only
        # ever increases for the life of the process.
        self._last_reservation_number = 0

    @property
    def degraded(self) -> bool:
        return self.client.degraded

    @property
    def last_reservation_number(self) -> int:
        return self._last_reservation_number

    # ==========================================================================
    # Counter Bootstrap (degraded mode)
    # ==========================================================================

    def _parse_number(self, reservation_id: str) -> int | None:
        """Return the numeric suffix after the last separator, if there is one."""
        _, sep, tail = reservation_id.rpartition(self.config.reservation_separator)
        if not sep or not (tail.isascii() and tail.isdigit()):
            return None
        return int(tail)

    def _observed_maximum(self) -> int:
        highest = 0
        held = self.cluster.jobs.reservation_ids()
        for reservation_id in [*held, *self.tracker.active_ids()]:
            number = self._parse_number(reservation_id)
            if number is None:
                logger.debug("Ignoring unnumbered reservation id %s", reservation_id)
                continue
            highest = max(highest, number)
        return highest

    def bootstrap_counter(self) -> int:
        """
        Raise the local counter to the highest reservation number in use.

        Recomputed on every pass. The counter never moves backwards, so ids
        of jobs that have since finished are not handed out again.

        Returns:
            The counter value after the scan
        """
        self._last_reservation_number = max(
            self._last_reservation_number, self._observed_maximum()
        )
        logger.debug(
            "reservation counter bootstrap executed, last_res_id=%d",
            self._last_reservation_number,
        )
        return self._last_reservation_number

    def _next_local_id(self) -> str:
        self._last_reservation_number = (
            max(self._last_reservation_number, self._observed_maximum()) + 1
        )
        return (
            f"{self.config.reservation_prefix}"
            f"{self.config.reservation_separator}"
            f"{self._last_reservation_number}"
        )

    # ==========================================================================
    # Reserve / Release
    # ==========================================================================

    async def reserve(self, job: JobProtocol) -> str:
        """
        Create a reservation for a job that has just been allocated resources.

        The reservation id is written onto the job and also returned. If
        the job already holds a reservation, that one is released once the
        new id has been obtained.

        Raises:
            ReservationError: Active mode only, if the allocator refused or
                failed. The job is left unchanged, including any
                reservation it already held.
        """
        if self.degraded:
            reservation_id = self._next_local_id()
        else:
            try:
                reservation_id = await self.client.reserve(
                    job.job_id, job.resource_spec
                )
            except AllocatorTransportError as e:
                logger.error("allocator reserve error for job %d: %s", job.job_id, e)
                self._count(RESERVATION_FAILURES_TOTAL)
                raise ReservationError(
                    f"Could not reserve resources for job {job.job_id}: {e}",
                    job_id=job.job_id,
                ) from e

        previous = job.get_reservation_id()
        if previous is not None and previous != reservation_id:
            await self._supersede(job.job_id, previous)

        self.tracker.add(reservation_id, job.job_id)
        job.set_reservation_id(reservation_id)

        mode = "disabled" if self.degraded else "enabled"
        logger.debug(
            "reservation made job_id=%d res_id=%s", job.job_id, reservation_id
        )
        self._count(RESERVATIONS_CREATED_TOTAL, {"mode": mode})
        self._publish_active()
        return reservation_id

    async def release(self, reservation_id: str) -> bool:
        """
        Release a reservation.

        Local bookkeeping (tracker record and any job holding the id) is
        cleared whether or not the allocator confirms the release. In
        degraded mode there is no allocator to call, so only that local
        clearing happens.

        Returns:
            True if the allocator confirmed (always True in degraded mode),
            False if the allocator release failed.
        """
        released = await self._drop(reservation_id)
        self._publish_active()
        return released

    async def _supersede(self, job_id: int, reservation_id: str) -> None:
        logger.warning(
            "job %d already holds reservation %s, releasing it", job_id, reservation_id
        )
        await self._drop(reservation_id)

    async def _drop(self, reservation_id: str) -> bool:
        if self.degraded:
            logger.debug("release of %s complete (no allocator)", reservation_id)
            released = True
        else:
            released = await self._release_to_allocator(reservation_id)

        self._clear_local(reservation_id)
        self._count(
            RESERVATION_RELEASES_TOTAL, {"outcome": "ok" if released else "failed"}
        )
        return released

    async def _release_to_allocator(self, reservation_id: str) -> bool:
        try:
            await self.client.release(reservation_id)
        except AllocatorTransportError as e:
            logger.error("allocator release of %s error: %s", reservation_id, e)
            return False
        logger.debug("allocator release of %s complete", reservation_id)
        return True

    def _clear_local(self, reservation_id: str) -> None:
        self.tracker.remove(reservation_id)
        for job in self.cluster.jobs.holders_of(reservation_id):
            job.set_reservation_id(None)

    # ==========================================================================
    # Vestigial Purge (active mode)
    # ==========================================================================

    async def purge_vestigial(self, snapshot: AllocatorSnapshot) -> list[str]:
        """
        Release allocator reservations that no job claims.

        Reservations held by a job but not yet tracked (for example after a
        manager restart) are adopted as ACTIVE records instead.

        Returns:
            The reservation ids released as vestigial, in sorted order.
        """
        if self.degraded:
            return []

        purged = []
        for reservation_id in sorted(snapshot.reservation_ids):
            holders = self.cluster.jobs.holders_of(reservation_id)
            if holders:
                if reservation_id not in self.tracker:
                    logger.info(
                        "Adopting reservation %s held by job %d",
                        reservation_id,
                        holders[0].job_id,
                    )
                    self.tracker.add(reservation_id, holders[0].job_id)
                continue

            logger.error("vestigial reservation %s being removed", reservation_id)
            self.tracker.mark_vestigial(reservation_id)
            self._count(VESTIGIAL_RESERVATIONS_TOTAL)
            released = await self._release_to_allocator(reservation_id)
            self._count(
                RESERVATION_RELEASES_TOTAL,
                {"outcome": "ok" if released else "failed"},
            )
            self.tracker.remove(reservation_id)
            purged.append(reservation_id)

        self._publish_active()
        return purged

    # ==========================================================================
    # Metrics
    # ==========================================================================

    def _count(self, name: str, labels: dict[str, str] | None = None) -> None:
        if self._metrics_collector is not None:
            self._metrics_collector.inc_counter(name, labels=labels)

    def _publish_active(self) -> None:
        if self._metrics_collector is not None:
            self._metrics_collector.set_gauge(
                RESERVATIONS_ACTIVE, float(self.tracker.active_count)
            )


__all__ = ["ReservationManager"]
