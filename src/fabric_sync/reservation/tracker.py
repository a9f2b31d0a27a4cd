# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""ReservationTracker for reservation records with a job index."""

import logging

from ..exceptions import DuplicateReservationError
from ..types.reservation import ReservationRecord, ReservationState

logger = logging.getLogger(__name__)


class ReservationTracker:
    """
    Tracks reservation records keyed by reservation id.

    Primary storage: Dict[reservation_id, ReservationRecord]
    Secondary index: Dict[job_id, reservation_id]

    The tracker holds ACTIVE and VESTIGIAL records. A record leaves the
    tracker when it is released; the removed record comes back to the caller
    in RELEASED state.

    This tracker does NOT make allocator calls and does NOT lock. The
    ReservationManager drives it while holding ClusterState.lock.
    """

    def __init__(self) -> None:
        self._records: dict[str, ReservationRecord] = {}
        self._job_index: dict[int, str] = {}

    def add(self, reservation_id: str, job_id: int | None) -> ReservationRecord:
        """
        Track a new ACTIVE reservation.

        Raises:
            DuplicateReservationError: If reservation_id is already ACTIVE
        """
        existing = self._records.get(reservation_id)
        if existing is not None and existing.state == ReservationState.ACTIVE:
            raise DuplicateReservationError(
                f"Reservation {reservation_id} is already active for job {existing.job_id}",
                job_id=job_id,
                reservation_id=reservation_id,
            )

        record = ReservationRecord(reservation_id=reservation_id, job_id=job_id)
        self._records[reservation_id] = record
        if job_id is not None:
            self._job_index[job_id] = reservation_id

        logger.debug(
            "Tracking reservation: reservation_id=%s, job_id=%s", reservation_id, job_id
        )
        return record

    def mark_vestigial(self, reservation_id: str) -> ReservationRecord:
        """Mark an allocator reservation as claimed by no job, tracking it if new."""
        record = self._records.get(reservation_id)
        if record is None:
            record = ReservationRecord(reservation_id=reservation_id, job_id=None)
            self._records[reservation_id] = record
        else:
            self._unindex(record)
        record.state = ReservationState.VESTIGIAL
        return record

    def remove(self, reservation_id: str) -> ReservationRecord | None:
        """
        Drop a reservation from tracking (idempotent).

        Returns:
            The removed record in RELEASED state, or None if it was untracked
        """
        record = self._records.pop(reservation_id, None)
        if record is None:
            return None
        self._unindex(record)
        record.state = ReservationState.RELEASED
        logger.debug("Released reservation record: reservation_id=%s", reservation_id)
        return record

    def _unindex(self, record: ReservationRecord) -> None:
        if (
            record.job_id is not None
            and self._job_index.get(record.job_id) == record.reservation_id
        ):
            del self._job_index[record.job_id]

    def get(self, reservation_id: str) -> ReservationRecord | None:
        return self._records.get(reservation_id)

    def for_job(self, job_id: int) -> ReservationRecord | None:
        """Return the reservation held by a job, if tracked."""
        reservation_id = self._job_index.get(job_id)
        if reservation_id is None:
            return None
        return self._records.get(reservation_id)

    def active_ids(self) -> set[str]:
        return {
            rid
            for rid, record in self._records.items()
            if record.state == ReservationState.ACTIVE
        }

    @property
    def reservation_count(self) -> int:
        """Return the current number of tracked reservations."""
        return len(self._records)

    @property
    def active_count(self) -> int:
        return sum(
            1
            for record in self._records.values()
            if record.state == ReservationState.ACTIVE
        )

    def __contains__(self, reservation_id: object) -> bool:
        return reservation_id in self._records


__all__ = ["ReservationTracker"]
