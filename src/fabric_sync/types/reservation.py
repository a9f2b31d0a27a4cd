# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Reservation record types."""

import time
from dataclasses import dataclass, field
from enum import Enum


class ReservationState(Enum):
    """
    Lifecycle state of a reservation.

    - ACTIVE: Held by a running job.
    - VESTIGIAL: Known to the allocator but claimed by no job; about to be
      released.
    - RELEASED: Returned to the allocator. Released records are dropped from
      the tracker and only seen by callers that removed them.
    """

    ACTIVE = "active"
    VESTIGIAL = "vestigial"
    RELEASED = "released"


@dataclass
class ReservationRecord:
    """
    Tracks one reservation and the job that owns it.

    Attributes:
        reservation_id: Allocator (or locally generated) reservation id
        job_id: Owning job id, None for orphans found in an allocator snapshot
        state: Current lifecycle state
        created_at: Unix timestamp when the record was created
    """

    reservation_id: str
    job_id: int | None
    state: ReservationState = ReservationState.ACTIVE
    created_at: float = field(default_factory=time.time)


__all__ = ["ReservationRecord", "ReservationState"]
