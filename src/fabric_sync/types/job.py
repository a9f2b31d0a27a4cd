# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Job type used by the reservation lifecycle.

The manager's job entity is much richer than this. Reconciliation only
needs the job id, the resources it was allocated, and typed access to the
reservation id attribute, so that is all Job carries.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Job:
    """
    A job holding (or about to hold) an allocator reservation.

    Attributes:
        job_id: Manager job id
        resource_spec: Resources allocated to the job, passed through to the
            allocator reserve call unchanged
    """

    job_id: int
    resource_spec: dict[str, Any] = field(default_factory=dict)
    _reservation_id: str | None = field(default=None, repr=False)

    def get_reservation_id(self) -> str | None:
        return self._reservation_id

    def set_reservation_id(self, reservation_id: str | None) -> None:
        self._reservation_id = reservation_id


__all__ = ["Job"]
