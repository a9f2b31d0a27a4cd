# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Protocol for the job entity's reservation id attribute."""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class JobProtocol(Protocol):
    """
    Minimal protocol for jobs that can hold an allocator reservation.

    Reconciliation never looks inside the manager's job structure. It reads
    and writes the reservation id through these accessors, so the manager is
    free to store it however it likes.
    """

    @property
    def job_id(self) -> int:
        """Manager job id (for logging and reservation ownership)."""
        ...

    @property
    def resource_spec(self) -> dict[str, Any]:
        """Resources allocated to the job, forwarded to the allocator."""
        ...

    def get_reservation_id(self) -> str | None:
        """Return the job's reservation id, or None if it holds none."""
        ...

    def set_reservation_id(self, reservation_id: str | None) -> None:
        """Record (or clear, with None) the job's reservation id."""
        ...
