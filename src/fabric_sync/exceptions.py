# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Exception classes for the fabric-sync library.

This module defines the exception hierarchy used throughout the library.
All exceptions inherit from FabricSyncError, making it easy to catch
all reconciliation-related exceptions with a single except clause.

Only conditions that must reach the caller are exceptions. Identity and
capacity defects on individual nodes, and orphaned reservations, are
recovered inside a pass and reported through logs and the PassReport.
"""


class FabricSyncError(Exception):
    """Base exception for all fabric-sync errors.

    Example:
        try:
            await driver.query()
        except FabricSyncError as e:
            logger.error(f"Reconciliation failed: {e}")
    """

    pass


class AllocatorTransportError(FabricSyncError):
    """Raised when the external allocator is unreachable or answers garbage.

    This is the only error that aborts a reconciliation pass. No node or
    reservation changes from the failed pass are applied, and the next
    periodic pass simply tries again.

    Attributes:
        operation: The allocator operation that failed ('query', 'reserve',
            'release'). May be None if the operation is not known.

    Example:
        try:
            report = await driver.query()
        except AllocatorTransportError as e:
            logger.error(f"Allocator {e.operation} failed, will retry next interval")
    """

    def __init__(self, message: str, operation: str | None = None):
        super().__init__(message)
        self.operation = operation


class ReservationError(FabricSyncError):
    """Raised when a reservation cannot be created for a job.

    The job is left untouched when this is raised, so the caller can
    requeue it or fail the allocation.

    Attributes:
        job_id: The job the reservation was for, if known.
        reservation_id: The reservation involved, if one was issued.
    """

    def __init__(
        self,
        message: str,
        job_id: int | None = None,
        reservation_id: str | None = None,
    ):
        super().__init__(message)
        self.job_id = job_id
        self.reservation_id = reservation_id


class DuplicateReservationError(ReservationError):
    """Raised when a reservation id is already held by an ACTIVE reservation."""

    pass


class ConfigurationError(FabricSyncError):
    """Raised when configuration is invalid.

    Common causes include:
    - An ENABLED driver built around a degraded allocator client
    - A DISABLED driver given an active allocator client
    - Unknown sync mode names
    """

    pass


class NodeNotFoundError(FabricSyncError):
    """Raised when a node name is not present in the node table.

    Attributes:
        name: The node name that was looked up.
    """

    def __init__(self, name: str):
        super().__init__(f"Node not found: {name}")
        self.name = name
