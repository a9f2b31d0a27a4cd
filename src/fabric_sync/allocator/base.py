# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Base Allocator Client for fabric-sync

This module provides the BaseAllocatorClient abstract class that defines
the interface every allocator implementation offers to the reconciliation
driver and the reservation manager.

Implementations:
- TransportAllocatorClient: Talks to a real allocator through an injected transport
- MemoryAllocator: In-process allocator for development and tests
- DisabledAllocatorClient: Degraded mode, no allocator at all
"""

import abc
import logging
from dataclasses import dataclass
from typing import Any

from ..exceptions import AllocatorTransportError
from ..types.snapshot import AllocatorSnapshot

logger = logging.getLogger(__name__)


@dataclass
class HealthCheckResult:
    """
    Structured health check result for allocator monitoring.

    Attributes:
        healthy: Whether the allocator answered
        client_type: Type of client (e.g., 'transport', 'memory', 'disabled')
        error: Error message if unhealthy
        metadata: Additional client-specific information
    """

    healthy: bool
    client_type: str
    error: str | None = None
    metadata: dict[str, Any] | None = None


class BaseAllocatorClient(abc.ABC):
    """
    Abstract interface to the external allocator.

    Every call either returns its result or raises AllocatorTransportError.
    Clients never retry internally; the retry cadence is the driver's
    query interval.
    """

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Short client name for logs and health checks."""
        pass

    @property
    def degraded(self) -> bool:
        """True when there is no external allocator behind this client."""
        return False

    @abc.abstractmethod
    async def query(self) -> AllocatorSnapshot:
        """
        Query the allocator for node and reservation state.

        Returns:
            The full snapshot. A partial snapshot is never returned; any
            failure part way through raises instead.

        Raises:
            AllocatorTransportError: If the allocator is unreachable or the
                response is malformed.
        """
        pass

    @abc.abstractmethod
    async def reserve(self, job_id: int, resource_spec: dict[str, Any]) -> str:
        """
        Create a reservation for a job.

        Args:
            job_id: The job the reservation is for
            resource_spec: Resources allocated to the job

        Returns:
            The allocator's reservation id

        Raises:
            AllocatorTransportError: If the reservation could not be made.
        """
        pass

    @abc.abstractmethod
    async def release(self, reservation_id: str) -> None:
        """
        Release a reservation.

        Raises:
            AllocatorTransportError: If the release could not be confirmed.
        """
        pass

    async def health_check(self) -> HealthCheckResult:
        """
        Probe the allocator with a query.

        Returns:
            HealthCheckResult describing whether the allocator answered.
        """
        try:
            snapshot = await self.query()
        except AllocatorTransportError as e:
            logger.warning("Allocator health check failed (%s): %s", self.name, e)
            return HealthCheckResult(healthy=False, client_type=self.name, error=str(e))
        return HealthCheckResult(
            healthy=True,
            client_type=self.name,
            metadata={
                "nodes": len(snapshot.nodes),
                "reservations": len(snapshot.reservation_ids),
            },
        )


__all__ = ["BaseAllocatorClient", "HealthCheckResult"]
