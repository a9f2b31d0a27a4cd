# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
MemoryAllocator for fabric-sync

This module provides an in-process allocator that behaves like an external
one: it owns node facts, admits reservations and hands out reservation ids.
Perfect for testing, development, and dry runs of the reconciliation loop.
"""

import asyncio
import itertools
import logging
from typing import Any

from ..exceptions import AllocatorTransportError
from ..types.snapshot import AllocatorNodeFact, AllocatorSnapshot
from .base import BaseAllocatorClient

logger = logging.getLogger(__name__)


class MemoryAllocator(BaseAllocatorClient):
    """
    An in-memory allocator implementation.

    Key Features:
    - Node facts set directly with set_node / remove_node
    - Reservation ids issued from a local sequence
    - Failure injection via fail_next() to exercise transport failure paths
    - Records every release call for inspection

    Note:
        This allocator is NOT suitable for production. It exists so the
        reconciliation driver can run end to end without the vendor
        allocator.
    """

    def __init__(self, id_prefix: str = "alloc-") -> None:
        """
        Initialize the in-memory allocator.

        Args:
            id_prefix: Prefix for issued reservation ids
        """
        self._id_prefix = id_prefix
        self._nodes: dict[str, AllocatorNodeFact] = {}
        self._reservations: dict[str, int | None] = {}
        self._sequence = itertools.count(1)
        self._failures: dict[str, int] = {}
        self._lock = asyncio.Lock()

        self.release_calls: list[str] = []

        logger.debug("Initialized MemoryAllocator with prefix '%s'", id_prefix)

    @property
    def name(self) -> str:
        return "memory"

    # ==========================================================================
    # Test/Dev Controls
    # ==========================================================================

    def set_node(self, fact: AllocatorNodeFact) -> None:
        """Add or replace the fact reported for a node."""
        self._nodes[fact.name] = fact

    def remove_node(self, name: str) -> None:
        self._nodes.pop(name, None)

    def add_reservation(self, reservation_id: str, job_id: int | None = None) -> None:
        """Register a reservation the allocator knows about (e.g. an orphan)."""
        self._reservations[reservation_id] = job_id

    @property
    def reservation_ids(self) -> set[str]:
        return set(self._reservations)

    def fail_next(self, operation: str, count: int = 1) -> None:
        """Make the next ``count`` calls of ``operation`` raise AllocatorTransportError."""
        if operation not in ("query", "reserve", "release"):
            raise ValueError(f"Unknown allocator operation: {operation}")
        self._failures[operation] = self._failures.get(operation, 0) + count

    def _maybe_fail(self, operation: str) -> None:
        remaining = self._failures.get(operation, 0)
        if remaining > 0:
            self._failures[operation] = remaining - 1
            raise AllocatorTransportError(
                f"injected {operation} failure", operation=operation
            )

    # ==========================================================================
    # BaseAllocatorClient
    # ==========================================================================

    async def query(self) -> AllocatorSnapshot:
        async with self._lock:
            self._maybe_fail("query")
            return AllocatorSnapshot(
                nodes=tuple(self._nodes.values()),
                reservation_ids=frozenset(self._reservations),
            )

    async def reserve(self, job_id: int, resource_spec: dict[str, Any]) -> str:
        async with self._lock:
            self._maybe_fail("reserve")
            reservation_id = f"{self._id_prefix}{next(self._sequence)}"
            self._reservations[reservation_id] = job_id
            logger.debug(
                "memory allocator reserved %s for job %d (%s)",
                reservation_id,
                job_id,
                resource_spec,
            )
            return reservation_id

    async def release(self, reservation_id: str) -> None:
        async with self._lock:
            self.release_calls.append(reservation_id)
            self._maybe_fail("release")
            if self._reservations.pop(reservation_id, None) is None:
                logger.debug(
                    "memory allocator release of unknown or unowned %s", reservation_id
                )


__all__ = ["MemoryAllocator"]
