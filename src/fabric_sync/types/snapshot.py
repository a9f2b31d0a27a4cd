# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Allocator snapshot types.

A snapshot is the ephemeral result of one allocator query. It is consumed
by a single reconciliation pass and never persisted.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class AllocatorNodeFact:
    """
    What the allocator reports about one node.

    Attributes:
        name: Node name, matched against the manager's node table
        node_id: Allocator-assigned node id
        arch: Architecture string
        status: Allocator node status (e.g. 'UP', 'DOWN')
        role: Allocator node role (e.g. 'BATCH', 'INTERACTIVE')
        cpus: Processor count
        memory: Memory size in MB
    """

    name: str
    node_id: int
    arch: str
    status: str
    role: str
    cpus: int
    memory: int


@dataclass(frozen=True)
class AllocatorSnapshot:
    """
    Result of an allocator query.

    Attributes:
        nodes: Node facts in allocator order
        reservation_ids: Reservation ids the allocator currently holds
    """

    nodes: tuple[AllocatorNodeFact, ...] = ()
    reservation_ids: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def empty(cls) -> "AllocatorSnapshot":
        """Snapshot returned when no allocator is available."""
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.nodes and not self.reservation_ids


__all__ = ["AllocatorNodeFact", "AllocatorSnapshot"]
