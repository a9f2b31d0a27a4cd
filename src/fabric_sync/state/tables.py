# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Node and job tables.

These are the manager-owned containers that reconciliation reads and
mutates. They are plain in-memory registries; locking is the job of the
ClusterState that owns them.
"""

import logging
from collections.abc import Iterable, Iterator

from ..exceptions import NodeNotFoundError
from ..protocols.job import JobProtocol
from ..types.node import NodeRecord

logger = logging.getLogger(__name__)


class NodeTable:
    """
    Node registry keyed by node name.

    Iteration order is insertion order, which matches the order nodes were
    declared in static configuration.
    """

    def __init__(self, nodes: Iterable[NodeRecord] = ()) -> None:
        self._nodes: dict[str, NodeRecord] = {}
        for node in nodes:
            self.add(node)

    def add(self, node: NodeRecord) -> None:
        """Add or replace a node record."""
        self._nodes[node.name] = node

    def find(self, name: str) -> NodeRecord | None:
        """Return the node record if present."""
        return self._nodes.get(name)

    def get(self, name: str) -> NodeRecord:
        """Return the node record or raise NodeNotFoundError."""
        node = self._nodes.get(name)
        if node is None:
            raise NodeNotFoundError(name)
        return node

    def names(self) -> list[str]:
        return list(self._nodes)

    def __iter__(self) -> Iterator[NodeRecord]:
        return iter(list(self._nodes.values()))

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, name: object) -> bool:
        return name in self._nodes


class JobTable:
    """
    Job registry keyed by job id.

    Iteration returns a snapshot list so callers may add or remove jobs
    while walking the table.
    """

    def __init__(self, jobs: Iterable[JobProtocol] = ()) -> None:
        self._jobs: dict[int, JobProtocol] = {}
        for job in jobs:
            self.add(job)

    def add(self, job: JobProtocol) -> None:
        """Add or replace a job."""
        self._jobs[job.job_id] = job

    def remove(self, job_id: int) -> JobProtocol | None:
        """Remove and return a job, or None if it was not present."""
        job = self._jobs.pop(job_id, None)
        if job is not None:
            logger.debug("Removed job %d from job table", job_id)
        return job

    def get(self, job_id: int) -> JobProtocol | None:
        return self._jobs.get(job_id)

    def holders_of(self, reservation_id: str) -> list[JobProtocol]:
        """Return every job whose reservation id equals reservation_id."""
        return [
            job
            for job in self._jobs.values()
            if job.get_reservation_id() == reservation_id
        ]

    def reservation_ids(self) -> list[str]:
        """Return the reservation ids currently held by jobs."""
        ids = []
        for job in self._jobs.values():
            reservation_id = job.get_reservation_id()
            if reservation_id:
                ids.append(reservation_id)
        return ids

    def __iter__(self) -> Iterator[JobProtocol]:
        return iter(list(self._jobs.values()))

    def __len__(self) -> int:
        return len(self._jobs)


__all__ = ["JobTable", "NodeTable"]
