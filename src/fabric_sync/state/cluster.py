# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Cluster state shared between the manager and reconciliation.

ClusterState bundles the node and job tables with the lock that protects
them, the shared "last node update" marker, and the bitmap resync hook.
The surrounding manager owns it and injects it into the reconciliation
components at construction.
"""

import asyncio
import logging
import time

from ..protocols import BitmapResyncHook
from ..types.node import NODE_STATE_BASE, NodeRecord, NodeState
from .tables import JobTable, NodeTable

logger = logging.getLogger(__name__)


def _noop_resync(node: NodeRecord) -> None:
    pass


class ClusterState:
    """
    Manager-owned tables plus the lock guarding them.

    Thread Safety:
        Hold ``lock`` for any sequence of reads and writes that must not
        interleave with scheduling decisions. Methods on this class do not
        take the lock themselves.

    Attributes:
        nodes: Node table
        jobs: Job table
        lock: Manager-wide asyncio.Lock for both tables
        last_node_update: Unix timestamp of the most recent node state change
    """

    def __init__(
        self,
        nodes: NodeTable | None = None,
        jobs: JobTable | None = None,
        resync_hook: BitmapResyncHook | None = None,
    ) -> None:
        self.nodes = nodes if nodes is not None else NodeTable()
        self.jobs = jobs if jobs is not None else JobTable()
        self.lock = asyncio.Lock()
        self.last_node_update: float = 0.0
        self._resync_hook = resync_hook or _noop_resync

    def set_node_down(self, node: NodeRecord, reason: str) -> None:
        """
        Force a node DOWN, keeping its flag bits.

        Records the reason, stamps the shared last-update marker and runs the
        bitmap resync hook so scheduling sees the change.
        """
        now = time.time()
        node.state = (node.state & ~NODE_STATE_BASE) | NodeState.DOWN
        node.reason = reason
        node.reason_time = now
        self.last_node_update = now
        logger.info("Node %s set DOWN: %s", node.name, reason)
        self._resync_hook(node)


__all__ = ["ClusterState"]
