# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Node reconciliation against allocator facts.

NodeReconciler merges what the allocator reports about each node into the
manager's node table and forces DOWN any node whose report is unhealthy,
undersized, or inconsistent with the identity it was given earlier. After
the facts are applied, an identity sweep forces DOWN every node that is
still up but never received an allocator node id.

Callers must hold ClusterState.lock.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from ..config import SyncConfig
from ..observability.constants import NODE_TRANSITIONS_TOTAL, UNKNOWN_NODES_TOTAL
from ..observability.protocols import MetricsCollectorProtocol
from ..state.cluster import ClusterState
from ..types.node import NodeRecord
from ..types.snapshot import AllocatorNodeFact, AllocatorSnapshot

logger = logging.getLogger(__name__)

REASON_ID_MISMATCH = "external id mismatch"
REASON_NOT_UP = "allocator state not UP"
REASON_NOT_BATCH = "allocator role not BATCH"
REASON_LOW_CPUS = "Low CPUs"
REASON_LOW_MEMORY = "Low RealMemory"
REASON_MISSING_ID = "missing external id"


class DefectKind(Enum):
    """Why a node was forced DOWN."""

    STATUS = "status"
    ROLE = "role"
    CAPACITY = "capacity"
    IDENTITY = "identity"


@dataclass(frozen=True)
class NodeTransition:
    """A node that reconciliation forced DOWN."""

    node_name: str
    reason: str
    defect: DefectKind


class NodeReconciler:
    """
    Applies allocator node facts to the node table.

    Example:
        >>> reconciler = NodeReconciler(cluster, SyncConfig())
        >>> transitions = reconciler.reconcile(snapshot)
        >>> transitions += reconciler.validate_identities()
    """

    def __init__(
        self,
        cluster: ClusterState,
        config: SyncConfig,
        metrics_collector: MetricsCollectorProtocol | None = None,
    ) -> None:
        self.cluster = cluster
        self.config = config
        self._metrics_collector = metrics_collector

    def reconcile(self, snapshot: AllocatorSnapshot) -> list[NodeTransition]:
        """
        Apply every node fact in the snapshot.

        Returns:
            The nodes forced DOWN, in snapshot order.
        """
        transitions = []
        for fact in snapshot.nodes:
            transition = self._apply_fact(fact)
            if transition is not None:
                transitions.append(transition)
        return transitions

    def _apply_fact(self, fact: AllocatorNodeFact) -> NodeTransition | None:
        node = self.cluster.nodes.find(fact.name)
        if node is None:
            logger.error("allocator node %s not found in node table", fact.name)
            self._count(UNKNOWN_NODES_TOTAL)
            return None

        id_mismatch = self._adopt_identity(node, fact)

        if node.arch is None:
            node.arch = fact.arch

        reason, defect = self._downgrade_reason(node, fact, id_mismatch)

        # Local size always tracks the allocator, whether or not the node goes DOWN
        node.cpus = fact.cpus
        node.real_memory = fact.memory

        if reason is None or defect is None:
            return None
        return self._force_down(node, reason, defect)

    def _adopt_identity(self, node: NodeRecord, fact: AllocatorNodeFact) -> bool:
        """Record the allocator node id; return True on a mismatch."""
        if node.external_id is None:
            node.external_id = fact.node_id
            logger.debug("Node %s adopted allocator node_id %d", node.name, fact.node_id)
            return False
        if node.external_id != fact.node_id:
            logger.error(
                "Node %s allocator node_id changed from %d to %d, keeping %d",
                node.name,
                node.external_id,
                fact.node_id,
                node.external_id,
            )
            return True
        return False

    def _downgrade_reason(
        self,
        node: NodeRecord,
        fact: AllocatorNodeFact,
        id_mismatch: bool,
    ) -> tuple[str | None, DefectKind | None]:
        # Nodes already DOWN keep their existing reason
        if node.is_down:
            return None, None

        # Every applicable condition overwrites the previous one: last wins
        reason: str | None = None
        defect: DefectKind | None = None
        if id_mismatch:
            reason, defect = REASON_ID_MISMATCH, DefectKind.IDENTITY
        if fact.status != self.config.up_status:
            reason, defect = REASON_NOT_UP, DefectKind.STATUS
        if fact.role != self.config.batch_role:
            reason, defect = REASON_NOT_BATCH, DefectKind.ROLE
        if self.config.strict_validation:
            if fact.cpus < node.config.cpus:
                logger.error("Node %s has low cpu count %d", node.name, fact.cpus)
                reason, defect = REASON_LOW_CPUS, DefectKind.CAPACITY
            if fact.memory < node.config.real_memory:
                logger.error(
                    "Node %s has low real_memory size %d", node.name, fact.memory
                )
                reason, defect = REASON_LOW_MEMORY, DefectKind.CAPACITY
        return reason, defect

    def validate_identities(self) -> list[NodeTransition]:
        """
        Force DOWN every up node that has no allocator node id.

        Returns:
            The nodes forced DOWN, in node table order.
        """
        transitions = []
        for node in self.cluster.nodes:
            if node.has_external_id or node.is_down:
                continue
            logger.error("Node %s has no allocator node_id", node.name)
            transitions.append(
                self._force_down(node, REASON_MISSING_ID, DefectKind.IDENTITY)
            )
        return transitions

    def _force_down(
        self, node: NodeRecord, reason: str, defect: DefectKind
    ) -> NodeTransition:
        self.cluster.set_node_down(node, reason)
        self._count(NODE_TRANSITIONS_TOTAL, {"defect": defect.value})
        return NodeTransition(node_name=node.name, reason=reason, defect=defect)

    def _count(self, name: str, labels: dict[str, str] | None = None) -> None:
        if self._metrics_collector is not None:
            self._metrics_collector.inc_counter(name, labels=labels)


__all__ = [
    "REASON_ID_MISMATCH",
    "REASON_LOW_CPUS",
    "REASON_LOW_MEMORY",
    "REASON_MISSING_ID",
    "REASON_NOT_BATCH",
    "REASON_NOT_UP",
    "DefectKind",
    "NodeReconciler",
    "NodeTransition",
]
