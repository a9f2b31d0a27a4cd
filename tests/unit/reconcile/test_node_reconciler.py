# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Tests for NodeReconciler fact application and the identity sweep."""

import logging

import pytest

from fabric_sync.config import SyncConfig
from fabric_sync.observability import NODE_TRANSITIONS_TOTAL, UNKNOWN_NODES_TOTAL
from fabric_sync.reconcile.nodes import (
    REASON_ID_MISMATCH,
    REASON_LOW_CPUS,
    REASON_LOW_MEMORY,
    REASON_MISSING_ID,
    REASON_NOT_BATCH,
    REASON_NOT_UP,
    DefectKind,
    NodeReconciler,
)
from fabric_sync.types import AllocatorSnapshot, NodeState, NodeStateFlag


def snapshot_of(*facts):
    return AllocatorSnapshot(nodes=tuple(facts))


@pytest.fixture
def reconciler(cluster, config, collector):
    return NodeReconciler(cluster, config, collector)


class TestFactApplication:
    """Tests for applying allocator node facts to the node table."""

    def test_healthy_node_stays_up(self, reconciler, cluster, make_fact, resync_hook):
        """A node matching its baseline is left up and gains its allocator identity."""
        transitions = reconciler.reconcile(snapshot_of(make_fact("n1", cpus=16, memory=65536)))

        node = cluster.nodes.get("n1")
        assert transitions == []
        assert node.base_state == NodeState.IDLE
        assert (node.cpus, node.real_memory) == (16, 65536)
        assert node.external_id == 101
        assert node.arch == "x86_64"
        resync_hook.assert_not_called()

    def test_low_cpus_forces_down(self, reconciler, cluster, make_fact, resync_hook):
        """Verify fewer cpus than the baseline forces the node DOWN."""
        transitions = reconciler.reconcile(snapshot_of(make_fact("n1", cpus=8)))

        node = cluster.nodes.get("n1")
        assert node.is_down
        assert node.reason == REASON_LOW_CPUS
        assert node.cpus == 8
        assert len(transitions) == 1
        assert transitions[0].node_name == "n1"
        assert transitions[0].defect == DefectKind.CAPACITY
        resync_hook.assert_called_once_with(node)

    def test_low_memory_forces_down(self, reconciler, cluster, make_fact):
        """Verify less memory than the baseline forces the node DOWN."""
        reconciler.reconcile(snapshot_of(make_fact("n1", memory=1024)))
        node = cluster.nodes.get("n1")
        assert node.reason == REASON_LOW_MEMORY
        assert node.real_memory == 1024

    @pytest.mark.parametrize("status", ["DOWN", "DRAINED", "up"])
    def test_status_not_up_forces_down(self, reconciler, cluster, make_fact, status):
        """Verify any allocator status other than UP forces DOWN."""
        transitions = reconciler.reconcile(snapshot_of(make_fact("n1", status=status)))

        node = cluster.nodes.get("n1")
        assert node.is_down
        assert node.reason == REASON_NOT_UP
        assert transitions[0].defect == DefectKind.STATUS

    def test_role_not_batch_forces_down(self, reconciler, cluster, make_fact):
        """Verify a node outside the batch role is forced DOWN."""
        transitions = reconciler.reconcile(snapshot_of(make_fact("n1", role="INTERACTIVE")))
        assert cluster.nodes.get("n1").reason == REASON_NOT_BATCH
        assert transitions[0].defect == DefectKind.ROLE

    def test_last_applicable_reason_wins(self, reconciler, cluster, make_fact, resync_hook):
        """Status, role and both capacity checks fail; only the last is recorded."""
        fact = make_fact("n1", status="DOWN", role="INTERACTIVE", cpus=1, memory=1)

        transitions = reconciler.reconcile(snapshot_of(fact))

        assert cluster.nodes.get("n1").reason == REASON_LOW_MEMORY
        assert len(transitions) == 1
        resync_hook.assert_called_once()

    def test_larger_than_baseline_is_fine(self, reconciler, cluster, make_fact):
        """Verify more capacity than the baseline is not a defect."""
        reconciler.reconcile(snapshot_of(make_fact("n1", cpus=64, memory=262144)))
        node = cluster.nodes.get("n1")
        assert not node.is_down
        assert node.cpus == 64

    def test_already_down_node_keeps_reason(self, reconciler, cluster, make_fact, resync_hook):
        """Verify a DOWN node keeps its reason but gets fresh sizes."""
        node = cluster.nodes.get("n1")
        node.state = NodeState.DOWN
        node.reason = "operator maintenance"

        transitions = reconciler.reconcile(snapshot_of(make_fact("n1", status="DOWN", cpus=2)))

        assert transitions == []
        assert node.reason == "operator maintenance"
        # Size still tracks the allocator
        assert node.cpus == 2
        resync_hook.assert_not_called()

    def test_flags_preserved_on_transition(self, reconciler, cluster, make_fact):
        """Verify flag bits survive the move to DOWN."""
        node = cluster.nodes.get("n1")
        node.state = NodeState.ALLOCATED | NodeStateFlag.COMPLETING

        reconciler.reconcile(snapshot_of(make_fact("n1", status="DOWN")))

        assert node.base_state == NodeState.DOWN
        assert node.flags == NodeStateFlag.COMPLETING

    def test_arch_only_adopted_when_unset(self, reconciler, cluster, make_fact):
        """Verify a known architecture is not overwritten."""
        node = cluster.nodes.get("n1")
        node.arch = "aarch64"
        reconciler.reconcile(snapshot_of(make_fact("n1", arch="x86_64")))
        assert node.arch == "aarch64"

    def test_non_strict_ignores_capacity(self, cluster, make_fact, collector):
        """Verify capacity checks are skipped without strict validation."""
        reconciler = NodeReconciler(
            cluster, SyncConfig(strict_validation=False, metrics_enabled=False), collector
        )

        transitions = reconciler.reconcile(snapshot_of(make_fact("n1", cpus=1, memory=1)))

        node = cluster.nodes.get("n1")
        assert transitions == []
        assert not node.is_down
        assert (node.cpus, node.real_memory) == (1, 1)

    def test_custom_status_and_role(self, cluster, make_fact):
        """Verify the healthy status and role come from config."""
        config = SyncConfig(up_status="ONLINE", batch_role="COMPUTE", metrics_enabled=False)
        reconciler = NodeReconciler(cluster, config)

        transitions = reconciler.reconcile(
            snapshot_of(make_fact("n1", status="ONLINE", role="COMPUTE"))
        )
        assert transitions == []

    def test_unknown_node_skipped(self, reconciler, cluster, make_fact, collector, caplog):
        """Verify a fact for an unknown node is logged, counted and skipped."""
        with caplog.at_level(logging.ERROR, logger="fabric_sync.reconcile.nodes"):
            transitions = reconciler.reconcile(
                snapshot_of(make_fact("ghost"), make_fact("n2", node_id=102))
            )

        assert transitions == []
        assert "ghost" not in cluster.nodes
        assert cluster.nodes.get("n2").external_id == 102
        assert "ghost" in caplog.text
        assert collector.get_counter(UNKNOWN_NODES_TOTAL) == 1


class TestIdentity:
    """Tests for allocator node id handling and the identity sweep."""

    def test_id_mismatch_keeps_old_id_and_forces_down(
        self, reconciler, cluster, make_fact, caplog
    ):
        """Verify a changed allocator id is not adopted and forces DOWN."""
        node = cluster.nodes.get("n1")
        node.external_id = 101

        with caplog.at_level(logging.ERROR, logger="fabric_sync.reconcile.nodes"):
            transitions = reconciler.reconcile(snapshot_of(make_fact("n1", node_id=555)))

        assert node.external_id == 101
        assert node.is_down
        assert node.reason == REASON_ID_MISMATCH
        assert transitions[0].defect == DefectKind.IDENTITY
        assert "555" in caplog.text

    def test_mismatch_superseded_by_later_reason(self, reconciler, cluster, make_fact):
        """Verify a later defect replaces the mismatch as the reason."""
        node = cluster.nodes.get("n1")
        node.external_id = 101
        reconciler.reconcile(snapshot_of(make_fact("n1", node_id=555, status="DOWN")))
        assert node.reason == REASON_NOT_UP

    def test_zero_is_a_valid_node_id(self, reconciler, cluster, make_fact):
        """Verify node id 0 counts as an identity."""
        reconciler.reconcile(snapshot_of(make_fact("n1", node_id=0)))
        node = cluster.nodes.get("n1")
        assert node.external_id == 0
        swept = [t.node_name for t in reconciler.validate_identities()]
        assert swept == ["n2", "n3"]
        assert not node.is_down

    def test_validate_identities_forces_unidentified_nodes_down(
        self, reconciler, cluster, make_fact, resync_hook
    ):
        """Verify the sweep forces nodes without an allocator id DOWN."""
        reconciler.reconcile(snapshot_of(make_fact("n1")))

        transitions = reconciler.validate_identities()

        assert [t.node_name for t in transitions] == ["n2", "n3"]
        assert all(t.reason == REASON_MISSING_ID for t in transitions)
        assert not cluster.nodes.get("n1").is_down
        assert cluster.nodes.get("n2").is_down
        assert resync_hook.call_count == 2

    def test_validate_identities_skips_down_nodes(self, reconciler, cluster):
        """Verify the sweep leaves nodes that are already DOWN alone."""
        for node in cluster.nodes:
            node.state = NodeState.DOWN
        assert reconciler.validate_identities() == []

    def test_every_up_node_has_an_id_after_reconcile_and_sweep(
        self, reconciler, cluster, make_fact
    ):
        """Verify no node is left up without an id after a full pass."""
        reconciler.reconcile(snapshot_of(make_fact("n1"), make_fact("n3", node_id=103)))
        reconciler.validate_identities()

        for node in cluster.nodes:
            assert node.is_down or node.has_external_id


class TestMetrics:
    """Tests for reconciler metric updates."""

    def test_transitions_counted_by_defect(self, reconciler, make_fact, collector):
        """Verify transitions are counted per defect kind."""
        reconciler.reconcile(
            snapshot_of(
                make_fact("n1", status="DOWN"),
                make_fact("n2", node_id=102, cpus=1),
            )
        )
        reconciler.validate_identities()

        assert collector.get_counter(NODE_TRANSITIONS_TOTAL, {"defect": "status"}) == 1
        assert collector.get_counter(NODE_TRANSITIONS_TOTAL, {"defect": "capacity"}) == 1
        assert collector.get_counter(NODE_TRANSITIONS_TOTAL, {"defect": "identity"}) == 1

    def test_no_collector(self, cluster, config, make_fact):
        """Verify the reconciler works without a collector."""
        reconciler = NodeReconciler(cluster, config)
        assert len(reconciler.reconcile(snapshot_of(make_fact("n1", cpus=1)))) == 1
