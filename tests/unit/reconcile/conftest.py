# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Shared fixtures for reconciliation tests.
"""

from unittest.mock import Mock

import pytest

from fabric_sync.config import SyncConfig
from fabric_sync.observability import UnifiedMetricsCollector
from fabric_sync.state import ClusterState
from fabric_sync.types import AllocatorNodeFact, NodeConfig, NodeRecord, NodeState

BASELINE = NodeConfig(name="compute", cpus=16, real_memory=65536)

# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def make_fact():
    """Build an allocator fact that passes every check against BASELINE."""

    def _make(name="n1", node_id=101, **overrides):
        values = {
            "arch": "x86_64",
            "status": "UP",
            "role": "BATCH",
            "cpus": BASELINE.cpus,
            "memory": BASELINE.real_memory,
        }
        values.update(overrides)
        return AllocatorNodeFact(name=name, node_id=node_id, **values)

    return _make


@pytest.fixture
def resync_hook():
    return Mock()


@pytest.fixture
def cluster(resync_hook):
    """Cluster with three IDLE nodes sharing the BASELINE config."""
    cluster = ClusterState(resync_hook=resync_hook)
    for name in ("n1", "n2", "n3"):
        cluster.nodes.add(NodeRecord(name=name, config=BASELINE, state=NodeState.IDLE))
    return cluster


@pytest.fixture
def config():
    return SyncConfig(metrics_enabled=False)


@pytest.fixture
def collector():
    return UnifiedMetricsCollector(enable_prometheus=False)
