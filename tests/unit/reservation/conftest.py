# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Shared fixtures for reservation tests."""

import pytest

from fabric_sync.allocator import DisabledAllocatorClient, MemoryAllocator
from fabric_sync.config import SyncConfig
from fabric_sync.observability import UnifiedMetricsCollector
from fabric_sync.reservation import ReservationManager
from fabric_sync.state import ClusterState


@pytest.fixture
def cluster():
    return ClusterState()


@pytest.fixture
def collector():
    return UnifiedMetricsCollector(enable_prometheus=False)


@pytest.fixture
def allocator():
    return MemoryAllocator()


@pytest.fixture
def active_manager(allocator, cluster, collector):
    return ReservationManager(allocator, cluster, SyncConfig(metrics_enabled=False), collector)


@pytest.fixture
def degraded_manager(cluster, collector):
    return ReservationManager(
        DisabledAllocatorClient(), cluster, SyncConfig(metrics_enabled=False), collector
    )
