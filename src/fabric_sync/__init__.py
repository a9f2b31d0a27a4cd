# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Fabric Sync - Keep a batch manager in step with an external node allocator.

This library reconciles the manager's view of its compute nodes and job
reservations with an external allocator that owns node identity, health
and placement.

Key Features:
    - Node reconciliation: adopt allocator identity and architecture,
      force nodes DOWN on status, role, capacity or identity defects
    - Reservation lifecycle: reserve/release through the allocator, or
      issue ids locally when no allocator is configured
    - Vestigial reservation purge after manager restarts
    - Periodic reconciliation loop with Prometheus metrics

Quick Start:
    >>> from fabric_sync import ClusterState, MemoryAllocator, create_driver
    >>> from fabric_sync.types import NodeConfig, NodeRecord
    >>>
    >>> cluster = ClusterState()
    >>> cluster.nodes.add(NodeRecord(name="n01", config=NodeConfig("n01", 8, 16384)))
    >>> driver = create_driver(cluster, mode="enabled", client=MemoryAllocator())
    >>> async with driver:
    ...     reservation_id = await driver.reserve(job)

Main Exports:
    - ReconciliationDriver, create_driver: Pass orchestration
    - SyncConfig, SyncMode: Configuration options
    - TransportAllocatorClient, MemoryAllocator, DisabledAllocatorClient:
      Allocator clients
    - ClusterState: Manager-owned node and job tables
    - ReservationManager, ReservationTracker: Reservation management

Version: 1.0.0
"""

__version__ = "1.0.0"

from .allocator import (
    AllocatorTransport,
    BaseAllocatorClient,
    DisabledAllocatorClient,
    HealthCheckResult,
    MemoryAllocator,
    TransportAllocatorClient,
)
from .config import SyncConfig, SyncMode
from .exceptions import (
    AllocatorTransportError,
    ConfigurationError,
    DuplicateReservationError,
    FabricSyncError,
    NodeNotFoundError,
    ReservationError,
)
from .protocols import BitmapResyncHook, JobProtocol
from .reconcile import (
    NodeReconciler,
    NodeTransition,
    PassReport,
    ReconciliationDriver,
    create_driver,
)
from .reservation import ReservationManager, ReservationTracker
from .state import ClusterState, JobTable, NodeTable

__all__ = [
    # Allocator clients
    "AllocatorTransport",
    "AllocatorTransportError",
    "BaseAllocatorClient",
    "BitmapResyncHook",
    # State
    "ClusterState",
    "ConfigurationError",
    "DisabledAllocatorClient",
    "DuplicateReservationError",
    # Exceptions
    "FabricSyncError",
    "HealthCheckResult",
    "JobProtocol",
    "JobTable",
    "MemoryAllocator",
    "NodeNotFoundError",
    # Reconciliation
    "NodeReconciler",
    "NodeTable",
    "NodeTransition",
    "PassReport",
    "ReconciliationDriver",
    "ReservationError",
    # Reservation
    "ReservationManager",
    "ReservationTracker",
    # Configuration
    "SyncConfig",
    "SyncMode",
    "TransportAllocatorClient",
    "create_driver",
]
