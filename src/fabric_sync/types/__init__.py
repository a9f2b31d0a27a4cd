# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Type definitions and constants."""

from .job import Job
from .node import NODE_STATE_BASE, NodeConfig, NodeRecord, NodeState, NodeStateFlag
from .reservation import ReservationRecord, ReservationState
from .snapshot import AllocatorNodeFact, AllocatorSnapshot

__all__ = [
    "NODE_STATE_BASE",
    # Snapshot types
    "AllocatorNodeFact",
    "AllocatorSnapshot",
    # Job
    "Job",
    # Node types
    "NodeConfig",
    "NodeRecord",
    "NodeState",
    "NodeStateFlag",
    # Reservation types
    "ReservationRecord",
    "ReservationState",
]
