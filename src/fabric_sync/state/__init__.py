# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Manager-owned state used by reconciliation.

This module provides:
- NodeTable: Node registry keyed by name
- JobTable: Job registry keyed by job id
- ClusterState: Both tables, their lock, and the node-down operation
"""

from .cluster import ClusterState
from .tables import JobTable, NodeTable

__all__ = [
    "ClusterState",
    "JobTable",
    "NodeTable",
]
