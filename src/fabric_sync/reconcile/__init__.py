# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Reconciliation of node inventory and reservations.

This module provides:
- ReconciliationDriver, create_driver: Pass orchestration and lifecycle
- NodeReconciler: Applies allocator node facts and sweeps node identities
- NodeTransition, DefectKind: What a pass did to a node and why
- PassReport: Result of one pass
"""

from .driver import ReconciliationDriver, create_driver
from .modes import (
    BasePassStrategy,
    DisabledPassStrategy,
    EnabledPassStrategy,
    create_pass_strategy,
)
from .nodes import DefectKind, NodeReconciler, NodeTransition
from .report import PassReport

__all__ = [
    # Modes
    "BasePassStrategy",
    # Nodes
    "DefectKind",
    "DisabledPassStrategy",
    "EnabledPassStrategy",
    "NodeReconciler",
    "NodeTransition",
    "PassReport",
    # Driver
    "ReconciliationDriver",
    "create_driver",
    "create_pass_strategy",
]
