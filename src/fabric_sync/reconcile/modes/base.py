# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Base pass strategy for the reconciliation driver.

This module defines the abstract base class that the ENABLED and DISABLED
pass strategies implement. The driver picks one at startup and delegates
the body of every pass to it, instead of branching on the mode inside each
step.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...allocator.base import BaseAllocatorClient
    from ...config import SyncConfig
    from ...reservation.manager import ReservationManager
    from ..nodes import NodeReconciler
    from ..report import PassReport


class BasePassStrategy(ABC):
    """
    Abstract base class for pass strategies.

    Attributes:
        client: Allocator client used for the query
        config: Sync configuration
        reconciler: Node reconciler over the manager's node table
        reservations: Reservation manager over the manager's job table
    """

    def __init__(
        self,
        client: "BaseAllocatorClient",
        config: "SyncConfig",
        reconciler: "NodeReconciler",
        reservations: "ReservationManager",
    ):
        self.client = client
        self.config = config
        self.reconciler = reconciler
        self.reservations = reservations

    @abstractmethod
    async def run_pass(self) -> "PassReport":
        """
        Run the body of one pass. The caller holds ClusterState.lock.

        Each step finishes before the next one starts. A failure in one
        step raises without running the remaining steps; changes already
        made by completed steps are kept.

        Raises:
            AllocatorTransportError: If the allocator query fails. Raised
                before any node or reservation is touched.
        """
        pass
