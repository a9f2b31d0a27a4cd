# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Pass strategy for operation with an external allocator."""

import logging

from ...config import SyncMode
from ..report import PassReport
from .base import BasePassStrategy

logger = logging.getLogger(__name__)


class EnabledPassStrategy(BasePassStrategy):
    """
    Full reconciliation: node facts, identity sweep, vestigial purge.

    The snapshot is fetched before anything is mutated, so a query failure
    leaves the node and job tables exactly as they were.
    """

    async def run_pass(self) -> PassReport:
        snapshot = await self.client.query()
        logger.debug(
            "allocator reported %d nodes and %d reservations",
            len(snapshot.nodes),
            len(snapshot.reservation_ids),
        )

        transitions = self.reconciler.reconcile(snapshot)
        transitions.extend(self.reconciler.validate_identities())
        purged = await self.reservations.purge_vestigial(snapshot)

        return PassReport(
            mode=SyncMode.ENABLED,
            transitions=transitions,
            purged_reservations=purged,
            last_reservation_number=self.reservations.last_reservation_number,
            nodes_reported=len(snapshot.nodes),
        )
