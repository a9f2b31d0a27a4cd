# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Pass strategy for degraded operation without an allocator."""

from ...config import SyncMode
from ..report import PassReport
from .base import BasePassStrategy


class DisabledPassStrategy(BasePassStrategy):
    """
    Degraded pass: no node reconciliation, only the reservation counter
    bootstrap from job state. Cannot fail.
    """

    async def run_pass(self) -> PassReport:
        counter = self.reservations.bootstrap_counter()
        return PassReport(mode=SyncMode.DISABLED, last_reservation_number=counter)
