# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Result type for a reconciliation pass."""

from dataclasses import dataclass, field

from ..config import SyncMode
from .nodes import NodeTransition


@dataclass
class PassReport:
    """
    What one reconciliation pass did.

    Attributes:
        mode: Mode the pass ran in
        transitions: Nodes forced DOWN (fact reconciliation, then identity sweep)
        purged_reservations: Vestigial reservation ids released
        last_reservation_number: Local reservation counter after the pass
        nodes_reported: Number of node facts in the allocator snapshot
        duration: Wall-clock seconds the pass took, set by the driver
    """

    mode: SyncMode
    transitions: list[NodeTransition] = field(default_factory=list)
    purged_reservations: list[str] = field(default_factory=list)
    last_reservation_number: int = 0
    nodes_reported: int = 0
    duration: float = 0.0

    @property
    def changed(self) -> bool:
        """True if the pass changed any node or reservation."""
        return bool(self.transitions or self.purged_reservations)


__all__ = ["PassReport"]
