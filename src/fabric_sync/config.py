# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Configuration for fabric-sync.

This module provides the configuration dataclass for the reconciliation
driver, including mode selection, node validation and reservation id
formatting.
"""

from dataclasses import dataclass
from enum import Enum


class SyncMode(Enum):
    """Allocator integration mode, selected once at startup.

    - ENABLED: An external allocator is available. Passes reconcile node
      facts, sweep node identities and purge vestigial reservations.
    - DISABLED: Degraded operation without the allocator. Passes only
      bootstrap the local reservation counter from job state.
    """

    ENABLED = "enabled"
    DISABLED = "disabled"


@dataclass
class SyncConfig:
    """
    Configuration for the reconciliation driver.
    """

    # === Mode ===

    mode: SyncMode = SyncMode.ENABLED
    """Allocator integration mode."""

    # === Node Validation ===

    strict_validation: bool = True
    """Down nodes whose reported cpu/memory is below their baseline config."""

    up_status: str = "UP"
    """Allocator status string for a healthy node."""

    batch_role: str = "BATCH"
    """Allocator role string for nodes usable by batch jobs."""

    # === Reservations ===

    reservation_prefix: str = "RES"
    """Prefix for locally generated reservation ids in degraded mode."""

    reservation_separator: str = "_"
    """Separator between the prefix and the numeric suffix."""

    # === Scheduling ===

    query_interval: float = 60.0
    """Seconds between periodic reconciliation passes."""

    # === Metrics ===

    metrics_enabled: bool = True
    """Enable metrics collection."""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.query_interval <= 0:
            raise ValueError("query_interval must be positive")
        if not self.reservation_prefix:
            raise ValueError("reservation_prefix must not be empty")
        if len(self.reservation_separator) != 1:
            raise ValueError("reservation_separator must be a single character")
        if not self.up_status or not self.batch_role:
            raise ValueError("up_status and batch_role must not be empty")


__all__ = [
    "SyncConfig",
    "SyncMode",
]
