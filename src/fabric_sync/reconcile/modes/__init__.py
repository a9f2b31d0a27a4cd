# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Pass strategies for the reconciliation driver.

Available Modes:
    - ENABLED: Node reconciliation, identity sweep and vestigial purge
    - DISABLED: Reservation counter bootstrap only

The base class `BasePassStrategy` defines the interface that both mode
implementations follow.
"""

from typing import TYPE_CHECKING

from ...config import SyncMode
from ...exceptions import ConfigurationError
from .base import BasePassStrategy
from .disabled import DisabledPassStrategy
from .enabled import EnabledPassStrategy

if TYPE_CHECKING:
    from ...allocator.base import BaseAllocatorClient
    from ...config import SyncConfig
    from ...reservation.manager import ReservationManager
    from ..nodes import NodeReconciler


def create_pass_strategy(
    mode: SyncMode | str,
    client: "BaseAllocatorClient",
    config: "SyncConfig",
    reconciler: "NodeReconciler",
    reservations: "ReservationManager",
) -> BasePassStrategy:
    """
    Factory function to create the pass strategy for a mode.

    Args:
        mode: SyncMode or its name ("enabled", "disabled")
        client: Allocator client
        config: Sync configuration
        reconciler: Node reconciler
        reservations: Reservation manager

    Returns:
        Pass strategy instance

    Raises:
        ConfigurationError: If mode is unknown or does not match the client
    """
    if isinstance(mode, str):
        try:
            mode = SyncMode(mode.lower())
        except ValueError as e:
            raise ConfigurationError(f"Unknown sync mode: {mode}") from e

    if mode == SyncMode.ENABLED:
        if client.degraded:
            raise ConfigurationError(
                f"ENABLED mode requires an active allocator client, got '{client.name}'"
            )
        return EnabledPassStrategy(client, config, reconciler, reservations)

    if not client.degraded:
        raise ConfigurationError(
            f"DISABLED mode requires a degraded allocator client, got '{client.name}'"
        )
    return DisabledPassStrategy(client, config, reconciler, reservations)


__all__ = [
    "BasePassStrategy",
    "DisabledPassStrategy",
    "EnabledPassStrategy",
    "create_pass_strategy",
]
