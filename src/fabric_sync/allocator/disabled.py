# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Allocator client for degraded operation without an external allocator."""

from typing import Any

from ..exceptions import FabricSyncError
from ..types.snapshot import AllocatorSnapshot
from .base import BaseAllocatorClient


class DisabledAllocatorClient(BaseAllocatorClient):
    """
    Stand-in client used when no allocator is configured.

    ``query`` always answers with the empty snapshot and never fails. The
    reservation manager generates ids locally in this mode, so ``reserve``
    and ``release`` are never expected to be called and raise if they are.
    """

    @property
    def name(self) -> str:
        return "disabled"

    @property
    def degraded(self) -> bool:
        return True

    async def query(self) -> AllocatorSnapshot:
        return AllocatorSnapshot.empty()

    async def reserve(self, job_id: int, resource_spec: dict[str, Any]) -> str:
        raise FabricSyncError(
            f"No allocator configured; cannot reserve for job {job_id}"
        )

    async def release(self, reservation_id: str) -> None:
        raise FabricSyncError(
            f"No allocator configured; cannot release {reservation_id}"
        )


__all__ = ["DisabledAllocatorClient"]
