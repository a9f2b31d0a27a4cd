# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Protocol definitions for fabric-sync components.

Available protocols:
- JobProtocol: Interface for manager jobs that carry a reservation id
- BitmapResyncHook: Callback invoked after any node state change
"""

from collections.abc import Callable

from ..types.node import NodeRecord
from .job import JobProtocol

BitmapResyncHook = Callable[[NodeRecord], None]
"""Resynchronizes the manager's node bitmaps after a node changes state."""

__all__ = [
    "BitmapResyncHook",
    "JobProtocol",
]
