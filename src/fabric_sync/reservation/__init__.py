# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Reservation lifecycle: record tracking, reserve/release, counter bootstrap and vestigial purge.

Exports:
    ReservationManager: Creates, releases and purges reservations
    ReservationTracker: Reservation records keyed by id with a job index
"""

from .manager import ReservationManager
from .tracker import ReservationTracker

__all__ = ["ReservationManager", "ReservationTracker"]
