# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Node types for reconciliation.

This module defines node states, the baseline node configuration, and the
NodeRecord that the manager keeps for every compute node it schedules on.
Only the fields reconciliation reads or writes are modelled here.
"""

from dataclasses import dataclass
from enum import IntEnum, IntFlag

NODE_STATE_BASE = 0x000F
"""Mask selecting the base state out of a combined node state value."""


class NodeState(IntEnum):
    """
    Base state of a node.

    The stored node state is an int whose low bits hold one of these values
    and whose high bits hold NodeStateFlag bits. Compare against the base
    state (``state & NODE_STATE_BASE``), never the raw value.
    """

    UNKNOWN = 0
    DOWN = 1
    IDLE = 2
    ALLOCATED = 3
    MIXED = 4


class NodeStateFlag(IntFlag):
    """Modifier bits carried alongside the base state."""

    DRAIN = 0x0200
    COMPLETING = 0x0400
    NO_RESPOND = 0x0800
    POWER_SAVE = 0x1000


@dataclass(frozen=True)
class NodeConfig:
    """
    Baseline configuration for a class of nodes.

    Attributes:
        name: Configuration (node class) name
        cpus: Expected processor count
        real_memory: Expected memory size in MB
    """

    name: str
    cpus: int
    real_memory: int


@dataclass
class NodeRecord:
    """
    The manager's view of a single compute node.

    Attributes:
        name: Unique node name
        config: Baseline configuration this node was declared with
        arch: Architecture string, None until learned
        cpus: Processor count last recorded for this node; the configured
            count when not given
        real_memory: Memory size in MB last recorded for this node; the
            configured size when not given
        state: Combined base state and flag bits
        external_id: Allocator node id, None while unassigned
        reason: Why the node was last set DOWN
        reason_time: Unix timestamp of the last DOWN transition
    """

    name: str
    config: NodeConfig
    arch: str | None = None
    cpus: int | None = None
    real_memory: int | None = None
    state: int = NodeState.UNKNOWN
    external_id: int | None = None
    reason: str | None = None
    reason_time: float | None = None

    def __post_init__(self) -> None:
        # A freshly declared node starts out with its configured size
        if self.cpus is None:
            self.cpus = self.config.cpus
        if self.real_memory is None:
            self.real_memory = self.config.real_memory

    @property
    def base_state(self) -> NodeState:
        return NodeState(self.state & NODE_STATE_BASE)

    @property
    def flags(self) -> NodeStateFlag:
        return NodeStateFlag(self.state & ~NODE_STATE_BASE)

    @property
    def is_down(self) -> bool:
        return self.base_state == NodeState.DOWN

    @property
    def has_external_id(self) -> bool:
        return self.external_id is not None


__all__ = [
    "NODE_STATE_BASE",
    "NodeConfig",
    "NodeRecord",
    "NodeState",
    "NodeStateFlag",
]
