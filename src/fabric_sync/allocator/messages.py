# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Wire models for decoded allocator responses.

Pydantic validates each response as a whole before anything is turned into
fabric-sync types, so a malformed field anywhere rejects the entire answer.
Strict types keep the transport from coercing "8" into 8 or True into 1.
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr

from ..types.snapshot import AllocatorNodeFact, AllocatorSnapshot

NonEmptyStr = Annotated[StrictStr, Field(min_length=1)]


class NodeEntry(BaseModel):
    """One node as reported by the allocator query."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    name: NonEmptyStr
    node_id: StrictInt
    arch: StrictStr
    state: StrictStr
    role: StrictStr
    cpus: StrictInt = Field(ge=0)
    memory: StrictInt = Field(ge=0)

    def to_fact(self) -> AllocatorNodeFact:
        return AllocatorNodeFact(
            name=self.name,
            node_id=self.node_id,
            arch=self.arch,
            status=self.state,
            role=self.role,
            cpus=self.cpus,
            memory=self.memory,
        )


class QueryResponse(BaseModel):
    """Decoded answer to a query: every node plus every live reservation id."""

    model_config = ConfigDict(extra="ignore")

    nodes: list[NodeEntry]
    reservations: list[NonEmptyStr]

    def to_snapshot(self) -> AllocatorSnapshot:
        return AllocatorSnapshot(
            nodes=tuple(entry.to_fact() for entry in self.nodes),
            reservation_ids=frozenset(self.reservations),
        )


class ReserveResponse(BaseModel):
    """Decoded answer to a reserve request."""

    model_config = ConfigDict(extra="ignore")

    reservation_id: NonEmptyStr


__all__ = ["NodeEntry", "QueryResponse", "ReserveResponse"]
