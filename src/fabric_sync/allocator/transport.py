# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Transport-backed allocator client.

TransportAllocatorClient turns the decoded responses of an external
allocator into fabric-sync types. How requests reach the allocator (XML
over a pipe, HTTP, a vendor library) is the transport's business; the
client only needs ``call(method, payload)`` to return a decoded mapping.

Every transport failure and every malformed response surfaces as
AllocatorTransportError. The client does not retry and does not set its own
timeout; it relies on the transport's.
"""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from pydantic import ValidationError

from ..exceptions import AllocatorTransportError
from ..types.snapshot import AllocatorNodeFact, AllocatorSnapshot
from .base import BaseAllocatorClient
from .messages import NodeEntry, QueryResponse, ReserveResponse

logger = logging.getLogger(__name__)

QUERY = "query"
RESERVE = "reserve"
RELEASE = "release"


@runtime_checkable
class AllocatorTransport(Protocol):
    """Carries one request to the allocator and returns its decoded answer."""

    async def call(self, method: str, payload: dict[str, Any]) -> Mapping[str, Any]:
        """
        Send a request and wait for the decoded response.

        Args:
            method: One of 'query', 'reserve', 'release'
            payload: Request body

        Raises:
            OSError, asyncio.TimeoutError: On transport-level failures.
        """
        ...


def _invalid(operation: str, error: ValidationError) -> AllocatorTransportError:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"]) or "<root>"
    return AllocatorTransportError(
        f"allocator {operation} response invalid at '{location}': {first['msg']}",
        operation=operation,
    )


def parse_node_fact(entry: Mapping[str, Any]) -> AllocatorNodeFact:
    """Build an AllocatorNodeFact from one decoded node entry."""
    try:
        return NodeEntry.model_validate(entry).to_fact()
    except ValidationError as e:
        raise _invalid(QUERY, e) from e


def parse_snapshot(response: Mapping[str, Any]) -> AllocatorSnapshot:
    """
    Build an AllocatorSnapshot from a decoded query response.

    Expected shape::

        {
            "nodes": [{"name", "node_id", "arch", "state", "role", "cpus", "memory"}, ...],
            "reservations": ["<reservation id>", ...],
        }

    Raises:
        AllocatorTransportError: If any part of the response is malformed.
            Nothing is returned for a partially valid response.
    """
    try:
        return QueryResponse.model_validate(response).to_snapshot()
    except ValidationError as e:
        raise _invalid(QUERY, e) from e


class TransportAllocatorClient(BaseAllocatorClient):
    """
    Allocator client for a real external allocator.

    Example:
        >>> client = TransportAllocatorClient(my_transport)
        >>> snapshot = await client.query()
    """

    def __init__(self, transport: AllocatorTransport, name: str = "transport") -> None:
        self._transport = transport
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    async def _call(self, method: str, payload: dict[str, Any]) -> Mapping[str, Any]:
        try:
            response = await self._transport.call(method, payload)
        except AllocatorTransportError:
            raise
        except (OSError, asyncio.TimeoutError) as e:
            raise AllocatorTransportError(
                f"allocator {method} failed: {e}", operation=method
            ) from e
        except Exception as e:
            # Transports are third-party code; anything they raise is a transport failure
            raise AllocatorTransportError(
                f"allocator {method} failed: {type(e).__name__}: {e}",
                operation=method,
            ) from e
        if not isinstance(response, Mapping):
            raise AllocatorTransportError(
                f"allocator {method} response is not a mapping", operation=method
            )
        return response

    async def query(self) -> AllocatorSnapshot:
        logger.debug("allocator query initiated")
        response = await self._call(QUERY, {})
        snapshot = parse_snapshot(response)
        for fact in snapshot.nodes:
            logger.debug(
                "allocator query: name=%s node_id=%d arch=%s state=%s role=%s cpus=%d memory=%d",
                fact.name,
                fact.node_id,
                fact.arch,
                fact.status,
                fact.role,
                fact.cpus,
                fact.memory,
            )
        return snapshot

    async def reserve(self, job_id: int, resource_spec: dict[str, Any]) -> str:
        response = await self._call(
            RESERVE, {"job_id": job_id, "resources": dict(resource_spec)}
        )
        try:
            reservation_id = ReserveResponse.model_validate(response).reservation_id
        except ValidationError as e:
            raise _invalid(RESERVE, e) from e
        logger.debug(
            "allocator reservation made job_id=%d res_id=%s", job_id, reservation_id
        )
        return reservation_id

    async def release(self, reservation_id: str) -> None:
        await self._call(RELEASE, {"reservation_id": reservation_id})
        logger.debug("allocator release of %s complete", reservation_id)


__all__ = [
    "AllocatorTransport",
    "TransportAllocatorClient",
    "parse_node_fact",
    "parse_snapshot",
]
