# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Allocator client implementations.

Available clients:
- BaseAllocatorClient: Abstract base class defining the allocator interface
- TransportAllocatorClient: Active client over an injected AllocatorTransport
- MemoryAllocator: In-process active allocator for development and tests
- DisabledAllocatorClient: Degraded client, no external allocator

Supporting types:
- HealthCheckResult: Structured result from allocator health checks
- AllocatorTransport: Protocol for the request/response carrier
- NodeEntry, QueryResponse, ReserveResponse: Pydantic models for decoded responses
"""

from .base import BaseAllocatorClient, HealthCheckResult
from .disabled import DisabledAllocatorClient
from .memory import MemoryAllocator
from .messages import NodeEntry, QueryResponse, ReserveResponse
from .transport import (
    AllocatorTransport,
    TransportAllocatorClient,
    parse_node_fact,
    parse_snapshot,
)

__all__ = [
    "AllocatorTransport",
    # Base classes
    "BaseAllocatorClient",
    # Clients
    "DisabledAllocatorClient",
    "HealthCheckResult",
    "MemoryAllocator",
    # Wire models
    "NodeEntry",
    "QueryResponse",
    "ReserveResponse",
    "TransportAllocatorClient",
    "parse_node_fact",
    "parse_snapshot",
]
