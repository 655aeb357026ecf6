"""Service layer for the semantic memory integration.

This module provides the availability probe, the memory client that maps
operations onto the memory server's MCP tools, and a session hub.
"""

from semantic_memory.service.client import (
    ENRICH_CONTEXT_TOOL,
    GET_CORE_IDENTITY_TOOL,
    GET_LAST_CHUNK_INDEX_TOOL,
    STORE_EXCHANGE_TOOL,
    MemoryClient,
    parse_envelope,
)
from semantic_memory.service.hub import ServerConnection, SessionHub
from semantic_memory.service.probe import (
    AvailabilityProbe,
    McpHub,
    ServiceRegistry,
    ToolCaller,
)

__all__ = [
    "ENRICH_CONTEXT_TOOL",
    "GET_CORE_IDENTITY_TOOL",
    "GET_LAST_CHUNK_INDEX_TOOL",
    "STORE_EXCHANGE_TOOL",
    "AvailabilityProbe",
    "McpHub",
    "MemoryClient",
    "ServerConnection",
    "ServiceRegistry",
    "SessionHub",
    "ToolCaller",
    "parse_envelope",
]
