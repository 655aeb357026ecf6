"""Availability probe and the hub capabilities the service layer depends on."""

import logging
from typing import Any, Protocol, Sequence, runtime_checkable

from semantic_memory.types import ServerStatus, field_value

logger = logging.getLogger(__name__)


@runtime_checkable
class ServiceRegistry(Protocol):
    """Anything that lists MCP server entries with ``name`` and ``status``."""

    def get_servers(self) -> Sequence[Any]: ...


@runtime_checkable
class ToolCaller(Protocol):
    """Anything that can invoke a tool on a named MCP server."""

    async def call_tool(
        self,
        server_name: str,
        tool_name: str,
        arguments: dict[str, Any],
    ) -> Any: ...


@runtime_checkable
class McpHub(ServiceRegistry, ToolCaller, Protocol):
    """Host hub: a server registry that can also call tools."""


class AvailabilityProbe:
    """Reports whether the memory server is currently connected.

    Reads the registry on every call. Reconnects change the registry between
    calls, so nothing is cached.

    Args:
        registry: Host service registry
        server_name: Name of the memory server entry
    """

    def __init__(self, registry: ServiceRegistry, server_name: str):
        self.registry = registry
        self.server_name = server_name

    def is_available(self) -> bool:
        """Check the registry for a connected memory server entry.

        Returns:
            True if the first entry named server_name has status "connected"
        """
        for server in self.registry.get_servers():
            if field_value(server, "name") == self.server_name:
                return field_value(server, "status") == ServerStatus.CONNECTED
        return False
