"""MCP session hub over already-initialised client sessions.

The host opens transports and initialises ``mcp.ClientSession`` objects; the
hub only tracks them by server name, reports their status and routes tool
calls. It satisfies the ``McpHub`` protocol used by the memory client.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Optional

from mcp import ClientSession
from mcp.types import CallToolResult

from semantic_memory.exceptions import ServerNotConnectedError
from semantic_memory.types import ServerStatus

logger = logging.getLogger(__name__)


@dataclass
class ServerConnection:
    """A named MCP server entry.

    Attributes:
        name: Server name used for lookups and tool calls
        session: Initialised client session, or None while disconnected
        status: One of the ServerStatus values
    """
    name: str
    session: Optional[ClientSession] = None
    status: str = ServerStatus.DISCONNECTED


class SessionHub:
    """Registry of MCP client sessions keyed by server name.

    Args:
        tool_timeout: Read timeout in seconds for each tool call (default: 30)

    Example:
        >>> hub = SessionHub()
        >>> hub.add_server("semantic-memory", session)
        >>> result = await hub.call_tool("semantic-memory", "get_core_identity", {})
    """

    def __init__(self, tool_timeout: float = 30.0):
        self.tool_timeout = tool_timeout
        self._servers: dict[str, ServerConnection] = {}

    def add_server(
        self,
        name: str,
        session: Optional[ClientSession],
        status: str = ServerStatus.CONNECTED,
    ) -> ServerConnection:
        """Register (or replace) a server entry."""
        connection = ServerConnection(name=name, session=session, status=status)
        self._servers[name] = connection
        logger.info(f"Registered MCP server '{name}' (status: {status})")
        return connection

    def set_status(self, name: str, status: str) -> None:
        """Update the status of a registered server.

        Raises:
            KeyError: If no server with that name is registered
        """
        self._servers[name].status = status
        logger.info(f"MCP server '{name}' status changed to {status}")

    def remove_server(self, name: str) -> bool:
        """Remove a server entry.

        Returns:
            True if an entry was removed
        """
        removed = self._servers.pop(name, None) is not None
        if removed:
            logger.info(f"Removed MCP server '{name}'")
        return removed

    def get_servers(self) -> list[ServerConnection]:
        """List registered server entries in registration order."""
        return list(self._servers.values())

    async def call_tool(
        self,
        server_name: str,
        tool_name: str,
        arguments: dict[str, Any],
    ) -> CallToolResult:
        """Invoke a tool on a connected server.

        Args:
            server_name: Target server
            tool_name: Tool to invoke
            arguments: Tool arguments

        Returns:
            The server's CallToolResult

        Raises:
            ServerNotConnectedError: If the server is missing or not connected
        """
        connection = self._servers.get(server_name)
        if connection is None:
            raise ServerNotConnectedError(server_name)
        if connection.status != ServerStatus.CONNECTED or connection.session is None:
            raise ServerNotConnectedError(server_name, connection.status)

        return await connection.session.call_tool(
            tool_name,
            arguments=arguments,
            read_timeout_seconds=timedelta(seconds=self.tool_timeout),
        )
