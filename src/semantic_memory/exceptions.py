"""Exceptions raised by the semantic memory integration.

Runtime memory failures never surface as exceptions; they are logged and
turned into empty results. These classes cover wiring mistakes and the
transport-level errors raised by the session hub.
"""


class MemoryIntegrationError(Exception):
    """Base exception for integration wiring errors."""

    pass


class ServerNotConnectedError(MemoryIntegrationError):
    """Raised when a tool call targets a server that is missing or not connected."""

    def __init__(self, server_name: str, status: str | None = None):
        self.server_name = server_name
        self.status = status
        if status is None:
            message = f"MCP server '{server_name}' is not registered"
        else:
            message = f"MCP server '{server_name}' is not connected (status: {status})"
        super().__init__(message)
