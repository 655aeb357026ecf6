"""Unit tests for the MCP session hub."""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from mcp import ClientSession

from conftest import make_result
from semantic_memory.exceptions import ServerNotConnectedError
from semantic_memory.service.hub import SessionHub
from semantic_memory.service.probe import AvailabilityProbe


@pytest.fixture
def session():
    mock_session = MagicMock(spec=ClientSession)
    mock_session.call_tool = AsyncMock(return_value=make_result({"success": True}))
    return mock_session


class TestSessionHub:
    """Tests for SessionHub registry and tool routing."""

    def test_registry(self, session):
        hub = SessionHub()
        hub.add_server("semantic-memory", session)
        hub.add_server("other", None, status="disconnected")

        servers = hub.get_servers()
        assert [(s.name, s.status) for s in servers] == [
            ("semantic-memory", "connected"),
            ("other", "disconnected"),
        ]

    def test_probe_follows_status(self, session):
        """Test that the availability probe sees status changes immediately."""
        hub = SessionHub()
        probe = AvailabilityProbe(hub, "semantic-memory")
        assert probe.is_available() is False

        hub.add_server("semantic-memory", session)
        assert probe.is_available() is True

        hub.set_status("semantic-memory", "disconnected")
        assert probe.is_available() is False

        hub.set_status("semantic-memory", "connected")
        assert hub.remove_server("semantic-memory") is True
        assert hub.remove_server("semantic-memory") is False
        assert probe.is_available() is False

    @pytest.mark.asyncio
    async def test_call_tool_delegates_to_session(self, session):
        hub = SessionHub(tool_timeout=5.0)
        hub.add_server("semantic-memory", session)

        result = await hub.call_tool("semantic-memory", "store_exchange", {"userMessage": "hi"})

        assert result.content[0].text == '{"success": true}'
        session.call_tool.assert_awaited_once_with(
            "store_exchange",
            arguments={"userMessage": "hi"},
            read_timeout_seconds=timedelta(seconds=5.0),
        )

    @pytest.mark.asyncio
    async def test_call_tool_unknown_server(self):
        with pytest.raises(ServerNotConnectedError, match="not registered"):
            await SessionHub().call_tool("semantic-memory", "get_core_identity", {})

    @pytest.mark.asyncio
    async def test_call_tool_disconnected_server(self, session):
        hub = SessionHub()
        hub.add_server("semantic-memory", session, status="connecting")

        with pytest.raises(ServerNotConnectedError, match="status: connecting"):
            await hub.call_tool("semantic-memory", "get_core_identity", {})
        session.call_tool.assert_not_called()
