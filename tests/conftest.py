"""Shared fixtures for semantic memory tests."""

import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from mcp.types import CallToolResult, TextContent

from semantic_memory.config import MemorySettings
from semantic_memory.integration.events import TaskEventBus

SERVER_NAME = "semantic-memory"


class FakeTask(TaskEventBus):
    """Minimal conversation task: an event bus with an id and a transcript."""

    def __init__(self, task_id: str = "test-task-123", history: list | None = None):
        super().__init__()
        self.task_id = task_id
        self.api_conversation_history: list[dict[str, Any]] = history if history is not None else []


def make_result(payload: Any) -> CallToolResult:
    """Wrap a payload the way the memory server does: one JSON text block."""
    return CallToolResult(content=[TextContent(type="text", text=json.dumps(payload))])


@pytest.fixture
def tool_result():
    """Factory building CallToolResult envelopes from payloads."""
    return make_result


@pytest.fixture
def settings():
    """Default settings, independent of the environment."""
    return MemorySettings(_env_file=None)


@pytest.fixture
def hub():
    """Mock MCP hub with the memory server connected and successful tool calls."""
    mock_hub = MagicMock()
    mock_hub.get_servers.return_value = [{"name": SERVER_NAME, "status": "connected"}]
    mock_hub.call_tool = AsyncMock(return_value=make_result({"success": True}))
    return mock_hub


@pytest.fixture
def offline_hub():
    """Mock MCP hub without the memory server."""
    mock_hub = MagicMock()
    mock_hub.get_servers.return_value = []
    mock_hub.call_tool = AsyncMock()
    return mock_hub


@pytest.fixture
def task():
    """Fresh fake task with an empty transcript."""
    return FakeTask()


def user(content: Any, **extra: Any) -> dict[str, Any]:
    return {"role": "user", "content": content, **extra}


def assistant(content: Any, **extra: Any) -> dict[str, Any]:
    return {"role": "assistant", "content": content, **extra}
