"""Semantic memory - durable recall for conversational agents.

This package connects a conversation task to an external semantic memory
MCP server: recalled context is prepended to outgoing user turns, finished
exchanges are stored, and the server's record of a task is kept in step
with the local transcript.

Main components:
- text: Sanitizer rule table and message text extraction
- service: Availability probe, memory client and MCP session hub
- integration: Task events, handlers, history sync and the per-task facade
- config: Pydantic Settings for configuration management
- logging_setup: stderr logging configuration for hosts

Usage:
    from semantic_memory import SemanticMemoryIntegration

    integration = SemanticMemoryIntegration(hub, task)
"""

from semantic_memory.config import MemorySettings
from semantic_memory.exceptions import MemoryIntegrationError, ServerNotConnectedError
from semantic_memory.integration import (
    AssistantResponseProcessedPayload,
    SemanticMemoryIntegration,
    TaskEvent,
    TaskEventBus,
    UserMessageEnrichmentPayload,
)
from semantic_memory.logging_setup import setup_logging
from semantic_memory.service import AvailabilityProbe, MemoryClient, SessionHub
from semantic_memory.text import sanitize
from semantic_memory.types import RecalledMemoryItem, StoreOutcome, SyncState

__all__ = [
    "AssistantResponseProcessedPayload",
    "AvailabilityProbe",
    "MemoryClient",
    "MemoryIntegrationError",
    "MemorySettings",
    "RecalledMemoryItem",
    "SemanticMemoryIntegration",
    "ServerNotConnectedError",
    "SessionHub",
    "StoreOutcome",
    "SyncState",
    "TaskEvent",
    "TaskEventBus",
    "UserMessageEnrichmentPayload",
    "sanitize",
    "setup_logging",
]
__version__ = "0.1.0"
