"""Task integration for the semantic memory server.

This module wires task events to the memory client: enrichment of outgoing
user turns, storage of finished exchanges and history synchronization.
"""

from semantic_memory.integration.events import (
    AssistantResponseProcessedPayload,
    EventSource,
    TaskEvent,
    TaskEventBus,
    UserMessageEnrichmentPayload,
)
from semantic_memory.integration.facade import ConversationTask, SemanticMemoryIntegration
from semantic_memory.integration.handlers import (
    EnrichmentHandler,
    StorageHandler,
    format_memory,
    format_recall_block,
)
from semantic_memory.integration.history import HistorySynchronizer, is_exchange
from semantic_memory.integration.prompt import build_core_identity_section

__all__ = [
    "AssistantResponseProcessedPayload",
    "ConversationTask",
    "EnrichmentHandler",
    "EventSource",
    "HistorySynchronizer",
    "SemanticMemoryIntegration",
    "StorageHandler",
    "TaskEvent",
    "TaskEventBus",
    "UserMessageEnrichmentPayload",
    "build_core_identity_section",
    "format_memory",
    "format_recall_block",
    "is_exchange",
]
