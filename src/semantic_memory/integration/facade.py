"""Per-task semantic memory integration.

One ``SemanticMemoryIntegration`` is created per conversation task. At
construction it subscribes its handlers to the task's events and starts a
background history sync, so a task picked up mid-conversation is caught up
before the next completion.
"""

import asyncio
import logging
from typing import Any, Optional, Protocol, Sequence, runtime_checkable

from semantic_memory.config import MemorySettings
from semantic_memory.exceptions import MemoryIntegrationError
from semantic_memory.integration.events import EventHandler, TaskEvent
from semantic_memory.integration.handlers import EnrichmentHandler, StorageHandler
from semantic_memory.integration.history import HistorySynchronizer
from semantic_memory.integration.prompt import build_core_identity_section
from semantic_memory.service.client import MemoryClient
from semantic_memory.service.probe import AvailabilityProbe, McpHub
from semantic_memory.types import Message, SyncState

logger = logging.getLogger(__name__)


@runtime_checkable
class ConversationTask(Protocol):
    """The host task the integration attaches to."""

    task_id: str
    api_conversation_history: Sequence[Message]

    def on(self, event: TaskEvent, handler: EventHandler) -> None: ...


class SemanticMemoryIntegration:
    """Memory enrichment and persistence for one conversation task.

    Args:
        hub: Host MCP hub (server registry plus tool invocation)
        task: Conversation task exposing task_id, api_conversation_history and on()
        settings: Integration settings (default: loaded from environment)

    Raises:
        MemoryIntegrationError: If hub or task is missing or the task has no id

    Example:
        >>> integration = SemanticMemoryIntegration(hub, task)
        >>> if integration.is_available():
        ...     await integration.sync_history()
    """

    def __init__(
        self,
        hub: McpHub,
        task: ConversationTask,
        settings: Optional[MemorySettings] = None,
    ):
        if hub is None:
            raise MemoryIntegrationError("SemanticMemoryIntegration requires an MCP hub")
        if task is None:
            raise MemoryIntegrationError("SemanticMemoryIntegration requires a task")
        task_id = getattr(task, "task_id", None)
        if not task_id:
            raise MemoryIntegrationError("SemanticMemoryIntegration requires a task with a task_id")

        self.hub = hub
        self.task = task
        self.task_id: str = task_id
        self.settings = settings or MemorySettings()

        self.state = SyncState(task_id=task_id)
        self.probe = AvailabilityProbe(hub, self.settings.server_name)
        self.client = MemoryClient(hub, self.probe, self.settings)
        self.synchronizer = HistorySynchronizer(self.client, self._history, self.state)
        self.enrichment_handler = EnrichmentHandler(self.client, task_id)
        self.storage_handler = StorageHandler(self.synchronizer, self.settings)

        self._subscribe()
        self.initial_sync: Optional[asyncio.Task] = self._start_initial_sync()

    def _history(self) -> Sequence[Message]:
        return self.task.api_conversation_history

    def _subscribe(self) -> None:
        self.task.on(TaskEvent.BEFORE_USER_MESSAGE_ENRICHMENT, self.enrichment_handler)
        self.task.on(TaskEvent.AFTER_ASSISTANT_RESPONSE_PROCESSED, self.storage_handler)
        logger.info(f"[task {self.task_id}] subscribed to task events")

    def _start_initial_sync(self) -> Optional[asyncio.Task]:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.info(
                f"[task {self.task_id}] no running event loop, initial history sync deferred"
            )
            return None
        return loop.create_task(self.sync_history())

    @property
    def last_stored_message_index(self) -> int:
        """Index of the last transcript message already attempted."""
        return self.state.last_stored_message_index

    def is_available(self) -> bool:
        """Check whether the memory server is connected."""
        return self.probe.is_available()

    async def sync_history(self) -> None:
        """Store every exchange of the transcript not yet attempted.

        Never raises: failures are logged.
        """
        try:
            await self.synchronizer.sync()
        except Exception as e:
            logger.error(f"[task {self.task_id}] history synchronization failed: {e}", exc_info=True)

    async def get_core_identity(self) -> Optional[dict[str, Any]]:
        """Fetch the agent's core identity from the memory server.

        Returns:
            The identity mapping, or None when unavailable
        """
        return await self.client.get_core_identity()

    async def core_identity_prompt(self) -> str:
        """Build the core identity section of the system prompt."""
        return await build_core_identity_section(self.client)
