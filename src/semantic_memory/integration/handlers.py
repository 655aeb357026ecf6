"""Event handlers that connect task events to the memory server.

Both handlers do their synchronous work (task id check, extraction,
sanitization) during emission and return a coroutine for the remote part,
or None when there is nothing to do.
"""

import logging
from typing import Awaitable, Optional, Sequence

from semantic_memory.config import MemorySettings
from semantic_memory.integration.events import (
    AssistantResponseProcessedPayload,
    UserMessageEnrichmentPayload,
)
from semantic_memory.integration.history import HistorySynchronizer
from semantic_memory.service.client import MemoryClient
from semantic_memory.text.extract import extract_text, is_recall_block, message_text
from semantic_memory.text.sanitize import RECALL_BLOCK_CLOSE, RECALL_BLOCK_OPEN, sanitize
from semantic_memory.types import Message, RecalledMemoryItem

logger = logging.getLogger(__name__)

MEMORY_SEPARATOR = "\n---\n"


def format_memory(index: int, item: RecalledMemoryItem) -> str:
    """Format one recalled memory, numbered from 1."""
    relevance = item.relevance
    score = f"{relevance:.4f}" if relevance is not None else "N/A"
    chunk = item.chunk_index if item.chunk_index is not None else "N/A"
    return f"Memory {index} (Source: {item.source_id}, Chunk: {chunk}, Score: {score}):\n{item.text}"


def format_recall_block(items: Sequence[RecalledMemoryItem]) -> dict[str, str]:
    """Build the text block that carries recalled memories into a turn."""
    body = MEMORY_SEPARATOR.join(format_memory(n, item) for n, item in enumerate(items, start=1))
    return {"type": "text", "text": f"{RECALL_BLOCK_OPEN}\n{body}\n{RECALL_BLOCK_CLOSE}"}


class EnrichmentHandler:
    """Prepends recalled memories to the outgoing user content.

    Args:
        client: Memory client
        task_id: Task owned by the calling integration instance
    """

    def __init__(self, client: MemoryClient, task_id: str):
        self.client = client
        self.task_id = task_id

    def __call__(self, payload: UserMessageEnrichmentPayload) -> Optional[Awaitable[None]]:
        if payload.task_id != self.task_id:
            return None

        # Recall blocks left over from a retried turn must not be queried or doubled
        stale = [block for block in payload.user_content if is_recall_block(block)]
        if stale:
            payload.user_content[:] = [
                block for block in payload.user_content if not is_recall_block(block)
            ]
            logger.debug(f"[task {self.task_id}] removed {len(stale)} stale recall block(s)")

        query = sanitize(extract_text(payload.user_content))
        if not query:
            logger.debug(f"[task {self.task_id}] no query text after cleaning, skipping enrichment")
            return None

        return self._enrich(payload, query)

    async def _enrich(self, payload: UserMessageEnrichmentPayload, query: str) -> None:
        memories = await self.client.enrich_context(query, payload.current_history_slice)
        if not memories:
            return

        payload.user_content.insert(0, format_recall_block(memories))
        logger.info(f"[task {self.task_id}] enriched user message with {len(memories)} memories")


class StorageHandler:
    """Persists finished exchanges.

    A completion marker in the assistant text triggers a full history sync,
    which also covers turns whose events were missed; any other turn is
    stored on its own.

    Args:
        synchronizer: History synchronizer owning the task's cursor
        settings: Integration settings (completion_marker)
    """

    def __init__(self, synchronizer: HistorySynchronizer, settings: MemorySettings):
        self.synchronizer = synchronizer
        self.settings = settings

    @property
    def task_id(self) -> str:
        return self.synchronizer.task_id

    def is_completion(self, assistant_message: Message) -> bool:
        """Check the raw assistant text for the completion marker."""
        return self.settings.completion_marker in message_text(assistant_message)

    def __call__(self, payload: AssistantResponseProcessedPayload) -> Optional[Awaitable[None]]:
        if payload.task_id != self.task_id:
            return None

        if self.is_completion(payload.assistant_message):
            logger.info(f"[task {self.task_id}] completion detected, triggering history sync")
            return self._settle(self.synchronizer.sync())

        return self._settle(
            self.synchronizer.store_latest(payload.user_message, payload.assistant_message)
        )

    async def _settle(self, work: Awaitable[object]) -> None:
        try:
            await work
        except Exception as e:
            logger.error(f"[task {self.task_id}] storing exchange failed: {e}", exc_info=True)
