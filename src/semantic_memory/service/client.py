"""Memory client for the semantic memory MCP server.

This module maps the integration's operations onto four MCP tools:
- enrich_context: Recall memories relevant to a query
- store_exchange: Persist one user/assistant exchange
- get_last_chunk_index: Last chunk index the server holds for a source
- get_core_identity: Structured identity payload

Every tool answers with a single JSON text block,
``{"content": [{"type": "text", "text": "{\\"success\\": true, ...}"}]}``.
A missing text block, invalid JSON, an MCP error result or ``success`` other
than ``true`` is a soft failure: it is logged and the operation returns its
empty result. No operation raises.
"""

import json
import logging
from typing import Any, Optional, Sequence

from pydantic import BaseModel, StrictBool, ValidationError

from semantic_memory.config import MemorySettings
from semantic_memory.service.probe import AvailabilityProbe, ToolCaller
from semantic_memory.text.extract import (
    extract_user_message,
    message_role,
    message_text,
    message_timestamp,
)
from semantic_memory.text.sanitize import sanitize
from semantic_memory.types import (
    Exchange,
    Message,
    RecalledMemoryItem,
    StoreOutcome,
    field_value,
)

logger = logging.getLogger(__name__)

ENRICH_CONTEXT_TOOL = "enrich_context"
STORE_EXCHANGE_TOOL = "store_exchange"
GET_LAST_CHUNK_INDEX_TOOL = "get_last_chunk_index"
GET_CORE_IDENTITY_TOOL = "get_core_identity"


class EnrichContextResponse(BaseModel):
    """Success envelope of enrich_context."""

    success: StrictBool
    recalled_memories: list[Any]

    def valid_memories(self) -> list[RecalledMemoryItem]:
        """Validate recalled items one by one, dropping only the malformed ones."""
        memories = []
        for position, raw in enumerate(self.recalled_memories):
            try:
                memories.append(RecalledMemoryItem.model_validate(raw))
            except ValidationError as e:
                logger.warning(f"enrich_context: dropping malformed memory at {position}: {e}")
        return memories


def parse_envelope(response: Any, tool_name: str) -> Optional[dict[str, Any]]:
    """Parse the JSON envelope carried by a tool response.

    Args:
        response: MCP CallToolResult, or a mapping with the same shape
        tool_name: Tool name, for log messages

    Returns:
        The decoded payload when it reports success, otherwise None
    """
    if field_value(response, "isError", False):
        logger.warning(f"{tool_name} returned an MCP error result: {response!r}")
        return None

    content = field_value(response, "content")
    if not isinstance(content, (list, tuple)) or not content:
        logger.warning(f"{tool_name} unexpected response format: {response!r}")
        return None

    first = content[0]
    if field_value(first, "type") != "text":
        logger.warning(f"{tool_name} response does not start with a text block: {response!r}")
        return None

    try:
        payload = json.loads(field_value(first, "text", ""))
    except (json.JSONDecodeError, TypeError) as e:
        logger.warning(f"{tool_name} returned invalid JSON: {e}")
        return None

    if not isinstance(payload, dict) or payload.get("success") is not True:
        logger.warning(f"{tool_name} call was not successful: {payload!r}")
        return None

    return payload


class MemoryClient:
    """Request/response mapper around the memory server's tools.

    Every operation checks the availability probe first. When the server is
    not connected the operation logs a warning, makes no call and returns its
    empty result.

    Args:
        caller: Tool invocation capability (usually the host's MCP hub)
        probe: Availability probe for the memory server
        settings: Integration settings (default: loaded from environment)

    Example:
        >>> client = MemoryClient(hub, AvailabilityProbe(hub, "semantic-memory"))
        >>> memories = await client.enrich_context("How do we deploy?", history)
    """

    def __init__(
        self,
        caller: ToolCaller,
        probe: AvailabilityProbe,
        settings: Optional[MemorySettings] = None,
    ):
        self.caller = caller
        self.probe = probe
        self.settings = settings or MemorySettings()

    @property
    def server_name(self) -> str:
        """Name of the memory server entry."""
        return self.probe.server_name

    def is_available(self) -> bool:
        """Check whether the memory server is connected."""
        return self.probe.is_available()

    async def _call(self, tool_name: str, arguments: dict[str, Any]) -> Optional[dict[str, Any]]:
        """Call a tool and return its success payload, or None on any failure."""
        try:
            logger.debug(f"Calling {tool_name} with args: {json.dumps(arguments, default=str)}")
            response = await self.caller.call_tool(self.server_name, tool_name, arguments)
        except Exception as e:
            logger.error(f"Error calling {tool_name}: {e}", exc_info=True)
            return None
        return parse_envelope(response, tool_name)

    def build_conversation_context(self, recent_history: Sequence[Message]) -> str:
        """Render the trailing history as ``role: text`` lines.

        Args:
            recent_history: Messages preceding the current turn

        Returns:
            The last context_window messages, sanitized, one per line
        """
        window = self.settings.context_window
        history_slice = list(recent_history)[-window:] if window else []
        lines = [
            f"{message_role(message)}: {sanitize(message_text(message))}"
            for message in history_slice
        ]
        return "\n".join(lines)

    async def enrich_context(
        self,
        query: str,
        recent_history: Sequence[Message],
    ) -> list[RecalledMemoryItem]:
        """Recall memories relevant to a query.

        Args:
            query: Sanitized query text
            recent_history: Messages preceding the current turn

        Returns:
            Recalled memories, or an empty list on any failure
        """
        if not self.is_available():
            logger.warning(f"enrich_context: server '{self.server_name}' not available")
            return []

        arguments = {
            "query": query,
            "conversationContext": self.build_conversation_context(recent_history),
            "topK": self.settings.top_k,
        }
        payload = await self._call(ENRICH_CONTEXT_TOOL, arguments)
        if payload is None:
            return []

        try:
            result = EnrichContextResponse.model_validate(payload)
        except ValidationError as e:
            logger.warning(f"enrich_context returned malformed recalled_memories: {e}")
            return []

        memories = result.valid_memories()
        logger.debug(f"enrich_context recalled {len(memories)} memories")
        return memories

    def build_exchange(
        self,
        user_message: Message,
        assistant_message: Message,
        task_id: str,
    ) -> Exchange:
        """Reduce a user/assistant pair to the text that gets stored.

        Recall blocks and tool markup are removed from both sides; framed
        user text is reduced to its user_message section first.
        """
        user_text = sanitize(extract_user_message(message_text(user_message)))
        assistant_text = sanitize(message_text(assistant_message))
        return Exchange(
            user_text=user_text,
            assistant_text=assistant_text,
            task_id=task_id,
            user_timestamp=message_timestamp(user_message),
            assistant_timestamp=message_timestamp(assistant_message),
        )

    async def store_exchange(
        self,
        user_message: Message,
        assistant_message: Message,
        task_id: str,
    ) -> StoreOutcome:
        """Persist one user/assistant exchange.

        Args:
            user_message: The user message
            assistant_message: The assistant reply that followed it
            task_id: Task the exchange belongs to

        Returns:
            StoreOutcome describing what happened
        """
        if not self.is_available():
            logger.warning(f"store_exchange: server '{self.server_name}' not available")
            return StoreOutcome.UNAVAILABLE

        exchange = self.build_exchange(user_message, assistant_message, task_id)
        if exchange.is_empty():
            logger.warning(
                f"store_exchange: both messages are empty after cleaning for task {task_id}, skipping"
            )
            return StoreOutcome.SKIPPED

        payload = await self._call(STORE_EXCHANGE_TOOL, exchange.to_arguments())
        if payload is None:
            return StoreOutcome.FAILED

        logger.debug(f"store_exchange successful for task {task_id}")
        return StoreOutcome.STORED

    async def get_last_chunk_index(self, source_id: str) -> int:
        """Get the last chunk index the server holds for a source.

        Args:
            source_id: Source identifier (the task id for conversations)

        Returns:
            The last chunk index, or -1 if unavailable or unparseable
        """
        if not self.is_available():
            logger.warning(f"get_last_chunk_index: server '{self.server_name}' not available")
            return -1

        payload = await self._call(GET_LAST_CHUNK_INDEX_TOOL, {"sourceId": source_id})
        if payload is None:
            return -1

        index = payload.get("lastChunkIndex")
        if isinstance(index, bool) or not isinstance(index, int):
            logger.warning(f"get_last_chunk_index returned a non-integer index: {index!r}")
            return -1
        return index

    async def get_core_identity(self) -> Optional[dict[str, Any]]:
        """Fetch the structured core identity payload.

        Returns:
            The identity mapping, or None on any failure
        """
        if not self.is_available():
            logger.warning(f"get_core_identity: server '{self.server_name}' not available")
            return None

        payload = await self._call(GET_CORE_IDENTITY_TOOL, {})
        if payload is None:
            return None

        identity = payload.get("identity")
        if not isinstance(identity, dict):
            logger.warning(f"get_core_identity returned a non-object identity: {identity!r}")
            return None
        return identity
