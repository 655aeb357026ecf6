"""Core data types for the semantic memory integration.

This module defines the data structures shared across the integration:
- RecalledMemoryItem: A memory returned by the enrich_context tool
- Exchange: A user/assistant pair reduced to the text that gets stored
- SyncState: Per-task sync cursor owned by one integration instance
- StoreOutcome: Result of a store_exchange attempt
- ServerStatus: Connection states reported by the MCP hub

Messages and content blocks are owned by the host. They are accepted either
as plain mappings (``{"role": "user", "content": [...]}``) or as SDK objects
exposing the same names as attributes; ``field_value`` reads both.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Host-owned message and content block shapes
Message = Union[Mapping[str, Any], Any]
ContentBlock = Union[Mapping[str, Any], Any]


def field_value(obj: Any, name: str, default: Any = None) -> Any:
    """Read a field from a mapping or an attribute-style object.

    Args:
        obj: Mapping or object to read from
        name: Field name
        default: Value returned when the field is absent

    Returns:
        The field value, or default
    """
    if obj is None:
        return default
    if isinstance(obj, Mapping):
        return obj.get(name, default)
    return getattr(obj, name, default)


class ServerStatus:
    """Connection states reported by MCP hub entries."""

    CONNECTED = "connected"
    CONNECTING = "connecting"
    DISCONNECTED = "disconnected"


class RecalledMemoryItem(BaseModel):
    """A memory returned by the enrich_context tool.

    ``score`` and ``distance`` are alternative relevance signals: a higher
    score is more relevant, a lower distance is more relevant. Servers may
    send either one, both, or neither. Unknown fields are kept.

    Attributes:
        text: The recalled memory text
        source_id: Identifier of the source (wire name: sourceId)
        chunk_index: Chunk position within the source (wire name: chunkIndex)
        score: Optional relevance score from semantic search
        distance: Optional vector distance
        metadata: Optional additional metadata
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    text: str
    source_id: str = Field(alias="sourceId")
    chunk_index: Optional[int] = Field(default=None, alias="chunkIndex")
    score: Optional[float] = None
    distance: Optional[float] = None
    metadata: Optional[dict[str, Any]] = None

    @field_validator("source_id", mode="before")
    @classmethod
    def numeric_source_id(cls, value: Any) -> Any:
        """Accept numeric source ids as their string form."""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @property
    def relevance(self) -> Optional[float]:
        """Relevance on a higher-is-better scale.

        Returns:
            score when present, otherwise 1 - distance, otherwise None
        """
        if self.score is not None:
            return self.score
        if self.distance is not None:
            return 1.0 - self.distance
        return None


@dataclass
class Exchange:
    """A user message paired with the assistant reply that followed it.

    Transient: built right before a store_exchange call and never kept.

    Attributes:
        user_text: Cleaned user text
        assistant_text: Cleaned assistant text
        task_id: Task the exchange belongs to
        user_timestamp: Optional timestamp of the user message
        assistant_timestamp: Optional timestamp of the assistant message
    """
    user_text: str
    assistant_text: str
    task_id: str
    user_timestamp: Optional[Any] = None
    assistant_timestamp: Optional[Any] = None

    def is_empty(self) -> bool:
        """Check whether both sides are empty after cleaning."""
        return not self.user_text and not self.assistant_text

    def to_arguments(self) -> dict[str, Any]:
        """Render the store_exchange tool arguments."""
        return {
            "userMessage": self.user_text,
            "assistantResponse": self.assistant_text,
            "taskId": self.task_id,
            "metadata": {
                "userTimestamp": self.user_timestamp,
                "assistantTimestamp": self.assistant_timestamp,
            },
        }


@dataclass
class SyncState:
    """Sync cursor for one task.

    ``last_stored_message_index`` is the index of the last transcript message
    whose exchange has had a store attempt. It starts at -1 and only moves
    forward, always onto the assistant half of a user/assistant pair.

    Attributes:
        task_id: Task the cursor belongs to
        last_stored_message_index: Cursor into the task's message list
    """
    task_id: str
    last_stored_message_index: int = -1


class StoreOutcome(Enum):
    """Result of a store_exchange attempt.

    - STORED: The service confirmed the exchange
    - SKIPPED: Both sides were empty after cleaning, nothing was sent
    - FAILED: The call failed or the service reported failure
    - UNAVAILABLE: The memory server was not connected
    """
    STORED = "stored"
    SKIPPED = "skipped"
    FAILED = "failed"
    UNAVAILABLE = "unavailable"

    @property
    def settled(self) -> bool:
        """True when the exchange was stored or had nothing to store."""
        return self in (StoreOutcome.STORED, StoreOutcome.SKIPPED)
