"""Task events consumed by the integration.

Handlers are plain callables. A handler that has asynchronous work returns
an awaitable instead of awaiting it; the event source schedules it and hands
the handle back to the emitter, who awaits every handle before finalising the
turn. Emission itself never blocks.
"""

import asyncio
import inspect
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Protocol, runtime_checkable

from semantic_memory.types import ContentBlock, Message

logger = logging.getLogger(__name__)


class TaskEvent(str, Enum):
    """Events emitted by the conversation engine for one task."""
    BEFORE_USER_MESSAGE_ENRICHMENT = "before_user_message_enrichment"
    AFTER_ASSISTANT_RESPONSE_PROCESSED = "after_assistant_response_processed"


@dataclass
class UserMessageEnrichmentPayload:
    """Payload of BEFORE_USER_MESSAGE_ENRICHMENT.

    ``user_content`` is the outgoing content of the current turn and is
    mutated in place by handlers.

    Attributes:
        task_id: Task the turn belongs to
        user_content: Mutable ordered list of outgoing content blocks
        current_history_slice: Messages preceding the current turn
    """
    task_id: str
    user_content: list[ContentBlock]
    current_history_slice: list[Message] = field(default_factory=list)


@dataclass
class AssistantResponseProcessedPayload:
    """Payload of AFTER_ASSISTANT_RESPONSE_PROCESSED (read-only).

    Attributes:
        task_id: Task the turn belongs to
        user_message: The user message of the exchange
        assistant_message: The assistant reply
    """
    task_id: str
    user_message: Message
    assistant_message: Message


EventHandler = Callable[[Any], Optional[Awaitable[Any]]]


@runtime_checkable
class EventSource(Protocol):
    """Subscription interface the integration depends on."""

    def on(self, event: TaskEvent, handler: EventHandler) -> None: ...


class TaskEventBus:
    """In-process event source for a conversation task.

    Example:
        >>> bus = TaskEventBus()
        >>> bus.on(TaskEvent.BEFORE_USER_MESSAGE_ENRICHMENT, handler)
        >>> await bus.emit_and_wait(TaskEvent.BEFORE_USER_MESSAGE_ENRICHMENT, payload)
    """

    def __init__(self) -> None:
        self._handlers: dict[TaskEvent, list[EventHandler]] = defaultdict(list)

    def on(self, event: TaskEvent, handler: EventHandler) -> None:
        """Subscribe a handler to an event."""
        self._handlers[event].append(handler)

    def off(self, event: TaskEvent, handler: EventHandler) -> None:
        """Unsubscribe a handler. Unknown handlers are ignored."""
        if handler in self._handlers[event]:
            self._handlers[event].remove(handler)

    def listener_count(self, event: TaskEvent) -> int:
        """Number of handlers subscribed to an event."""
        return len(self._handlers[event])

    def emit(self, event: TaskEvent, payload: Any) -> list[asyncio.Future]:
        """Call every handler and schedule the work they return.

        Must be called from a running event loop when any handler returns
        an awaitable.

        Args:
            event: Event being emitted
            payload: Event payload passed to each handler

        Returns:
            Handles for the scheduled handler work, in subscription order
        """
        pending: list[asyncio.Future] = []
        for handler in list(self._handlers[event]):
            result = handler(payload)
            if inspect.isawaitable(result):
                pending.append(asyncio.ensure_future(result))
        return pending

    async def emit_and_wait(self, event: TaskEvent, payload: Any) -> None:
        """Emit an event and wait for all handler work to settle.

        Handler failures are logged, never raised to the emitter.
        """
        pending = self.emit(event, payload)
        if not pending:
            return
        results = await asyncio.gather(*pending, return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException):
                logger.error(f"Handler for {event.value} failed: {result!r}")
