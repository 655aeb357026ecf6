"""History synchronization between the local transcript and the memory server.

The transcript is append-only. ``SyncState.last_stored_message_index`` marks
the last message whose exchange has had a store attempt; each pass replays
the user/assistant pairs after it, in ascending order.

Cursor rules:
- It only moves forward, and only onto the assistant half of a pair
- It moves past a pair once that pair's store attempt has finished,
  whatever the outcome; failed pairs are logged and not resent by later passes
"""

import asyncio
import logging
from typing import Callable, Sequence

from semantic_memory.service.client import MemoryClient
from semantic_memory.text.extract import message_role
from semantic_memory.types import Message, StoreOutcome, SyncState

logger = logging.getLogger(__name__)

HistorySource = Callable[[], Sequence[Message]]


def is_exchange(messages: Sequence[Message], index: int) -> bool:
    """Check whether messages[index] and messages[index + 1] form a user/assistant pair."""
    if index < 0 or index + 1 >= len(messages):
        return False
    return (
        message_role(messages[index]) == "user"
        and message_role(messages[index + 1]) == "assistant"
    )


class HistorySynchronizer:
    """Replays unsent exchanges from a task transcript.

    Passes on one instance are serialised, so overlapping sync calls never
    resend pairs from the same cursor position.

    Args:
        client: Memory client used for store calls
        history: Callable returning the task's live message list
        state: Sync cursor owned by the calling integration instance
    """

    def __init__(self, client: MemoryClient, history: HistorySource, state: SyncState):
        self.client = client
        self.history = history
        self.state = state
        self._lock = asyncio.Lock()

    @property
    def task_id(self) -> str:
        return self.state.task_id

    @property
    def cursor(self) -> int:
        """Index of the last message already attempted (-1 when none is)."""
        return self.state.last_stored_message_index

    def _advance(self, index: int) -> None:
        if index > self.state.last_stored_message_index:
            self.state.last_stored_message_index = index

    async def sync(self) -> int:
        """Store every unsent exchange after the cursor.

        Returns:
            Number of exchanges the server confirmed in this pass
        """
        if not self.client.is_available():
            logger.warning(f"[task {self.task_id}] sync skipped: memory server not available")
            return 0

        async with self._lock:
            return await self._sync_locked()

    async def _sync_locked(self) -> int:
        # Chunk indices do not map onto message indices; the remote index is
        # only a hint and the local cursor decides where to start.
        last_chunk_index = await self.client.get_last_chunk_index(self.task_id)
        logger.debug(f"[task {self.task_id}] server last chunk index: {last_chunk_index}")

        messages = self.history()
        start = self.state.last_stored_message_index + 1
        if start >= len(messages):
            logger.debug(f"[task {self.task_id}] no new local history to sync")
            return 0

        logger.info(f"[task {self.task_id}] syncing history from message index {start}")

        stored = 0
        failed = 0
        i = start
        while i + 1 < len(messages):
            if not is_exchange(messages, i):
                i += 1
                continue

            try:
                outcome = await self.client.store_exchange(messages[i], messages[i + 1], self.task_id)
            except Exception as e:
                logger.error(
                    f"[task {self.task_id}] storing exchange ({i}, {i + 1}) failed: {e}",
                    exc_info=True,
                )
                outcome = StoreOutcome.FAILED

            if outcome is StoreOutcome.STORED:
                stored += 1
            elif not outcome.settled:
                failed += 1
                logger.warning(
                    f"[task {self.task_id}] exchange ({i}, {i + 1}) not stored ({outcome.value})"
                )
            self._advance(i + 1)
            i += 2

        logger.info(
            f"[task {self.task_id}] history sync complete: {stored} stored, "
            f"{failed} failed, cursor at {self.cursor}"
        )
        return stored

    async def store_latest(self, user_message: Message, assistant_message: Message) -> StoreOutcome:
        """Store the exchange of the turn that just finished.

        If it settles and is exactly the next unsent pair of the transcript,
        the cursor moves onto it so a later sync does not resend it.

        Returns:
            Outcome of the store attempt
        """
        async with self._lock:
            outcome = await self.client.store_exchange(user_message, assistant_message, self.task_id)
            if not outcome.settled:
                return outcome

            messages = self.history()
            nxt = self.state.last_stored_message_index + 1
            if (
                is_exchange(messages, nxt)
                and messages[nxt] == user_message
                and messages[nxt + 1] == assistant_message
            ):
                self._advance(nxt + 1)
            return outcome
