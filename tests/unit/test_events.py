"""Unit tests for the task event bus."""

import asyncio

import pytest

from semantic_memory.integration.events import TaskEvent, TaskEventBus


class TestTaskEventBus:
    """Tests for TaskEventBus."""

    def test_sync_handlers_called_in_order(self):
        """Test that handlers run in subscription order during emission."""
        bus = TaskEventBus()
        calls = []
        bus.on(TaskEvent.BEFORE_USER_MESSAGE_ENRICHMENT, lambda p: calls.append(("a", p)))
        bus.on(TaskEvent.BEFORE_USER_MESSAGE_ENRICHMENT, lambda p: calls.append(("b", p)))

        assert bus.emit(TaskEvent.BEFORE_USER_MESSAGE_ENRICHMENT, 1) == []
        assert calls == [("a", 1), ("b", 1)]

    def test_events_are_separate(self):
        bus = TaskEventBus()
        calls = []
        bus.on(TaskEvent.AFTER_ASSISTANT_RESPONSE_PROCESSED, calls.append)

        bus.emit(TaskEvent.BEFORE_USER_MESSAGE_ENRICHMENT, "x")

        assert calls == []
        assert bus.listener_count(TaskEvent.AFTER_ASSISTANT_RESPONSE_PROCESSED) == 1

    def test_off(self):
        bus = TaskEventBus()
        calls = []
        bus.on(TaskEvent.AFTER_ASSISTANT_RESPONSE_PROCESSED, calls.append)
        bus.off(TaskEvent.AFTER_ASSISTANT_RESPONSE_PROCESSED, calls.append)
        bus.off(TaskEvent.AFTER_ASSISTANT_RESPONSE_PROCESSED, calls.append)

        bus.emit(TaskEvent.AFTER_ASSISTANT_RESPONSE_PROCESSED, "x")
        assert calls == []

    @pytest.mark.asyncio
    async def test_emit_returns_handles_without_blocking(self):
        """Test that async work is scheduled, not awaited, by emit."""
        bus = TaskEventBus()
        release = asyncio.Event()
        done = []

        async def work(payload):
            await release.wait()
            done.append(payload)

        bus.on(TaskEvent.BEFORE_USER_MESSAGE_ENRICHMENT, work)
        handles = bus.emit(TaskEvent.BEFORE_USER_MESSAGE_ENRICHMENT, "p")

        assert len(handles) == 1
        assert done == []
        release.set()
        await asyncio.gather(*handles)
        assert done == ["p"]

    @pytest.mark.asyncio
    async def test_emit_and_wait_contains_failures(self):
        """Test that a failing handler does not stop the others or raise."""
        bus = TaskEventBus()
        done = []

        async def failing(payload):
            raise RuntimeError("boom")

        async def working(payload):
            done.append(payload)

        bus.on(TaskEvent.AFTER_ASSISTANT_RESPONSE_PROCESSED, failing)
        bus.on(TaskEvent.AFTER_ASSISTANT_RESPONSE_PROCESSED, working)

        await bus.emit_and_wait(TaskEvent.AFTER_ASSISTANT_RESPONSE_PROCESSED, "p")

        assert done == ["p"]
