"""Tests for justdo/delivery/offline_queue.py: uses a temporary SQLite file."""

import pytest
import pytest_asyncio

from justdo.delivery.offline_queue import (
    OfflineCaptureQueue,
    ProcessResult,
    QueueStatus,
    capture_id,
)
from justdo.models import ContextWindow


@pytest_asyncio.fixture
async def queue(tmp_path):
    q = OfflineCaptureQueue(
        str(tmp_path / "queue.db"), enabled=True, max_attempts=2, retry_base=60, dedupe_ttl_hours=24
    )
    await q.init()
    return q


def succeed():
    seen = []

    async def processor(item):
        seen.append(item)
        return ProcessResult(success=True)

    return processor, seen


async def fail(item):
    return ProcessResult(success=False, error="still offline")


@pytest.mark.asyncio
async def test_enqueue_returns_hashed_item(queue):
    item = await queue.enqueue_capture("call mom", "[task]", "chat")
    assert item.id == capture_id("call mom", "[task]", "chat")
    assert item.status is QueueStatus.PENDING
    assert item.args == {"text": "call mom", "hints": "[task]"}
    counts = await queue.get_status()
    assert counts.pending == 1


@pytest.mark.asyncio
async def test_duplicate_capture_is_deduplicated(queue):
    first = await queue.enqueue_capture("call mom", None, "chat")
    second = await queue.enqueue_capture("call mom", None, "chat")
    assert first.id == second.id
    assert (await queue.get_status()).pending == 1


@pytest.mark.asyncio
async def test_channel_is_part_of_identity(queue):
    a = await queue.enqueue_capture("call mom", None, "chat")
    b = await queue.enqueue_capture("call mom", None, "email")
    assert a.id != b.id


@pytest.mark.asyncio
async def test_disabled_queue_returns_none(tmp_path):
    q = OfflineCaptureQueue(str(tmp_path / "off.db"), enabled=False)
    assert q.is_enabled() is False
    assert await q.enqueue_capture("x", None, "chat") is None


@pytest.mark.asyncio
async def test_replay_success_marks_processed(queue):
    context = ContextWindow(index_content="- task/a: A")
    await queue.enqueue_capture("call mom", None, "chat", context)
    processor, seen = succeed()

    assert await queue.replay(processor) == 1
    assert seen[0].context.index_content == "- task/a: A"
    counts = await queue.get_status()
    assert counts.pending == 0
    assert counts.failed == 0

    # Processed rows are not replayed again
    assert await queue.replay(processor) == 0


@pytest.mark.asyncio
async def test_failure_schedules_retry_in_future(queue):
    await queue.enqueue_capture("call mom", None, "chat")
    assert await queue.process_pending(fail) == 0

    counts = await queue.get_status()
    assert counts.pending == 1
    # Backoff keeps the item out of the next pass
    processor, seen = succeed()
    assert await queue.process_pending(processor) == 0
    assert seen == []


@pytest.mark.asyncio
async def test_max_attempts_marks_failed(tmp_path):
    q = OfflineCaptureQueue(str(tmp_path / "q.db"), enabled=True, max_attempts=1, retry_base=0)
    await q.init()
    await q.enqueue_capture("call mom", None, "chat")
    await q.process_pending(fail)

    failed = await q.list_failed()
    assert len(failed) == 1
    assert failed[0].attempts == 1
    assert failed[0].last_error == "still offline"
    assert (await q.get_status()).failed == 1


@pytest.mark.asyncio
async def test_processor_exception_counts_as_failure(tmp_path):
    q = OfflineCaptureQueue(str(tmp_path / "q.db"), enabled=True, max_attempts=1, retry_base=0)
    await q.init()
    await q.enqueue_capture("call mom", None, "chat")

    async def boom(item):
        raise RuntimeError("kaboom")

    assert await q.process_pending(boom) == 0
    failed = await q.list_failed()
    assert failed[0].last_error == "kaboom"
