"""Tests for justdo/app.py wiring."""

import os
from unittest.mock import MagicMock

import pytest

from justdo.app import build_offline_queue, build_tool_executor
from justdo.config import reset_settings
from justdo.models import ToolCall
from justdo.storage.memory import InMemoryEntryStore


def test_executor_defaults_to_in_memory_storage():
    executor = build_tool_executor(llm_client=MagicMock())
    assert set(executor.registry.tool_names) >= {"classify_and_capture", "update_entry"}


def test_guardrail_follows_settings(monkeypatch):
    monkeypatch.setenv("GUARDRAIL_ENABLED", "false")
    reset_settings()
    executor = build_tool_executor(llm_client=MagicMock())
    assert executor._guardrail is None


def test_custom_store_needs_search_index():
    with pytest.raises(ValueError):
        build_tool_executor(llm_client=MagicMock(), entry_store=MagicMock())


@pytest.mark.asyncio
async def test_wired_executor_lists_entries():
    store = InMemoryEntryStore()
    await store.create("task", {"name": "Call mom"}, "api")
    executor = build_tool_executor(llm_client=MagicMock(), entry_store=store)
    result = await executor.execute(ToolCall(name="list_entries", arguments={}))
    assert [e.path for e in result.data.entries] == ["task/call-mom"]


@pytest.mark.asyncio
async def test_build_offline_queue_creates_database(tmp_path):
    queue = await build_offline_queue()
    assert queue.db_path == os.path.join(str(tmp_path), "offline_queue.db")
    assert os.path.exists(queue.db_path)
    assert (await queue.get_status()).pending == 0
