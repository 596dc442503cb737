"""Shared fixtures for justdo tests."""

import pytest

from justdo.config import reset_settings
from justdo.models import ContextWindow, Message
from justdo.storage.memory import InMemoryEntryStore, InMemorySearchIndex


@pytest.fixture(autouse=True)
def isolate_env(monkeypatch, tmp_path):
    """Prevent tests from reading real .env or touching real data."""
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test_key")
    monkeypatch.setenv("DATA_DIR", str(tmp_path))
    for var in (
        "CONFIDENCE_THRESHOLD",
        "GUARDRAIL_ENABLED",
        "TIMEZONE",
        "OFFLINE_QUEUE_ENABLED",
        "RESOLUTION_MESSAGE_WINDOW",
        "RESOLUTION_SEARCH_LIMIT",
    ):
        monkeypatch.delenv(var, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def store():
    return InMemoryEntryStore()


@pytest.fixture
def search_index(store):
    return InMemorySearchIndex(store)


@pytest.fixture
def chat_context():
    """Factory for a context window whose newest message is the last user text."""

    def _make(*user_messages: str, index_content: str = "") -> ContextWindow:
        messages = []
        for text in user_messages:
            messages.append(Message(role="user", content=text))
            messages.append(Message(role="assistant", content="ok"))
        if messages:
            messages.pop()
        return ContextWindow(index_content=index_content, recent_messages=messages)

    return _make
