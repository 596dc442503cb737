"""
Composition root: wires the LLM-backed services and the collaborators into
a ToolExecutor using the application settings.
"""

from __future__ import annotations

import logging
import os

from .ai.action_extraction import ActionExtractionService
from .ai.classifier import ClassificationAgent
from .ai.guardrail import ToolGuardrailService
from .ai.intent_analysis import IntentAnalysisService
from .ai.llm_client import LLMClient
from .ai.tools import ToolExecutor
from .config import settings
from .delivery.offline_queue import OfflineCaptureQueue
from .logging_config import setup_logging
from .storage.memory import InMemoryEntryStore, InMemorySearchIndex

logger = logging.getLogger(__name__)


async def build_offline_queue() -> OfflineCaptureQueue:
    os.makedirs(settings.data_dir, exist_ok=True)
    queue = OfflineCaptureQueue(settings.queue_db_path)
    await queue.init()
    return queue


def build_tool_executor(
    *,
    entry_store=None,
    search_index=None,
    llm_client: LLMClient | None = None,
    entry_linker=None,
    capture_queue=None,
    digest_generator=None,
    duplicate_finder=None,
    index_provider=None,
) -> ToolExecutor:
    """
    Build a ToolExecutor from settings. Storage defaults to the in-memory
    store, which also serves as the index provider.
    """
    llm = llm_client or LLMClient()
    if entry_store is None:
        entry_store = InMemoryEntryStore()
        index_provider = index_provider or entry_store
    if search_index is None:
        if not isinstance(entry_store, InMemoryEntryStore):
            raise ValueError("search_index is required with a custom entry_store")
        search_index = InMemorySearchIndex(entry_store)

    tz_name = settings.timezone
    executor = ToolExecutor(
        entry_store=entry_store,
        search_index=search_index,
        classification_agent=ClassificationAgent(llm, tz_name=tz_name),
        index_provider=index_provider,
        guardrail=ToolGuardrailService(llm) if settings.guardrail_enabled else None,
        intent_analysis=IntentAnalysisService(llm),
        action_extraction=ActionExtractionService(llm, tz_name=tz_name),
        entry_linker=entry_linker,
        capture_queue=capture_queue,
        digest_generator=digest_generator,
        duplicate_finder=duplicate_finder,
        tz_name=tz_name,
    )
    logger.info(
        "Tool executor ready (threshold=%.2f, guardrail=%s, queue=%s)",
        settings.confidence_threshold,
        settings.guardrail_enabled,
        capture_queue is not None,
    )
    return executor


def init_logging() -> None:
    setup_logging(settings.log_level, settings.logs_dir, settings.json_logs)
