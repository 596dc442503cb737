"""
Action extraction: pulls concrete next steps out of captured text.

Best effort. Any failure is logged and yields an empty result; capture never
fails because of this service.
"""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime

import anthropic

from ..config import settings
from ..constants import LEGACY_TASK_CATEGORY
from ..exceptions import ActionExtractionError
from ..models import ActionExtractionResult, ActionItem
from ..utils.dates import current_date_string
from .llm_client import extract_json_object
from .prompts import ACTION_SYSTEM_PROMPT

logger = logging.getLogger(__name__)


def parse_actions(raw: str) -> ActionExtractionResult:
    """Raises ActionExtractionError when the reply is not a JSON object."""
    try:
        payload = extract_json_object(raw or "")
    except json.JSONDecodeError as exc:
        raise ActionExtractionError("Invalid action extraction response", exc) from exc
    if not isinstance(payload, dict):
        raise ActionExtractionError("Invalid action extraction response")

    items = payload.get("actions")
    actions: list[ActionItem] = []
    for item in items if isinstance(items, list) else []:
        if not isinstance(item, dict):
            continue
        text = item.get("text")
        if not isinstance(text, str) or not text.strip():
            continue
        confidence = item.get("confidence")
        if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
            confidence = 0.5
        due = item.get("due_date")
        actions.append(ActionItem(
            text=text.strip(),
            type="task" if item.get("type") in ("task", LEGACY_TASK_CATEGORY) else "project",
            due_date=due if isinstance(due, str) and due else None,
            confidence=float(confidence),
        ))

    primary = payload.get("primary_action")
    return ActionExtractionResult(
        primary_action=primary.strip() if isinstance(primary, str) and primary.strip() else None,
        actions=actions,
    )


class ActionExtractionService:
    def __init__(
        self,
        llm_client,
        *,
        model: str | None = None,
        timeout: float | None = None,
        tz_name: str | None = None,
    ) -> None:
        self._llm = llm_client
        self._model = model or settings.model_action_extraction
        self._timeout = timeout if timeout is not None else settings.action_extraction_timeout
        self._tz_name = tz_name

    async def extract_actions(
        self, text: str, category: str | None = None, now: datetime | None = None
    ) -> ActionExtractionResult:
        if not text or not text.strip():
            return ActionExtractionResult()

        today = current_date_string(self._tz_name or settings.timezone, now)
        system = (
            f"{ACTION_SYSTEM_PROMPT}\n"
            f"Today's date is {today}. Convert relative due dates to YYYY-MM-DD."
        )
        try:
            raw = await asyncio.wait_for(
                self._llm.complete(
                    [{"role": "user", "content": f"Category: {category or 'unknown'}\nText: {text}"}],
                    system=system,
                    model=self._model,
                    max_tokens=400,
                    temperature=0.2,
                ),
                timeout=self._timeout,
            )
            return parse_actions(raw)
        except asyncio.TimeoutError:
            logger.warning("Action extraction timed out after %.1fs", self._timeout)
        except (anthropic.APIError, ActionExtractionError) as exc:
            logger.warning("Action extraction failed: %s", exc)
        return ActionExtractionResult()
