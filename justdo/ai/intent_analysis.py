"""
Update-intent analysis: reads the user's latest message about an existing
entry and reports the title, note, people and status change they asked for.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import anthropic

from ..config import settings
from ..exceptions import IntentAnalysisError
from ..models import UpdateIntentAnalysis
from .llm_client import extract_json_object
from .prompts import INTENT_SYSTEM_PROMPT

logger = logging.getLogger(__name__)


def _clean_str(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


class IntentAnalysisService:
    def __init__(self, llm_client, *, model: str | None = None, timeout: float | None = None) -> None:
        self._llm = llm_client
        self._model = model or settings.model_intent_analysis
        self._timeout = timeout if timeout is not None else settings.intent_analysis_timeout

    async def analyze_update_intent(
        self,
        message: str,
        *,
        path: str | None = None,
        current_title: str | None = None,
        updates: dict | None = None,
        has_body_update: bool = False,
    ) -> UpdateIntentAnalysis:
        """
        Raises IntentAnalysisError on an empty message, timeout, transport
        failure or a reply that is not a JSON object.
        """
        if not message or not message.strip():
            raise IntentAnalysisError("Cannot analyze empty update message")

        prompt = "\n".join([
            f"Message: {message}",
            f"Path: {path or 'unknown'}",
            f"Current title: {current_title or 'unknown'}",
            f"Tool updates payload: {json.dumps(updates or {}, default=str)}",
            f"Tool body_update already present: {bool(has_body_update)}",
        ])
        try:
            raw = await asyncio.wait_for(
                self._llm.complete(
                    [{"role": "user", "content": prompt}],
                    system=INTENT_SYSTEM_PROMPT,
                    model=self._model,
                    max_tokens=300,
                    temperature=0.1,
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            raise IntentAnalysisError("Intent analysis timed out") from None
        except anthropic.APIError as exc:
            raise IntentAnalysisError(f"Intent analysis request failed: {exc}", exc) from exc

        try:
            payload = extract_json_object(raw or "")
        except json.JSONDecodeError as exc:
            raise IntentAnalysisError("Intent analysis returned invalid JSON", exc) from exc
        if not isinstance(payload, dict):
            raise IntentAnalysisError("Intent analysis returned invalid JSON")

        people = payload.get("related_people")
        related_people = (
            [p.strip() for p in people if isinstance(p, str) and p.strip()]
            if isinstance(people, list) else []
        )
        confidence = payload.get("confidence")
        if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
            confidence = 0.5

        requested_status = _clean_str(payload.get("requested_status"))
        if requested_status == "null":
            requested_status = None

        return UpdateIntentAnalysis(
            title=_clean_str(payload.get("title")),
            note=_clean_str(payload.get("note")),
            related_people=related_people,
            status_change_requested=payload.get("status_change_requested") is True,
            requested_status=requested_status,
            confidence=float(confidence),
        )
