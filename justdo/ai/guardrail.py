"""
Tool guardrail: asks a small model whether a planned mutating tool call
matches what the user explicitly asked for.

Any failure to reach a decision (empty message, timeout, transport error,
unparseable reply) raises ToolGuardrailError. The executor treats that as a
block, so the guardrail never fails open.
"""

from __future__ import annotations

import asyncio
import json
import logging

import anthropic

from ..config import settings
from ..exceptions import ToolGuardrailError
from ..models import GuardrailDecision
from .llm_client import extract_json_object
from .prompts import GUARDRAIL_SYSTEM_PROMPT

logger = logging.getLogger(__name__)


class ToolGuardrailService:
    def __init__(self, llm_client, *, model: str | None = None, timeout: float | None = None) -> None:
        self._llm = llm_client
        self._model = model or settings.model_guardrail
        self._timeout = timeout if timeout is not None else settings.guardrail_timeout

    async def validate_tool_call(
        self, tool_name: str, args: dict, user_message: str
    ) -> GuardrailDecision:
        if not user_message or not user_message.strip():
            raise ToolGuardrailError("Cannot run tool guardrail without a user message")

        prompt = "\n".join([
            f"User message: {user_message}",
            f"Planned tool: {tool_name}",
            f"Planned arguments: {json.dumps(args, default=str)}",
        ])
        try:
            raw = await asyncio.wait_for(
                self._llm.complete(
                    [{"role": "user", "content": prompt}],
                    system=GUARDRAIL_SYSTEM_PROMPT,
                    model=self._model,
                    max_tokens=256,
                    temperature=0.0,
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            raise ToolGuardrailError("Tool guardrail timed out") from None
        except anthropic.APIError as exc:
            raise ToolGuardrailError(f"Tool guardrail request failed: {exc}", exc) from exc

        decision = self._parse(raw)
        if not decision.allowed:
            logger.info("Guardrail blocked %s: %s", tool_name, decision.reason)
        return decision

    @staticmethod
    def _parse(raw: str) -> GuardrailDecision:
        try:
            payload = extract_json_object(raw or "")
        except json.JSONDecodeError as exc:
            raise ToolGuardrailError("Tool guardrail returned invalid JSON", exc) from exc
        if not isinstance(payload, dict):
            raise ToolGuardrailError("Tool guardrail returned invalid JSON")

        reason = payload.get("reason")
        reason = reason.strip() if isinstance(reason, str) else ""
        confidence = payload.get("confidence")
        if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
            confidence = 0.5
        return GuardrailDecision(
            # Only a literal true allows the call
            allowed=payload.get("allowed") is True,
            reason=reason or None,
            confidence=max(0.0, min(1.0, float(confidence))),
        )
