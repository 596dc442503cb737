"""
Anthropic Claude API client used by every LLM-backed service in justdo.

Only non-streaming completion is needed here: classification, guardrail,
intent analysis and action extraction all ask for a single JSON object.
Timeouts are applied by the callers with asyncio.wait_for so that each
service owns its own budget and cancelling the wait cancels the request.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

import anthropic

from ..config import settings

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


class LLMClient:
    def __init__(self, api_key: str | None = None, client: anthropic.AsyncAnthropic | None = None) -> None:
        self._client = client or anthropic.AsyncAnthropic(
            api_key=api_key if api_key is not None else settings.anthropic_api_key
        )

    async def complete(
        self,
        messages: list[dict],
        *,
        system: str,
        model: str,
        max_tokens: int = 512,
        temperature: float = 0.0,
    ) -> str:
        """
        Non-streaming completion.
        Returns the text of the first content block, or "" when there is none.
        Transport errors (anthropic.APIError and subclasses) propagate.
        """
        response = await self._client.messages.create(
            model=model,
            max_tokens=max_tokens,
            temperature=temperature,
            system=system,
            messages=messages,
        )
        if not getattr(response, "content", None):
            return ""
        block = response.content[0]
        return getattr(block, "text", "") or ""

    async def ping(self) -> bool:
        """Lightweight availability check using the models list endpoint."""
        try:
            await self._client.models.list()
            return True
        except anthropic.APIError as exc:
            logger.warning("Anthropic ping failed: %s", exc)
            return False


def extract_json_object(raw: str) -> Any:
    """
    Parse a model reply as JSON, tolerating a surrounding ```json fence.
    Raises json.JSONDecodeError when the payload is not JSON.
    """
    text = raw.strip()
    match = _FENCE.match(text)
    if match:
        text = match.group(1)
    return json.loads(text)
