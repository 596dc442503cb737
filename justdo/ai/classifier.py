"""
Classification agent.
Turns a raw thought plus conversational context into a typed
ClassificationResult (category, confidence, name, slug, fields, body).

One LLM call per thought, bounded by a timeout. The reply is parsed as JSON
and normalised: confidence clamped, slug cleaned, camelCase/snake_case field
keys reconciled, non-string array items dropped, out-of-range enums defaulted.
"""

from __future__ import annotations

import asyncio
import json
import logging
import math
from datetime import datetime
from typing import Any

import anthropic
from pydantic import ValidationError

from ..config import settings
from ..constants import LEGACY_TASK_CATEGORY, PROJECT_STATUSES, canonical_category
from ..exceptions import (
    ClassificationAPIError,
    ClassificationError,
    ClassificationTimeoutError,
    InvalidClassificationResponseError,
)
from ..models import (
    ClassificationInput,
    ClassificationResult,
    IdeasFields,
    PeopleFields,
    ProjectsFields,
    TaskFields,
)
from ..utils.dates import current_date_string
from ..utils.slug import normalize_slug, slugify
from .llm_client import extract_json_object
from .prompts import (
    BODY_CONTENT_GUIDELINES,
    CLASSIFICATION_INSTRUCTIONS,
    CLASSIFICATION_SCHEMA,
    CLASSIFICATION_SYSTEM_PROMPT,
)

logger = logging.getLogger(__name__)

_ACCEPTED_CATEGORIES = ("people", "projects", "ideas", "task", LEGACY_TASK_CATEGORY)
_MIN_DURATION_MINUTES = 5

# Message markers of provider-side failures raised by non-Anthropic transports
_TRANSIENT_MARKERS = ("rate limit", "ratelimit", "throttl", "timeout", "timed out", "provider", "overloaded")


# --------------------------------------------------------------------------- #
# Normalisation helpers                                                        #
# --------------------------------------------------------------------------- #

def normalize_confidence(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


def _pick(fields: dict, camel: str, snake: str) -> Any:
    """camelCase wins; snake_case is the fallback when camelCase is absent."""
    value = fields.get(camel)
    if value is None:
        value = fields.get(snake)
    return value


def normalize_string_array(value: Any) -> list[str]:
    if isinstance(value, list):
        return [item for item in value if isinstance(item, str)]
    return []


def _optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            number = float(value)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def normalize_people_fields(fields: dict) -> PeopleFields:
    return PeopleFields(
        context=str(fields.get("context") or ""),
        follow_ups=normalize_string_array(_pick(fields, "followUps", "follow_ups")),
        related_projects=normalize_string_array(_pick(fields, "relatedProjects", "related_projects")),
    )


def normalize_projects_fields(fields: dict) -> ProjectsFields:
    status = fields.get("status")
    return ProjectsFields(
        status=status if status in PROJECT_STATUSES else "active",
        next_action=str(_pick(fields, "nextAction", "next_action") or ""),
        related_people=normalize_string_array(_pick(fields, "relatedPeople", "related_people")),
        due_date=_optional_str(_pick(fields, "dueDate", "due_date")),
    )


def normalize_ideas_fields(fields: dict) -> IdeasFields:
    return IdeasFields(
        one_liner=str(_pick(fields, "oneLiner", "one_liner") or ""),
        related_projects=normalize_string_array(_pick(fields, "relatedProjects", "related_projects")),
    )


def normalize_task_fields(fields: dict) -> TaskFields:
    duration = _as_number(_pick(fields, "durationMinutes", "duration_minutes"))
    priority = _as_number(fields.get("priority"))
    return TaskFields(
        due_date=_optional_str(_pick(fields, "dueDate", "due_date")),
        due_at=_optional_str(_pick(fields, "dueAt", "due_at")),
        duration_minutes=(
            math.floor(duration) if duration is not None and duration >= _MIN_DURATION_MINUTES else None
        ),
        fixed_at=_optional_str(_pick(fields, "fixedAt", "fixed_at")),
        priority=math.floor(priority) if priority is not None and 1 <= priority <= 5 else None,
        related_people=normalize_string_array(_pick(fields, "relatedPeople", "related_people")),
    )


def _looks_transient(exc: BaseException) -> bool:
    message = str(exc).lower()
    return any(marker in message for marker in _TRANSIENT_MARKERS)


_FIELD_NORMALISERS = {
    "people": normalize_people_fields,
    "projects": normalize_projects_fields,
    "ideas": normalize_ideas_fields,
    "task": normalize_task_fields,
}


def _is_complete(payload: Any) -> bool:
    if not isinstance(payload, dict):
        return False
    if payload.get("category") not in _ACCEPTED_CATEGORIES:
        return False
    confidence = payload.get("confidence")
    if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
        return False
    for key in ("name", "slug"):
        value = payload.get(key)
        if not isinstance(value, str) or not value:
            return False
    return isinstance(payload.get("fields"), dict)


# --------------------------------------------------------------------------- #
# Agent                                                                        #
# --------------------------------------------------------------------------- #

class ClassificationAgent:
    """Classify free text into a category with structured fields."""

    def __init__(
        self,
        llm_client,
        *,
        model: str | None = None,
        timeout: float | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
        tz_name: str | None = None,
    ) -> None:
        # llm_client needs only `await complete(messages, system=, model=, ...)`
        self._llm = llm_client
        self._model = model or settings.model_classification
        self._timeout = timeout if timeout is not None else settings.classification_timeout
        self._max_tokens = max_tokens or settings.classification_max_tokens
        self._temperature = (
            temperature if temperature is not None else settings.classification_temperature
        )
        self._tz_name = tz_name

    async def classify(
        self, inp: ClassificationInput, now: datetime | None = None
    ) -> ClassificationResult:
        """
        Classify a thought.

        Raises:
            ClassificationTimeoutError: the LLM did not answer within the timeout
            ClassificationAPIError: transport failure, provider-side error or empty reply
            InvalidClassificationResponseError: reply is not JSON or misses required keys
            ClassificationError: anything else
        """
        prompt = self.build_prompt(inp, now=now)
        system = inp.context.system_prompt or CLASSIFICATION_SYSTEM_PROMPT
        try:
            raw = await self._call_llm(prompt, system)
            result = self.parse_response(raw)
        except ClassificationError:
            raise
        except anthropic.APIError as exc:
            raise ClassificationAPIError(f"Anthropic API error: {exc}", exc) from exc
        except ConnectionError as exc:
            raise ClassificationAPIError(f"Connection error: {exc}", exc) from exc
        except Exception as exc:
            if _looks_transient(exc):
                raise ClassificationAPIError(f"Classification failed: {exc}", exc) from exc
            raise ClassificationError(f"Classification failed: {exc}", exc) from exc

        logger.info(
            "Classified as %s (%.2f): %s", result.category, result.confidence, result.name
        )
        return result

    def build_prompt(self, inp: ClassificationInput, now: datetime | None = None) -> str:
        tz_name = self._tz_name or settings.timezone
        today = current_date_string(tz_name, now)
        context = inp.context

        parts = [
            CLASSIFICATION_INSTRUCTIONS.format(today=today),
            f"Schema:\n{CLASSIFICATION_SCHEMA}",
            BODY_CONTENT_GUIDELINES,
            f"Current index for context:\n{context.index_content or '(No existing entries)'}",
        ]
        if context.summaries:
            parts.append(
                "Conversation summaries:\n"
                + "\n".join(f"- {s.summary}" for s in context.summaries)
            )
        if context.recent_messages:
            parts.append(
                "Recent conversation:\n"
                + "\n".join(
                    f"{'User' if m.role == 'user' else 'Assistant'}: {m.content}"
                    for m in context.recent_messages
                )
            )
        parts.append(f"User input: {inp.text}")
        if inp.hints:
            parts.append(f"Hints: {inp.hints}")
        return "\n\n".join(parts)

    async def _call_llm(self, prompt: str, system: str) -> str:
        try:
            raw = await asyncio.wait_for(
                self._llm.complete(
                    [{"role": "user", "content": prompt}],
                    system=system,
                    model=self._model,
                    max_tokens=self._max_tokens,
                    temperature=self._temperature,
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Classification timed out after %.1fs", self._timeout)
            raise ClassificationTimeoutError() from None
        if not raw or not raw.strip():
            raise ClassificationAPIError("LLM returned an empty response")
        return raw

    def parse_response(self, raw: str) -> ClassificationResult:
        try:
            payload = extract_json_object(raw)
        except json.JSONDecodeError:
            raise InvalidClassificationResponseError(
                "Failed to parse classification response as JSON", raw
            ) from None

        if not _is_complete(payload):
            raise InvalidClassificationResponseError(
                "Classification response missing required fields", raw
            )

        category = canonical_category(payload["category"])
        name = payload["name"]
        body = payload.get("body_content")
        try:
            return ClassificationResult(
                category=category,
                confidence=normalize_confidence(payload["confidence"]),
                name=name,
                slug=normalize_slug(payload["slug"]) or slugify(name),
                fields=_FIELD_NORMALISERS[category](payload["fields"]),
                related_entries=normalize_string_array(payload.get("related_entries")),
                reasoning=str(payload.get("reasoning") or ""),
                body_content=body.strip() if isinstance(body, str) else "",
            )
        except ValidationError as exc:
            raise InvalidClassificationResponseError(
                f"Classification response failed validation: {exc}", raw
            ) from exc
