"""
Entry construction for classify_and_capture: classification fields to
storage fields, task hints from free text, and action-extraction enrichment.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from ...models import (
    ActionExtractionResult,
    Channel,
    ClassificationResult,
    IdeasFields,
    PeopleFields,
    ProjectsFields,
    TaskFields,
)
from ...utils.dates import normalize_due_date
from ...utils.text_heuristics import infer_duration_minutes, infer_priority


def build_entry_fields(
    result: ClassificationResult,
    channel: Channel,
    source_text: str,
    *,
    now: datetime | None = None,
    tz_name: str | None = None,
) -> dict[str, Any]:
    """Storage fields (snake_case) for a classified entry. None values are dropped."""
    data: dict[str, Any] = {
        "name": result.name,
        "confidence": result.confidence,
        "tags": [],
        "source_channel": channel,
    }

    match result.fields:
        case PeopleFields() as f:
            data.update(
                context=f.context,
                follow_ups=f.follow_ups,
                related_projects=f.related_projects,
            )
        case ProjectsFields() as f:
            data.update(
                status=f.status,
                next_action=f.next_action,
                related_people=f.related_people,
                due_date=normalize_due_date(f.due_date, source_text, now=now, tz_name=tz_name),
            )
        case IdeasFields() as f:
            data.update(one_liner=f.one_liner, related_projects=f.related_projects)
        case TaskFields() as f:
            data.update(
                status=f.status,
                due_date=normalize_due_date(f.due_date, source_text, now=now, tz_name=tz_name),
                due_at=f.due_at,
                duration_minutes=f.duration_minutes or infer_duration_minutes(source_text),
                fixed_at=f.fixed_at,
                priority=f.priority or infer_priority(source_text),
                related_people=f.related_people,
            )

    return {key: value for key, value in data.items() if value is not None}


def apply_actions(
    category: str,
    fields: dict[str, Any],
    body: str,
    actions: ActionExtractionResult,
) -> tuple[dict[str, Any], str]:
    """Add an '## Actions' section and fill next_action / name from the primary action."""
    if not actions.actions:
        return fields, body

    fields = dict(fields)
    if category == "projects" and not fields.get("next_action"):
        fields["next_action"] = actions.primary_action or actions.actions[0].text
    if category == "task" and not fields.get("name") and actions.primary_action:
        fields["name"] = actions.primary_action

    lines = [
        f"- {action.text}" + (f" (due {action.due_date})" if action.due_date else "")
        for action in actions.actions
    ]
    section = "## Actions\n\n" + "\n".join(lines)
    body = f"{body.strip()}\n\n{section}" if body and body.strip() else section
    return fields, body


def inbox_fields(result: ClassificationResult, text: str, channel: Channel) -> dict[str, Any]:
    return {
        "original_text": text,
        "suggested_category": result.category,
        "suggested_name": result.name,
        "confidence": result.confidence,
        "source_channel": channel,
    }
