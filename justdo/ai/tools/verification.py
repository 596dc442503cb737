"""
Post-mutation verification and receipts.

The storage call returning without error is not taken as proof. Each check
re-derives the claimed effect from the returned entry (or, for delete, from
a fresh existence probe). Any failed hard check turns the tool result into a
failure; passed checks are recorded on an immutable MutationReceipt.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from ...constants import canonical_category
from ...exceptions import is_not_found
from ...models import BodyContentUpdate, Entry, MutationOperation, MutationReceipt, VerificationSummary

logger = logging.getLogger(__name__)


@dataclass
class VerificationOutcome:
    passed: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)

    @property
    def verified(self) -> bool:
        return not self.failed

    def error_message(self) -> str:
        return f"Mutation verification failed: {'; '.join(self.failed)}"


def _strip_md(path: str) -> str:
    return path[:-3] if path.endswith(".md") else path


def verify_update(
    entry: Entry,
    resolved_path: str,
    requested_fields: dict[str, Any],
    body_update: BodyContentUpdate | None = None,
) -> VerificationOutcome:
    outcome = VerificationOutcome()

    if _strip_md(entry.path) == _strip_md(resolved_path):
        outcome.passed.append(f"path matches {entry.path}")
    else:
        outcome.failed.append(f"expected path {resolved_path}, storage returned {entry.path}")

    if "status" in requested_fields:
        requested = requested_fields["status"]
        if entry.status == requested:
            outcome.passed.append(f"status is {requested}")
        else:
            outcome.failed.append(f"status is {entry.status!r}, expected {requested!r}")

    requested_due = requested_fields.get("due_date")
    if requested_due:
        if entry.due_date is None or entry.due_date == requested_due:
            outcome.passed.append(f"due_date is {entry.due_date or 'unset'}")
        else:
            outcome.failed.append(f"due_date is {entry.due_date!r}, expected {requested_due!r}")

    if body_update is not None and body_update.content.strip():
        if body_update.content.strip() in entry.body:
            outcome.passed.append("body contains supplied content")
        else:
            # Soft check
            outcome.notes.append("body content could not be matched verbatim")
            logger.info("Body content for %s not found verbatim after update", entry.path)

    return outcome


def verify_move(entry: Entry, target_category: str) -> VerificationOutcome:
    outcome = VerificationOutcome()
    target = canonical_category(target_category)

    if canonical_category(entry.category) == target:
        outcome.passed.append(f"category is {target}")
    else:
        outcome.failed.append(f"category is {entry.category!r}, expected {target!r}")

    if entry.path.startswith(f"{target}/"):
        outcome.passed.append(f"path is under {target}/")
    else:
        outcome.failed.append(f"path {entry.path} is not under {target}/")

    if entry.path.endswith(".md"):
        outcome.failed.append(f"path {entry.path} carries a .md suffix")

    return outcome


async def verify_delete(entry_store, path: str) -> VerificationOutcome:
    outcome = VerificationOutcome()
    try:
        await entry_store.read(path)
    except Exception as exc:
        if is_not_found(exc):
            outcome.passed.append(f"{path} no longer exists")
        else:
            # Inconclusive probe is accepted as best effort
            logger.warning("Existence probe for deleted %s failed: %s", path, exc)
            outcome.notes.append(f"existence probe inconclusive: {exc}")
            outcome.passed.append("existence probe inconclusive (accepted)")
        return outcome

    outcome.failed.append(f"{path} still exists after delete")
    return outcome


def build_receipt(
    operation: MutationOperation,
    requested_path: str,
    resolved_path: str,
    outcome: VerificationOutcome,
) -> MutationReceipt:
    return MutationReceipt(
        operation=operation,
        requested_path=requested_path,
        resolved_path=resolved_path,
        verification=VerificationSummary(verified=outcome.verified, checks=tuple(outcome.passed)),
    )
