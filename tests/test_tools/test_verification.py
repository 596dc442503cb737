"""Tests for justdo/ai/tools/verification.py."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import ValidationError

from justdo.ai.tools.verification import (
    build_receipt,
    verify_delete,
    verify_move,
    verify_update,
)
from justdo.exceptions import EntryNotFoundError
from justdo.models import BodyContentUpdate, Entry


def entry(path="task/call-mom", category="task", **fields):
    return Entry(path=path, category=category, name="Call mom", fields=fields, body="## Notes\nhello")


class TestVerifyUpdate:
    def test_status_match(self):
        outcome = verify_update(entry(status="done"), "task/call-mom", {"status": "done"})
        assert outcome.verified
        assert "status is done" in outcome.passed

    def test_status_mismatch_fails(self):
        outcome = verify_update(entry(status="done"), "task/call-mom", {"status": "pending"})
        assert not outcome.verified
        assert outcome.error_message() == (
            "Mutation verification failed: status is 'done', expected 'pending'"
        )

    def test_path_mismatch_fails(self):
        outcome = verify_update(entry(), "task/other", {})
        assert not outcome.verified

    def test_md_suffix_ignored_for_path(self):
        assert verify_update(entry(), "task/call-mom.md", {}).verified

    def test_due_date_unset_is_accepted(self):
        assert verify_update(entry(), "task/call-mom", {"due_date": "2026-10-20"}).verified

    def test_due_date_mismatch_fails(self):
        outcome = verify_update(entry(due_date="2026-10-21"), "task/call-mom", {"due_date": "2026-10-20"})
        assert not outcome.verified

    def test_body_mismatch_is_only_a_note(self):
        outcome = verify_update(
            entry(), "task/call-mom", {}, BodyContentUpdate(content="rewritten", mode="append")
        )
        assert outcome.verified
        assert outcome.notes

    def test_body_match_passes(self):
        outcome = verify_update(
            entry(), "task/call-mom", {}, BodyContentUpdate(content="hello", mode="append")
        )
        assert "body contains supplied content" in outcome.passed


class TestVerifyMove:
    def test_passes(self):
        assert verify_move(entry(path="projects/call-mom", category="projects"), "projects").verified

    def test_admin_target_is_task(self):
        assert verify_move(entry(), "admin").verified

    def test_wrong_category_fails(self):
        outcome = verify_move(entry(path="ideas/call-mom", category="ideas"), "projects")
        assert len(outcome.failed) == 2

    def test_md_suffix_fails(self):
        assert not verify_move(entry(path="task/call-mom.md"), "task").verified


class TestVerifyDelete:
    @pytest.mark.asyncio
    async def test_not_found_passes(self):
        store = MagicMock()
        store.read = AsyncMock(side_effect=EntryNotFoundError("task/call-mom"))
        assert (await verify_delete(store, "task/call-mom")).verified

    @pytest.mark.asyncio
    async def test_still_exists_fails(self):
        store = MagicMock()
        store.read = AsyncMock(return_value=entry())
        outcome = await verify_delete(store, "task/call-mom")
        assert outcome.failed == ["task/call-mom still exists after delete"]

    @pytest.mark.asyncio
    async def test_inconclusive_probe_is_accepted(self):
        store = MagicMock()
        store.read = AsyncMock(side_effect=RuntimeError("disk on fire"))
        outcome = await verify_delete(store, "task/call-mom")
        assert outcome.verified
        assert "disk on fire" in outcome.notes[0]


def test_receipt_is_immutable():
    outcome = verify_update(entry(status="done"), "task/call-mom", {"status": "done"})
    receipt = build_receipt("update", "task/call-mum", "task/call-mom", outcome)
    assert receipt.verification.verified is True
    assert receipt.resolved_path == "task/call-mom"
    assert "status is done" in receipt.verification.checks
    with pytest.raises(ValidationError):
        receipt.resolved_path = "task/other"
