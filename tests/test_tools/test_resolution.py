"""Tests for justdo/ai/tools/resolution.py: backed by the in-memory store."""

import pytest

from justdo.ai.tools.resolution import ResolvedTarget, TargetResolver, pick_winner, score_match
from justdo.exceptions import DisambiguationError


@pytest.fixture
def resolver(store, search_index):
    return TargetResolver(search_index=search_index, entry_store=store, message_window=3, search_limit=5)


def test_score_match():
    score = score_match(
        "Call the bank", "task/call-the-bank", "call the bank", "task/call-bank",
        {"rename", "call", "the", "bank"},
    )
    # 3*3 name/query + 3 path overlap + 3 message overlap + 3 exact match
    assert score == 9 + 3 + 3 + 3


def test_pick_winner_ignores_zero_scores():
    assert pick_winner({"a": ResolvedTarget("a", "A", 0)}, "x") is None


def test_pick_winner_tie_raises():
    scored = {
        "task/a": ResolvedTarget("task/a", "A", 4),
        "task/b": ResolvedTarget("task/b", "B", 4),
        "task/c": ResolvedTarget("task/c", "C", 1),
    }
    with pytest.raises(DisambiguationError) as exc_info:
        pick_winner(scored, "task/x")
    assert exc_info.value.options == [("task/a", "A"), ("task/b", "B")]
    assert "'A' (task/a), 'B' (task/b)" in str(exc_info.value)


@pytest.mark.asyncio
async def test_resolves_from_quoted_name(store, resolver, chat_context):
    await store.create("task", {"name": "Dentist appointment"}, "api")
    await store.create("task", {"name": "Grocery run"}, "api")

    target = await resolver.resolve(
        "task/dentist-appt", chat_context('update "Dentist appointment" to tomorrow')
    )
    assert target.path == "task/dentist-appointment"
    assert target.warning == (
        "Requested path was not found. Used matching entry 'Dentist appointment' "
        "(task/dentist-appointment)."
    )


@pytest.mark.asyncio
async def test_equal_matches_raise_instead_of_guessing(store, resolver, chat_context):
    await store.create("task", {"name": "Pay rent"}, "api")
    await store.create("task", {"name": "Pay rent"}, "api")

    with pytest.raises(DisambiguationError) as exc_info:
        await resolver.resolve("task/rent-payment", chat_context("delete pay rent"))
    paths = [path for path, _ in exc_info.value.options]
    assert paths == ["task/pay-rent", "task/pay-rent-2"]


@pytest.mark.asyncio
async def test_excluded_category_is_skipped(store, resolver, chat_context):
    await store.create("ideas", {"name": "Marathon training"}, "api")
    await store.create("projects", {"name": "Marathon training"}, "api")

    target = await resolver.resolve(
        "ideas/marathon-plan",
        chat_context("move marathon training to projects"),
        exclude_category="projects",
    )
    assert target.path == "ideas/marathon-training"


@pytest.mark.asyncio
async def test_nothing_matches(store, resolver, chat_context):
    await store.create("task", {"name": "Grocery run"}, "api")
    assert await resolver.resolve("task/zebra-feeding", chat_context("hello")) is None


@pytest.mark.asyncio
async def test_completed_task_resolution_only_considers_done_tasks(store, resolver, chat_context):
    done = await store.create("task", {"name": "Renew passport", "status": "done"}, "api")
    await store.create("task", {"name": "Renew passport"}, "api")
    await store.create("task", {"name": "Book flights", "status": "done"}, "api")

    target = await resolver.resolve_completed_task(
        "task/passport-renewal", chat_context("reopen the renew passport task")
    )
    assert target.path == done.path


@pytest.mark.asyncio
async def test_completed_task_tie(store, resolver, chat_context):
    await store.create("task", {"name": "Renew passport", "status": "done"}, "api")
    await store.create("task", {"name": "Renew passport", "status": "done"}, "api")

    with pytest.raises(DisambiguationError):
        await resolver.resolve_completed_task(
            "task/passport-renewal", chat_context("reopen the renew passport task")
        )
