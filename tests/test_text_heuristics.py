"""Tests for justdo/utils/text_heuristics.py."""

import pytest

from justdo.utils.text_heuristics import (
    extract_person_names,
    extract_query_candidates,
    has_status_request,
    infer_duration_minutes,
    infer_priority,
    infer_title_and_note,
    path_tokens,
    slug_query_from_path,
    suggests_reopen,
    tokenize,
)


def test_tokenize_drops_single_characters():
    assert tokenize("Call Mom re: Q4-plan, a b!") == {"call", "mom", "re", "q4", "plan"}
    assert tokenize(None) == set()


def test_path_tokens_ignore_extension():
    assert path_tokens("task/call-mom.md") == {"task", "call", "mom"}


def test_slug_query_from_path():
    assert slug_query_from_path("task/call-mom.md") == "call mom"
    assert slug_query_from_path("dentist_appt") == "dentist appt"


class TestQueryCandidates:
    def test_quoted_phrase_comes_first(self):
        candidates = extract_query_candidates(
            ['rename "Dentist appointment" to Dentist visit'], "task/dentist-appt"
        )
        assert candidates[0] == "Dentist appointment"
        assert "dentist appt" in candidates

    def test_delete_target_strips_filler(self):
        candidates = extract_query_candidates(["please delete the grocery list entry"])
        assert candidates == ["grocery list"]

    def test_move_target(self):
        candidates = extract_query_candidates(["move the marathon training to projects"])
        assert "marathon training" in candidates

    def test_duplicates_removed_case_insensitively(self):
        candidates = extract_query_candidates(['"Call Mom"', "delete call mom"])
        assert candidates == ["Call Mom"]

    def test_nothing_to_mine(self):
        assert extract_query_candidates(["thanks!"]) == []


class TestTitleAndNote:
    def test_quoted_title(self):
        assert infer_title_and_note('rename the task to "Call the bank"') == ("Call the bank", None)

    def test_plain_note(self):
        title, note = infer_title_and_note("add a note that the branch closes at 4.")
        assert title is None
        assert note == "the branch closes at 4"

    def test_empty(self):
        assert infer_title_and_note(None) == (None, None)
        assert infer_title_and_note("mark it done") == (None, None)


def test_person_names_need_capitals():
    assert extract_person_names("Call Sarah Jones about the invoice") == ["Sarah Jones"]
    assert extract_person_names("call the bank about fees") == []


@pytest.mark.parametrize(
    "message, expected",
    [("mark it done", True), ("set it back to pending", True), ("rename it", False), (None, False)],
)
def test_has_status_request(message, expected):
    assert has_status_request(message) is expected


@pytest.mark.parametrize(
    "message, expected",
    [
        ("please reopen the dentist task", True),
        ("re-open it", True),
        ("mark the dentist task as pending", True),
        ("bring it back", True),
        ("finish the report", False),
    ],
)
def test_suggests_reopen(message, expected):
    assert suggests_reopen(message) is expected


@pytest.mark.parametrize(
    "text, expected",
    [
        ("30 minute task", 30),
        ("about 2 hours", 120),
        ("half an hour", 30),
        ("an hour tops", 60),
        ("3 min", None),
        ("no duration", None),
    ],
)
def test_infer_duration_minutes(text, expected):
    assert infer_duration_minutes(text) == expected


@pytest.mark.parametrize(
    "text, expected",
    [
        ("urgent: pay rent", 5),
        ("this is important", 4),
        ("low priority cleanup", 2),
        ("whenever", None),
    ],
)
def test_infer_priority(text, expected):
    assert infer_priority(text) == expected
