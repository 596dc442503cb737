"""
Text heuristics over raw user messages.

Pure functions only: tokenising, query-candidate mining for stale entry
references, title/note/person-name inference for updates, status and reopen
intent detection, and duration/priority hints for captured tasks. The
LLM-backed services are preferred when available and these are the
fallback.
"""

from __future__ import annotations

import re
from typing import Iterable

_TOKEN_SPLIT = re.compile(r"[^a-z0-9]+")

# Double and curly quotes only; single quotes collide with apostrophes
_QUOTED = re.compile(r"[\"“”]([^\"“”]+)[\"“”]")

_TARGET_PATTERNS = [
    re.compile(
        r"\b(?:update|rename|change)\s+(?:the\s+)?(?:entry\s+|task\s+|item\s+)?(?P<target>.+?)\s+(?:to|as)\b",
        re.IGNORECASE,
    ),
    re.compile(
        r"\b(?:delete|remove)\s+(?:the\s+)?(?:entry\s+|task\s+|item\s+)?(?P<target>[^.!?,;]+)",
        re.IGNORECASE,
    ),
    re.compile(
        r"\b(?:make|move)\s+(?:the\s+)?(?P<target>.+?)\s+(?:to|into|in)\s+(?:an?\s+|the\s+|my\s+)?"
        r"(?:people|person|projects?|ideas?|tasks?|admin)\b",
        re.IGNORECASE,
    ),
    re.compile(
        r"\bmake\s+(?:the\s+)?(?P<target>.+?)\s+(?:an?\s+)(?:person|project|idea|task)\b",
        re.IGNORECASE,
    ),
    re.compile(r"\breclassify\s+(?:the\s+)?(?P<target>.+?)\s+as\b", re.IGNORECASE),
]

_FILLER_WORDS = frozenset({
    "it", "this", "that", "them", "one", "entry", "task", "item", "note",
    "please", "pls", "now", "again", "too", "my", "the", "a", "an",
})

_TITLE_QUOTED = re.compile(
    r"(update|rename|change)(?:\s+the)?(?:\s+(?:entry|task|item))?(?:\s+(?:title|name))?\s+(?:to|as)\s+[\"“]([^\"”]+)[\"”]",
    re.IGNORECASE,
)
_TITLE_PLAIN = re.compile(
    r"(update|rename|change)(?:\s+the)?(?:\s+(?:entry|task|item))?(?:\s+(?:title|name))?\s+(?:to|as)\s+([^.]+)(?:\.|$)",
    re.IGNORECASE,
)
_NOTE_QUOTED = re.compile(
    r"(add|append|include)\s+(?:a\s+)?note(?:\s+that|\s+to)?\s+[\"“]([^\"”]+)[\"”]",
    re.IGNORECASE,
)
_NOTE_PLAIN = re.compile(
    r"(add|append|include)\s+(?:a\s+)?note(?:\s+that|\s+to)?\s+(.+)$",
    re.IGNORECASE,
)

_PERSON_AFTER_VERB = re.compile(
    r"\b(call|email|text|ping|meet|meeting with|meet with|talk to|chat with|follow up with|"
    r"follow up|schedule|remind|pay)\s+([a-z][a-z]+(?:\s+[a-z][a-z]+){0,3})",
    re.IGNORECASE,
)
_CAPITALISED = re.compile(r"^(?:[A-Z][a-z].*|[A-Z]{2,})$")
_NAME_STOPWORDS = frozenset({
    "the", "a", "an", "about", "regarding", "re", "with", "task", "project",
    "item", "note", "my", "his", "her", "their", "your", "our", "apology",
    "apologies", "sorry", "delay", "delays",
})

_STATUS_KEYWORDS = (
    "mark done", "done", "completed", "complete", "finished", "reopen",
    "pending", "active", "waiting", "blocked",
)

_REOPEN = re.compile(
    r"\b(?:re-?open|bring\s+(?:\w+\s+){0,3}?back|undo|un-?complete|"
    r"mark\s+(?:\w+\s+){0,5}?(?:as\s+)?(?:pending|active|not\s+done|incomplete|open))\b",
    re.IGNORECASE,
)

_MINUTES = re.compile(r"\b(\d{1,3})\s*-?\s*(?:min|mins|minute|minutes)\b", re.IGNORECASE)
_HOURS = re.compile(r"\b(\d+(?:\.\d+)?)\s*-?\s*(?:h|hr|hrs|hour|hours)\b", re.IGNORECASE)
_HALF_HOUR = re.compile(r"\bhalf\s+(?:an\s+)?hour\b", re.IGNORECASE)
_AN_HOUR = re.compile(r"\ban\s+hour\b", re.IGNORECASE)
_MIN_DURATION = 5

_PRIORITY_RULES = [
    (re.compile(r"\b(?:urgent(?:ly)?|asap|critical|immediately|top\s+priority)\b", re.IGNORECASE), 5),
    (re.compile(r"\b(?:high[-\s]priority|important)\b", re.IGNORECASE), 4),
    (re.compile(r"\blow[-\s]priority\b", re.IGNORECASE), 2),
]


# --------------------------------------------------------------------------- #
# Tokens                                                                       #
# --------------------------------------------------------------------------- #

def tokenize(text: str | None) -> set[str]:
    """Lower-case tokens split on non-alphanumeric runs, length > 1."""
    if not text:
        return set()
    return {token for token in _TOKEN_SPLIT.split(text.lower()) if len(token) > 1}


def path_tokens(path: str) -> set[str]:
    """Tokens of an entry path, ignoring a trailing .md."""
    return tokenize(path[:-3] if path.endswith(".md") else path)


# --------------------------------------------------------------------------- #
# Query candidates for stale references                                        #
# --------------------------------------------------------------------------- #

def extract_quoted_phrases(text: str) -> list[str]:
    return [match.strip() for match in _QUOTED.findall(text) if match.strip()]


def slug_query_from_path(path: str) -> str:
    """'task/call-mom.md' → 'call mom'."""
    slug = path.rsplit("/", 1)[-1]
    if slug.endswith(".md"):
        slug = slug[:-3]
    return " ".join(part for part in re.split(r"[-_]+", slug) if part)


def _clean_candidate(candidate: str) -> str:
    words = candidate.strip().strip("\"'“”").split()
    while words and words[0].lower() in _FILLER_WORDS:
        words.pop(0)
    while words and words[-1].lower() in _FILLER_WORDS:
        words.pop()
    return " ".join(words)


def extract_query_candidates(messages: Iterable[str], requested_path: str = "") -> list[str]:
    """
    Search queries that may identify the entry a user meant, most specific
    first: quoted phrases, then imperative targets ("delete X", "move X to
    ideas"), then the words of the requested slug.
    """
    candidates: list[str] = []
    for message in messages:
        candidates.extend(extract_quoted_phrases(message))
        for pattern in _TARGET_PATTERNS:
            for match in pattern.finditer(message):
                candidates.append(match.group("target"))
    if requested_path:
        candidates.append(slug_query_from_path(requested_path))

    seen: set[str] = set()
    cleaned: list[str] = []
    for candidate in candidates:
        value = _clean_candidate(candidate)
        key = value.lower()
        if not value or key in seen or not tokenize(value):
            continue
        seen.add(key)
        cleaned.append(value)
    return cleaned


# --------------------------------------------------------------------------- #
# Update intent fallbacks                                                      #
# --------------------------------------------------------------------------- #

def infer_title_and_note(message: str | None) -> tuple[str | None, str | None]:
    """Title from "rename ... to X", note from "add a note ...", if present."""
    if not message:
        return None, None

    title = None
    note = None
    match = _TITLE_QUOTED.search(message) or _TITLE_PLAIN.search(message)
    if match and match.group(2):
        title = match.group(2).strip().rstrip()
    match = _NOTE_QUOTED.search(message) or _NOTE_PLAIN.search(message)
    if match and match.group(2):
        note = match.group(2).strip().rstrip()
        if note.endswith("."):
            note = note[:-1]

    if title and note and title == note:
        note = None
    return title or None, note or None


def extract_person_names(text: str) -> list[str]:
    """Capitalised names following contact verbs ("call Sarah Jones")."""
    results: list[str] = []
    for match in _PERSON_AFTER_VERB.finditer(text):
        words = [w for w in match.group(2).split() if w.lower() not in _NAME_STOPWORDS]
        if not words:
            continue
        if not any(_CAPITALISED.match(word) for word in words):
            continue
        name = " ".join(word[:1].upper() + word[1:].lower() for word in words[:3])
        if len(name) > 1:
            results.append(name)
    return results


def has_status_request(message: str | None) -> bool:
    if not message:
        return False
    lowered = message.lower()
    return any(keyword in lowered for keyword in _STATUS_KEYWORDS)


def suggests_reopen(message: str | None) -> bool:
    return bool(message and _REOPEN.search(message))


# --------------------------------------------------------------------------- #
# Capture hints                                                                #
# --------------------------------------------------------------------------- #

def infer_duration_minutes(text: str | None) -> int | None:
    """'30 minute task' → 30, '2 hours' → 120, 'half an hour' → 30."""
    if not text:
        return None
    minutes: int | None = None
    match = _MINUTES.search(text)
    if match:
        minutes = int(match.group(1))
    else:
        match = _HOURS.search(text)
        if match:
            minutes = int(round(float(match.group(1)) * 60))
        elif _HALF_HOUR.search(text):
            minutes = 30
        elif _AN_HOUR.search(text):
            minutes = 60
    if minutes is None or minutes < _MIN_DURATION:
        return None
    return minutes


def infer_priority(text: str | None) -> int | None:
    """'urgent' → 5, 'high priority' → 4, 'low priority' → 2."""
    if not text:
        return None
    for pattern, priority in _PRIORITY_RULES:
        if pattern.search(text):
            return priority
    return None
