"""
Shared constants for justdo.

Centralises category, status and tool names that are used across multiple
modules to avoid duplication and ensure consistency.
"""

# ── Categories ──────────────────────────────────────────────────────────────────
CLASSIFIED_CATEGORIES = ("people", "projects", "ideas", "task")
LEGACY_TASK_CATEGORY = "admin"
TASK_CATEGORY = "task"
INBOX_CATEGORY = "inbox"

# Accepted on the tool surface (older prompts still say "admin")
TOOL_CATEGORIES = ["people", "projects", "ideas", "task", "admin", "inbox"]
MOVE_TARGET_CATEGORIES = ["people", "projects", "ideas", "task", "admin"]

# ── Statuses ────────────────────────────────────────────────────────────────────
PROJECT_STATUSES = ("active", "waiting", "blocked", "someday")
ACTIVE_LIKE_STATUSES = frozenset({"pending", "active", "waiting", "blocked"})
DONE_STATUS = "done"

# ── Channels ────────────────────────────────────────────────────────────────────
CHANNELS = ("chat", "email", "api")

# ── Tools ───────────────────────────────────────────────────────────────────────
MUTATING_TOOLS = frozenset({
    "classify_and_capture",
    "update_entry",
    "move_entry",
    "delete_entry",
    "merge_entries",
})

BODY_CONTENT_MODES = ["append", "replace", "section"]

# ── Resolution scoring ──────────────────────────────────────────────────────────
NAME_QUERY_WEIGHT = 3
EXACT_MATCH_BONUS = 3
MAX_DISAMBIGUATION_OPTIONS = 3


def canonical_category(category: str) -> str:
    """Map the legacy task category onto the canonical one."""
    if category == LEGACY_TASK_CATEGORY:
        return TASK_CATEGORY
    return category


def is_task_category(category: str | None) -> bool:
    return category in (TASK_CATEGORY, LEGACY_TASK_CATEGORY)


def category_of_path(path: str) -> str:
    """Category prefix of an entry path (text before the first '/')."""
    return path.split("/", 1)[0] if "/" in path else ""
