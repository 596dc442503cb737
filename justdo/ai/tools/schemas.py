"""
Tool schemas for native Anthropic tool use (function calling).

Tools available:
  Capture
    classify_and_capture  → classify a thought and file it (or park it in inbox)

  Read
    list_entries          → list entries, optionally by category/status
    get_entry             → full entry by path
    search_entries        → keyword/semantic search
    find_duplicates       → likely duplicates of a name/text
    generate_digest       → daily digest or weekly review

  Mutate
    update_entry          → change fields and/or body of an entry
    move_entry            → reclassify an entry into another category
    delete_entry          → remove an entry
    merge_entries         → fold source entries into a target entry
"""

from __future__ import annotations

from ...constants import BODY_CONTENT_MODES, MOVE_TARGET_CATEGORIES, TOOL_CATEGORIES

TOOL_SCHEMAS: list[dict] = [
    # ------------------------------------------------------------------ #
    # Capture                                                              #
    # ------------------------------------------------------------------ #
    {
        "name": "classify_and_capture",
        "description": (
            "Classify a thought and create an entry in the knowledge base. "
            "Use when the user shares new information, facts, ideas or tasks to remember. "
            "The category (people, projects, ideas or task) is chosen automatically."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "text": {
                    "type": "string",
                    "description": "The thought or information to capture.",
                },
                "hints": {
                    "type": "string",
                    "description": "Optional category hint such as [project] or [person:name].",
                },
            },
            "required": ["text"],
        },
    },

    # ------------------------------------------------------------------ #
    # Read                                                                 #
    # ------------------------------------------------------------------ #
    {
        "name": "list_entries",
        "description": (
            "List entries with optional filters. "
            "Use when the user asks to see or list their people, projects, ideas or tasks."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "category": {
                    "type": "string",
                    "enum": TOOL_CATEGORIES,
                    "description": "Filter by category.",
                },
                "status": {
                    "type": "string",
                    "description": "Filter by status (e.g. active, pending, done).",
                },
                "limit": {
                    "type": "number",
                    "description": "Maximum number of entries to return (default 10).",
                },
            },
            "required": [],
        },
    },
    {
        "name": "get_entry",
        "description": (
            "Get the full details of one entry. "
            "Use when the user asks about a specific person, project, idea or task."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": "Entry path, e.g. projects/clientco-integration.",
                },
            },
            "required": ["path"],
        },
    },
    {
        "name": "generate_digest",
        "description": (
            "Generate a daily digest or weekly review. "
            "Use when the user asks for their digest, summary or review of recent activity."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "type": {
                    "type": "string",
                    "enum": ["daily", "weekly"],
                    "description": "Which digest to generate.",
                },
            },
            "required": ["type"],
        },
    },

    # ------------------------------------------------------------------ #
    # Mutate                                                               #
    # ------------------------------------------------------------------ #
    {
        "name": "update_entry",
        "description": (
            "Update an existing entry. Use 'updates' for metadata such as status, due_date "
            "or next_action, and 'body_content' only to add notes or log lines. "
            "To mark a task done use updates: {status: \"done\"}. "
            "To add a note use body_content with mode \"section\"."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": "Entry path to update.",
                },
                "updates": {
                    "type": "object",
                    "description": (
                        "Metadata fields to update. Status for tasks/projects: pending, done, "
                        "active, waiting, blocked. Also next_action, due_date, context, tags."
                    ),
                    "additionalProperties": True,
                },
                "body_content": {
                    "type": "object",
                    "description": "Notes or log lines for the body (not for status changes).",
                    "properties": {
                        "content": {
                            "type": "string",
                            "description": "Content to add or replace.",
                        },
                        "mode": {
                            "type": "string",
                            "enum": BODY_CONTENT_MODES,
                            "description": "How to apply the content.",
                        },
                        "section": {
                            "type": "string",
                            "description": "Section name for section mode (e.g. Notes, Log).",
                        },
                    },
                    "required": ["content", "mode"],
                },
            },
            "required": ["path"],
        },
    },
    {
        "name": "move_entry",
        "description": (
            "Move an entry to a different category. Use when the user reclassifies an entry "
            "(\"actually that should be a project\", \"move this to ideas\")."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": "Current entry path.",
                },
                "targetCategory": {
                    "type": "string",
                    "enum": MOVE_TARGET_CATEGORIES,
                    "description": "Category to move the entry to.",
                },
            },
            "required": ["path", "targetCategory"],
        },
    },
    {
        "name": "search_entries",
        "description": (
            "Search entries by keyword or meaning. Use for questions like "
            "\"do I have anything about X?\"."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "Search query.",
                },
                "category": {
                    "type": "string",
                    "enum": TOOL_CATEGORIES,
                    "description": "Optional category to limit the search.",
                },
                "limit": {
                    "type": "number",
                    "description": "Maximum results to return (default 10).",
                },
            },
            "required": ["query"],
        },
    },
    {
        "name": "delete_entry",
        "description": (
            "Delete an entry. Only use when the user explicitly asks to remove or delete it."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": "Entry path to delete, e.g. task/grocery-shopping.",
                },
            },
            "required": ["path"],
        },
    },
    {
        "name": "find_duplicates",
        "description": (
            "Find likely duplicate entries. Use when the user asks whether something already "
            "exists, or before creating an entry that may be a repeat."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "name": {
                    "type": "string",
                    "description": "Optional name or title to compare.",
                },
                "text": {
                    "type": "string",
                    "description": "Optional text to compare (e.g. the thought itself).",
                },
                "category": {
                    "type": "string",
                    "enum": TOOL_CATEGORIES,
                    "description": "Optional category to limit the search.",
                },
                "limit": {
                    "type": "number",
                    "description": "Maximum results to return (default 5).",
                },
                "excludePath": {
                    "type": "string",
                    "description": "Optional path to leave out of the results.",
                },
            },
            "required": [],
        },
    },
    {
        "name": "merge_entries",
        "description": (
            "Merge several entries into a target entry. "
            "Use when the user wants to combine duplicates or consolidate notes."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "targetPath": {
                    "type": "string",
                    "description": "Entry path to keep.",
                },
                "sourcePaths": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Entry paths to merge into the target.",
                },
            },
            "required": ["targetPath", "sourcePaths"],
        },
    },
]
