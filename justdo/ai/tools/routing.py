"""Confidence routing for captured thoughts."""

from __future__ import annotations

from ...constants import INBOX_CATEGORY, canonical_category


def route_category(confidence: float, category: str, threshold: float) -> str:
    """
    Where a classified thought is filed.

    At or above the threshold the classified category is used (legacy
    'admin' becomes 'task'); below it the thought goes to the inbox.
    Monotonic in confidence: raising confidence never moves a thought
    from a category back to the inbox.
    """
    if confidence >= threshold:
        return canonical_category(category)
    return INBOX_CATEGORY


def build_agent_note(confidence: float, reasoning: str = "") -> str:
    """Body of an inbox entry asking the user to clarify."""
    lines = [
        "## Agent Note",
        "",
        f"Low confidence classification ({round(confidence * 100)}%).",
    ]
    if reasoning:
        lines.append(f"Reasoning: {reasoning}")
    lines += [
        "",
        "Please clarify by replying with a category hint like [project], [person], [idea], or [task].",
    ]
    return "\n".join(lines)
