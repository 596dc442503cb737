"""
Mutation target resolution.

When the model names an entry path that does not exist, the user's recent
messages usually still say which entry they meant. The resolver mines query
candidates from those messages, searches for each one, and scores the hits
by token overlap:

    3 * |name ∩ query| + |path ∩ requested path| + |name ∩ user messages|
    + 3 when the name tokens equal the query tokens

The best-scoring entry wins. A tie at the top raises DisambiguationError
instead of guessing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ...config import settings
from ...constants import (
    DONE_STATUS,
    EXACT_MATCH_BONUS,
    MAX_DISAMBIGUATION_OPTIONS,
    NAME_QUERY_WEIGHT,
    TASK_CATEGORY,
    canonical_category,
)
from ...exceptions import DisambiguationError
from ...models import ContextWindow
from ...utils.text_heuristics import extract_query_candidates, path_tokens, tokenize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedTarget:
    path: str
    name: str
    score: int

    @property
    def warning(self) -> str:
        return f"Requested path was not found. Used matching entry '{self.name}' ({self.path})."


def score_match(
    name: str,
    path: str,
    query: str,
    requested_path: str,
    message_tokens: set[str],
) -> int:
    name_tokens = tokenize(name)
    query_tokens = tokenize(query)
    score = NAME_QUERY_WEIGHT * len(name_tokens & query_tokens)
    score += len(path_tokens(path) & path_tokens(requested_path))
    score += len(name_tokens & message_tokens)
    if name_tokens and name_tokens == query_tokens:
        score += EXACT_MATCH_BONUS
    return score


def pick_winner(scored: dict[str, ResolvedTarget], requested_path: str) -> ResolvedTarget | None:
    """Highest score wins; None when nothing scored; DisambiguationError on a tie."""
    ranked = sorted(scored.values(), key=lambda t: (-t.score, t.path))
    ranked = [t for t in ranked if t.score > 0]
    if not ranked:
        return None
    if len(ranked) > 1 and ranked[0].score == ranked[1].score:
        top = [t for t in ranked if t.score == ranked[0].score][:MAX_DISAMBIGUATION_OPTIONS]
        listed = ", ".join(f"'{t.name}' ({t.path})" for t in top)
        raise DisambiguationError(
            f"Requested path '{requested_path}' was not found and several entries match: "
            f"{listed}. Please say which one you meant.",
            options=[(t.path, t.name) for t in top],
        )
    return ranked[0]


class TargetResolver:
    """Finds the entry a user meant when the requested path is missing."""

    def __init__(
        self,
        *,
        search_index,
        entry_store,
        message_window: int | None = None,
        search_limit: int | None = None,
    ) -> None:
        self._search = search_index
        self._store = entry_store
        self._window = message_window or settings.resolution_message_window
        self._limit = search_limit or settings.resolution_search_limit

    def _inputs(self, requested_path: str, context: ContextWindow | None) -> tuple[list[str], set[str]]:
        messages = context.user_messages(limit=self._window) if context else []
        message_tokens: set[str] = set()
        for message in messages:
            message_tokens |= tokenize(message)
        return extract_query_candidates(messages, requested_path), message_tokens

    async def resolve(
        self,
        requested_path: str,
        context: ContextWindow | None,
        *,
        exclude_category: str | None = None,
    ) -> ResolvedTarget | None:
        queries, message_tokens = self._inputs(requested_path, context)
        if not queries:
            return None
        excluded = canonical_category(exclude_category) if exclude_category else None
        requested = requested_path[:-3] if requested_path.endswith(".md") else requested_path

        best: dict[str, ResolvedTarget] = {}
        for query in queries:
            response = await self._search.search(query, limit=self._limit)
            for hit in response.entries:
                if excluded and canonical_category(hit.category) == excluded:
                    continue
                if hit.path == requested:
                    continue
                score = score_match(hit.name, hit.path, query, requested_path, message_tokens)
                current = best.get(hit.path)
                if current is None or score > current.score:
                    best[hit.path] = ResolvedTarget(path=hit.path, name=hit.name, score=score)

        winner = pick_winner(best, requested_path)
        if winner:
            logger.info("Resolved missing path %s to %s (score %d)", requested_path, winner.path, winner.score)
        return winner

    async def resolve_completed_task(
        self, requested_path: str, context: ContextWindow | None
    ) -> ResolvedTarget | None:
        """Same scoring, over completed tasks only."""
        queries, message_tokens = self._inputs(requested_path, context)
        if not queries:
            return None

        best: dict[str, ResolvedTarget] = {}
        for entry in await self._store.list(TASK_CATEGORY, {"status": DONE_STATUS}):
            for query in queries:
                score = score_match(entry.name, entry.path, query, requested_path, message_tokens)
                current = best.get(entry.path)
                if current is None or score > current.score:
                    best[entry.path] = ResolvedTarget(path=entry.path, name=entry.name, score=score)

        winner = pick_winner(best, requested_path)
        if winner:
            logger.info("Reopening completed task %s for %s", winner.path, requested_path)
        return winner
