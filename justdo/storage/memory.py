"""
In-memory collaborators for local runs and tests.

InMemoryEntryStore keeps entries in a dict keyed by path ("{category}/{slug}")
and also serves the index summary. InMemorySearchIndex ranks entries by token
overlap with the query.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any

from ..constants import TASK_CATEGORY, canonical_category
from ..exceptions import EntryNotFoundError, InvalidEntryDataError
from ..models import BodyContentUpdate, Channel, Entry, SearchHit, SearchResponse
from ..utils.slug import slugify
from ..utils.text_heuristics import path_tokens, tokenize
from .interfaces import EntryStore, IndexProvider, SearchIndex

logger = logging.getLogger(__name__)

_DEFAULT_STATUS = {TASK_CATEGORY: "pending", "projects": "active"}


def _normalize_path(path: str) -> str:
    return path[:-3] if path.endswith(".md") else path


def apply_body_update(body: str, update: BodyContentUpdate) -> str:
    """Apply append/replace/section to a markdown body."""
    content = update.content.strip()
    match update.mode:
        case "replace":
            return content
        case "append":
            return f"{body.rstrip()}\n\n{content}".strip() if body.strip() else content
        case "section":
            heading = f"## {update.section or 'Notes'}"
            pattern = re.compile(rf"^{re.escape(heading)}\s*$", re.MULTILINE)
            found = pattern.search(body)
            if found is None:
                prefix = f"{body.rstrip()}\n\n" if body.strip() else ""
                return f"{prefix}{heading}\n{content}"
            # Insert at the end of the section, before the next heading
            next_heading = re.compile(r"^#{1,2} ", re.MULTILINE).search(body, found.end())
            end = next_heading.start() if next_heading else len(body)
            section = body[:end].rstrip()
            rest = body[end:]
            joined = f"{section}\n{content}"
            return f"{joined}\n\n{rest.lstrip()}".rstrip() if rest.strip() else joined
        case _:
            raise InvalidEntryDataError(f"Unknown body update mode: {update.mode}")


class InMemoryEntryStore(EntryStore, IndexProvider):
    def __init__(self) -> None:
        self._entries: dict[str, Entry] = {}

    def _get(self, path: str) -> Entry:
        entry = self._entries.get(_normalize_path(path))
        if entry is None:
            raise EntryNotFoundError(path)
        return entry

    def _unique_path(self, category: str, slug: str) -> str:
        path = f"{category}/{slug}"
        suffix = 2
        while path in self._entries:
            path = f"{category}/{slug}-{suffix}"
            suffix += 1
        return path

    async def create(
        self, category: str, fields: dict[str, Any], channel: Channel, body: str | None = None
    ) -> Entry:
        category = canonical_category(category)
        name = str(fields.get("name") or fields.get("suggested_name") or "").strip()
        if not name:
            raise InvalidEntryDataError("Entry needs a name")

        stored_fields = {k: v for k, v in fields.items() if k != "name"}
        if category in _DEFAULT_STATUS:
            stored_fields.setdefault("status", _DEFAULT_STATUS[category])
        entry = Entry(
            path=self._unique_path(category, slugify(name) or "entry"),
            category=category,
            name=name,
            fields=stored_fields,
            body=body or "",
        )
        self._entries[entry.path] = entry
        logger.debug("Created %s via %s", entry.path, channel)
        return entry.model_copy(deep=True)

    async def read(self, path: str) -> Entry:
        return self._get(path).model_copy(deep=True)

    async def update(
        self,
        path: str,
        fields: dict[str, Any],
        channel: Channel,
        body_update: BodyContentUpdate | None = None,
    ) -> Entry:
        entry = self._get(path)
        changes = dict(fields)
        if "name" in changes:
            entry.name = str(changes.pop("name"))
        entry.fields.update(changes)
        if body_update is not None:
            entry.body = apply_body_update(entry.body, body_update)
        entry.updated_at = datetime.now(timezone.utc)
        return entry.model_copy(deep=True)

    async def move(self, path: str, target_category: str, channel: Channel) -> Entry:
        entry = self._get(path)
        target = canonical_category(target_category)
        if entry.category == target:
            return entry.model_copy(deep=True)

        del self._entries[entry.path]
        slug = entry.path.rsplit("/", 1)[-1]
        entry.path = self._unique_path(target, slug)
        entry.category = target
        if target in _DEFAULT_STATUS and entry.fields.get("status") in (None, ""):
            entry.fields["status"] = _DEFAULT_STATUS[target]
        entry.updated_at = datetime.now(timezone.utc)
        self._entries[entry.path] = entry
        logger.debug("Moved %s to %s", path, entry.path)
        return entry.model_copy(deep=True)

    async def delete(self, path: str, channel: Channel) -> None:
        entry = self._get(path)
        del self._entries[entry.path]

    async def list(self, category: str | None = None, filters: dict[str, Any] | None = None) -> list[Entry]:
        wanted = canonical_category(category) if category else None
        results = []
        for entry in self._entries.values():
            if wanted and entry.category != wanted:
                continue
            if filters and any(entry.fields.get(k) != v for k, v in filters.items()):
                continue
            results.append(entry.model_copy(deep=True))
        results.sort(key=lambda e: e.updated_at, reverse=True)
        return results

    async def merge(self, target_path: str, source_paths: list[str], channel: Channel) -> Entry:
        target = self._get(target_path)
        sources = [self._get(p) for p in source_paths if _normalize_path(p) != target.path]
        for source in sources:
            if source.body.strip():
                target.body = apply_body_update(
                    target.body,
                    BodyContentUpdate(content=source.body, mode="section", section=f"Merged: {source.name}"),
                )
            del self._entries[source.path]
        target.updated_at = datetime.now(timezone.utc)
        return target.model_copy(deep=True)

    async def get_index_content(self) -> str:
        if not self._entries:
            return ""
        lines = []
        for entry in sorted(self._entries.values(), key=lambda e: e.path):
            status = f" [{entry.status}]" if entry.status else ""
            lines.append(f"- {entry.path}: {entry.name}{status}")
        return "\n".join(lines)


class InMemorySearchIndex(SearchIndex):
    """Token-overlap search over an InMemoryEntryStore."""

    def __init__(self, store: InMemoryEntryStore) -> None:
        self._store = store

    async def search(
        self, query: str, category: str | None = None, limit: int | None = None
    ) -> SearchResponse:
        query_tokens = tokenize(query)
        if not query_tokens:
            return SearchResponse()

        hits: list[SearchHit] = []
        for entry in await self._store.list(category):
            haystack = tokenize(entry.name) | path_tokens(entry.path) | tokenize(entry.body)
            overlap = len(query_tokens & haystack)
            if overlap == 0:
                continue
            hits.append(SearchHit(
                path=entry.path,
                name=entry.name,
                category=entry.category,
                snippet=entry.body[:120],
                score=overlap / len(query_tokens),
            ))
        hits.sort(key=lambda h: (-(h.score or 0.0), h.path))
        total = len(hits)
        return SearchResponse(entries=hits[: limit or 10], total=total)
