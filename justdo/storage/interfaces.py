"""
Collaborator interfaces the tool executor depends on.

Stores raise EntryNotFoundError (StorageErrorKind.NOT_FOUND) for a missing
path; callers branch on the error kind, never on the message text.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from ..models import BodyContentUpdate, Channel, ContextWindow, Entry, SearchResponse

if TYPE_CHECKING:
    from ..delivery.offline_queue import QueuedCapture


class EntryStore(ABC):
    @abstractmethod
    async def create(
        self, category: str, fields: dict[str, Any], channel: Channel, body: str | None = None
    ) -> Entry:
        ...

    @abstractmethod
    async def read(self, path: str) -> Entry:
        ...

    @abstractmethod
    async def update(
        self,
        path: str,
        fields: dict[str, Any],
        channel: Channel,
        body_update: BodyContentUpdate | None = None,
    ) -> Entry:
        ...

    @abstractmethod
    async def move(self, path: str, target_category: str, channel: Channel) -> Entry:
        ...

    @abstractmethod
    async def delete(self, path: str, channel: Channel) -> None:
        ...

    @abstractmethod
    async def list(self, category: str | None = None, filters: dict[str, Any] | None = None) -> list[Entry]:
        ...

    @abstractmethod
    async def merge(self, target_path: str, source_paths: list[str], channel: Channel) -> Entry:
        ...


class SearchIndex(ABC):
    @abstractmethod
    async def search(
        self, query: str, category: str | None = None, limit: int | None = None
    ) -> SearchResponse:
        ...


class EntryLinker(ABC):
    @abstractmethod
    async def link_people_for_entry(self, entry: Entry, names: list[str], channel: Channel) -> None:
        ...

    @abstractmethod
    async def link_projects_for_entry(
        self, entry: Entry, names: list[str], channel: Channel, create_missing: bool = False
    ) -> None:
        ...


class CaptureQueue(ABC):
    """Parks captures that could not be classified for a later replay."""

    @abstractmethod
    def is_enabled(self) -> bool:
        ...

    @abstractmethod
    async def enqueue_capture(
        self,
        text: str,
        hints: str | None,
        channel: Channel,
        context: ContextWindow | None = None,
    ) -> QueuedCapture | None:
        ...


class DigestGenerator(ABC):
    @abstractmethod
    async def generate_daily_digest(self) -> str:
        ...

    @abstractmethod
    async def generate_weekly_review(self) -> str:
        ...


class DuplicateFinder(ABC):
    @abstractmethod
    async def find_duplicates_for_text(
        self,
        name: str | None,
        text: str | None,
        category: str | None,
        limit: int,
        exclude_path: str | None = None,
    ) -> list:
        ...


class IndexProvider(ABC):
    @abstractmethod
    async def get_index_content(self) -> str:
        ...
