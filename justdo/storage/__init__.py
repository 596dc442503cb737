"""Storage collaborator interfaces and the in-memory implementation."""

from justdo.storage.interfaces import (
    CaptureQueue,
    DigestGenerator,
    DuplicateFinder,
    EntryLinker,
    EntryStore,
    IndexProvider,
    SearchIndex,
)
from justdo.storage.memory import InMemoryEntryStore, InMemorySearchIndex

__all__ = [
    "CaptureQueue",
    "DigestGenerator",
    "DuplicateFinder",
    "EntryLinker",
    "EntryStore",
    "IndexProvider",
    "InMemoryEntryStore",
    "InMemorySearchIndex",
    "SearchIndex",
]
