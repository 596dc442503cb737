"""Offline queue for captures that could not be classified.

When the classifier times out or the API is unreachable, the capture is
persisted to SQLite and replayed later by a processor callback.

Items are keyed by a hash of (text, hints, channel), so repeating the same
capture inside the dedupe window returns the existing item.

State machine:
    pending -> processing -> processed (success, pruned after the dedupe window)
                          -> pending (retry after retry_base * 2**(attempts-1) seconds)
                          -> failed (max attempts reached)
"""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Awaitable, Callable

import aiosqlite

from ..config import settings
from ..models import Channel, ContextWindow
from ..storage.interfaces import CaptureQueue

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS offline_queue (
    id TEXT PRIMARY KEY,
    tool TEXT NOT NULL,
    args TEXT NOT NULL,
    channel TEXT NOT NULL,
    context TEXT,
    status TEXT NOT NULL,
    attempts INTEGER NOT NULL DEFAULT 0,
    last_error TEXT,
    next_attempt_at TEXT,
    processing_started_at TEXT,
    created_at TEXT NOT NULL
)
"""


class QueueStatus(str, Enum):
    """Status of a queued capture."""

    PENDING = "pending"
    PROCESSING = "processing"
    PROCESSED = "processed"
    FAILED = "failed"


@dataclass
class QueuedCapture:
    """A capture waiting in the offline queue."""

    id: str
    tool: str
    args: dict[str, Any]
    channel: str
    context: ContextWindow | None
    status: QueueStatus
    attempts: int
    created_at: datetime
    last_error: str | None = None
    next_attempt_at: datetime | None = None
    processing_started_at: datetime | None = None


@dataclass
class QueueCounts:
    """Statistics for the offline queue."""

    pending: int = 0
    processing: int = 0
    failed: int = 0


@dataclass
class ProcessResult:
    success: bool
    error: str | None = None


QueueProcessor = Callable[[QueuedCapture], Awaitable[ProcessResult]]


def capture_id(text: str, hints: str | None, channel: str) -> str:
    digest = hashlib.sha256()
    digest.update(text.encode("utf-8"))
    digest.update((hints or "").encode("utf-8"))
    digest.update(channel.encode("utf-8"))
    return digest.hexdigest()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_dt(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


class OfflineCaptureQueue(CaptureQueue):
    """SQLite-backed capture queue.

    Usage:
        queue = OfflineCaptureQueue(db_path)
        await queue.init()
        item = await queue.enqueue_capture(text, hints, "chat", context)
        ...
        await queue.replay(processor)   # from a periodic job
    """

    def __init__(
        self,
        db_path: str,
        *,
        enabled: bool | None = None,
        max_attempts: int | None = None,
        retry_base: float | None = None,
        dedupe_ttl_hours: int | None = None,
        processing_timeout: float = 300.0,
    ) -> None:
        self.db_path = db_path
        self._enabled = settings.offline_queue_enabled if enabled is None else enabled
        self._max_attempts = max_attempts or settings.offline_queue_max_attempts
        self._retry_base = retry_base if retry_base is not None else settings.offline_queue_retry_base
        self._dedupe_ttl = timedelta(
            hours=dedupe_ttl_hours if dedupe_ttl_hours is not None else settings.offline_queue_dedupe_ttl_hours
        )
        self._processing_timeout = processing_timeout

    async def init(self) -> None:
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(_SCHEMA)
            await db.commit()

    def is_enabled(self) -> bool:
        return self._enabled

    async def enqueue_capture(
        self,
        text: str,
        hints: str | None,
        channel: Channel,
        context: ContextWindow | None = None,
    ) -> QueuedCapture | None:
        """Persist a capture for replay. Returns the existing item inside the dedupe window."""
        if not self._enabled:
            return None

        item_id = capture_id(text, hints, channel)
        existing = await self._find_recent(item_id)
        if existing is not None:
            logger.debug("Capture %s already queued", item_id[:12])
            return existing

        created_at = _now()
        async with aiosqlite.connect(self.db_path) as db:
            # Replaces a processed or expired row with the same id
            await db.execute(
                """
                INSERT OR REPLACE INTO offline_queue
                    (id, tool, args, channel, context, status, attempts, created_at)
                VALUES (?, ?, ?, ?, ?, ?, 0, ?)
                """,
                (
                    item_id,
                    "classify_and_capture",
                    json.dumps({"text": text, "hints": hints}),
                    channel,
                    context.model_dump_json() if context is not None else None,
                    QueueStatus.PENDING.value,
                    created_at.isoformat(),
                ),
            )
            await db.commit()
        logger.info("Queued capture %s for replay", item_id[:12])
        return QueuedCapture(
            id=item_id,
            tool="classify_and_capture",
            args={"text": text, "hints": hints},
            channel=channel,
            context=context,
            status=QueueStatus.PENDING,
            attempts=0,
            created_at=created_at,
        )

    async def get_status(self) -> QueueCounts:
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT status, COUNT(*) FROM offline_queue GROUP BY status"
            )
            rows = await cursor.fetchall()
        counts = dict(rows)
        return QueueCounts(
            pending=counts.get(QueueStatus.PENDING.value, 0),
            processing=counts.get(QueueStatus.PROCESSING.value, 0),
            failed=counts.get(QueueStatus.FAILED.value, 0),
        )

    async def list_failed(self) -> list[QueuedCapture]:
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM offline_queue WHERE status = ? ORDER BY created_at ASC",
                (QueueStatus.FAILED.value,),
            )
            rows = await cursor.fetchall()
        return [self._row_to_item(row) for row in rows]

    async def replay(self, processor: QueueProcessor) -> int:
        """Requeue stuck items, process due items, prune old processed ones.

        Returns:
            Number of items processed successfully.
        """
        await self._requeue_stuck()
        processed = await self.process_pending(processor)
        await self._prune_processed()
        return processed

    async def process_pending(self, processor: QueueProcessor) -> int:
        now = _now()
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                """
                SELECT * FROM offline_queue
                WHERE status = ? AND (next_attempt_at IS NULL OR next_attempt_at <= ?)
                ORDER BY created_at ASC
                """,
                (QueueStatus.PENDING.value, now.isoformat()),
            )
            rows = await cursor.fetchall()

        processed = 0
        for row in rows:
            item = self._row_to_item(row)
            await self._set_status(item.id, QueueStatus.PROCESSING, processing_started_at=_now())
            try:
                result = await processor(item)
            except Exception as exc:
                logger.exception("Offline queue processor raised for %s", item.id[:12])
                result = ProcessResult(success=False, error=str(exc))

            if result.success:
                await self._set_status(item.id, QueueStatus.PROCESSED)
                processed += 1
            else:
                await self._handle_failure(item, result.error)
        return processed

    async def _handle_failure(self, item: QueuedCapture, error: str | None) -> None:
        attempts = item.attempts + 1
        error = error or "Unknown error"
        async with aiosqlite.connect(self.db_path) as db:
            if attempts >= self._max_attempts:
                await db.execute(
                    """
                    UPDATE offline_queue
                    SET status = ?, attempts = ?, last_error = ?,
                        processing_started_at = NULL, next_attempt_at = NULL
                    WHERE id = ?
                    """,
                    (QueueStatus.FAILED.value, attempts, error, item.id),
                )
                logger.error(
                    "Queued capture %s permanently failed after %d attempts: %s",
                    item.id[:12], attempts, error,
                )
            else:
                delay = self._retry_base * (2 ** max(0, attempts - 1))
                await db.execute(
                    """
                    UPDATE offline_queue
                    SET status = ?, attempts = ?, last_error = ?,
                        processing_started_at = NULL, next_attempt_at = ?
                    WHERE id = ?
                    """,
                    (
                        QueueStatus.PENDING.value,
                        attempts,
                        error,
                        (_now() + timedelta(seconds=delay)).isoformat(),
                        item.id,
                    ),
                )
                logger.warning(
                    "Queued capture %s failed (attempt %d/%d): %s",
                    item.id[:12], attempts, self._max_attempts, error,
                )
            await db.commit()

    async def _requeue_stuck(self) -> None:
        cutoff = _now() - timedelta(seconds=self._processing_timeout)
        retry_at = _now() + timedelta(seconds=self._retry_base)
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                UPDATE offline_queue
                SET status = ?, processing_started_at = NULL, next_attempt_at = ?
                WHERE status = ? AND processing_started_at IS NOT NULL
                  AND processing_started_at < ?
                """,
                (
                    QueueStatus.PENDING.value,
                    retry_at.isoformat(),
                    QueueStatus.PROCESSING.value,
                    cutoff.isoformat(),
                ),
            )
            await db.commit()
            if cursor.rowcount > 0:
                logger.info("Requeued %d stuck captures", cursor.rowcount)

    async def _prune_processed(self) -> int:
        cutoff = _now() - self._dedupe_ttl
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "DELETE FROM offline_queue WHERE status = ? AND created_at < ?",
                (QueueStatus.PROCESSED.value, cutoff.isoformat()),
            )
            await db.commit()
            return cursor.rowcount

    async def _find_recent(self, item_id: str) -> QueuedCapture | None:
        cutoff = _now() - self._dedupe_ttl
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                """
                SELECT * FROM offline_queue
                WHERE id = ? AND created_at >= ? AND status IN (?, ?, ?)
                """,
                (
                    item_id,
                    cutoff.isoformat(),
                    QueueStatus.PENDING.value,
                    QueueStatus.PROCESSING.value,
                    QueueStatus.FAILED.value,
                ),
            )
            row = await cursor.fetchone()
        return self._row_to_item(row) if row else None

    async def _set_status(
        self, item_id: str, status: QueueStatus, processing_started_at: datetime | None = None
    ) -> None:
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                "UPDATE offline_queue SET status = ?, processing_started_at = ? WHERE id = ?",
                (
                    status.value,
                    processing_started_at.isoformat() if processing_started_at else None,
                    item_id,
                ),
            )
            await db.commit()

    def _row_to_item(self, row: aiosqlite.Row) -> QueuedCapture:
        """Convert a database row to a QueuedCapture."""
        return QueuedCapture(
            id=row["id"],
            tool=row["tool"],
            args=json.loads(row["args"]),
            channel=row["channel"],
            context=ContextWindow.model_validate_json(row["context"]) if row["context"] else None,
            status=QueueStatus(row["status"]),
            attempts=row["attempts"],
            created_at=datetime.fromisoformat(row["created_at"]),
            last_error=row["last_error"],
            next_attempt_at=_parse_dt(row["next_attempt_at"]),
            processing_started_at=_parse_dt(row["processing_started_at"]),
        )
