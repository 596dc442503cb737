"""
Date helpers: today's date in the configured timezone and due-date
normalisation from relative phrases ("tomorrow", "next friday").
"""

from __future__ import annotations

import calendar
import logging
import re
import zoneinfo
from datetime import date, datetime, timedelta, timezone

logger = logging.getLogger(__name__)

_WEEKDAYS = {
    "monday": 0, "tuesday": 1, "wednesday": 2, "thursday": 3,
    "friday": 4, "saturday": 5, "sunday": 6,
}
_WEEKDAY_PATTERN = re.compile(
    r"\b(?:next\s+)?(monday|tuesday|wednesday|thursday|friday|saturday|sunday)\b"
)
_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_TODAY_PHRASES = ("today", "tonight", "this morning", "this afternoon", "this evening")


def resolve_timezone(name: str | None) -> zoneinfo.ZoneInfo | timezone:
    if not name:
        return timezone.utc
    try:
        return zoneinfo.ZoneInfo(name)
    except (zoneinfo.ZoneInfoNotFoundError, ValueError):
        logger.warning("Invalid timezone %r, falling back to UTC", name)
        return timezone.utc


def local_today(tz_name: str | None = None, now: datetime | None = None) -> date:
    tz = resolve_timezone(tz_name)
    base = now or datetime.now(timezone.utc)
    if base.tzinfo is None:
        base = base.replace(tzinfo=timezone.utc)
    return base.astimezone(tz).date()


def current_date_string(tz_name: str | None = None, now: datetime | None = None) -> str:
    return local_today(tz_name, now).isoformat()


def _add_months(day: date, months: int) -> date:
    raw = day.month - 1 + months
    year = day.year + raw // 12
    month = raw % 12 + 1
    last = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last))


def resolve_relative_date(text: str, today: date) -> str | None:
    """Resolve the first relative-date phrase in text, or None."""
    lowered = text.lower()
    if "tomorrow" in lowered:
        return (today + timedelta(days=1)).isoformat()
    if any(phrase in lowered for phrase in _TODAY_PHRASES):
        return today.isoformat()
    if "yesterday" in lowered:
        return (today - timedelta(days=1)).isoformat()
    if "next week" in lowered:
        return (today + timedelta(days=7)).isoformat()
    if "next month" in lowered:
        return _add_months(today, 1).isoformat()
    if "next year" in lowered:
        try:
            return today.replace(year=today.year + 1).isoformat()
        except ValueError:  # Feb 29
            return today.replace(year=today.year + 1, day=28).isoformat()

    match = _WEEKDAY_PATTERN.search(lowered)
    if match:
        delta = (_WEEKDAYS[match.group(1)] - today.weekday()) % 7
        if delta == 0:
            delta = 7
        return (today + timedelta(days=delta)).isoformat()
    return None


def parse_iso_date(value: str) -> str | None:
    match = _ISO_DATE.match(value.strip())
    if not match:
        return None
    try:
        return date(int(match.group(1)), int(match.group(2)), int(match.group(3))).isoformat()
    except ValueError:
        return None


def normalize_due_date(
    due_date: str | None,
    source_text: str | None = None,
    *,
    now: datetime | None = None,
    tz_name: str | None = None,
) -> str | None:
    """
    Relative phrases in the source text win over the model's date. Otherwise
    the model's value is kept only if it is a real YYYY-MM-DD date.
    """
    today = local_today(tz_name, now)
    text = source_text or due_date or ""
    relative = resolve_relative_date(text, today)
    if relative:
        return relative
    if not due_date:
        return None
    return parse_iso_date(due_date)
