# storecast/services/content_status.py
"""
Derived lifecycle status of a content item.

Status is a pure function of (start_date, end_date, now) and is never
persisted. Both boundaries are inclusive: an item whose window is exactly
`now` is active.
"""
from datetime import date, datetime
from enum import Enum

from storecast.core.timeutils import parse_instant, utcnow


class ContentStatus(str, Enum):
    SCHEDULED = "scheduled"
    ACTIVE = "active"
    ARCHIVED = "archived"
    UNKNOWN = "unknown"


_LABELS = {
    ContentStatus.SCHEDULED: "Scheduled",
    ContentStatus.ACTIVE: "Active",
    ContentStatus.ARCHIVED: "Archived",
    ContentStatus.UNKNOWN: "Status Unknown",
}

DateLike = datetime | date | str | None


def classify_status(
    start_date: DateLike,
    end_date: DateLike,
    now: datetime | None = None,
) -> ContentStatus:
    """
    Classify a schedule window relative to `now` (defaults to current UTC).

    Returns UNKNOWN when either date is missing or cannot be parsed.
    """
    start = parse_instant(start_date)
    end = parse_instant(end_date)
    if start is None or end is None:
        return ContentStatus.UNKNOWN

    reference = parse_instant(now) if now is not None else utcnow()

    if start > reference:
        return ContentStatus.SCHEDULED
    if end < reference:
        return ContentStatus.ARCHIVED
    return ContentStatus.ACTIVE


def status_label(status: ContentStatus) -> str:
    return _LABELS[status]
