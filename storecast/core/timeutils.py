# storecast/core/timeutils.py
from datetime import date, datetime, time, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """
    Normalize to an aware UTC datetime.

    Naive values are taken to already be UTC (SQLite and `timestamp`
    columns drop the offset on the way back).
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_instant(value: datetime | date | str | None) -> datetime | None:
    """
    Best-effort conversion of a stored or user supplied timestamp.

    Returns None for missing or unparsable input. Plain dates map to
    midnight UTC.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    text = str(value).strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return ensure_utc(datetime.fromisoformat(text))
    except ValueError:
        return None
