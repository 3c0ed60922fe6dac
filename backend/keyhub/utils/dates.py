"""
Helpers for Firestore timestamp values
"""
from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_datetime(value):
    """
    Normalize a stored timestamp to an aware UTC datetime.

    Accepts datetimes (Firestore returns DatetimeWithNanoseconds), ISO-8601
    strings, and objects exposing ``timestamp()``. Naive datetimes are assumed
    to be UTC. Returns None for empty or unparseable values.
    """
    if not value:
        return None

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
        except ValueError:
            return None
        return to_datetime(parsed)

    if hasattr(value, 'timestamp'):
        try:
            return datetime.fromtimestamp(value.timestamp(), tz=timezone.utc)
        except (TypeError, ValueError, OverflowError):
            return None

    return None
