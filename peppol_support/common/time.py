"""Common time utilities."""

from __future__ import annotations

import datetime as dt


def utcnow() -> dt.datetime:
    """Return an aware UTC timestamp."""
    return dt.datetime.now(dt.UTC)


def truncate_to_millis(value: dt.datetime) -> dt.datetime:
    """Drop sub-millisecond precision so every backend round-trips the value."""
    return value.replace(microsecond=(value.microsecond // 1000) * 1000)


def utcnow_millis() -> dt.datetime:
    """Return an aware UTC timestamp with millisecond precision."""
    return truncate_to_millis(utcnow())


def ensure_aware(value: dt.datetime) -> dt.datetime:
    """Return ``value`` in UTC, assuming UTC for naive datetimes.

    MongoDB and SQLite hand back naive datetimes even when an aware value was
    written, so read paths normalise through here.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.UTC)
    return value.astimezone(dt.UTC)
