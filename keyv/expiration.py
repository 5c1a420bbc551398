"""Expiry computation and checks used by the store and by backends without native TTL."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from .entry import Entry


Clock = Callable[[], datetime]
TTL = timedelta | int | float


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


def as_utc(moment: datetime) -> datetime:
    """Interpret naive datetimes as UTC and convert aware ones to UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def normalize_ttl(ttl: TTL | None) -> timedelta | None:
    """Convert a TTL given as timedelta or seconds into a timedelta."""
    if ttl is None:
        return None
    if isinstance(ttl, bool):
        msg = "ttl must be a timedelta or a number of seconds, not bool"
        raise TypeError(msg)
    if isinstance(ttl, timedelta):
        delta = ttl
    elif isinstance(ttl, int | float):
        delta = timedelta(seconds=ttl)
    else:
        msg = f"ttl must be a timedelta or a number of seconds, got {type(ttl).__name__}"
        raise TypeError(msg)

    if delta < timedelta(0):
        msg = "ttl must not be negative"
        raise ValueError(msg)
    return delta


def expires_at_for(ttl: TTL | None, now: datetime) -> datetime | None:
    """Return the absolute deadline for a TTL counted from ``now``."""
    delta = normalize_ttl(ttl)
    if delta is None:
        return None
    return as_utc(now) + delta


def is_deadline_passed(expires_at: datetime | None, now: datetime) -> bool:
    if expires_at is None:
        return False
    return as_utc(expires_at) <= as_utc(now)


def is_expired(entry: Entry, now: datetime) -> bool:
    """Return True when ``entry`` must be treated as absent at ``now``.

    An entry without deadline never expires; a deadline equal to ``now`` counts as expired.
    """
    return is_deadline_passed(entry.expires_at, now)
