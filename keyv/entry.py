"""Stored record shape shared by all backends."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from datetime import datetime


@dataclass(frozen=True, slots=True)
class Entry:
    """One stored key with its encoded value and optional expiry deadline.

    ``expires_at`` is a timezone-aware UTC datetime; ``None`` means the entry never expires.
    """

    key: str
    value: str
    expires_at: datetime | None = None
