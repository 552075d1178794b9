"""UTC timestamp helpers shared by backups and metadata."""

from __future__ import annotations

from datetime import UTC, datetime


def now_compact() -> str:
    """Current UTC time for backup names (YYYYMMDDTHHmmss + microseconds).

    Sortable lexically, and unique across back-to-back backups.
    """
    return datetime.now(UTC).strftime("%Y%m%dT%H%M%S%f")


def filename_stamp() -> str:
    """Compact timestamp used as an opt-in filename suffix (YYYYMMDDHHmmss)."""
    return datetime.now(UTC).strftime("%Y%m%d%H%M%S")


def from_epoch(seconds: float) -> datetime:
    """Convert a stat() timestamp to an aware UTC datetime."""
    return datetime.fromtimestamp(seconds, tz=UTC)
