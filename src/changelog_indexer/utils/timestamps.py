"""Checkpoint timestamp helpers.

Checkpoints are stored as ISO-8601 UTC strings. Naive datetimes coming
back from the database are treated as UTC.
"""

from datetime import datetime, timezone
from typing import Optional

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utc_now() -> datetime:
    """Return timezone-aware UTC datetime."""
    return datetime.now(tz=timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_iso_utc(value: datetime) -> str:
    """Canonical checkpoint form, e.g. 2024-05-01T10:00:00.123456+00:00"""
    return ensure_utc(value).isoformat()


def parse_checkpoint(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored checkpoint; None and blank strings mean "no checkpoint"."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    text = str(value).strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(text))


def checkpoint_lower_bound(value: Optional[str]) -> datetime:
    """Lower bound for the changelog query; the epoch when there is no checkpoint."""
    parsed = parse_checkpoint(value)
    return parsed if parsed is not None else EPOCH
