"""Shared helpers"""

from .timestamps import (
    EPOCH,
    utc_now,
    ensure_utc,
    to_iso_utc,
    parse_checkpoint,
    checkpoint_lower_bound
)

__all__ = [
    "EPOCH",
    "utc_now",
    "ensure_utc",
    "to_iso_utc",
    "parse_checkpoint",
    "checkpoint_lower_bound"
]
