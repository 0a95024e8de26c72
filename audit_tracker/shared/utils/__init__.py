"""Shared utilities: UTC datetime helpers and id generation."""

from audit_tracker.shared.utils.datetime import ensure_utc, start_of_day_utc, utc_now
from audit_tracker.shared.utils.generators import generate_cuid

__all__ = [
    "generate_cuid",
    "utc_now",
    "ensure_utc",
    "start_of_day_utc",
]
