"""Shared utilities: logging setup and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from audit_tracker.shared.utils import (
    ensure_utc,
    generate_cuid,
    start_of_day_utc,
    utc_now,
)

__all__ = [
    "generate_cuid",
    "utc_now",
    "ensure_utc",
    "start_of_day_utc",
]
