"""Core: configuration, exception handlers, lifespan and rate limiting."""

from audit_tracker.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
