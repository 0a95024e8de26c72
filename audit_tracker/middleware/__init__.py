"""HTTP middleware. Import and use from audit_tracker.main."""

from audit_tracker.middleware.request_id import RequestIDMiddleware

__all__ = ["RequestIDMiddleware"]
