"""Infrastructure services: notification sinks."""

from audit_tracker.infrastructure.services.notification_sink import (
    LogOnlyNotificationSink,
    PostCommitNotificationSink,
    RecordingNotificationSink,
    build_notification_sink,
)

__all__ = [
    "LogOnlyNotificationSink",
    "PostCommitNotificationSink",
    "RecordingNotificationSink",
    "build_notification_sink",
]
