"""Notification sinks for task status changes: log-only, in-memory recording and post-commit."""

from __future__ import annotations

from collections import deque

from audit_tracker.application.dtos.task import TaskStatusChangeEvent
from audit_tracker.application.interfaces.services import INotificationSink
from audit_tracker.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

RECORDING_SINK_MAX_EVENTS = 1000


class LogOnlyNotificationSink:
    """INotificationSink implementation that logs instead of sending email.

    Use when no mail or in-app channel is configured.
    """

    async def publish(self, event: TaskStatusChangeEvent) -> None:
        logger.info(
            "Task notify: task %s %s -> %s by user %s at %s",
            event.task_id,
            event.from_status.value,
            event.to_status.value,
            event.actor_id,
            event.timestamp.isoformat(),
        )


class RecordingNotificationSink:
    """Keeps the most recent published events in order (notification_sink='memory' and tests).

    Only the last max_events are retained; older events are dropped.
    """

    def __init__(self, max_events: int = RECORDING_SINK_MAX_EVENTS) -> None:
        self.events: deque[TaskStatusChangeEvent] = deque(maxlen=max_events)

    async def publish(self, event: TaskStatusChangeEvent) -> None:
        self.events.append(event)

    def clear(self) -> None:
        self.events.clear()


class PostCommitNotificationSink:
    """Buffers events until the surrounding SQL transaction has committed.

    The write dependency calls flush() only after a successful commit, so a
    rolled-back transition is never announced. Delivery failures are logged.
    """

    def __init__(self, sink: INotificationSink) -> None:
        self._sink = sink
        self._pending: list[TaskStatusChangeEvent] = []

    async def publish(self, event: TaskStatusChangeEvent) -> None:
        self._pending.append(event)

    async def flush(self) -> None:
        pending, self._pending = self._pending, []
        for event in pending:
            try:
                await self._sink.publish(event)
            except Exception:
                logger.exception(
                    "Notification sink failed for task %s (%s -> %s)",
                    event.task_id,
                    event.from_status.value,
                    event.to_status.value,
                )


def build_notification_sink(kind: str) -> LogOnlyNotificationSink | RecordingNotificationSink:
    """Return the sink for settings.notification_sink ('log' or 'memory')."""
    if kind == "memory":
        return RecordingNotificationSink()
    if kind == "log":
        return LogOnlyNotificationSink()
    raise ValueError(f"Unknown notification sink: {kind}")
