"""Service interfaces (ports) for the application layer."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from audit_tracker.application.dtos.task import TaskStatusChangeEvent


# Notification sink: receives status changes after they are saved
class INotificationSink(Protocol):
    """Protocol for delivering task status-change events (email, in-app, log)."""

    async def publish(self, event: TaskStatusChangeEvent) -> None:
        """Deliver or enqueue the event. Delivery failures are the sink's concern."""
