"""Domain enumerations for the Audit Tracker application.

Enums represent fixed sets of domain values (task status, workflow actions,
user roles). Values match the wire/storage strings.
"""

from enum import Enum


class _ValuesMixin:
    """Adds a values() helper to str enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings (e.g. for validation or serialization)."""
        return [member.value for member in cls]  # type: ignore[attr-defined]


class TaskStatus(_ValuesMixin, str, Enum):
    """Task workflow status.

    PENDING is the initial state; APPROVED is the success terminal;
    REJECTED is re-entrant (the maker may start again).
    """

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    SUBMITTED = "submitted"
    CHECKER1_APPROVED = "checker1-approved"
    APPROVED = "approved"
    REJECTED = "rejected"


class TaskAction(_ValuesMixin, str, Enum):
    """Action an actor requests against a task's status."""

    START = "start"
    SUBMIT = "submit"
    CHECKER1_APPROVE = "checker1-approve"
    CHECKER2_APPROVE = "checker2-approve"
    REJECT = "reject"


class UserRole(_ValuesMixin, str, Enum):
    """Actor role. A user's primary role decides visibility and permitted transitions."""

    ADMIN = "admin"
    MAKER = "maker"
    CHECKER1 = "checker1"
    CHECKER2 = "checker2"


class TaskPriority(_ValuesMixin, str, Enum):
    """Task priority set by the admin at creation."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskFrequency(_ValuesMixin, str, Enum):
    """Recurrence period of a task."""

    ONCE = "once"
    DAILY = "daily"
    WEEKLY = "weekly"
    BI_WEEKLY = "bi-weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class ObservationStatus(_ValuesMixin, str, Enum):
    """Whether audit observations were found; the maker must set it before submitting."""

    YES = "yes"
    NO = "no"
    MIXED = "mixed"


class EscalationPriority(_ValuesMixin, str, Enum):
    """Derived urgency of an escalated task (overdue or rejected)."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        """Sort key: higher is more urgent."""
        return _ESCALATION_RANK[self]


_ESCALATION_RANK = {
    EscalationPriority.LOW: 0,
    EscalationPriority.MEDIUM: 1,
    EscalationPriority.HIGH: 2,
    EscalationPriority.CRITICAL: 3,
}
