"""Domain enumerations for the PrintFlow application.

Enums represent fixed sets of domain values (roles, task status, priority).
"""

from enum import Enum

from printflow.domain.exceptions import PermissionDeniedException


class Role(str, Enum):
    """Organizational role of an actor. Determines transitions and visibility."""

    INTAKE = "intake"
    DESIGN = "design"
    MANAGEMENT = "management"
    PRODUCTION = "production"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid role values as strings."""
        return [role.value for role in cls]

    @classmethod
    def parse(cls, raw: str | None) -> "Role":
        """Return the Role for raw, or raise PermissionDeniedException.

        A role outside the four known roles is a permission failure, not a
        validation failure: the identity provider vouched for the actor but
        the actor has no standing in this workflow.
        """
        try:
            return cls(raw)
        except ValueError:
            raise PermissionDeniedException(
                f"Unknown role: {raw!r}", role=str(raw), action="act"
            ) from None


class TaskStatus(str, Enum):
    """Task lifecycle status."""

    NEW = "new"
    DESIGN = "design"
    REVIEW = "review"
    APPROVED = "approved"
    PRODUCTION = "production"
    COMPLETED = "completed"
    REJECTED = "rejected"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid status values as strings."""
        return [status.value for status in cls]

    @property
    def label(self) -> str:
        """Human-readable label used in notification messages."""
        return _STATUS_LABELS[self]


_STATUS_LABELS: dict[TaskStatus, str] = {
    TaskStatus.NEW: "New task created",
    TaskStatus.DESIGN: "Task moved to Design",
    TaskStatus.REVIEW: "Task ready for review",
    TaskStatus.APPROVED: "Task approved",
    TaskStatus.PRODUCTION: "Task moved to Production",
    TaskStatus.COMPLETED: "Task completed",
    TaskStatus.REJECTED: "Task rejected",
}


class Priority(str, Enum):
    """Task priority."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
