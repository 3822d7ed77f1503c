"""Domain exceptions for the PrintFlow application.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class PrintflowException(Exception):
    """Base exception for all PrintFlow application errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for an error response body."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(PrintflowException):
    """Raised when input validation fails (e.g. forbidden or malformed field)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class UnauthenticatedException(PrintflowException):
    """Raised when no valid actor identity accompanies the request."""

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message, "UNAUTHENTICATED")


class PermissionDeniedException(PrintflowException):
    """Raised for an illegal transition, an unauthorized delete, or an unknown role."""

    def __init__(
        self,
        message: str = "Permission denied",
        *,
        role: str | None = None,
        action: str | None = None,
        **details_extra: Any,
    ) -> None:
        """Initialize with message and optional role/action context.

        Args:
            message: Human-readable description.
            role: Role of the actor that was refused.
            action: Action that was attempted (e.g. 'delete', 'transition').
            **details_extra: Optional keys merged into details (e.g. from_status).
        """
        details: dict[str, Any] = {}
        if role:
            details["role"] = role
        if action:
            details["action"] = action
        details.update(details_extra)
        super().__init__(message, "PERMISSION_DENIED", details)


class ResourceNotFoundException(PrintflowException):
    """Raised when a requested task or notification does not exist."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'task', 'notification').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class ConflictException(PrintflowException):
    """Raised when an update carries a stale updated_at precondition."""

    def __init__(self, task_id: str) -> None:
        super().__init__(
            "Task was updated by another request; reload and retry.",
            "CONFLICT",
            {"task_id": task_id},
        )
