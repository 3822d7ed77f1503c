"""DTOs for application services (no dependency on presentation schemas)."""

from printflow.application.dtos.task import TaskCreate, TransitionResult

__all__ = ["TaskCreate", "TransitionResult"]
