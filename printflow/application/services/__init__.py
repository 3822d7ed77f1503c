"""Application services (use cases over the repository ports)."""

from printflow.application.services.live_query import LiveQueryManager, Subscription
from printflow.application.services.notification_dispatcher import (
    DispatchReport,
    NotificationDispatcher,
    recipient_role_for,
)
from printflow.application.services.notification_service import NotificationService
from printflow.application.services.subscription_router import (
    SubscriptionRouter,
    visible_statuses,
)
from printflow.application.services.task_service import TaskService
from printflow.application.services.workflow_engine import WorkflowEngine

__all__ = [
    "DispatchReport",
    "LiveQueryManager",
    "NotificationDispatcher",
    "NotificationService",
    "Subscription",
    "SubscriptionRouter",
    "TaskService",
    "WorkflowEngine",
    "recipient_role_for",
    "visible_statuses",
]
