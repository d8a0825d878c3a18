"""FastAPI dependencies for course access.

Provides dependency injection for:
- Access engine services (from app state)
- Post-commit notification dispatch
"""

from collections.abc import Sequence
from typing import Annotated

from fastapi import BackgroundTasks, Depends, HTTPException, Request, status

from src.core.logging import get_logger
from src.notifications.models import PendingNotification
from src.notifications.service import NotificationService

from .decision import AccessDecisionService
from .extension import SubscriptionExtensionService
from .workflow import AccessRequestWorkflow


logger = get_logger(__name__)


def _require_state(request: Request, name: str, label: str):
    service = getattr(request.app.state, name, None)
    if not service:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{label} not available",
        )
    return service


async def get_access_workflow(request: Request) -> AccessRequestWorkflow:
    """Get access request workflow from app state."""
    return _require_state(request, "access_workflow", "Access service")


async def get_access_decisions(request: Request) -> AccessDecisionService:
    """Get access decision service from app state."""
    return _require_state(request, "access_decisions", "Access service")


async def get_extension_service(request: Request) -> SubscriptionExtensionService:
    """Get subscription extension service from app state."""
    return _require_state(request, "extension_service", "Subscription service")


class EffectDispatcher:
    """Schedules pending notifications to run after the response is sent."""

    def __init__(
        self, background_tasks: BackgroundTasks, notifier: NotificationService | None
    ):
        self.background_tasks = background_tasks
        self.notifier = notifier

    def schedule(self, effects: Sequence[PendingNotification]) -> None:
        if not effects:
            return
        if self.notifier is None:
            logger.warning("notifications_skipped", count=len(effects))
            return
        self.background_tasks.add_task(self.notifier.dispatch, list(effects))


async def get_effect_dispatcher(
    request: Request, background_tasks: BackgroundTasks
) -> EffectDispatcher:
    """Get a dispatcher bound to this request's background tasks."""
    notifier = getattr(request.app.state, "notification_service", None)
    return EffectDispatcher(background_tasks, notifier)


# Type aliases for dependency injection
AccessWorkflowDep = Annotated[AccessRequestWorkflow, Depends(get_access_workflow)]
AccessDecisionsDep = Annotated[AccessDecisionService, Depends(get_access_decisions)]
ExtensionServiceDep = Annotated[
    SubscriptionExtensionService, Depends(get_extension_service)
]
EffectDispatcherDep = Annotated[EffectDispatcher, Depends(get_effect_dispatcher)]
