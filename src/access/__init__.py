"""Course access and subscription lifecycle.

Provides:
- Access decisions for courses and lessons (trial lesson, time windows)
- Access request workflow (request, approve/reject, assign, revoke)
- Subscription window arithmetic and paid extensions
"""

from .decision import AccessDecision, AccessDecisionService, evaluate
from .extension import ExtensionResult, SubscriptionExtensionService
from .models import (
    ACCESS_TABLES_CQL,
    SYSTEM_ACTOR_ID,
    AccessReason,
    AccessRecord,
    AccessStatus,
    AccessTransition,
    DecisionAction,
)
from .repository import AccessRepositoryInterface, CassandraAccessRepository
from .windows import Window, add_months, add_period, compute_window
from .workflow import AccessRequestWorkflow


__all__ = [
    "ACCESS_TABLES_CQL",
    "SYSTEM_ACTOR_ID",
    "AccessDecision",
    "AccessDecisionService",
    "AccessReason",
    "AccessRecord",
    "AccessRepositoryInterface",
    "AccessRequestWorkflow",
    "AccessStatus",
    "AccessTransition",
    "CassandraAccessRepository",
    "DecisionAction",
    "ExtensionResult",
    "SubscriptionExtensionService",
    "Window",
    "add_months",
    "add_period",
    "compute_window",
    "evaluate",
]
