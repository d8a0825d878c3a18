"""Notifications module.

Best-effort delivery of the notifications produced by access state
transitions (requests, approvals, rejections, revocations, extensions).
"""

from src.notifications.models import (
    NOTIFICATIONS_TABLES_CQL,
    Notification,
    NotificationType,
    PendingNotification,
)
from src.notifications.service import NotificationService


__all__ = [
    "NOTIFICATIONS_TABLES_CQL",
    "Notification",
    "NotificationService",
    "NotificationType",
    "PendingNotification",
]
