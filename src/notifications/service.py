# ruff: noqa: S608 - All CQL queries use keyspace from config, not user input
"""Notification dispatch.

Fire-and-forget sink for the access engine's pending effects:
- Persist each notification and bump the unread counter (Cassandra)
- Publish it on the user's Redis channel for real-time delivery

Delivery is best-effort. Failures are logged and never reach the caller, so
they can neither roll back nor delay an access decision.
"""

import contextlib
import json
from collections.abc import Iterable
from typing import TYPE_CHECKING

from src.core.logging import get_logger
from src.core.redis import notification_channel

from .models import Notification, PendingNotification


if TYPE_CHECKING:
    from cassandra.cluster import Session
    from redis.asyncio import Redis


logger = get_logger(__name__)


class NotificationService:
    """Stores and publishes access notifications."""

    def __init__(self, session: "Session", keyspace: str, redis: "Redis | None" = None):
        """Initialize with Cassandra session and optional Redis."""
        self.session = session
        self.keyspace = keyspace
        self.redis = redis
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient queries."""
        self._insert_notification = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.notifications
            (user_id, notification_id, type, title, message, course_id,
             reference_url, is_read, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._incr_unread = self.session.prepare(f"""
            UPDATE {self.keyspace}.notification_unread_counts
            SET count = count + 1
            WHERE user_id = ?
        """)

    async def dispatch(self, effects: Iterable[PendingNotification]) -> int:
        """Deliver pending notifications, one failure never blocks the others.

        Returns:
            Number of notifications stored successfully
        """
        delivered = 0
        for pending in effects:
            try:
                await self.create_notification(Notification.from_pending(pending))
                delivered += 1
            except Exception:
                logger.exception(
                    "notification_dispatch_failed",
                    recipient_id=str(pending.recipient_id),
                    notification_type=pending.type.value,
                )
        return delivered

    async def create_notification(self, notification: Notification) -> Notification:
        """Store a notification and publish it for real-time clients."""
        await self.session.aexecute(
            self._insert_notification,
            [
                notification.user_id,
                notification.notification_id,
                notification.type.value,
                notification.title,
                notification.message,
                notification.course_id,
                notification.reference_url,
                notification.is_read,
                notification.created_at,
            ],
        )
        await self.session.aexecute(self._incr_unread, [notification.user_id])

        await self._publish_notification(notification)

        logger.info(
            "notification_created",
            user_id=str(notification.user_id),
            notification_type=notification.type.value,
        )
        return notification

    async def _publish_notification(self, notification: Notification) -> None:
        """Publish notification to Redis Pub/Sub for real-time delivery."""
        if not self.redis:
            return

        message = {"type": "notification", "data": notification.to_dict()}

        # Non-critical: the notification is already stored
        with contextlib.suppress(Exception):
            await self.redis.publish(
                notification_channel(str(notification.user_id)), json.dumps(message)
            )
