"""Database models for access notifications.

Access state transitions produce ``PendingNotification`` effects. They are
dispatched after the state commit and stored here:
- COURSE_REQUEST: Teacher is told a student requested access
- COURSE_APPROVED: Student gained (or renewed) access
- COURSE_REJECTED: Student's request was refused
- COURSE_REVOKED: Student's enrollment was removed
- SUBSCRIPTION_EXTENDED: Student's paid window was extended
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4


class NotificationType(str, Enum):
    """Types of access notifications."""

    COURSE_REQUEST = "course_request"
    COURSE_APPROVED = "course_approved"
    COURSE_REJECTED = "course_rejected"
    COURSE_REVOKED = "course_revoked"
    SUBSCRIPTION_EXTENDED = "subscription_extended"


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

NOTIFICATION_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.notifications (
    user_id UUID,
    notification_id UUID,
    type TEXT,
    title TEXT,
    message TEXT,
    course_id UUID,
    reference_url TEXT,
    is_read BOOLEAN,
    created_at TIMESTAMP,
    PRIMARY KEY ((user_id), created_at, notification_id)
) WITH CLUSTERING ORDER BY (created_at DESC, notification_id ASC)
"""

UNREAD_COUNT_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.notification_unread_counts (
    user_id UUID PRIMARY KEY,
    count COUNTER
)
"""

NOTIFICATIONS_TABLES_CQL = [
    NOTIFICATION_TABLE_CQL,
    UNREAD_COUNT_TABLE_CQL,
]


# ==============================================================================
# Entities
# ==============================================================================


@dataclass(frozen=True)
class PendingNotification:
    """Notification produced by a state transition, not yet delivered."""

    recipient_id: UUID
    type: NotificationType
    title: str
    message: str
    course_id: UUID | None = None
    reference_url: str | None = None


@dataclass
class Notification:
    """Stored notification."""

    notification_id: UUID
    user_id: UUID
    type: NotificationType
    title: str
    message: str
    course_id: UUID | None
    reference_url: str | None
    is_read: bool
    created_at: datetime

    @classmethod
    def from_pending(cls, pending: PendingNotification) -> "Notification":
        """Materialize a pending effect as a new unread notification."""
        return cls(
            notification_id=uuid4(),
            user_id=pending.recipient_id,
            type=pending.type,
            title=pending.title,
            message=pending.message,
            course_id=pending.course_id,
            reference_url=pending.reference_url,
            is_read=False,
            created_at=datetime.now(UTC),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (Pub/Sub payload)."""
        return {
            "id": str(self.notification_id),
            "type": self.type.value,
            "title": self.title,
            "message": self.message,
            "course_id": str(self.course_id) if self.course_id else None,
            "reference_url": self.reference_url,
            "is_read": self.is_read,
            "created_at": self.created_at.isoformat(),
        }


# ==============================================================================
# Factory Functions
# ==============================================================================


def _course_url(course_id: UUID) -> str:
    return f"/courses/{course_id}"


def access_requested(
    teacher_id: UUID, student_id: UUID, course_id: UUID, course_title: str
) -> PendingNotification:
    """Tell the teacher a student asked for access."""
    return PendingNotification(
        recipient_id=teacher_id,
        type=NotificationType.COURSE_REQUEST,
        title="New course access request",
        message=f"Student {student_id} requested access to \"{course_title}\"",
        course_id=course_id,
        reference_url="/teacher/dashboard",
    )


def access_approved(
    student_id: UUID,
    course_id: UUID,
    course_title: str,
    access_end_date: datetime | None = None,
) -> PendingNotification:
    """Tell the student access was granted."""
    until = (
        f" until {access_end_date.date().isoformat()}"
        if access_end_date
        else " with no end date"
    )
    return PendingNotification(
        recipient_id=student_id,
        type=NotificationType.COURSE_APPROVED,
        title="Course access granted",
        message=f"You now have access to \"{course_title}\"{until}",
        course_id=course_id,
        reference_url=_course_url(course_id),
    )


def access_rejected(
    student_id: UUID, course_id: UUID, course_title: str
) -> PendingNotification:
    """Tell the student the request was refused."""
    return PendingNotification(
        recipient_id=student_id,
        type=NotificationType.COURSE_REJECTED,
        title="Access request rejected",
        message=f"Your request for \"{course_title}\" was rejected",
        course_id=course_id,
        reference_url=_course_url(course_id),
    )


def access_revoked(
    student_id: UUID, course_id: UUID, course_title: str
) -> PendingNotification:
    """Tell the student the enrollment was removed."""
    return PendingNotification(
        recipient_id=student_id,
        type=NotificationType.COURSE_REVOKED,
        title="Course access revoked",
        message=f"Your access to \"{course_title}\" was revoked",
        course_id=course_id,
        reference_url="/courses",
    )


def subscription_extended(
    student_id: UUID, course_id: UUID, course_title: str, new_end_date: datetime
) -> PendingNotification:
    """Tell the student the subscription now ends later."""
    return PendingNotification(
        recipient_id=student_id,
        type=NotificationType.SUBSCRIPTION_EXTENDED,
        title="Subscription extended",
        message=(
            f"Your subscription to \"{course_title}\" was extended "
            f"until {new_end_date.date().isoformat()}"
        ),
        course_id=course_id,
        reference_url=_course_url(course_id),
    )
