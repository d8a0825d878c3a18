"""Course access models and Cassandra schema.

One AccessRecord per (student, course) pair tracks the enrollment status and
the validity window:
- PENDING: Student requested access, waiting for the teacher
- APPROVED: Access granted for ``[access_start_date, access_end_date)``
- REJECTED: Request refused (window cleared)
Revocation deletes the record instead of adding a status.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import UUID

from src.core.clock import ensure_utc_aware
from src.core.errors import InvalidOperationError


if TYPE_CHECKING:
    from cassandra.cluster import Row

    from src.notifications.models import PendingNotification


# Approver recorded for free-course auto approvals
SYSTEM_ACTOR_ID = UUID(int=0)


class AccessStatus(str, Enum):
    """Enrollment status of an access record."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class AccessReason(str, Enum):
    """Why a view was granted or denied."""

    GRANTED = "GRANTED"  # Approved record with a valid window
    TRIAL_LESSON = "TRIAL_LESSON"  # Course's designated preview lesson
    COURSE_OWNER = "COURSE_OWNER"  # Teacher viewing their own course
    ADMIN_ROLE = "ADMIN_ROLE"  # Platform admin
    NO_RECORD = "NO_RECORD"  # Never requested (or revoked)
    PENDING = "PENDING"  # Waiting for approval
    REJECTED = "REJECTED"  # Request was refused
    EXPIRED = "EXPIRED"  # Had access, window ended
    NOT_STARTED = "NOT_STARTED"  # Window starts in the future


class DecisionAction(str, Enum):
    """Teacher/admin decision on a pending request."""

    APPROVE = "approve"
    REJECT = "reject"


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

COURSE_ACCESS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.course_access (
    student_id UUID,
    course_id UUID,
    status TEXT,
    requested_at TIMESTAMP,
    approved_at TIMESTAMP,
    approved_by UUID,
    access_start_date TIMESTAMP,
    access_end_date TIMESTAMP,
    updated_at TIMESTAMP,
    PRIMARY KEY ((student_id), course_id)
)
"""

# Lookup: students of a course, for the teacher dashboard
COURSE_ACCESS_BY_COURSE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.course_access_by_course (
    course_id UUID,
    student_id UUID,
    status TEXT,
    requested_at TIMESTAMP,
    approved_at TIMESTAMP,
    approved_by UUID,
    access_start_date TIMESTAMP,
    access_end_date TIMESTAMP,
    PRIMARY KEY ((course_id), student_id)
)
"""

ACCESS_TABLES_CQL = [
    COURSE_ACCESS_TABLE_CQL,
    COURSE_ACCESS_BY_COURSE_TABLE_CQL,
]


# ==============================================================================
# Entity
# ==============================================================================


@dataclass(frozen=True)
class AccessRecord:
    """A student's enrollment in a course and its access window."""

    student_id: UUID
    course_id: UUID
    status: AccessStatus
    requested_at: datetime
    approved_at: datetime | None = None
    approved_by: UUID | None = None
    access_start_date: datetime | None = None
    access_end_date: datetime | None = None

    def check_invariants(self) -> "AccessRecord":
        """Validate the record before it is written.

        Raises:
            InvalidOperationError: If the record is structurally invalid
        """
        if self.status == AccessStatus.APPROVED and self.access_start_date is None:
            raise InvalidOperationError("Approved access requires a start date")
        if (
            self.access_start_date is not None
            and self.access_end_date is not None
            and self.access_end_date < self.access_start_date
        ):
            raise InvalidOperationError("Access end date cannot be before start date")
        return self

    def with_changes(self, **changes: Any) -> "AccessRecord":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    @classmethod
    def from_row(cls, row: "Row") -> "AccessRecord":
        """Create instance from Cassandra row."""
        return cls(
            student_id=row.student_id,
            course_id=row.course_id,
            status=AccessStatus(row.status),
            requested_at=ensure_utc_aware(row.requested_at),
            approved_at=ensure_utc_aware(row.approved_at),
            approved_by=row.approved_by,
            access_start_date=ensure_utc_aware(row.access_start_date),
            access_end_date=ensure_utc_aware(row.access_end_date),
        )


@dataclass(frozen=True)
class AccessTransition:
    """Committed record plus notifications to dispatch after the commit."""

    record: AccessRecord
    effects: list["PendingNotification"] = field(default_factory=list)
