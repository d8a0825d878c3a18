"""Access request lifecycle.

State machine of an AccessRecord:
- (none) --request--> PENDING, or APPROVED when the course is free
- PENDING/any --approve--> APPROVED with a computed window
- PENDING/any --reject--> REJECTED, window cleared
- REJECTED --request--> PENDING (fresh request)
- (any) --assign--> APPROVED with an explicit window
- (any) --revoke--> (none)

Every operation validates before writing and returns an ``AccessTransition``:
the committed record plus the notifications the caller dispatches afterwards.
"""

from datetime import datetime
from uuid import UUID

from src.auth.permissions import Actor, can_manage_course
from src.core.clock import Clock, ensure_utc_aware
from src.core.errors import ConflictError, ForbiddenError, NotFoundError
from src.core.logging import get_logger
from src.courses.models import CourseConfig, PeriodToken
from src.notifications.models import (
    access_approved,
    access_rejected,
    access_requested,
    access_revoked,
)

from .models import (
    SYSTEM_ACTOR_ID,
    AccessRecord,
    AccessStatus,
    AccessTransition,
    DecisionAction,
)
from .repository import AccessRepositoryInterface
from .windows import Window, compute_window


logger = get_logger(__name__)


class AccessRequestWorkflow:
    """Drives request, decision, assignment and revocation of course access."""

    def __init__(self, repository: AccessRepositoryInterface, clock: Clock):
        self.repository = repository
        self.clock = clock

    # ==========================================================================
    # Student Operations
    # ==========================================================================

    async def request_access(
        self, student_id: UUID, course: CourseConfig
    ) -> AccessTransition:
        """Request access to a course.

        Free courses (price exactly zero) are approved immediately with an
        unbounded window. Other courses create a PENDING request for the
        teacher. A previously rejected request may be submitted again.

        Raises:
            ConflictError: If a request is pending or access is approved
        """
        existing = await self.repository.get(student_id, course.course_id)
        if existing is not None and existing.status != AccessStatus.REJECTED:
            raise ConflictError(
                "Access already approved"
                if existing.status == AccessStatus.APPROVED
                else "Access request already pending"
            )

        now = self.clock.now()
        if course.is_free:
            record = AccessRecord(
                student_id=student_id,
                course_id=course.course_id,
                status=AccessStatus.APPROVED,
                requested_at=now,
                approved_at=now,
                approved_by=SYSTEM_ACTOR_ID,
                access_start_date=now,
            )
        else:
            record = AccessRecord(
                student_id=student_id,
                course_id=course.course_id,
                status=AccessStatus.PENDING,
                requested_at=now,
            )

        if existing is None:
            applied = await self.repository.create_if_absent(record)
        else:
            applied = await self.repository.replace_if_status(
                record, AccessStatus.REJECTED
            )
        if not applied:
            # Lost the race against a concurrent request for the same pair
            raise ConflictError("Access request already exists")

        logger.info(
            "access_requested",
            student_id=str(student_id),
            course_id=str(course.course_id),
            status=record.status.value,
            auto_approved=course.is_free,
        )

        if course.is_free:
            effects = [access_approved(student_id, course.course_id, course.title)]
        else:
            effects = [
                access_requested(
                    course.teacher_id, student_id, course.course_id, course.title
                )
            ]
        return AccessTransition(record=record, effects=effects)

    async def list_student_records(self, student_id: UUID) -> list[AccessRecord]:
        """List a student's own access records."""
        return await self.repository.list_by_student(student_id)

    # ==========================================================================
    # Teacher / Admin Operations
    # ==========================================================================

    async def decide(
        self,
        actor: Actor,
        student_id: UUID,
        course: CourseConfig,
        action: DecisionAction,
        period: PeriodToken | str | None = None,
    ) -> AccessTransition:
        """Approve or reject a student's access record.

        On approval the window is computed from the course configuration
        anchored at now. PAID courses use ``period``; without one the access
        is unbounded. Rejection clears the approval and window fields.

        Raises:
            ForbiddenError: If actor neither owns the course nor is admin
            NotFoundError: If the student has no record for the course
            InvalidOperationError: If ``period`` is not a known token
        """
        self._ensure_can_manage(actor, course)
        token = PeriodToken.parse(period) if period is not None else None

        record = await self._require_record(student_id, course.course_id)
        now = self.clock.now()

        if action == DecisionAction.APPROVE:
            window = compute_window(
                course.subscription_type, course.trial_period_days, token, now
            )
            updated = record.with_changes(
                status=AccessStatus.APPROVED,
                approved_at=now,
                approved_by=actor.id,
                access_start_date=window.start,
                access_end_date=window.end,
            )
            effects = [
                access_approved(student_id, course.course_id, course.title, window.end)
            ]
        else:
            updated = record.with_changes(
                status=AccessStatus.REJECTED,
                approved_at=None,
                approved_by=None,
                access_start_date=None,
                access_end_date=None,
            )
            effects = [access_rejected(student_id, course.course_id, course.title)]

        await self.repository.save(updated)

        logger.info(
            "access_decided",
            student_id=str(student_id),
            course_id=str(course.course_id),
            decided_by=str(actor.id),
            action=action.value,
            period=token.value if token else None,
            access_end_date=updated.access_end_date.isoformat()
            if updated.access_end_date
            else None,
        )
        return AccessTransition(record=updated, effects=effects)

    async def assign_directly(
        self,
        actor: Actor,
        student_id: UUID,
        course: CourseConfig,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> AccessTransition:
        """Grant access with an explicit window, creating or overwriting the record.

        ``start`` defaults to now; ``end=None`` means unbounded.

        Raises:
            ForbiddenError: If actor neither owns the course nor is admin
            InvalidOperationError: If ``end`` is before ``start``
        """
        self._ensure_can_manage(actor, course)

        now = self.clock.now()
        window = Window(
            start=ensure_utc_aware(start) or now, end=ensure_utc_aware(end)
        )

        existing = await self.repository.get(student_id, course.course_id)
        record = AccessRecord(
            student_id=student_id,
            course_id=course.course_id,
            status=AccessStatus.APPROVED,
            requested_at=existing.requested_at if existing else now,
            approved_at=now,
            approved_by=actor.id,
            access_start_date=window.start,
            access_end_date=window.end,
        )
        await self.repository.save(record)

        logger.info(
            "access_assigned",
            student_id=str(student_id),
            course_id=str(course.course_id),
            assigned_by=str(actor.id),
            replaced=existing is not None,
        )
        return AccessTransition(
            record=record,
            effects=[
                access_approved(student_id, course.course_id, course.title, window.end)
            ],
        )

    async def revoke(
        self, actor: Actor, student_id: UUID, course: CourseConfig
    ) -> AccessTransition:
        """Remove a student's access record.

        Returns:
            Transition holding the record as it was before deletion

        Raises:
            ForbiddenError: If actor neither owns the course nor is admin
            NotFoundError: If the student has no record for the course
        """
        self._ensure_can_manage(actor, course)

        record = await self._require_record(student_id, course.course_id)
        await self.repository.delete(student_id, course.course_id)

        logger.info(
            "access_revoked",
            student_id=str(student_id),
            course_id=str(course.course_id),
            revoked_by=str(actor.id),
            previous_status=record.status.value,
        )
        return AccessTransition(
            record=record,
            effects=[access_revoked(student_id, course.course_id, course.title)],
        )

    async def list_course_requests(
        self,
        actor: Actor,
        course: CourseConfig,
        status: AccessStatus | None = None,
    ) -> list[AccessRecord]:
        """List a course's access records for its owner or an admin.

        Raises:
            ForbiddenError: If actor neither owns the course nor is admin
        """
        self._ensure_can_manage(actor, course)
        records = await self.repository.list_by_course(course.course_id, status)
        return sorted(records, key=lambda r: r.requested_at, reverse=True)

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @staticmethod
    def _ensure_can_manage(actor: Actor, course: CourseConfig) -> None:
        if not can_manage_course(actor, course):
            raise ForbiddenError("Only the course owner or an admin can manage access")

    async def _require_record(self, student_id: UUID, course_id: UUID) -> AccessRecord:
        record = await self.repository.get(student_id, course_id)
        if record is None:
            raise NotFoundError("Access record not found")
        return record
