"""Access decisions: may this student view this course or lesson right now?

Read-only. A lesson is viewable when it is the course's designated trial
lesson (regardless of any record) or when the student holds an APPROVED
record whose half-open window ``[start, end)`` contains the current instant.
"""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from src.auth.permissions import Actor, can_manage_course, is_admin
from src.core.clock import Clock
from src.core.errors import AccessDeniedError
from src.core.logging import get_logger
from src.courses.models import CourseConfig, LessonRef
from src.courses.service import (
    CourseConfigReaderInterface,
    require_course,
    require_lesson,
)

from .models import AccessReason, AccessRecord, AccessStatus
from .repository import AccessRepositoryInterface


logger = get_logger(__name__)


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of an access check."""

    granted: bool
    reason: AccessReason
    record: AccessRecord | None = None


def evaluate(record: AccessRecord | None, now: datetime) -> AccessDecision:
    """Decide access from a stored record alone (no trial lesson override)."""
    if record is None:
        return AccessDecision(granted=False, reason=AccessReason.NO_RECORD)

    if record.status == AccessStatus.PENDING:
        return AccessDecision(False, AccessReason.PENDING, record)
    if record.status == AccessStatus.REJECTED:
        return AccessDecision(False, AccessReason.REJECTED, record)

    # End is exclusive: access stops at the exact end instant
    if record.access_end_date is not None and now >= record.access_end_date:
        return AccessDecision(False, AccessReason.EXPIRED, record)
    if record.access_start_date is not None and now < record.access_start_date:
        return AccessDecision(False, AccessReason.NOT_STARTED, record)

    return AccessDecision(True, AccessReason.GRANTED, record)


class AccessDecisionService:
    """Answers course and lesson access questions against the record store."""

    def __init__(
        self,
        repository: AccessRepositoryInterface,
        courses: CourseConfigReaderInterface,
        clock: Clock,
    ):
        self.repository = repository
        self.courses = courses
        self.clock = clock

    # ==========================================================================
    # By configuration
    # ==========================================================================

    async def check_course(
        self, student_id: UUID, course: CourseConfig
    ) -> AccessDecision:
        """Check a student's access to a course."""
        record = await self.repository.get(student_id, course.course_id)
        return evaluate(record, self.clock.now())

    async def check_lesson(
        self, student_id: UUID, lesson: LessonRef, course: CourseConfig
    ) -> AccessDecision:
        """Check a student's access to a lesson of ``course``."""
        if course.trial_lesson_id is not None and course.trial_lesson_id == lesson.lesson_id:
            return AccessDecision(granted=True, reason=AccessReason.TRIAL_LESSON)
        return await self.check_course(student_id, course)

    async def check_for_viewer(self, actor: Actor, course: CourseConfig) -> AccessDecision:
        """Check course access for any caller.

        Course owners and admins always see their courses; everyone else goes
        through the student rules.
        """
        if can_manage_course(actor, course):
            reason = (
                AccessReason.ADMIN_ROLE if is_admin(actor.role) else AccessReason.COURSE_OWNER
            )
            return AccessDecision(granted=True, reason=reason)
        return await self.check_course(actor.id, course)

    # ==========================================================================
    # By ID
    # ==========================================================================

    async def has_access_to_course(
        self, student_id: UUID, course_id: UUID
    ) -> AccessDecision:
        """Check access to a course by ID.

        Raises:
            NotFoundError: If the course does not exist
        """
        course = await require_course(self.courses, course_id)
        return await self.check_course(student_id, course)

    async def has_access_to_lesson(
        self, student_id: UUID, lesson_id: UUID
    ) -> AccessDecision:
        """Check access to a lesson by ID.

        Raises:
            NotFoundError: If the lesson or its course does not exist
        """
        lesson, course = await require_lesson(self.courses, lesson_id)
        return await self.check_lesson(student_id, lesson, course)

    async def require_lesson_access(
        self, student_id: UUID, lesson_id: UUID
    ) -> tuple[LessonRef, AccessDecision]:
        """Check lesson access and raise when denied.

        Raises:
            NotFoundError: If the lesson or its course does not exist
            AccessDeniedError: If access is not granted
        """
        lesson, course = await require_lesson(self.courses, lesson_id)
        decision = await self.check_lesson(student_id, lesson, course)
        if not decision.granted:
            logger.info(
                "lesson_access_denied",
                student_id=str(student_id),
                lesson_id=str(lesson_id),
                reason=decision.reason.value,
            )
            raise AccessDeniedError(decision.reason)
        return lesson, decision
