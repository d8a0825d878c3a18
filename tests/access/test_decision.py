"""Tests for access decisions."""

from datetime import timedelta
from uuid import uuid4

import pytest

from src.access.decision import evaluate
from src.access.models import AccessReason, AccessRecord, AccessStatus
from src.auth.permissions import Actor, UserRole
from src.core.errors import AccessDeniedError, NotFoundError
from src.courses.models import LessonRef
from tests.fakes import T0


def approved(student_id, course_id, start=T0, end=None) -> AccessRecord:
    return AccessRecord(
        student_id=student_id,
        course_id=course_id,
        status=AccessStatus.APPROVED,
        requested_at=start,
        approved_at=start,
        approved_by=uuid4(),
        access_start_date=start,
        access_end_date=end,
    )


class TestEvaluate:
    """Decision from a record alone."""

    def test_no_record(self) -> None:
        decision = evaluate(None, T0)
        assert not decision.granted
        assert decision.reason == AccessReason.NO_RECORD

    @pytest.mark.parametrize(
        "status,reason",
        [
            (AccessStatus.PENDING, AccessReason.PENDING),
            (AccessStatus.REJECTED, AccessReason.REJECTED),
        ],
    )
    def test_not_approved(self, status, reason) -> None:
        record = AccessRecord(uuid4(), uuid4(), status, requested_at=T0)
        decision = evaluate(record, T0)
        assert not decision.granted
        assert decision.reason == reason

    def test_unbounded_window(self) -> None:
        decision = evaluate(approved(uuid4(), uuid4()), T0 + timedelta(days=3650))
        assert decision.granted
        assert decision.reason == AccessReason.GRANTED

    def test_end_is_exclusive(self) -> None:
        end = T0 + timedelta(days=30)
        record = approved(uuid4(), uuid4(), end=end)

        assert evaluate(record, end - timedelta(microseconds=1)).granted
        at_end = evaluate(record, end)
        assert not at_end.granted
        assert at_end.reason == AccessReason.EXPIRED

    def test_start_is_inclusive(self) -> None:
        start = T0 + timedelta(days=1)
        record = approved(uuid4(), uuid4(), start=start)

        assert evaluate(record, start).granted
        before = evaluate(record, start - timedelta(microseconds=1))
        assert before.reason == AccessReason.NOT_STARTED


class TestAccessDecisionService:
    """Course and lesson checks against the store."""

    @pytest.mark.asyncio
    async def test_course_access_granted(
        self, decisions, access_repo, paid_course, student_id
    ) -> None:
        access_repo.seed(approved(student_id, paid_course.course_id))

        decision = await decisions.has_access_to_course(student_id, paid_course.course_id)

        assert decision.granted
        assert decision.record is not None

    @pytest.mark.asyncio
    async def test_unknown_course(self, decisions, student_id) -> None:
        with pytest.raises(NotFoundError):
            await decisions.has_access_to_course(student_id, uuid4())

    @pytest.mark.asyncio
    async def test_unknown_lesson(self, decisions, student_id) -> None:
        with pytest.raises(NotFoundError):
            await decisions.has_access_to_lesson(student_id, uuid4())

    @pytest.mark.asyncio
    async def test_expired_access_denied(
        self, decisions, access_repo, clock, paid_course, lesson, student_id
    ) -> None:
        access_repo.seed(
            approved(student_id, paid_course.course_id, end=T0 + timedelta(days=30))
        )
        clock.advance(timedelta(days=30))

        decision = await decisions.has_access_to_lesson(student_id, lesson.lesson_id)

        assert not decision.granted
        assert decision.reason == AccessReason.EXPIRED

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [None, AccessStatus.REJECTED, AccessStatus.PENDING])
    async def test_trial_lesson_overrides_record(
        self, decisions, access_repo, course_reader, make_course, student_id, status
    ) -> None:
        trial_lesson_id = uuid4()
        course = make_course(trial_lesson_id=trial_lesson_id)
        course_reader.add_lesson(LessonRef(trial_lesson_id, course.course_id))
        if status is not None:
            access_repo.seed(
                AccessRecord(student_id, course.course_id, status, requested_at=T0)
            )

        decision = await decisions.has_access_to_lesson(student_id, trial_lesson_id)

        assert decision.granted
        assert decision.reason == AccessReason.TRIAL_LESSON

    @pytest.mark.asyncio
    async def test_trial_lesson_does_not_open_other_lessons(
        self, decisions, course_reader, make_course, student_id
    ) -> None:
        course = make_course(trial_lesson_id=uuid4())
        other = course_reader.add_lesson(LessonRef(uuid4(), course.course_id))

        decision = await decisions.has_access_to_lesson(student_id, other.lesson_id)

        assert decision.reason == AccessReason.NO_RECORD

    @pytest.mark.asyncio
    async def test_require_lesson_access_raises_with_reason(
        self, decisions, lesson, student_id
    ) -> None:
        with pytest.raises(AccessDeniedError) as exc_info:
            await decisions.require_lesson_access(student_id, lesson.lesson_id)

        assert exc_info.value.reason == AccessReason.NO_RECORD
        assert exc_info.value.code == "access_denied"


class TestCheckForViewer:
    """Owners and admins bypass student rules."""

    @pytest.mark.asyncio
    async def test_owner(self, decisions, paid_course, teacher) -> None:
        decision = await decisions.check_for_viewer(teacher, paid_course)
        assert decision.granted
        assert decision.reason == AccessReason.COURSE_OWNER

    @pytest.mark.asyncio
    async def test_admin(self, decisions, paid_course, admin) -> None:
        decision = await decisions.check_for_viewer(admin, paid_course)
        assert decision.reason == AccessReason.ADMIN_ROLE

    @pytest.mark.asyncio
    async def test_other_teacher_uses_student_rules(self, decisions, paid_course) -> None:
        stranger = Actor(id=uuid4(), role=UserRole.TEACHER)
        decision = await decisions.check_for_viewer(stranger, paid_course)
        assert not decision.granted
        assert decision.reason == AccessReason.NO_RECORD
