"""HTTP endpoints for course access.

Provides:
- POST   /v1/access/courses/{course_id}/request - Student requests access
- GET    /v1/access/my - Student's access records
- GET    /v1/access/courses/{course_id}/check - Check course access
- GET    /v1/access/lessons/{lesson_id}/check - Check lesson access
- POST   /v1/access/courses/{course_id}/extend - Extend a PAID subscription
- Teacher/Admin endpoints for deciding, assigning, revoking and listing

Domain errors propagate to the application's AccessError handler.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, status

from src.auth.dependencies import CurrentUser, StudentUser, TeacherUser
from src.courses.dependencies import CourseReaderDep
from src.courses.service import require_course, require_lesson

from .dependencies import (
    AccessDecisionsDep,
    AccessWorkflowDep,
    EffectDispatcherDep,
    ExtensionServiceDep,
)
from .models import AccessStatus
from .schemas import (
    AccessRecordListResponse,
    AccessRecordResponse,
    AssignAccessRequest,
    CheckAccessResponse,
    DecisionRequest,
    ExtendSubscriptionRequest,
    ExtensionResponse,
)


router = APIRouter(prefix="/v1/access", tags=["access"])


# ==============================================================================
# Student Endpoints
# ==============================================================================


@router.post(
    "/courses/{course_id}/request",
    response_model=AccessRecordResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request access to a course",
)
async def request_course_access(
    course_id: UUID,
    workflow: AccessWorkflowDep,
    courses: CourseReaderDep,
    dispatcher: EffectDispatcherDep,
    current_user: StudentUser,
) -> AccessRecordResponse:
    """Request access to a course.

    Free courses are approved immediately; otherwise the request waits for
    the course teacher.
    """
    course = await require_course(courses, course_id)
    transition = await workflow.request_access(current_user.id, course)
    dispatcher.schedule(transition.effects)
    return AccessRecordResponse.from_record(transition.record)


@router.get(
    "/my",
    response_model=AccessRecordListResponse,
    summary="List my access records",
)
async def list_my_access(
    workflow: AccessWorkflowDep,
    current_user: CurrentUser,
) -> AccessRecordListResponse:
    """List the current user's access records across courses."""
    records = await workflow.list_student_records(current_user.id)
    return AccessRecordListResponse.from_records(records)


@router.get(
    "/courses/{course_id}/check",
    response_model=CheckAccessResponse,
    summary="Check access to a course",
)
async def check_course_access(
    course_id: UUID,
    decisions: AccessDecisionsDep,
    courses: CourseReaderDep,
    current_user: CurrentUser,
) -> CheckAccessResponse:
    """Check whether the current user may view a course.

    Course owners and admins always have access.
    """
    course = await require_course(courses, course_id)
    decision = await decisions.check_for_viewer(current_user, course)
    return CheckAccessResponse.from_decision(decision)


@router.get(
    "/lessons/{lesson_id}/check",
    response_model=CheckAccessResponse,
    summary="Check access to a lesson",
)
async def check_lesson_access(
    lesson_id: UUID,
    decisions: AccessDecisionsDep,
    courses: CourseReaderDep,
    current_user: CurrentUser,
) -> CheckAccessResponse:
    """Check whether the current user may view a lesson.

    The course's trial lesson is always viewable.
    """
    lesson, course = await require_lesson(courses, lesson_id)
    decision = await decisions.check_for_viewer(current_user, course)
    if not decision.granted:
        decision = await decisions.check_lesson(current_user.id, lesson, course)
    return CheckAccessResponse.from_decision(decision)


@router.post(
    "/courses/{course_id}/extend",
    response_model=ExtensionResponse,
    summary="Extend a paid subscription",
)
async def extend_subscription(
    course_id: UUID,
    payload: ExtendSubscriptionRequest,
    extensions: ExtensionServiceDep,
    courses: CourseReaderDep,
    dispatcher: EffectDispatcherDep,
    current_user: StudentUser,
) -> ExtensionResponse:
    """Extend the current student's subscription by one period."""
    course = await require_course(courses, course_id)
    result = await extensions.extend(current_user.id, course, payload.period)
    dispatcher.schedule(result.effects)
    return ExtensionResponse.from_result(result)


# ==============================================================================
# Teacher / Admin Endpoints
# ==============================================================================


@router.get(
    "/courses/{course_id}/requests",
    response_model=AccessRecordListResponse,
    summary="List access records of a course",
)
async def list_course_requests(
    course_id: UUID,
    workflow: AccessWorkflowDep,
    courses: CourseReaderDep,
    current_user: TeacherUser,
    status_filter: Annotated[AccessStatus | None, Query(alias="status")] = None,
) -> AccessRecordListResponse:
    """List a course's access records (owner or admin), newest first."""
    course = await require_course(courses, course_id)
    records = await workflow.list_course_requests(current_user, course, status_filter)
    return AccessRecordListResponse.from_records(records)


@router.post(
    "/courses/{course_id}/students/{student_id}/decision",
    response_model=AccessRecordResponse,
    summary="Approve or reject an access request",
)
async def decide_access(
    course_id: UUID,
    student_id: UUID,
    payload: DecisionRequest,
    workflow: AccessWorkflowDep,
    courses: CourseReaderDep,
    dispatcher: EffectDispatcherDep,
    current_user: TeacherUser,
) -> AccessRecordResponse:
    """Approve (computing the access window) or reject a student's request."""
    course = await require_course(courses, course_id)
    transition = await workflow.decide(
        current_user, student_id, course, payload.action, payload.period
    )
    dispatcher.schedule(transition.effects)
    return AccessRecordResponse.from_record(transition.record)


@router.put(
    "/courses/{course_id}/students/{student_id}",
    response_model=AccessRecordResponse,
    summary="Assign access directly",
)
async def assign_access(
    course_id: UUID,
    student_id: UUID,
    payload: AssignAccessRequest,
    workflow: AccessWorkflowDep,
    courses: CourseReaderDep,
    dispatcher: EffectDispatcherDep,
    current_user: TeacherUser,
) -> AccessRecordResponse:
    """Grant a student access with an explicit window."""
    course = await require_course(courses, course_id)
    transition = await workflow.assign_directly(
        current_user,
        student_id,
        course,
        start=payload.access_start_date,
        end=payload.access_end_date,
    )
    dispatcher.schedule(transition.effects)
    return AccessRecordResponse.from_record(transition.record)


@router.delete(
    "/courses/{course_id}/students/{student_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Revoke access",
)
async def revoke_access(
    course_id: UUID,
    student_id: UUID,
    workflow: AccessWorkflowDep,
    courses: CourseReaderDep,
    dispatcher: EffectDispatcherDep,
    current_user: TeacherUser,
) -> None:
    """Remove a student's access record."""
    course = await require_course(courses, course_id)
    transition = await workflow.revoke(current_user, student_id, course)
    dispatcher.schedule(transition.effects)
