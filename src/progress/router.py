"""HTTP endpoints for lesson progress.

Provides:
- POST /v1/progress/lessons/{lesson_id} - Record position / completion
"""

from uuid import UUID

from fastapi import APIRouter

from src.auth.dependencies import StudentUser

from .dependencies import ProgressServiceDep
from .schemas import MarkCompletionRequest, ProgressResponse


router = APIRouter(prefix="/v1/progress", tags=["progress"])


@router.post(
    "/lessons/{lesson_id}",
    response_model=ProgressResponse,
    summary="Record lesson progress",
)
async def mark_lesson_progress(
    lesson_id: UUID,
    payload: MarkCompletionRequest,
    service: ProgressServiceDep,
    current_user: StudentUser,
) -> ProgressResponse:
    """Record the resume position and, optionally, completion of a lesson.

    The first completion of a lesson credits the student's reward balance.
    Requires access to the lesson.
    """
    record = await service.mark_completion(
        current_user.id, lesson_id, payload.completed, payload.position
    )
    return ProgressResponse.from_record(record)
