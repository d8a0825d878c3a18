"""FastAPI dependencies for course configuration."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from src.courses.service import CourseConfigReader


async def get_course_reader(request: Request) -> CourseConfigReader:
    """Get course configuration reader from app state."""
    app_state = request.app.state
    if not getattr(app_state, "course_reader", None):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Course service not available",
        )
    return app_state.course_reader


CourseReaderDep = Annotated[CourseConfigReader, Depends(get_course_reader)]
