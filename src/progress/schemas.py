"""Pydantic schemas for lesson progress."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .models import ProgressRecord


class MarkCompletionRequest(BaseModel):
    """Record progress on a lesson."""

    completed: bool = Field(..., description="Whether the lesson is finished")
    position: int = Field(0, ge=0, description="Video resume position in seconds")


class ProgressResponse(BaseModel):
    """A student's progress on a lesson."""

    model_config = ConfigDict(from_attributes=True)

    student_id: UUID
    lesson_id: UUID
    course_id: UUID
    completed: bool
    last_position: int
    watched_at: datetime | None = None
    completed_at: datetime | None = None

    @classmethod
    def from_record(cls, record: ProgressRecord) -> "ProgressResponse":
        """Create response from ProgressRecord entity."""
        return cls.model_validate(record)
