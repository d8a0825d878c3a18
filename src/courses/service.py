# ruff: noqa: S608 - All CQL queries use keyspace from config, not user input
"""Course configuration reader.

Loads the subscription configuration of courses and the course a lesson
belongs to. Never writes: course management owns these tables.
"""

from typing import TYPE_CHECKING, Protocol
from uuid import UUID

from src.core.errors import NotFoundError

from .models import CourseConfig, LessonRef


if TYPE_CHECKING:
    from cassandra.cluster import Session


class CourseConfigReaderInterface(Protocol):
    """Read-only course configuration contract used by the access engine."""

    async def get_course(
        self, course_id: UUID
    ) -> CourseConfig | None:  # pragma: no cover - Protocol
        ...

    async def get_lesson(
        self, lesson_id: UUID
    ) -> LessonRef | None:  # pragma: no cover - Protocol
        ...


class CourseConfigReader:
    """Cassandra-backed course configuration reader."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        self._get_course = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.course_configs WHERE course_id = ?"
        )
        self._get_lesson = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.lesson_refs WHERE lesson_id = ?"
        )

    async def get_course(self, course_id: UUID) -> CourseConfig | None:
        """Get course configuration by ID."""
        result = await self.session.aexecute(self._get_course, [course_id])
        row = result.one()
        return CourseConfig.from_row(row) if row else None

    async def get_lesson(self, lesson_id: UUID) -> LessonRef | None:
        """Get the lesson's course reference."""
        result = await self.session.aexecute(self._get_lesson, [lesson_id])
        row = result.one()
        return LessonRef.from_row(row) if row else None


async def require_course(
    reader: CourseConfigReaderInterface, course_id: UUID
) -> CourseConfig:
    """Load a course or raise NotFoundError."""
    course = await reader.get_course(course_id)
    if course is None:
        raise NotFoundError("Course not found")
    return course


async def require_lesson(
    reader: CourseConfigReaderInterface, lesson_id: UUID
) -> tuple[LessonRef, CourseConfig]:
    """Load a lesson together with its course or raise NotFoundError."""
    lesson = await reader.get_lesson(lesson_id)
    if lesson is None:
        raise NotFoundError("Lesson not found")
    return lesson, await require_course(reader, lesson.course_id)
