"""Database models for lesson completion tracking.

One ProgressRecord per (student, lesson):
- last_position: Video resume point in seconds
- completed: Monotonic flag, flips false -> true once and stays true
- watched_at: Last time progress was recorded

The first false -> true transition is the only event that earns a reward.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from src.core.clock import ensure_utc_aware


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

# Partition key: student_id, so a student's progress is read in one query
LESSON_PROGRESS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.lesson_progress (
    student_id UUID,
    lesson_id UUID,
    course_id UUID,
    completed BOOLEAN,
    last_position INT,
    watched_at TIMESTAMP,
    completed_at TIMESTAMP,
    PRIMARY KEY ((student_id), lesson_id)
)
"""

PROGRESS_TABLES_CQL = [
    LESSON_PROGRESS_TABLE_CQL,
]


# ==============================================================================
# Entity
# ==============================================================================


@dataclass(frozen=True)
class ProgressRecord:
    """A student's progress on a single lesson."""

    student_id: UUID
    lesson_id: UUID
    course_id: UUID
    completed: bool = False
    last_position: int = 0
    watched_at: datetime | None = None
    completed_at: datetime | None = None

    @classmethod
    def from_row(cls, row: Any) -> "ProgressRecord":
        """Create instance from Cassandra row."""
        return cls(
            student_id=row.student_id,
            lesson_id=row.lesson_id,
            course_id=row.course_id,
            completed=bool(row.completed),
            last_position=row.last_position or 0,
            watched_at=ensure_utc_aware(row.watched_at),
            completed_at=ensure_utc_aware(row.completed_at),
        )
