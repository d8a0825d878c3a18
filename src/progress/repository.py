# ruff: noqa: S608 - All CQL queries use keyspace from config, not user input
"""Lesson progress persistence.

Every write is a lightweight transaction (Paxos compare-and-set) so the
"was it already completed" check is decided by the store, never by the
application:
- ``insert_if_absent``: first progress event for the pair
- ``complete_if_incomplete``: the single false -> true transition
- ``update_position``: resume point, never touches ``completed``
"""

from datetime import datetime
from typing import TYPE_CHECKING, Protocol
from uuid import UUID

from .models import ProgressRecord


if TYPE_CHECKING:
    from cassandra.cluster import Session


class ProgressRepositoryInterface(Protocol):
    """Compare-and-set store contract for lesson progress."""

    async def get(
        self, student_id: UUID, lesson_id: UUID
    ) -> ProgressRecord | None:  # pragma: no cover - Protocol
        ...

    async def insert_if_absent(
        self, record: ProgressRecord
    ) -> bool:  # pragma: no cover - Protocol
        ...

    async def complete_if_incomplete(
        self, student_id: UUID, lesson_id: UUID, position: int, now: datetime
    ) -> bool:  # pragma: no cover - Protocol
        ...

    async def update_position(
        self, student_id: UUID, lesson_id: UUID, position: int, now: datetime
    ) -> bool:  # pragma: no cover - Protocol
        ...


class CassandraProgressRepository:
    """Cassandra-backed lesson progress store."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient queries."""
        self._get = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.lesson_progress
            WHERE student_id = ? AND lesson_id = ?
        """)

        self._insert_if_absent = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.lesson_progress
            (student_id, lesson_id, course_id, completed, last_position,
             watched_at, completed_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            IF NOT EXISTS
        """)

        self._complete_if_incomplete = self.session.prepare(f"""
            UPDATE {self.keyspace}.lesson_progress
            SET completed = true, completed_at = ?, last_position = ?, watched_at = ?
            WHERE student_id = ? AND lesson_id = ?
            IF completed = false
        """)

        self._update_position = self.session.prepare(f"""
            UPDATE {self.keyspace}.lesson_progress
            SET last_position = ?, watched_at = ?
            WHERE student_id = ? AND lesson_id = ?
            IF EXISTS
        """)

    async def get(self, student_id: UUID, lesson_id: UUID) -> ProgressRecord | None:
        """Get a student's progress on a lesson."""
        result = await self.session.aexecute(self._get, [student_id, lesson_id])
        row = result.one()
        return ProgressRecord.from_row(row) if row else None

    async def insert_if_absent(self, record: ProgressRecord) -> bool:
        """Create the record unless one exists.

        Returns:
            True if this call created the record
        """
        result = await self.session.aexecute(
            self._insert_if_absent,
            [
                record.student_id,
                record.lesson_id,
                record.course_id,
                record.completed,
                record.last_position,
                record.watched_at,
                record.completed_at,
            ],
        )
        return bool(result.was_applied)

    async def complete_if_incomplete(
        self, student_id: UUID, lesson_id: UUID, position: int, now: datetime
    ) -> bool:
        """Flip ``completed`` to true if it is currently false.

        Returns:
            True if this call performed the transition
        """
        result = await self.session.aexecute(
            self._complete_if_incomplete,
            [now, position, now, student_id, lesson_id],
        )
        return bool(result.was_applied)

    async def update_position(
        self, student_id: UUID, lesson_id: UUID, position: int, now: datetime
    ) -> bool:
        """Record the resume position of an existing record.

        Returns:
            False if the record does not exist
        """
        result = await self.session.aexecute(
            self._update_position, [position, now, student_id, lesson_id]
        )
        return bool(result.was_applied)
