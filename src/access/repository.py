# ruff: noqa: S608 - All CQL queries use keyspace from config, not user input
"""Access record persistence.

``AccessRepositoryInterface`` is the store contract the workflow depends on.
``CassandraAccessRepository`` is the shipped binding:
- ``course_access``: main table, partitioned by student
- ``course_access_by_course``: lookup table for the teacher dashboard

Conditional writes (request creation and re-request after rejection) use
lightweight transactions so two concurrent requests cannot both create a
record. Unconditional writes update both tables in a LOGGED batch.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Protocol
from uuid import UUID

from cassandra.query import BatchStatement, BatchType

from .models import AccessRecord, AccessStatus


if TYPE_CHECKING:
    from cassandra.cluster import Session


class AccessRepositoryInterface(Protocol):
    """Store contract for access records (one per student and course)."""

    async def get(
        self, student_id: UUID, course_id: UUID
    ) -> AccessRecord | None:  # pragma: no cover - Protocol
        ...

    async def create_if_absent(
        self, record: AccessRecord
    ) -> bool:  # pragma: no cover - Protocol
        ...

    async def replace_if_status(
        self, record: AccessRecord, expected: AccessStatus
    ) -> bool:  # pragma: no cover - Protocol
        ...

    async def save(self, record: AccessRecord) -> None:  # pragma: no cover - Protocol
        ...

    async def delete(
        self, student_id: UUID, course_id: UUID
    ) -> bool:  # pragma: no cover - Protocol
        ...

    async def list_by_course(
        self, course_id: UUID, status: AccessStatus | None = None
    ) -> list[AccessRecord]:  # pragma: no cover - Protocol
        ...

    async def list_by_student(
        self, student_id: UUID
    ) -> list[AccessRecord]:  # pragma: no cover - Protocol
        ...


class CassandraAccessRepository:
    """Cassandra-backed access record store."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient queries."""
        self._get = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.course_access
            WHERE student_id = ? AND course_id = ?
        """)

        self._list_by_student = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.course_access
            WHERE student_id = ?
        """)

        self._list_by_course = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.course_access_by_course
            WHERE course_id = ?
        """)

        # Compare-and-set writes (Paxos)
        self._insert_if_absent = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.course_access
            (student_id, course_id, status, requested_at, approved_at,
             approved_by, access_start_date, access_end_date, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            IF NOT EXISTS
        """)

        self._update_if_status = self.session.prepare(f"""
            UPDATE {self.keyspace}.course_access
            SET status = ?, requested_at = ?, approved_at = ?, approved_by = ?,
                access_start_date = ?, access_end_date = ?, updated_at = ?
            WHERE student_id = ? AND course_id = ?
            IF status = ?
        """)

        self._delete_if_exists = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.course_access
            WHERE student_id = ? AND course_id = ?
            IF EXISTS
        """)

        # Unconditional writes
        self._upsert = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.course_access
            (student_id, course_id, status, requested_at, approved_at,
             approved_by, access_start_date, access_end_date, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._upsert_by_course = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.course_access_by_course
            (course_id, student_id, status, requested_at, approved_at,
             approved_by, access_start_date, access_end_date)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._delete_by_course = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.course_access_by_course
            WHERE course_id = ? AND student_id = ?
        """)

    # ==========================================================================
    # Reads
    # ==========================================================================

    async def get(self, student_id: UUID, course_id: UUID) -> AccessRecord | None:
        """Get the access record of a student for a course."""
        result = await self.session.aexecute(self._get, [student_id, course_id])
        row = result.one()
        return AccessRecord.from_row(row) if row else None

    async def list_by_student(self, student_id: UUID) -> list[AccessRecord]:
        """List every access record of a student."""
        result = await self.session.aexecute(self._list_by_student, [student_id])
        return [AccessRecord.from_row(row) for row in result]

    async def list_by_course(
        self, course_id: UUID, status: AccessStatus | None = None
    ) -> list[AccessRecord]:
        """List access records of a course, optionally filtered by status."""
        result = await self.session.aexecute(self._list_by_course, [course_id])
        records = [AccessRecord.from_row(row) for row in result]
        if status is not None:
            records = [r for r in records if r.status == status]
        return records

    # ==========================================================================
    # Writes
    # ==========================================================================

    async def create_if_absent(self, record: AccessRecord) -> bool:
        """Insert a record only when none exists for the pair.

        Returns:
            True if this call created the record
        """
        record.check_invariants()
        result = await self.session.aexecute(
            self._insert_if_absent, self._main_values(record)
        )
        if not result.was_applied:
            return False

        await self.session.aexecute(self._upsert_by_course, self._lookup_values(record))
        return True

    async def replace_if_status(
        self, record: AccessRecord, expected: AccessStatus
    ) -> bool:
        """Overwrite a record only while its stored status equals ``expected``.

        Returns:
            True if the stored record was replaced
        """
        record.check_invariants()
        result = await self.session.aexecute(
            self._update_if_status,
            [
                record.status.value,
                record.requested_at,
                record.approved_at,
                record.approved_by,
                record.access_start_date,
                record.access_end_date,
                datetime.now(UTC),
                record.student_id,
                record.course_id,
                expected.value,
            ],
        )
        if not result.was_applied:
            return False

        await self.session.aexecute(self._upsert_by_course, self._lookup_values(record))
        return True

    async def save(self, record: AccessRecord) -> None:
        """Write the full record to both tables atomically."""
        record.check_invariants()

        batch = BatchStatement(batch_type=BatchType.LOGGED)
        batch.add(self._upsert, self._main_values(record))
        batch.add(self._upsert_by_course, self._lookup_values(record))
        await self.session.aexecute(batch)

    async def delete(self, student_id: UUID, course_id: UUID) -> bool:
        """Delete a record.

        Returns:
            True if a record existed and was deleted
        """
        result = await self.session.aexecute(
            self._delete_if_exists, [student_id, course_id]
        )
        await self.session.aexecute(self._delete_by_course, [course_id, student_id])
        return bool(result.was_applied)

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @staticmethod
    def _main_values(record: AccessRecord) -> list:
        return [
            record.student_id,
            record.course_id,
            record.status.value,
            record.requested_at,
            record.approved_at,
            record.approved_by,
            record.access_start_date,
            record.access_end_date,
            datetime.now(UTC),
        ]

    @staticmethod
    def _lookup_values(record: AccessRecord) -> list:
        return [
            record.course_id,
            record.student_id,
            record.status.value,
            record.requested_at,
            record.approved_at,
            record.approved_by,
            record.access_start_date,
            record.access_end_date,
        ]
