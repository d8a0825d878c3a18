"""Lesson completion service.

Records lesson progress for students with access and awards the completion
reward exactly once per (student, lesson).

Exactly-once is enforced by the store: every write is a compare-and-set and
only the caller whose false -> true transition is applied increments the
ledger. A caller that loses a race re-reads and retries, so concurrent
duplicate completions from any number of processes award a single reward.
"""

from dataclasses import replace
from uuid import UUID

from src.access.decision import AccessDecisionService
from src.core.clock import Clock
from src.core.errors import ConflictError
from src.core.logging import get_logger
from src.rewards.ledger import RewardLedgerInterface

from .models import ProgressRecord
from .repository import ProgressRepositoryInterface


logger = get_logger(__name__)

# Default coins credited on a lesson's first completion
DEFAULT_REWARD_COINS = 10

# Compare-and-set attempts before giving up under contention
DEFAULT_MAX_ATTEMPTS = 5


class ProgressService:
    """Service for lesson completion and resume positions."""

    def __init__(
        self,
        repository: ProgressRepositoryInterface,
        ledger: RewardLedgerInterface,
        decisions: AccessDecisionService,
        clock: Clock,
        reward_coins: int = DEFAULT_REWARD_COINS,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        self.repository = repository
        self.ledger = ledger
        self.decisions = decisions
        self.clock = clock
        self.reward_coins = reward_coins
        self.max_attempts = max_attempts

    async def mark_completion(
        self,
        student_id: UUID,
        lesson_id: UUID,
        completed: bool,
        position: int = 0,
    ) -> ProgressRecord:
        """Record progress on a lesson, rewarding the first completion.

        ``completed=False`` only updates the position: a completed lesson
        stays completed.

        Raises:
            NotFoundError: If the lesson does not exist
            AccessDeniedError: If the student may not view the lesson
            ConflictError: If the record kept changing under contention
        """
        lesson, _ = await self.decisions.require_lesson_access(student_id, lesson_id)

        for attempt in range(1, self.max_attempts + 1):
            now = self.clock.now()
            existing = await self.repository.get(student_id, lesson_id)

            if existing is None:
                record = ProgressRecord(
                    student_id=student_id,
                    lesson_id=lesson_id,
                    course_id=lesson.course_id,
                    completed=completed,
                    last_position=position,
                    watched_at=now,
                    completed_at=now if completed else None,
                )
                if await self.repository.insert_if_absent(record):
                    if completed:
                        await self._award(record)
                    return record

            elif completed and not existing.completed:
                if await self.repository.complete_if_incomplete(
                    student_id, lesson_id, position, now
                ):
                    record = replace(
                        existing,
                        completed=True,
                        completed_at=now,
                        last_position=position,
                        watched_at=now,
                    )
                    await self._award(record)
                    return record

            elif await self.repository.update_position(
                student_id, lesson_id, position, now
            ):
                return replace(existing, last_position=position, watched_at=now)

            logger.debug(
                "progress_write_contended",
                student_id=str(student_id),
                lesson_id=str(lesson_id),
                attempt=attempt,
            )

        logger.warning(
            "progress_write_conflict",
            student_id=str(student_id),
            lesson_id=str(lesson_id),
            attempts=self.max_attempts,
        )
        raise ConflictError("Progress was updated concurrently, please retry")

    async def _award(self, record: ProgressRecord) -> None:
        await self.ledger.increment(record.student_id, self.reward_coins)
        logger.info(
            "lesson_completed",
            student_id=str(record.student_id),
            lesson_id=str(record.lesson_id),
            course_id=str(record.course_id),
            coins=self.reward_coins,
        )
