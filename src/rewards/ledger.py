# ruff: noqa: S608 - All CQL queries use keyspace from config, not user input
"""Student reward ledger.

Coins are kept in a Cassandra COUNTER column per student. This service only
ever increments it; the caller is responsible for incrementing once per
rewarded event.
"""

from typing import TYPE_CHECKING, Protocol
from uuid import UUID

from src.core.logging import get_logger


if TYPE_CHECKING:
    from cassandra.cluster import Session


logger = get_logger(__name__)


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

STUDENT_REWARDS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.student_rewards (
    student_id UUID PRIMARY KEY,
    coins COUNTER
)
"""

REWARDS_TABLES_CQL = [
    STUDENT_REWARDS_TABLE_CQL,
]


class RewardLedgerInterface(Protocol):
    """Increment-only reward counter."""

    async def increment(
        self, student_id: UUID, amount: int
    ) -> None:  # pragma: no cover - Protocol
        ...

    async def balance(self, student_id: UUID) -> int:  # pragma: no cover - Protocol
        ...


class RewardLedger:
    """Cassandra COUNTER backed reward ledger."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        self._increment = self.session.prepare(f"""
            UPDATE {self.keyspace}.student_rewards
            SET coins = coins + ?
            WHERE student_id = ?
        """)

        self._get_balance = self.session.prepare(f"""
            SELECT coins FROM {self.keyspace}.student_rewards
            WHERE student_id = ?
        """)

    async def increment(self, student_id: UUID, amount: int) -> None:
        """Add ``amount`` coins to a student's balance."""
        if amount <= 0:
            raise ValueError("Reward amount must be positive")

        await self.session.aexecute(self._increment, [amount, student_id])
        logger.info("reward_awarded", student_id=str(student_id), amount=amount)

    async def balance(self, student_id: UUID) -> int:
        """Get a student's coin balance (0 when never rewarded)."""
        result = await self.session.aexecute(self._get_balance, [student_id])
        row = result.one()
        return row.coins if row and row.coins is not None else 0
