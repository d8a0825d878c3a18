"""Course subscription configuration consumed by the access engine.

Course management owns these tables; the access engine only reads them:
- Subscription type (FREE, TRIAL, PAID) and trial length
- Price table keyed by subscription period
- Designated trial lesson (always viewable sales preview)
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from src.core.errors import InvalidOperationError


class SubscriptionType(str, Enum):
    """How a course grants time-bounded access."""

    FREE = "FREE"
    TRIAL = "TRIAL"
    PAID = "PAID"


class PeriodToken(str, Enum):
    """Purchasable subscription periods."""

    DAYS_30 = "30_DAYS"
    MONTHS_3 = "3_MONTHS"
    MONTHS_6 = "6_MONTHS"
    YEAR_1 = "1_YEAR"

    @classmethod
    def parse(cls, value: "str | PeriodToken") -> "PeriodToken":
        """Validate a raw period token.

        Raises:
            InvalidOperationError: If the token is unknown
        """
        try:
            return cls(value)
        except ValueError as e:
            allowed = ", ".join(token.value for token in cls)
            raise InvalidOperationError(
                f"Invalid subscription period {value!r}. Use one of: {allowed}"
            ) from e


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

COURSE_CONFIG_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.course_configs (
    course_id UUID PRIMARY KEY,
    teacher_id UUID,
    title TEXT,
    price DECIMAL,
    subscription_type TEXT,
    trial_period_days INT,
    price_30_days DECIMAL,
    price_3_months DECIMAL,
    price_6_months DECIMAL,
    price_1_year DECIMAL,
    trial_lesson_id UUID,
    is_visible BOOLEAN
)
"""

LESSON_REFS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.lesson_refs (
    lesson_id UUID PRIMARY KEY,
    course_id UUID
)
"""

COURSES_TABLES_CQL = [
    COURSE_CONFIG_TABLE_CQL,
    LESSON_REFS_TABLE_CQL,
]

# Column name for each period's price
PRICE_COLUMNS: dict[PeriodToken, str] = {
    PeriodToken.DAYS_30: "price_30_days",
    PeriodToken.MONTHS_3: "price_3_months",
    PeriodToken.MONTHS_6: "price_6_months",
    PeriodToken.YEAR_1: "price_1_year",
}


# ==============================================================================
# Entities
# ==============================================================================


@dataclass(frozen=True)
class CourseConfig:
    """Read-only subscription configuration of a course."""

    course_id: UUID
    teacher_id: UUID
    title: str = ""
    price: Decimal | None = None
    subscription_type: SubscriptionType | None = None
    trial_period_days: int | None = None
    prices: dict[PeriodToken, Decimal] = field(default_factory=dict)
    trial_lesson_id: UUID | None = None
    is_visible: bool = True

    @property
    def is_free(self) -> bool:
        """Free courses (price exactly zero) are approved on request."""
        return self.price is not None and self.price == 0

    def price_for(self, period: PeriodToken) -> Decimal | None:
        """Price of a subscription period, None when not offered."""
        return self.prices.get(period)

    @classmethod
    def from_row(cls, row: Any) -> "CourseConfig":
        """Create instance from Cassandra row."""
        prices = {}
        for token, column in PRICE_COLUMNS.items():
            value = getattr(row, column, None)
            if value is not None:
                prices[token] = value

        subscription_type = getattr(row, "subscription_type", None)
        is_visible = getattr(row, "is_visible", None)
        return cls(
            course_id=row.course_id,
            teacher_id=row.teacher_id,
            title=row.title or "",
            price=row.price,
            subscription_type=SubscriptionType(subscription_type)
            if subscription_type
            else None,
            trial_period_days=row.trial_period_days,
            prices=prices,
            trial_lesson_id=row.trial_lesson_id,
            is_visible=is_visible if is_visible is not None else True,
        )


@dataclass(frozen=True)
class LessonRef:
    """Minimal lesson identity: which course it belongs to."""

    lesson_id: UUID
    course_id: UUID

    @classmethod
    def from_row(cls, row: Any) -> "LessonRef":
        return cls(lesson_id=row.lesson_id, course_id=row.course_id)
