"""Subscription extension for PAID courses.

The new end is one period after the current end while the subscription is
still running, or one period after now once it has lapsed (or when it has no
end at all). Payment is handled elsewhere; each call extends again.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from src.core.clock import Clock
from src.core.errors import InvalidOperationError, NotFoundError
from src.core.logging import get_logger
from src.courses.models import CourseConfig, PeriodToken, SubscriptionType
from src.notifications.models import PendingNotification, subscription_extended

from .models import AccessRecord, AccessStatus
from .repository import AccessRepositoryInterface
from .windows import add_period


logger = get_logger(__name__)


@dataclass(frozen=True)
class ExtensionResult:
    """Outcome of a subscription extension."""

    record: AccessRecord
    new_end: datetime
    price: Decimal
    period: PeriodToken
    effects: list[PendingNotification] = field(default_factory=list)


class SubscriptionExtensionService:
    """Extends the access window of an existing enrollment."""

    def __init__(self, repository: AccessRepositoryInterface, clock: Clock):
        self.repository = repository
        self.clock = clock

    async def extend(
        self,
        student_id: UUID,
        course: CourseConfig,
        period: PeriodToken | str,
    ) -> ExtensionResult:
        """Extend a student's subscription by one period.

        Raises:
            InvalidOperationError: If the course is not PAID, the period is
                unknown, or no positive price is configured for it
            NotFoundError: If the student has no record for the course
        """
        token = PeriodToken.parse(period)

        if course.subscription_type != SubscriptionType.PAID:
            raise InvalidOperationError("Only paid courses can be extended")

        price = course.price_for(token)
        if price is None or price <= 0:
            raise InvalidOperationError(
                f"No price configured for subscription period {token.value}"
            )

        record = await self.repository.get(student_id, course.course_id)
        if record is None:
            raise NotFoundError("No enrollment found for this course")

        now = self.clock.now()
        current_end = record.access_end_date
        anchor = current_end if current_end is not None and current_end > now else now
        new_end = add_period(anchor, token)

        updated = record.with_changes(
            status=AccessStatus.APPROVED,
            access_start_date=record.access_start_date or now,
            access_end_date=new_end,
        )
        await self.repository.save(updated)

        logger.info(
            "subscription_extended",
            student_id=str(student_id),
            course_id=str(course.course_id),
            period=token.value,
            previous_end=current_end.isoformat() if current_end else None,
            new_end=new_end.isoformat(),
            price=str(price),
        )
        return ExtensionResult(
            record=updated,
            new_end=new_end,
            price=price,
            period=token,
            effects=[
                subscription_extended(
                    student_id, course.course_id, course.title, new_end
                )
            ],
        )
