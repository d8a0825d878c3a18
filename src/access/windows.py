"""Subscription window arithmetic.

Pure functions, no I/O. Month and year periods use calendar arithmetic: the
day of month is kept and clamped to the last day of the target month
(Jan 31 + 1 month = Feb 28/29), never a fixed multiple of 30 days.
"""

import calendar
from dataclasses import dataclass
from datetime import datetime, timedelta

from src.core.errors import InvalidOperationError
from src.courses.models import PeriodToken, SubscriptionType


MONTHS_PER_YEAR = 12

# Calendar months added by each month-based token
_PERIOD_MONTHS: dict[PeriodToken, int] = {
    PeriodToken.MONTHS_3: 3,
    PeriodToken.MONTHS_6: 6,
    PeriodToken.YEAR_1: MONTHS_PER_YEAR,
}

_PERIOD_DAYS: dict[PeriodToken, int] = {
    PeriodToken.DAYS_30: 30,
}


@dataclass(frozen=True)
class Window:
    """Half-open access window ``[start, end)``; ``end=None`` is unbounded."""

    start: datetime
    end: datetime | None = None

    def __post_init__(self) -> None:
        if self.end is not None and self.end < self.start:
            raise InvalidOperationError("Access end date cannot be before start date")

    @property
    def is_unbounded(self) -> bool:
        return self.end is None


def add_months(moment: datetime, months: int) -> datetime:
    """Add calendar months, clamping the day to the target month's length."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // MONTHS_PER_YEAR
    month = month_index % MONTHS_PER_YEAR + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def add_period(anchor: datetime, period: PeriodToken) -> datetime:
    """Return ``anchor`` moved forward by one subscription period."""
    if period in _PERIOD_DAYS:
        return anchor + timedelta(days=_PERIOD_DAYS[period])
    return add_months(anchor, _PERIOD_MONTHS[period])


def compute_window(
    subscription_type: SubscriptionType | None,
    trial_period_days: int | None,
    period: PeriodToken | None,
    anchor: datetime,
) -> Window:
    """Compute the access window granted on approval.

    Args:
        subscription_type: Course subscription type (None = legacy, unbounded)
        trial_period_days: Trial length, only used for TRIAL courses
        period: Purchased period, only used for PAID courses
        anchor: Instant the window starts at

    Returns:
        Window starting at ``anchor``. TRIAL with days and PAID with a period
        are bounded; everything else is unbounded (including PAID without a
        period, which preserves the legacy approval behavior).

    Raises:
        InvalidOperationError: If the inputs would produce ``end < start``
    """
    end: datetime | None = None

    if subscription_type == SubscriptionType.TRIAL and trial_period_days:
        end = anchor + timedelta(days=trial_period_days)
    elif subscription_type == SubscriptionType.PAID and period is not None:
        end = add_period(anchor, period)

    return Window(start=anchor, end=end)
