"""Tests for subscription window arithmetic."""

from datetime import UTC, datetime, timedelta

import pytest

from src.access.windows import Window, add_months, add_period, compute_window
from src.core.errors import InvalidOperationError
from src.courses.models import PeriodToken, SubscriptionType


T0 = datetime(2025, 1, 15, 12, 0, tzinfo=UTC)


class TestAddMonths:
    """Calendar month arithmetic."""

    def test_keeps_day_and_time(self) -> None:
        assert add_months(T0, 3) == datetime(2025, 4, 15, 12, 0, tzinfo=UTC)

    def test_clamps_to_end_of_short_month(self) -> None:
        jan_31 = datetime(2025, 1, 31, 8, 30, tzinfo=UTC)
        assert add_months(jan_31, 1) == datetime(2025, 2, 28, 8, 30, tzinfo=UTC)

    def test_clamps_to_leap_day(self) -> None:
        jan_31 = datetime(2024, 1, 31, tzinfo=UTC)
        assert add_months(jan_31, 1) == datetime(2024, 2, 29, tzinfo=UTC)

    def test_rolls_over_year(self) -> None:
        nov_30 = datetime(2025, 11, 30, tzinfo=UTC)
        assert add_months(nov_30, 3) == datetime(2026, 2, 28, tzinfo=UTC)

    def test_twelve_months_is_one_year(self) -> None:
        assert add_months(T0, 12) == datetime(2026, 1, 15, 12, 0, tzinfo=UTC)


class TestAddPeriod:
    """Each subscription period token."""

    @pytest.mark.parametrize(
        "period,expected",
        [
            (PeriodToken.DAYS_30, datetime(2025, 2, 14, 12, 0, tzinfo=UTC)),
            (PeriodToken.MONTHS_3, datetime(2025, 4, 15, 12, 0, tzinfo=UTC)),
            (PeriodToken.MONTHS_6, datetime(2025, 7, 15, 12, 0, tzinfo=UTC)),
            (PeriodToken.YEAR_1, datetime(2026, 1, 15, 12, 0, tzinfo=UTC)),
        ],
    )
    def test_period_lengths(self, period: PeriodToken, expected: datetime) -> None:
        assert add_period(T0, period) == expected

    def test_thirty_days_is_exact_days_not_a_month(self) -> None:
        jan_31 = datetime(2025, 1, 31, tzinfo=UTC)
        assert add_period(jan_31, PeriodToken.DAYS_30) == datetime(
            2025, 3, 2, tzinfo=UTC
        )


class TestComputeWindow:
    """Window granted on approval."""

    def test_trial_ends_after_trial_days(self) -> None:
        window = compute_window(SubscriptionType.TRIAL, 7, None, T0)
        assert window.start == T0
        assert window.end == T0 + timedelta(days=7)

    def test_trial_ignores_period(self) -> None:
        window = compute_window(SubscriptionType.TRIAL, 7, PeriodToken.YEAR_1, T0)
        assert window.end == T0 + timedelta(days=7)

    def test_trial_without_days_is_unbounded(self) -> None:
        assert compute_window(SubscriptionType.TRIAL, None, None, T0).is_unbounded

    def test_paid_with_period(self) -> None:
        window = compute_window(SubscriptionType.PAID, None, PeriodToken.DAYS_30, T0)
        assert window.end == T0 + timedelta(days=30)

    def test_paid_without_period_is_unbounded(self) -> None:
        window = compute_window(SubscriptionType.PAID, None, None, T0)
        assert window.start == T0
        assert window.end is None

    @pytest.mark.parametrize("subscription_type", [SubscriptionType.FREE, None])
    def test_free_and_legacy_are_unbounded(self, subscription_type) -> None:
        window = compute_window(subscription_type, 30, PeriodToken.YEAR_1, T0)
        assert window.is_unbounded

    def test_negative_trial_fails_fast(self) -> None:
        with pytest.raises(InvalidOperationError):
            compute_window(SubscriptionType.TRIAL, -1, None, T0)


class TestWindow:
    def test_end_before_start_is_rejected(self) -> None:
        with pytest.raises(InvalidOperationError):
            Window(start=T0, end=T0 - timedelta(seconds=1))

    def test_empty_window_is_allowed(self) -> None:
        assert Window(start=T0, end=T0).end == T0


class TestPeriodToken:
    def test_parse_known_token(self) -> None:
        assert PeriodToken.parse("3_MONTHS") is PeriodToken.MONTHS_3

    def test_parse_unknown_token(self) -> None:
        with pytest.raises(InvalidOperationError, match="30_DAYS"):
            PeriodToken.parse("2_WEEKS")
