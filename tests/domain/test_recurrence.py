"""Tests for paytrack.domain.recurrence pure functions."""

from datetime import date, timedelta

import pytest

from paytrack.domain.models import Frequency
from paytrack.domain.recurrence import first_occurrence_on_or_after, next_occurrence, occurrences_until


class TestNextOccurrence:
    """Tests for next_occurrence."""

    def test_weekly_and_biweekly(self) -> None:
        """Should add 7 and 14 days."""
        assert next_occurrence(date(2024, 12, 27), Frequency.WEEKLY) == date(2025, 1, 3)
        assert next_occurrence(date(2024, 2, 23), Frequency.BIWEEKLY) == date(2024, 3, 8)

    @pytest.mark.parametrize(
        ("current", "expected"),
        [
            (date(2024, 1, 1), date(2024, 1, 15)),
            (date(2024, 1, 15), date(2024, 1, 31)),
            (date(2024, 1, 20), date(2024, 2, 15)),
            (date(2024, 2, 15), date(2024, 2, 29)),
            (date(2024, 1, 31), date(2024, 2, 15)),
            (date(2024, 12, 31), date(2025, 1, 15)),
        ],
    )
    def test_semimonthly(self, current: date, expected: date) -> None:
        """Should alternate between the 15th and the last day of the month."""
        assert next_occurrence(current, Frequency.SEMIMONTHLY) == expected

    def test_semimonthly_two_dates_per_month(self) -> None:
        """Should produce exactly two pay dates in every month."""
        dates = list(occurrences_until(date(2023, 12, 31), Frequency.SEMIMONTHLY, date(2024, 12, 31)))

        assert len(dates) == 24
        for month in range(1, 13):
            assert len([d for d in dates if d.month == month]) == 2

    def test_monthly_clamps_to_month_end(self) -> None:
        """Should clamp day 30/31 into February."""
        assert next_occurrence(date(2024, 1, 31), Frequency.MONTHLY) == date(2024, 2, 29)
        assert next_occurrence(date(2024, 1, 30), Frequency.MONTHLY) == date(2024, 2, 29)
        assert next_occurrence(date(2025, 1, 31), Frequency.MONTHLY) == date(2025, 2, 28)

    def test_yearly_leap_day(self) -> None:
        """Should move Feb 29 to Feb 28 of the next year."""
        assert next_occurrence(date(2024, 2, 29), Frequency.YEARLY) == date(2025, 2, 28)

    @pytest.mark.parametrize("frequency", list(Frequency))
    def test_strict_forward_progress(self, frequency: Frequency) -> None:
        """Every frequency should move strictly forward, for every day of a leap year."""
        current = date(2024, 1, 1)
        while current.year == 2024:
            assert next_occurrence(current, frequency) > current
            current += timedelta(days=1)


class TestOccurrencesUntil:
    """Tests for occurrences_until and first_occurrence_on_or_after."""

    def test_monthly_through_year_end(self) -> None:
        """Should yield Feb 1 through Dec 1, excluding the start."""
        dates = list(occurrences_until(date(2024, 1, 1), Frequency.MONTHLY, date(2024, 12, 31)))

        assert len(dates) == 11
        assert dates[0] == date(2024, 2, 1)
        assert dates[-1] == date(2024, 12, 1)
        assert all(date(2024, 1, 1) < d <= date(2024, 12, 31) for d in dates)

    def test_includes_horizon(self) -> None:
        """Should yield a date equal to the horizon."""
        dates = list(occurrences_until(date(2024, 1, 1), Frequency.WEEKLY, date(2024, 1, 15)))

        assert dates == [date(2024, 1, 8), date(2024, 1, 15)]

    def test_empty_when_horizon_reached(self) -> None:
        """Should yield nothing when the next date is past the horizon."""
        assert list(occurrences_until(date(2024, 12, 20), Frequency.BIWEEKLY, date(2024, 12, 31))) == []

    def test_restartable(self) -> None:
        """Calling again with the same arguments should yield the same dates."""
        args = (date(2024, 3, 15), Frequency.SEMIMONTHLY, date(2024, 9, 1))

        assert list(occurrences_until(*args)) == list(occurrences_until(*args))

    def test_first_occurrence_walks_forward(self) -> None:
        """Should step until the boundary is reached."""
        result = first_occurrence_on_or_after(date(2023, 11, 10), Frequency.MONTHLY, date(2024, 1, 1))

        assert result == date(2024, 1, 10)

    def test_first_occurrence_keeps_later_anchor(self) -> None:
        """Should return the anchor if it is already past the boundary."""
        anchor = date(2024, 3, 1)

        assert first_occurrence_on_or_after(anchor, Frequency.MONTHLY, date(2024, 1, 1)) == anchor
