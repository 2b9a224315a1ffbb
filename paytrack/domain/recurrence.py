"""Pure functions for recurring pay dates and expense due dates.

Every frequency maps a date to the next strictly later date. Sequences are
produced lazily and are restartable: calling ``occurrences_until`` again with
the same arguments yields the same dates.
"""

from collections.abc import Iterator
from datetime import date, timedelta

from paytrack.dates import add_months, add_years, end_of_month
from paytrack.domain.models import Frequency

SEMIMONTHLY_MID_DAY = 15


def next_semimonthly(current: date) -> date:
    """Next pay date on a 15th / month-end schedule.

    Before the 15th the next date is the 15th, on the 15th it is the last day
    of the same month, after the 15th it is the 15th of the next month.
    """
    if current.day < SEMIMONTHLY_MID_DAY:
        return current.replace(day=SEMIMONTHLY_MID_DAY)
    if current.day == SEMIMONTHLY_MID_DAY:
        return end_of_month(current)
    return add_months(current.replace(day=1), 1).replace(day=SEMIMONTHLY_MID_DAY)


def next_occurrence(current: date, frequency: Frequency) -> date:
    """Compute the next occurrence after a date.

    Args:
        current: Anchor date.
        frequency: Recurrence frequency.

    Returns:
        The next occurrence, always later than ``current``.
    """
    if frequency is Frequency.WEEKLY:
        return current + timedelta(days=7)
    if frequency is Frequency.BIWEEKLY:
        return current + timedelta(days=14)
    if frequency is Frequency.SEMIMONTHLY:
        return next_semimonthly(current)
    if frequency is Frequency.MONTHLY:
        return add_months(current, 1)
    if frequency is Frequency.YEARLY:
        return add_years(current, 1)
    raise ValueError(f"Unsupported frequency: {frequency!r}")


def occurrences_until(start: date, frequency: Frequency, horizon: date) -> Iterator[date]:
    """Yield every occurrence after ``start`` up to and including ``horizon``.

    Args:
        start: Anchor date (not itself yielded).
        frequency: Recurrence frequency.
        horizon: Last date that may be yielded.

    Yields:
        Occurrence dates in ascending order.
    """
    current = next_occurrence(start, frequency)
    while current <= horizon:
        yield current
        current = next_occurrence(current, frequency)


def first_occurrence_on_or_after(anchor: date, frequency: Frequency, boundary: date) -> date:
    """Walk forward from ``anchor`` until the date is no earlier than ``boundary``.

    Returns ``anchor`` unchanged when it is already on or after the boundary.
    """
    current = anchor
    while current < boundary:
        current = next_occurrence(current, frequency)
    return current
