"""Pure functions for dashboard report calculations and aggregations.

This module contains the functional core for reporting operations:
- No I/O operations (no database, no console, no files)
- No side effects
- Pure data transformations
- Easy to test

The report mixes two kinds of figures. Year-to-date cards only count what
happened up to ``today``; the monthly overview is a full-year projection that
also includes projected paychecks and future recurring expense occurrences,
which are tracked separately so they can be shown as estimates.

All monetary amounts are in cents (Money type).
"""

import calendar
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date

from paytrack.dates import end_of_month, end_of_year, start_of_month, start_of_year
from paytrack.domain.models import (
    PRE_TAX_SAVINGS_CATEGORIES,
    RECURRING_EXPENSE_FREQUENCIES,
    DeductionCategory,
    Money,
    TransactionType,
    UserId,
)
from paytrack.domain.paychecks import PaycheckRecord, sum_category
from paytrack.domain.recurrence import first_occurrence_on_or_after, next_occurrence
from paytrack.domain.transactions import RecurringExpenseRule, Transaction, billing_period, logged_periods

RECENT_PAYCHECK_LIMIT = 5
TAX_CATEGORIES = frozenset({DeductionCategory.TAX})


@dataclass(frozen=True)
class MonthBucket:
    """Immutable totals for one calendar month of the overview."""

    month: int
    gross: Money
    taxes: Money
    expense: Money
    estimated_gross: Money = Money(0)
    estimated_expense: Money = Money(0)

    @property
    def label(self) -> str:
        return calendar.month_abbr[self.month]

    @property
    def is_estimate(self) -> bool:
        """Whether any figure in the bucket comes from a projection."""
        return self.estimated_gross > 0 or self.estimated_expense > 0


@dataclass(frozen=True)
class Report:
    """Immutable dashboard report."""

    year: int
    gross_income_ytd: Money
    taxes_ytd: Money
    pre_tax_savings_ytd: Money
    savings_rate: float
    effective_tax_rate: float
    expenses_ytd: Money
    month_income: Money
    month_expenses: Money
    cash_flow: Money
    monthly_buckets: tuple[MonthBucket, ...]
    recent_paychecks: tuple[PaycheckRecord, ...]


def calculate_rate(part: Money, whole: Money) -> float:
    """Calculate ``part`` as a percentage of ``whole``.

    Args:
        part: Numerator in cents.
        whole: Denominator in cents.

    Returns:
        Percentage (0-100+), or 0.0 when ``whole`` is not positive.
    """
    if whole <= 0:
        return 0.0
    return (part / whole) * 100


def in_range(value: date, since: date, until: date) -> bool:
    """Whether ``since <= value <= until``."""
    return since <= value <= until


def rule_occurrences_in_year(
    rule: RecurringExpenseRule,
    year: int,
    skip_periods: set[tuple[int, ...]] | None = None,
) -> Iterator[date]:
    """Yield a rule's due dates within a calendar year.

    The walk starts at the rule's next due date, moved forward into the year
    if it lies before January 1, and continues through December 31. Dates
    before the rule's start date or after its end date are not yielded, nor
    are dates whose billing period is in ``skip_periods``.

    Args:
        rule: Recurring expense rule.
        year: Calendar year to project.
        skip_periods: Billing periods already covered by logged transactions.

    Yields:
        Due dates in ascending order. Nothing for inactive rules.
    """
    if not rule.active:
        return

    year_start = date(year, 1, 1)
    year_end = end_of_year(year_start)
    skip = skip_periods or set()

    current = first_occurrence_on_or_after(rule.next_due_date, rule.frequency, year_start)
    while current <= year_end:
        if rule.end_date is not None and current > rule.end_date:
            return
        if current >= rule.start_date and (not skip or billing_period(current, rule.frequency) not in skip):
            yield current
        current = next_occurrence(current, rule.frequency)


def _logged_periods_for(rule: RecurringExpenseRule, transactions: list[Transaction]) -> set[tuple[int, ...]]:
    if rule.frequency not in RECURRING_EXPENSE_FREQUENCIES:
        return set()
    return logged_periods(rule, transactions)


def build_report(
    user_id: UserId,
    paychecks: list[PaycheckRecord],
    recurring_rules: list[RecurringExpenseRule],
    transactions: list[Transaction],
    today: date,
) -> Report:
    """Aggregate paychecks, recurring rules and transactions for the dashboard.

    Args:
        user_id: User whose records are aggregated; other users' records are ignored.
        paychecks: Actual and projected paychecks.
        recurring_rules: Recurring expense rules.
        transactions: One-off and rule-generated transactions.
        today: Reference date for year-to-date and current month figures.

    Returns:
        Report with all aggregates. All zero for empty input.
    """
    paychecks = [p for p in paychecks if p.user_id == user_id]
    recurring_rules = [r for r in recurring_rules if r.user_id == user_id]
    transactions = [t for t in transactions if t.user_id == user_id]

    year = today.year
    year_start, year_end = start_of_year(today), end_of_year(today)
    month_start, month_end = start_of_month(today), end_of_month(today)

    gross = [0] * 12
    taxes = [0] * 12
    expense = [0] * 12
    estimated_gross = [0] * 12
    estimated_expense = [0] * 12

    gross_income_ytd = 0
    taxes_ytd = 0
    pre_tax_savings_ytd = 0
    expenses_ytd = 0
    month_income = 0
    month_expenses = 0

    for paycheck in paychecks:
        if not in_range(paycheck.pay_date, year_start, year_end):
            continue

        index = paycheck.pay_date.month - 1
        paycheck_taxes = sum_category(paycheck, TAX_CATEGORIES)
        gross[index] += paycheck.gross_amount
        taxes[index] += paycheck_taxes
        if paycheck.projected:
            estimated_gross[index] += paycheck.gross_amount

        if paycheck.pay_date <= today:
            gross_income_ytd += paycheck.gross_amount
            taxes_ytd += paycheck_taxes
            pre_tax_savings_ytd += sum_category(paycheck, PRE_TAX_SAVINGS_CATEGORIES)

        if in_range(paycheck.pay_date, month_start, month_end):
            month_income += paycheck.net_amount

    for txn in transactions:
        if not in_range(txn.date, year_start, year_end):
            continue

        index = txn.date.month - 1
        in_month = in_range(txn.date, month_start, month_end)

        if txn.type is TransactionType.INCOME:
            gross[index] += txn.amount
            if in_month:
                month_income += txn.amount
        else:
            expense[index] += txn.amount
            if txn.date <= today:
                expenses_ytd += txn.amount
            if in_month:
                month_expenses += txn.amount

    for rule in recurring_rules:
        for due in rule_occurrences_in_year(rule, year, _logged_periods_for(rule, transactions)):
            index = due.month - 1
            expense[index] += rule.amount
            if due > today:
                estimated_expense[index] += rule.amount
                continue

            expenses_ytd += rule.amount
            if in_range(due, month_start, month_end):
                month_expenses += rule.amount

    buckets = tuple(
        MonthBucket(
            month=i + 1,
            gross=Money(gross[i]),
            taxes=Money(taxes[i]),
            expense=Money(expense[i]),
            estimated_gross=Money(estimated_gross[i]),
            estimated_expense=Money(estimated_expense[i]),
        )
        for i in range(12)
    )

    recent = sorted(
        (p for p in paychecks if p.pay_date <= today),
        key=lambda p: p.pay_date,
        reverse=True,
    )[:RECENT_PAYCHECK_LIMIT]

    return Report(
        year=year,
        gross_income_ytd=Money(gross_income_ytd),
        taxes_ytd=Money(taxes_ytd),
        pre_tax_savings_ytd=Money(pre_tax_savings_ytd),
        savings_rate=calculate_rate(Money(pre_tax_savings_ytd), Money(gross_income_ytd)),
        effective_tax_rate=calculate_rate(Money(taxes_ytd), Money(gross_income_ytd)),
        expenses_ytd=Money(expenses_ytd),
        month_income=Money(month_income),
        month_expenses=Money(month_expenses),
        cash_flow=Money(month_income - month_expenses),
        monthly_buckets=buckets,
        recent_paychecks=tuple(recent),
    )


def calculate_histogram_bar_length(
    amount: Money,
    max_amount: Money,
    bar_width: int,
) -> int:
    """Calculate histogram bar length.

    Args:
        amount: Amount to display.
        max_amount: Maximum amount in dataset.
        bar_width: Maximum bar width in characters.

    Returns:
        Bar length in characters.
    """
    if max_amount <= 0:
        return 0
    return int((abs(amount) / max_amount) * bar_width)
