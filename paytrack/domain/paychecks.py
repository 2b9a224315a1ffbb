"""Pure functions for paycheck records and paycheck projection.

This module contains the functional core for paycheck operations:
- No I/O operations (no database, no console, no files)
- No side effects
- Pure data transformations

All monetary amounts are in cents (Money type).
"""

from dataclasses import dataclass, field, replace
from datetime import date

from paytrack.dates import end_of_year
from paytrack.domain.models import DeductionCategory, Frequency, Money, UserId
from paytrack.domain.recurrence import occurrences_until


@dataclass(frozen=True)
class DeductionRecord:
    """Immutable payroll deduction owned by one paycheck."""

    name: str
    amount: Money
    category: DeductionCategory
    pre_tax: bool = False


@dataclass(frozen=True)
class PaycheckRecord:
    """Immutable paycheck with its deductions.

    Projected paychecks have the same shape as actual ones; ``source_id``
    points at the paycheck they were cloned from.
    """

    id: int | None
    user_id: UserId
    employer_name: str
    pay_date: date
    gross_amount: Money
    net_amount: Money
    deductions: tuple[DeductionRecord, ...] = field(default_factory=tuple)
    projected: bool = False
    source_id: int | None = None


def total_deductions(deductions: tuple[DeductionRecord, ...] | list[DeductionRecord]) -> Money:
    """Sum of all deduction amounts in cents."""
    return Money(sum(d.amount for d in deductions))


def deductions_by_category(
    deductions: tuple[DeductionRecord, ...] | list[DeductionRecord],
) -> dict[DeductionCategory, Money]:
    """Total deduction amount per category.

    Categories without deductions are omitted.
    """
    totals: dict[DeductionCategory, Money] = {}
    for deduction in deductions:
        totals[deduction.category] = Money(totals.get(deduction.category, 0) + deduction.amount)
    return totals


def sum_category(paycheck: PaycheckRecord, categories: frozenset[DeductionCategory] | set[DeductionCategory]) -> Money:
    """Sum the paycheck's deductions in any of the given categories."""
    return Money(sum(d.amount for d in paycheck.deductions if d.category in categories))


def build_paycheck(
    user_id: UserId,
    employer_name: str,
    pay_date: date,
    gross_amount: Money,
    deductions: list[DeductionRecord],
    paycheck_id: int | None = None,
) -> PaycheckRecord:
    """Validate paycheck input and compute its net pay.

    Args:
        user_id: Owning user.
        employer_name: Employer name (required).
        pay_date: Pay date.
        gross_amount: Gross pay in cents (must be positive).
        deductions: Deductions in cents (each non-negative with a name).
        paycheck_id: Existing id when editing a stored paycheck.

    Returns:
        PaycheckRecord with net = gross - sum(deductions).

    Raises:
        ValueError: If any field is invalid.
    """
    if not employer_name.strip():
        raise ValueError("Employer name is required")
    if gross_amount <= 0:
        raise ValueError("Gross amount must be positive")
    for deduction in deductions:
        if not deduction.name.strip():
            raise ValueError("Deduction name is required")
        if deduction.amount < 0:
            raise ValueError(f"Deduction '{deduction.name}' amount must not be negative")

    net_amount = Money(gross_amount - total_deductions(deductions))

    return PaycheckRecord(
        id=paycheck_id,
        user_id=user_id,
        employer_name=employer_name.strip(),
        pay_date=pay_date,
        gross_amount=gross_amount,
        net_amount=net_amount,
        deductions=tuple(deductions),
    )


def project_paycheck(source: PaycheckRecord, frequency: Frequency) -> list[PaycheckRecord]:
    """Clone a paycheck onto every future pay date through year end.

    Args:
        source: Paycheck to clone (amounts and deductions are copied as-is).
        frequency: Pay frequency used to step from the source pay date.

    Returns:
        Projected paychecks, one per pay date after the source up to
        December 31 of the source's year. Empty when none fall in the year.
    """
    horizon = end_of_year(source.pay_date)
    origin = source.source_id if source.projected else source.id
    return [
        replace(source, id=None, pay_date=pay_date, projected=True, source_id=origin)
        for pay_date in occurrences_until(source.pay_date, frequency, horizon)
    ]
