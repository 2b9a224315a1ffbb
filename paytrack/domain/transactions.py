"""Pure functions for transactions and recurring expense rules.

This module contains the functional core for expense operations:
- No I/O operations (no database, no console, no files)
- No side effects
- Pure data transformations
- Easy to test

A recurring rule's ``next_due_date`` is its only moving part. It advances by
exactly one occurrence when the rule is honored (an expense is logged
against it) or skipped, and nowhere else.

All monetary amounts are in cents (Money type).
"""

from dataclasses import dataclass, replace
from datetime import date

from paytrack.domain.models import (
    RECURRING_EXPENSE_FREQUENCIES,
    Frequency,
    Money,
    TransactionType,
    UserId,
)
from paytrack.domain.recurrence import next_occurrence


@dataclass(frozen=True)
class Transaction:
    """Immutable one-off income or expense."""

    id: int | None
    user_id: UserId
    description: str
    amount: Money
    date: date
    type: TransactionType
    category_id: int | None = None
    recurring_rule_id: int | None = None
    # Due date of the rule occurrence this payment settles
    due_date: date | None = None


@dataclass(frozen=True)
class RecurringExpenseRule:
    """Immutable recurring expense definition."""

    id: int | None
    user_id: UserId
    description: str
    amount: Money
    frequency: Frequency
    start_date: date
    next_due_date: date
    end_date: date | None = None
    active: bool = True
    category_id: int | None = None


def validate_rule_frequency(frequency: Frequency) -> Frequency:
    """Ensure a recurring expense uses a supported frequency.

    Raises:
        ValueError: If the frequency is not MONTHLY or YEARLY.
    """
    if frequency not in RECURRING_EXPENSE_FREQUENCIES:
        allowed = ", ".join(f.value for f in RECURRING_EXPENSE_FREQUENCIES)
        raise ValueError(f"Recurring expenses must be {allowed}, got {frequency.value}")
    return frequency


def _validate_entry(description: str, amount: Money) -> None:
    if not description.strip():
        raise ValueError("Description is required")
    if amount <= 0:
        raise ValueError("Amount must be positive")


def new_transaction(
    user_id: UserId,
    description: str,
    amount: Money,
    on: date,
    txn_type: TransactionType = TransactionType.EXPENSE,
    category_id: int | None = None,
) -> Transaction:
    """Create a directly entered transaction.

    Raises:
        ValueError: If the description is empty or the amount is not positive.
    """
    _validate_entry(description, amount)
    return Transaction(
        id=None,
        user_id=user_id,
        description=description.strip(),
        amount=amount,
        date=on,
        type=txn_type,
        category_id=category_id,
    )


def new_rule(
    user_id: UserId,
    description: str,
    amount: Money,
    frequency: Frequency,
    start_date: date,
    end_date: date | None = None,
    category_id: int | None = None,
) -> RecurringExpenseRule:
    """Create an active recurring rule whose first due date is its start date.

    Raises:
        ValueError: On empty description, non-positive amount, unsupported
            frequency or an end date before the start date.
    """
    _validate_entry(description, amount)
    validate_rule_frequency(frequency)
    if end_date is not None and end_date < start_date:
        raise ValueError("End date must not be before start date")

    return RecurringExpenseRule(
        id=None,
        user_id=user_id,
        description=description.strip(),
        amount=amount,
        frequency=frequency,
        start_date=start_date,
        next_due_date=start_date,
        end_date=end_date,
        active=True,
        category_id=category_id,
    )


def edit_transaction(
    txn: Transaction,
    description: str | None = None,
    amount: Money | None = None,
    on: date | None = None,
    category_id: int | None = None,
) -> Transaction:
    """Apply edits to a transaction; fields left as None keep their value.

    Raises:
        ValueError: If the edited description is empty or amount not positive.
    """
    edited = replace(
        txn,
        description=(description if description is not None else txn.description).strip(),
        amount=amount if amount is not None else txn.amount,
        date=on if on is not None else txn.date,
        category_id=category_id if category_id is not None else txn.category_id,
    )
    _validate_entry(edited.description, edited.amount)
    return edited


def edit_rule(
    rule: RecurringExpenseRule,
    description: str | None = None,
    amount: Money | None = None,
    frequency: Frequency | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    category_id: int | None = None,
) -> RecurringExpenseRule:
    """Apply edits to a recurring rule; fields left as None keep their value.

    A new start date restarts the schedule: the next due date becomes the
    start date. Otherwise the due date cursor is untouched.

    Raises:
        ValueError: Under the same conditions as ``new_rule``.
    """
    edited = replace(
        rule,
        description=(description if description is not None else rule.description).strip(),
        amount=amount if amount is not None else rule.amount,
        frequency=frequency if frequency is not None else rule.frequency,
        start_date=start_date if start_date is not None else rule.start_date,
        end_date=end_date if end_date is not None else rule.end_date,
        category_id=category_id if category_id is not None else rule.category_id,
    )
    _validate_entry(edited.description, edited.amount)
    validate_rule_frequency(edited.frequency)
    if edited.end_date is not None and edited.end_date < edited.start_date:
        raise ValueError("End date must not be before start date")

    if start_date is not None and start_date != rule.start_date:
        edited = replace(edited, next_due_date=start_date)
    return edited


def skip_rule(rule: RecurringExpenseRule) -> RecurringExpenseRule:
    """Advance the rule's due date by one period without logging an expense."""
    return replace(rule, next_due_date=next_occurrence(rule.next_due_date, rule.frequency))


def honor_rule(
    rule: RecurringExpenseRule,
    description: str | None = None,
    amount: Money | None = None,
    paid_on: date | None = None,
    category_id: int | None = None,
) -> tuple[Transaction, RecurringExpenseRule]:
    """Mark the rule's current occurrence as paid.

    Args:
        rule: Rule being paid.
        description: Transaction description (defaults to the rule's).
        amount: Amount actually paid (defaults to the rule's amount).
        paid_on: Payment date (defaults to the rule's next due date).
        category_id: Category (defaults to the rule's).

    Returns:
        Tuple of (expense transaction referencing the rule and the due date
        it settles, advanced rule).

    Raises:
        ValueError: If the description is empty or the amount is not positive.
    """
    transaction = new_transaction(
        user_id=rule.user_id,
        description=description if description is not None else rule.description,
        amount=amount if amount is not None else rule.amount,
        on=paid_on if paid_on is not None else rule.next_due_date,
        txn_type=TransactionType.EXPENSE,
        category_id=category_id if category_id is not None else rule.category_id,
    )
    return replace(transaction, recurring_rule_id=rule.id, due_date=rule.next_due_date), skip_rule(rule)


def stop_rule(rule: RecurringExpenseRule, today: date) -> RecurringExpenseRule:
    """Soft-stop a rule: inactive, ending today. History is kept."""
    return replace(rule, active=False, end_date=today)


def billing_period(on: date, frequency: Frequency) -> tuple[int, ...]:
    """Key of the billing period containing a date.

    A calendar month for monthly rules, a calendar year for yearly ones. Two
    dates with the same key belong to the same occurrence of the rule.

    Raises:
        ValueError: If the frequency is not a recurring expense frequency.
    """
    if frequency is Frequency.MONTHLY:
        return (on.year, on.month)
    if frequency is Frequency.YEARLY:
        return (on.year,)
    raise ValueError(f"No billing period for frequency {frequency.value}")


def logged_periods(rule: RecurringExpenseRule, transactions: list[Transaction]) -> set[tuple[int, ...]]:
    """Billing periods already settled by expenses referencing the rule.

    A payment counts for the period of the occurrence it settles, not the
    period it was paid in, so a late payment does not hide the next
    occurrence. Expenses without a due date fall back to their own date.
    """
    return {
        billing_period(txn.due_date if txn.due_date is not None else txn.date, rule.frequency)
        for txn in transactions
        if txn.recurring_rule_id is not None
        and txn.recurring_rule_id == rule.id
        and txn.type is TransactionType.EXPENSE
    }
