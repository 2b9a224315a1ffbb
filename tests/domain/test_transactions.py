"""Tests for paytrack.domain.transactions pure functions."""

from dataclasses import replace
from datetime import date
from typing import Any

import pytest

from paytrack.domain.models import Frequency, Money, TransactionType, UserId
from paytrack.domain.transactions import (
    RecurringExpenseRule,
    billing_period,
    edit_rule,
    edit_transaction,
    honor_rule,
    logged_periods,
    new_rule,
    new_transaction,
    skip_rule,
    stop_rule,
)

USER = UserId("user-1")


def make_rule(**overrides: Any) -> RecurringExpenseRule:
    rule = new_rule(
        user_id=USER,
        description="Rent",
        amount=Money(150000),
        frequency=overrides.pop("frequency", Frequency.MONTHLY),
        start_date=overrides.pop("start_date", date(2024, 1, 31)),
    )
    return replace(rule, id=overrides.pop("id", 1), **overrides)


class TestNewTransaction:
    """Tests for new_transaction."""

    def test_creates_expense_by_default(self) -> None:
        """Should create an unsaved expense with trimmed description."""
        txn = new_transaction(USER, "  Groceries ", Money(4250), date(2024, 5, 2))

        assert txn.id is None
        assert txn.description == "Groceries"
        assert txn.type is TransactionType.EXPENSE
        assert txn.recurring_rule_id is None

    def test_income(self) -> None:
        """Should accept an explicit INCOME type."""
        txn = new_transaction(USER, "Refund", Money(1000), date(2024, 5, 2), TransactionType.INCOME)

        assert txn.type is TransactionType.INCOME

    @pytest.mark.parametrize(("description", "amount"), [("", 100), ("Coffee", 0), ("Coffee", -5)])
    def test_rejects_invalid_entries(self, description: str, amount: int) -> None:
        """Should require a description and a positive amount."""
        with pytest.raises(ValueError):
            new_transaction(USER, description, Money(amount), date(2024, 5, 2))


class TestNewRule:
    """Tests for new_rule."""

    def test_first_due_is_start(self) -> None:
        """Should start active with next due date equal to the start date."""
        rule = new_rule(USER, "Gym", Money(4000), Frequency.MONTHLY, date(2024, 3, 10))

        assert rule.next_due_date == date(2024, 3, 10)
        assert rule.active is True
        assert rule.end_date is None

    @pytest.mark.parametrize("frequency", [Frequency.WEEKLY, Frequency.BIWEEKLY, Frequency.SEMIMONTHLY])
    def test_rejects_pay_frequencies(self, frequency: Frequency) -> None:
        """Should only allow MONTHLY and YEARLY rules."""
        with pytest.raises(ValueError, match="MONTHLY"):
            new_rule(USER, "Gym", Money(4000), frequency, date(2024, 3, 10))

    def test_rejects_end_before_start(self) -> None:
        """Should reject an end date earlier than the start date."""
        with pytest.raises(ValueError, match="End date"):
            new_rule(USER, "Gym", Money(4000), Frequency.MONTHLY, date(2024, 3, 10), end_date=date(2024, 3, 1))


class TestRuleActions:
    """Tests for honor_rule, skip_rule and stop_rule."""

    def test_skip_advances_one_period(self) -> None:
        """Should move the due date forward once, clamping month ends."""
        rule = make_rule()

        skipped = skip_rule(rule)

        assert skipped.next_due_date == date(2024, 2, 29)
        assert rule.next_due_date == date(2024, 1, 31)

    def test_honor_logs_expense_and_advances(self) -> None:
        """Should create an expense on the due date linked to the rule."""
        rule = make_rule(category_id=4)

        txn, advanced = honor_rule(rule)

        assert txn.date == date(2024, 1, 31)
        assert txn.amount == 150000
        assert txn.description == "Rent"
        assert txn.type is TransactionType.EXPENSE
        assert txn.recurring_rule_id == 1
        assert txn.category_id == 4
        assert advanced.next_due_date == date(2024, 2, 29)
        assert txn.due_date == date(2024, 1, 31)

    def test_honor_with_overrides(self) -> None:
        """Should use the actual amount and payment date when given."""
        rule = make_rule()

        txn, advanced = honor_rule(rule, amount=Money(155000), paid_on=date(2024, 2, 2), description="Rent (late)")

        assert txn.amount == 155000
        assert txn.date == date(2024, 2, 2)
        assert txn.description == "Rent (late)"
        assert advanced.next_due_date == date(2024, 2, 29)
        assert txn.due_date == date(2024, 1, 31)

    def test_stop_deactivates(self) -> None:
        """Should mark the rule inactive and end it today, keeping its due date."""
        rule = make_rule()

        stopped = stop_rule(rule, date(2024, 6, 1))

        assert stopped.active is False
        assert stopped.end_date == date(2024, 6, 1)
        assert stopped.next_due_date == rule.next_due_date


class TestBillingPeriods:
    """Tests for billing_period and logged_periods."""

    def test_monthly_and_yearly_keys(self) -> None:
        """Should key by calendar month or calendar year."""
        assert billing_period(date(2024, 3, 5), Frequency.MONTHLY) == (2024, 3)
        assert billing_period(date(2024, 3, 5), Frequency.YEARLY) == (2024,)

    def test_no_period_for_weekly(self) -> None:
        """Should reject frequencies that have no billing period."""
        with pytest.raises(ValueError):
            billing_period(date(2024, 3, 5), Frequency.WEEKLY)

    def test_logged_periods_only_counts_linked_expenses(self) -> None:
        """Should only count expenses that reference this rule."""
        rule = make_rule()
        linked, _ = honor_rule(rule)
        other_rule = new_transaction(USER, "Other", Money(100), date(2024, 4, 1))
        income = new_transaction(USER, "Refund", Money(100), date(2024, 5, 1), TransactionType.INCOME)

        transactions = [
            linked,
            replace(other_rule, recurring_rule_id=2),
            replace(income, recurring_rule_id=1),
            new_transaction(USER, "Unlinked", Money(100), date(2024, 6, 1)),
        ]

        assert logged_periods(rule, transactions) == {(2024, 1)}

    def test_late_payment_counts_for_its_due_period(self) -> None:
        """A payment made next month should settle the period it was due in."""
        rule = make_rule()
        late, advanced = honor_rule(rule, paid_on=date(2024, 2, 2))

        assert logged_periods(advanced, [late]) == {(2024, 1)}


class TestEdits:
    """Tests for edit_transaction and edit_rule."""

    def test_edit_transaction_keeps_unset_fields(self) -> None:
        """Should only change the fields given."""
        txn = replace(new_transaction(USER, "Groceries", Money(4250), date(2024, 5, 2)), id=3)

        edited = edit_transaction(txn, amount=Money(5000))

        assert edited == replace(txn, amount=Money(5000))

    def test_edit_transaction_validates(self) -> None:
        """Should reject an empty description."""
        txn = new_transaction(USER, "Groceries", Money(4250), date(2024, 5, 2))

        with pytest.raises(ValueError):
            edit_transaction(txn, description="  ")

    def test_edit_rule_keeps_due_date(self) -> None:
        """Changing the amount should not move the due date cursor."""
        rule = skip_rule(make_rule())

        edited = edit_rule(rule, amount=Money(160000))

        assert edited.amount == 160000
        assert edited.next_due_date == date(2024, 2, 29)

    def test_edit_rule_new_start_restarts_schedule(self) -> None:
        """A new start date should become the next due date."""
        rule = skip_rule(make_rule())

        edited = edit_rule(rule, start_date=date(2024, 4, 1))

        assert edited.start_date == date(2024, 4, 1)
        assert edited.next_due_date == date(2024, 4, 1)

    def test_edit_rule_validates_frequency(self) -> None:
        """Should reject pay-only frequencies."""
        with pytest.raises(ValueError):
            edit_rule(make_rule(), frequency=Frequency.WEEKLY)
