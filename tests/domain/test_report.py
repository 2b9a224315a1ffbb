"""Tests for paytrack.domain.report pure functions."""

from dataclasses import replace
from datetime import date

from paytrack.domain.models import DeductionCategory, Frequency, Money, TransactionType, UserId
from paytrack.domain.paychecks import DeductionRecord, PaycheckRecord, build_paycheck
from paytrack.domain.report import (
    build_report,
    calculate_histogram_bar_length,
    calculate_rate,
    rule_occurrences_in_year,
)
from paytrack.domain.transactions import RecurringExpenseRule, honor_rule, new_rule, new_transaction, stop_rule

USER = UserId("user-1")
OTHER = UserId("user-2")
TODAY = date(2024, 6, 15)


def make_rule(next_due: date, **overrides: object) -> RecurringExpenseRule:
    rule = new_rule(USER, "Streaming", Money(5000), Frequency.MONTHLY, next_due)
    return replace(rule, id=1, **overrides)


def make_paycheck(pay_date: date, projected: bool = False, user_id: UserId = USER) -> PaycheckRecord:
    paycheck = build_paycheck(
        user_id,
        "Acme",
        pay_date,
        Money(100000),
        [
            DeductionRecord("FITW", Money(15000), DeductionCategory.TAX),
            DeductionRecord("Medicare", Money(5000), DeductionCategory.TAX),
            DeductionRecord("401k", Money(8000), DeductionCategory.RETIREMENT, pre_tax=True),
            DeductionRecord("HSA", Money(2000), DeductionCategory.HSA, pre_tax=True),
            DeductionRecord("Dental", Money(1000), DeductionCategory.BENEFIT, pre_tax=True),
        ],
    )
    return replace(paycheck, projected=projected)


class TestCalculateRate:
    """Tests for calculate_rate."""

    def test_percentage(self) -> None:
        """Should express part as a percentage of whole."""
        assert calculate_rate(Money(2500), Money(10000)) == 25.0

    def test_zero_whole(self) -> None:
        """Should be exactly 0 when the whole is zero, whatever the part."""
        assert calculate_rate(Money(5000), Money(0)) == 0.0


class TestRuleOccurrencesInYear:
    """Tests for rule_occurrences_in_year."""

    def test_monthly_from_next_due(self) -> None:
        """Should walk from the next due date through Dec 31."""
        dates = list(rule_occurrences_in_year(make_rule(date(2024, 3, 10)), 2024))

        assert dates[0] == date(2024, 3, 10)
        assert dates[-1] == date(2024, 12, 10)
        assert len(dates) == 10

    def test_overdue_rule_starts_in_year(self) -> None:
        """A due date from last year should be walked forward into January."""
        rule = replace(make_rule(date(2023, 11, 10)), start_date=date(2023, 1, 10))

        dates = list(rule_occurrences_in_year(rule, 2024))

        assert dates[0] == date(2024, 1, 10)
        assert len(dates) == 12

    def test_stops_after_end_date(self) -> None:
        """Should not yield dates after the rule's end date."""
        rule = make_rule(date(2024, 3, 10), end_date=date(2024, 4, 30))

        assert list(rule_occurrences_in_year(rule, 2024)) == [date(2024, 3, 10), date(2024, 4, 10)]

    def test_inactive_rule_yields_nothing(self) -> None:
        """A stopped rule should not be projected."""
        rule = stop_rule(make_rule(date(2024, 3, 10)), date(2024, 12, 31))

        assert list(rule_occurrences_in_year(rule, 2024)) == []

    def test_yearly(self) -> None:
        """Should yield one date per year."""
        rule = make_rule(date(2024, 2, 29), frequency=Frequency.YEARLY)

        assert list(rule_occurrences_in_year(rule, 2024)) == [date(2024, 2, 29)]
        assert list(rule_occurrences_in_year(rule, 2025)) == [date(2025, 2, 28)]

    def test_skips_logged_periods(self) -> None:
        """Should leave out occurrences whose billing period is already logged."""
        dates = list(rule_occurrences_in_year(make_rule(date(2024, 3, 10)), 2024, {(2024, 3), (2024, 5)}))

        assert date(2024, 3, 10) not in dates
        assert date(2024, 5, 10) not in dates
        assert len(dates) == 8


class TestBuildReport:
    """Tests for build_report."""

    def test_empty_input(self) -> None:
        """Should return all zero figures for no data."""
        report = build_report(USER, [], [], [], TODAY)

        assert report.year == 2024
        assert report.gross_income_ytd == 0
        assert report.savings_rate == 0.0
        assert report.effective_tax_rate == 0.0
        assert report.cash_flow == 0
        assert len(report.monthly_buckets) == 12
        assert all(b.gross == 0 and b.expense == 0 for b in report.monthly_buckets)
        assert report.recent_paychecks == ()

    def test_monthly_rule_end_to_end(self) -> None:
        """A monthly rule due from March should count March-June to date and fill March-December."""
        report = build_report(USER, [], [make_rule(date(2024, 3, 10))], [], TODAY)

        assert report.expenses_ytd == 20000
        assert report.month_expenses == 5000
        assert report.cash_flow == -5000
        for bucket in report.monthly_buckets:
            expected = 5000 if bucket.month >= 3 else 0
            assert bucket.expense == expected
        assert report.monthly_buckets[5].is_estimate is False
        assert report.monthly_buckets[6].is_estimate is True
        assert report.monthly_buckets[6].estimated_expense == 5000

    def test_paid_occurrence_not_counted_twice(self) -> None:
        """An occurrence logged as a transaction should not also be projected."""
        rule = make_rule(date(2024, 3, 10))
        paid = replace(
            new_transaction(USER, "Streaming", Money(5200), date(2024, 3, 12)),
            recurring_rule_id=rule.id,
        )

        report = build_report(USER, [], [rule], [paid], TODAY)

        assert report.expenses_ytd == 5200 + 3 * 5000
        assert report.monthly_buckets[2].expense == 5200

    def test_late_payment_keeps_next_occurrence(self) -> None:
        """Paying February's occurrence in March should not hide March's own occurrence."""
        late, advanced = honor_rule(make_rule(date(2024, 2, 1)), paid_on=date(2024, 3, 2))

        report = build_report(USER, [], [advanced], [late], TODAY)

        assert advanced.next_due_date == date(2024, 3, 1)
        assert report.expenses_ytd == 5000 + 4 * 5000
        assert report.monthly_buckets[1].expense == 0
        assert report.monthly_buckets[2].expense == 10000

    def test_paycheck_figures(self) -> None:
        """Should compute income, tax and savings figures from paychecks to date."""
        paychecks = [make_paycheck(date(2024, 1, 15)), make_paycheck(date(2024, 6, 14))]

        report = build_report(USER, paychecks, [], [], TODAY)

        assert report.gross_income_ytd == 200000
        assert report.taxes_ytd == 40000
        assert report.pre_tax_savings_ytd == 20000
        assert report.savings_rate == 10.0
        assert report.effective_tax_rate == 20.0
        assert report.month_income == 69000
        assert report.monthly_buckets[0].gross == 100000
        assert report.monthly_buckets[0].taxes == 20000

    def test_projected_paychecks(self) -> None:
        """Past projected paychecks count to date; future ones only fill estimated buckets."""
        paychecks = [
            make_paycheck(date(2024, 5, 31), projected=True),
            make_paycheck(date(2024, 8, 15), projected=True),
        ]

        report = build_report(USER, paychecks, [], [], TODAY)

        assert report.gross_income_ytd == 100000
        assert report.monthly_buckets[7].gross == 100000
        assert report.monthly_buckets[7].estimated_gross == 100000
        assert report.monthly_buckets[7].is_estimate is True
        assert [p.pay_date for p in report.recent_paychecks] == [date(2024, 5, 31)]

    def test_transactions(self) -> None:
        """Income adds to gross and this month's income; expenses to expense totals."""
        transactions = [
            new_transaction(USER, "Bonus", Money(30000), date(2024, 6, 1), TransactionType.INCOME),
            new_transaction(USER, "Groceries", Money(8000), date(2024, 6, 3)),
            new_transaction(USER, "Car repair", Money(45000), date(2024, 2, 20)),
            new_transaction(USER, "Flights", Money(60000), date(2024, 9, 1)),
            new_transaction(USER, "Last year", Money(99900), date(2023, 12, 31)),
        ]

        report = build_report(USER, [], [], transactions, TODAY)

        assert report.expenses_ytd == 53000
        assert report.month_income == 30000
        assert report.month_expenses == 8000
        assert report.cash_flow == 22000
        assert report.monthly_buckets[5].gross == 30000
        assert report.monthly_buckets[8].expense == 60000

    def test_other_users_ignored(self) -> None:
        """Records of other users should not leak into the report."""
        foreign_rule = replace(make_rule(date(2024, 3, 10)), user_id=OTHER)
        foreign_txn = new_transaction(OTHER, "Groceries", Money(8000), date(2024, 6, 3))

        foreign_paycheck = make_paycheck(date(2024, 1, 15), user_id=OTHER)

        report = build_report(USER, [foreign_paycheck], [foreign_rule], [foreign_txn], TODAY)

        assert report.gross_income_ytd == 0
        assert report.expenses_ytd == 0
        assert report.recent_paychecks == ()

    def test_recent_paychecks_limited(self) -> None:
        """Should keep the five most recent paychecks, newest first."""
        paychecks = [make_paycheck(date(2024, month, 1)) for month in range(1, 7)]

        report = build_report(USER, paychecks, [], [], TODAY)

        assert [p.pay_date.month for p in report.recent_paychecks] == [6, 5, 4, 3, 2]


class TestCalculateHistogramBarLength:
    """Tests for calculate_histogram_bar_length."""

    def test_max_amount_fills_bar(self) -> None:
        """Should give full width for the largest amount."""
        assert calculate_histogram_bar_length(Money(5000), Money(5000), 24) == 24

    def test_proportional(self) -> None:
        """Should scale linearly."""
        assert calculate_histogram_bar_length(Money(2500), Money(5000), 24) == 12

    def test_zero_max(self) -> None:
        """Should return 0 when there is nothing to scale against."""
        assert calculate_histogram_bar_length(Money(0), Money(0), 24) == 0
