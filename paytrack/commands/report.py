"""Dashboard command: year-to-date figures, monthly overview and recent paychecks."""

import sqlite3
import sys
from datetime import date

from rich.console import Console
from rich.table import Table

from paytrack.commands.shared import display_money, get_user_id, parse_date_option
from paytrack.config import get_setting
from paytrack.dates import end_of_year, start_of_year
from paytrack.domain.models import Money
from paytrack.domain.report import MonthBucket, Report, build_report, calculate_histogram_bar_length
from paytrack.store.queries import get_paychecks, get_recurring_rules, get_transactions
from paytrack.store.schema import get_db_path

console = Console()

BAR_WIDTH = 24


def format_rate_with_color(rate: float, target: float) -> str:
    """Format a savings rate, green when it meets the target."""
    text = f"{rate:.1f}%"
    if rate >= target:
        return f"[green]{text}[/green]"
    elif rate >= target / 2:
        return f"[yellow]{text}[/yellow]"
    else:
        return f"[red]{text}[/red]"


def render_summary(report: Report, savings_target: float) -> None:
    """Render the year-to-date and current month cards."""
    console.print(f"[bold cyan]{report.year} year to date[/bold cyan]\n")
    console.print(f"  Gross income:        {display_money(report.gross_income_ytd):>14}")
    console.print(f"  Taxes:               {display_money(report.taxes_ytd):>14}")
    console.print(f"  Pre-tax savings:     {display_money(report.pre_tax_savings_ytd):>14}")
    console.print(f"  Expenses:            {display_money(report.expenses_ytd):>14}")
    console.print(
        f"  Savings rate:        {format_rate_with_color(report.savings_rate, savings_target)}"
        f" [dim](target {savings_target:.0f}%)[/dim]"
    )
    console.print(f"  Effective tax rate:  {report.effective_tax_rate:.1f}%\n")

    if report.cash_flow < 0:
        flow = f"[red]{display_money(report.cash_flow, include_sign=True)}[/red]"
    else:
        flow = f"[green]{display_money(report.cash_flow, include_sign=True)}[/green]"

    console.print("[bold cyan]This month[/bold cyan]\n")
    console.print(f"  Income:    {display_money(report.month_income):>14}")
    console.print(f"  Expenses:  {display_money(report.month_expenses):>14}")
    console.print(f"  Cash flow: {flow}\n")


def render_monthly_overview(buckets: tuple[MonthBucket, ...], histogram: bool) -> None:
    """Render the twelve month overview table."""
    table = Table(title="Monthly overview")
    table.add_column("Month", style="cyan")
    table.add_column("Gross", justify="right")
    table.add_column("Taxes", justify="right")
    table.add_column("Expenses", justify="right")
    if histogram:
        table.add_column("", style="red")
    table.add_column("", justify="center")

    max_expense = Money(max((b.expense for b in buckets), default=0))

    for bucket in buckets:
        row = [
            bucket.label,
            display_money(bucket.gross),
            display_money(bucket.taxes),
            display_money(bucket.expense),
        ]
        if histogram:
            row.append("█" * calculate_histogram_bar_length(bucket.expense, max_expense, BAR_WIDTH))
        row.append("[yellow]est.[/yellow]" if bucket.is_estimate else "")
        table.add_row(*row)

    console.print(table)
    console.print("[dim]est. = includes projected paychecks or upcoming recurring expenses[/dim]\n")


def render_recent_paychecks(report: Report) -> None:
    if not report.recent_paychecks:
        console.print("[dim]No paychecks yet (add one with 'paytrack paycheck add')[/dim]")
        return

    table = Table(title="Recent paychecks")
    table.add_column("Pay date", style="cyan")
    table.add_column("Employer", style="white")
    table.add_column("Gross", justify="right")
    table.add_column("Net", justify="right")
    table.add_column("", justify="center")

    for paycheck in report.recent_paychecks:
        table.add_row(
            paycheck.pay_date.isoformat(),
            paycheck.employer_name,
            display_money(paycheck.gross_amount),
            f"[green]{display_money(paycheck.net_amount)}[/green]",
            "[yellow]projected[/yellow]" if paycheck.projected else "",
        )

    console.print(table)


def dashboard_command(today: str | None = None, histogram: bool = True) -> None:
    """Show the financial dashboard for the current year."""
    db_path = get_db_path()
    user_id = get_user_id()

    try:
        as_of = parse_date_option(today, default=date.today())
    except ValueError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)

    year_start, year_end = start_of_year(as_of), end_of_year(as_of)

    try:
        paychecks = get_paychecks(user_id, db_path, year_start, year_end)
        rules = get_recurring_rules(user_id, db_path)
        transactions = get_transactions(user_id, db_path, year_start, year_end)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    report = build_report(user_id, paychecks, rules, transactions, as_of)

    render_summary(report, float(get_setting("savings_target")))
    render_monthly_overview(report.monthly_buckets, histogram)
    render_recent_paychecks(report)
