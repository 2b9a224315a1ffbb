"""CLI entry point for paytrack."""

import logging
import os

import typer
from rich.logging import RichHandler

from paytrack.commands.admin import backup_command, config_command, init_command
from paytrack.commands.expenses import (
    add_category_command,
    add_expense_command,
    add_recurring_command,
    delete_expense_command,
    delete_recurring_command,
    edit_expense_command,
    edit_recurring_command,
    list_categories_command,
    list_expenses_command,
    list_recurring_command,
    pay_recurring_command,
    seed_categories_command,
    skip_recurring_command,
    stop_recurring_command,
)
from paytrack.commands.paychecks import (
    add_paycheck_command,
    delete_paycheck_command,
    edit_paycheck_command,
    import_paystub_command,
    list_paychecks_command,
    project_paycheck_command,
)
from paytrack.commands.report import dashboard_command

app = typer.Typer(
    name="paytrack",
    help="paytrack - paychecks, deductions and recurring expenses",
    add_completion=False,
)
paycheck_app = typer.Typer(help="Record, project and import paychecks.")
expense_app = typer.Typer(help="Log one-off expenses and income.")
recurring_app = typer.Typer(help="Manage recurring expenses.")
categories_app = typer.Typer(help="Manage budget categories.")

app.add_typer(paycheck_app, name="paycheck")
app.add_typer(expense_app, name="expense")
app.add_typer(recurring_app, name="recurring")
app.add_typer(categories_app, name="categories")


def configure_logging(verbose: bool) -> None:
    """Route log records through rich; PAYTRACK_LOG_LEVEL overrides the default WARNING."""
    level = "DEBUG" if verbose else os.environ.get("PAYTRACK_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """paytrack - paychecks, deductions and recurring expenses."""
    configure_logging(verbose)


@app.command(name="backup")
def backup(
    output_dir: str = typer.Option(None, "--output", "-o", help="Backup directory (default: next to the database)"),
) -> None:
    """Backup your database and configuration files."""
    backup_command(output_dir)


@app.command(name="init")
def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing database and config"),
    migrate: bool = typer.Option(False, "--migrate", help="Update the database schema only"),
    seed: bool = typer.Option(True, "--seed/--no-seed", help="Create the default categories"),
) -> None:
    """Initialize paytrack database and configuration."""
    init_command(force, migrate, seed)


@app.command(name="config")
def config(
    key: str = typer.Argument(None, help="Setting to show or change"),
    value: str = typer.Argument(None, help="New value"),
) -> None:
    """Show or change settings."""
    config_command(key, value)


@app.command()
def dashboard(
    today: str = typer.Option(None, "--today", help="Report as of this date (YYYY-MM-DD)"),
    histogram: bool = typer.Option(True, help="Show a histogram of monthly expenses"),
) -> None:
    """Show your year to date figures and monthly overview."""
    dashboard_command(today, histogram)


@paycheck_app.command(name="add")
def paycheck_add(
    employer: str = typer.Option(..., "--employer", "-e", help="Employer name"),
    gross: str = typer.Option(..., "--gross", "-g", help="Gross amount"),
    pay_date: str = typer.Option(None, "--date", "-d", help="Pay date (YYYY-MM-DD, default: today)"),
    deduction: list[str] = typer.Option(
        [], "--deduction", "-x", help="Deduction as NAME:AMOUNT:CATEGORY[:pretax] (repeatable)"
    ),
) -> None:
    """Add a paycheck with its deductions."""
    add_paycheck_command(employer, pay_date, gross, deduction)


@paycheck_app.command(name="list")
def paycheck_list(
    year: int = typer.Option(None, "--year", "-y", help="Only paychecks paid in this year"),
    limit: int = typer.Option(20, help="Maximum paychecks to show"),
) -> None:
    """List your paychecks."""
    list_paychecks_command(year, limit)


@paycheck_app.command(name="project")
def paycheck_project(
    paycheck_id: int,
    frequency: str = typer.Option(
        None, "--frequency", "-f", help="WEEKLY, BIWEEKLY, SEMIMONTHLY or MONTHLY (default: from config)"
    ),
) -> None:
    """Project a paycheck through the end of its year."""
    project_paycheck_command(paycheck_id, frequency)


@paycheck_app.command(name="edit")
def paycheck_edit(
    paycheck_id: int,
    employer: str = typer.Option(None, "--employer", "-e", help="New employer name"),
    gross: str = typer.Option(None, "--gross", "-g", help="New gross amount"),
    pay_date: str = typer.Option(None, "--date", "-d", help="New pay date (YYYY-MM-DD)"),
    deduction: list[str] = typer.Option(
        [], "--deduction", "-x", help="Replace all deductions with NAME:AMOUNT:CATEGORY[:pretax] (repeatable)"
    ),
    clear_deductions: bool = typer.Option(False, "--clear-deductions", help="Remove every deduction"),
) -> None:
    """Edit a paycheck and recompute its net pay."""
    edit_paycheck_command(paycheck_id, employer, pay_date, gross, deduction, clear_deductions)


@paycheck_app.command(name="delete")
def paycheck_delete(paycheck_id: int) -> None:
    """Delete a paycheck."""
    delete_paycheck_command(paycheck_id)


@paycheck_app.command(name="import")
def paycheck_import(
    path: str,
    employer: str = typer.Option(None, "--employer", "-e", help="Employer name"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Save without confirmation"),
) -> None:
    """Import a paycheck from a paystub PDF or text file."""
    import_paystub_command(path, employer, yes)


@expense_app.command(name="add")
def expense_add(
    description: str,
    amount: str,
    on: str = typer.Option(None, "--date", "-d", help="Date (YYYY-MM-DD, default: today)"),
    category: str = typer.Option(None, "--category", "-c", help="Category name"),
    income: bool = typer.Option(False, "--income", help="Record income instead of an expense"),
) -> None:
    """Log a one-off expense."""
    add_expense_command(description, amount, on, category, income)


@expense_app.command(name="list")
def expense_list(
    limit: int = typer.Option(20, help="Maximum transactions to show"),
    all: bool = typer.Option(False, "--all", "-a", help="Show all your transactions"),
    month: str = typer.Option(None, "--month", "-m", help="Only this month (YYYY-MM)"),
) -> None:
    """List your transactions."""
    list_expenses_command(limit, all, month)


@expense_app.command(name="edit")
def expense_edit(
    txn_id: int,
    description: str = typer.Option(None, "--description", help="New description"),
    amount: str = typer.Option(None, "--amount", help="New amount"),
    on: str = typer.Option(None, "--date", "-d", help="New date (YYYY-MM-DD)"),
    category: str = typer.Option(None, "--category", "-c", help="New category name"),
) -> None:
    """Edit a transaction."""
    edit_expense_command(txn_id, description, amount, on, category)


@expense_app.command(name="delete")
def expense_delete(txn_id: int) -> None:
    """Delete a transaction."""
    delete_expense_command(txn_id)


@recurring_app.command(name="add")
def recurring_add(
    description: str,
    amount: str,
    frequency: str = typer.Option("MONTHLY", "--frequency", "-f", help="MONTHLY or YEARLY"),
    start: str = typer.Option(None, "--start", help="First due date (YYYY-MM-DD, default: today)"),
    end: str = typer.Option(None, "--end", help="Last possible due date (YYYY-MM-DD)"),
    category: str = typer.Option(None, "--category", "-c", help="Category name"),
) -> None:
    """Add a recurring expense."""
    add_recurring_command(description, amount, frequency, start, end, category)


@recurring_app.command(name="list")
def recurring_list(
    all: bool = typer.Option(False, "--all", "-a", help="Include stopped recurring expenses"),
) -> None:
    """List your recurring expenses."""
    list_recurring_command(all)


@recurring_app.command(name="edit")
def recurring_edit(
    rule_id: int,
    description: str = typer.Option(None, "--description", help="New description"),
    amount: str = typer.Option(None, "--amount", help="New amount"),
    frequency: str = typer.Option(None, "--frequency", "-f", help="MONTHLY or YEARLY"),
    start: str = typer.Option(None, "--start", help="New start date; restarts the schedule"),
    end: str = typer.Option(None, "--end", help="Last possible due date (YYYY-MM-DD)"),
    category: str = typer.Option(None, "--category", "-c", help="New category name"),
) -> None:
    """Edit a recurring expense."""
    edit_recurring_command(rule_id, description, amount, frequency, start, end, category)


@recurring_app.command(name="pay")
def recurring_pay(
    rule_id: int,
    amount: str = typer.Option(None, "--amount", help="Amount actually paid (default: the usual amount)"),
    on: str = typer.Option(None, "--date", "-d", help="Payment date (default: the due date)"),
    description: str = typer.Option(None, "--description", help="Override the description"),
) -> None:
    """Mark the next occurrence as paid."""
    pay_recurring_command(rule_id, amount, on, description)


@recurring_app.command(name="skip")
def recurring_skip(rule_id: int) -> None:
    """Skip the next occurrence."""
    skip_recurring_command(rule_id)


@recurring_app.command(name="stop")
def recurring_stop(rule_id: int) -> None:
    """Stop a recurring expense as of today."""
    stop_recurring_command(rule_id)


@recurring_app.command(name="delete")
def recurring_delete(rule_id: int) -> None:
    """Delete a recurring expense."""
    delete_recurring_command(rule_id)


@categories_app.command(name="seed")
def categories_seed() -> None:
    """Create the default categories."""
    seed_categories_command()


@categories_app.command(name="add")
def categories_add(
    name: str,
    category_type: str = typer.Option("VARIABLE", "--type", "-t", help="FIXED, VARIABLE or SAVINGS_GOAL"),
) -> None:
    """Add a category."""
    add_category_command(name, category_type)


@categories_app.command(name="list")
def categories_list() -> None:
    """List your categories."""
    list_categories_command()


if __name__ == "__main__":
    app()
