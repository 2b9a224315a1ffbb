"""Expense commands: one-off transactions, recurring expenses and categories."""

import sqlite3
import sys
from datetime import date
from typing import NoReturn

from rich.console import Console
from rich.table import Table

from paytrack.commands.shared import (
    category_names,
    display_money,
    get_user_id,
    parse_amount_option,
    parse_date_option,
    resolve_category_id,
)
from paytrack.dates import month_range
from paytrack.domain.models import Month, TransactionType, UserId, parse_frequency
from paytrack.domain.transactions import (
    RecurringExpenseRule,
    edit_rule,
    edit_transaction,
    honor_rule,
    new_rule,
    new_transaction,
    skip_rule,
    stop_rule,
)
from paytrack.store.queries import (
    CATEGORY_TYPES,
    add_category,
    delete_recurring_rule,
    delete_transaction,
    get_all_categories,
    get_recurring_rule,
    get_recurring_rules,
    get_transaction,
    get_transactions,
    insert_recurring_rule,
    insert_transaction,
    record_rule_payment,
    seed_default_categories,
    update_recurring_rule,
    update_transaction,
)
from paytrack.store.schema import get_db_path

console = Console()


def _database_error(e: sqlite3.Error) -> NoReturn:
    console.print(f"[red]Database error: {e}[/red]", style="bold")
    sys.exit(1)


def _invalid(e: ValueError) -> NoReturn:
    console.print(f"[red]{e}[/red]", style="bold")
    sys.exit(1)


def add_expense_command(
    description: str,
    amount: str,
    on: str | None = None,
    category: str | None = None,
    income: bool = False,
) -> None:
    """Log a one-off expense (or income with --income)."""
    db_path = get_db_path()
    user_id = get_user_id()

    try:
        txn = new_transaction(
            user_id=user_id,
            description=description,
            amount=parse_amount_option(amount),
            on=parse_date_option(on),
            txn_type=TransactionType.INCOME if income else TransactionType.EXPENSE,
            category_id=resolve_category_id(user_id, category, db_path),
        )
        txn_id = insert_transaction(txn, db_path)
    except ValueError as e:
        _invalid(e)
    except sqlite3.Error as e:
        _database_error(e)

    kind = "Income" if income else "Expense"
    console.print(f"[green]✓[/green] {kind} added (ID: {txn_id}):")
    console.print(f"  Date: {txn.date.isoformat()}")
    console.print(f"  Description: {txn.description}")
    console.print(f"  Amount: {display_money(txn.amount)}")


def list_expenses_command(limit: int = 20, all: bool = False, month: str | None = None) -> None:
    """List recent transactions, optionally for one month."""
    db_path = get_db_path()
    user_id = get_user_id()

    since = until = None
    period = ""
    if month:
        try:
            since, until, period = month_range(Month(month))
        except ValueError:
            _invalid(ValueError(f"Invalid month '{month}' (expected YYYY-MM)"))

    try:
        transactions = get_transactions(
            user_id, db_path, since_date=since, until_date=until, limit=None if all or month else limit
        )
        names = category_names(user_id, db_path)
    except sqlite3.Error as e:
        _database_error(e)

    if not transactions:
        console.print("[yellow]No transactions found[/yellow]")
        return

    title = f"Transactions - {period}" if period else f"Transactions (showing {len(transactions)})"
    table = Table(title=title)
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Date", style="cyan")
    table.add_column("Description", style="white")
    table.add_column("Category", style="magenta")
    table.add_column("Amount", justify="right")
    table.add_column("Recurring", justify="center")

    for txn in transactions:
        if txn.type is TransactionType.EXPENSE:
            amount_display = f"[red]{display_money(txn.amount)}[/red]"
        else:
            amount_display = f"[green]+{display_money(txn.amount)}[/green]"

        category = names.get(txn.category_id, "[dim]-[/dim]") if txn.category_id else "[dim]-[/dim]"
        recurring = "↻" if txn.recurring_rule_id else ""
        table.add_row(str(txn.id), txn.date.isoformat(), txn.description, category, amount_display, recurring)

    console.print(table)


def edit_expense_command(
    txn_id: int,
    description: str | None = None,
    amount: str | None = None,
    on: str | None = None,
    category: str | None = None,
) -> None:
    """Edit a transaction's description, amount, date or category."""
    db_path = get_db_path()
    user_id = get_user_id()

    try:
        txn = get_transaction(user_id, txn_id, db_path)
        if txn is None:
            console.print(f"[red]Transaction {txn_id} not found[/red]", style="bold")
            sys.exit(1)

        edited = edit_transaction(
            txn,
            description=description,
            amount=parse_amount_option(amount) if amount else None,
            on=parse_date_option(on) if on else None,
            category_id=resolve_category_id(user_id, category, db_path),
        )
        update_transaction(edited, db_path)
    except ValueError as e:
        _invalid(e)
    except sqlite3.Error as e:
        _database_error(e)

    console.print(
        f"[green]✓[/green] Transaction {txn_id} updated: {edited.date} {edited.description} "
        f"{display_money(edited.amount)}"
    )


def delete_expense_command(txn_id: int) -> None:
    """Delete a transaction."""
    db_path = get_db_path()

    try:
        deleted = delete_transaction(get_user_id(), txn_id, db_path)
    except sqlite3.Error as e:
        _database_error(e)

    if not deleted:
        console.print(f"[yellow]Transaction {txn_id} not found[/yellow]")
        sys.exit(1)
    console.print(f"[green]✓[/green] Transaction {txn_id} deleted")


def add_recurring_command(
    description: str,
    amount: str,
    frequency: str,
    start: str | None = None,
    end: str | None = None,
    category: str | None = None,
) -> None:
    """Create a recurring expense rule."""
    db_path = get_db_path()
    user_id = get_user_id()

    try:
        rule = new_rule(
            user_id=user_id,
            description=description,
            amount=parse_amount_option(amount),
            frequency=parse_frequency(frequency),
            start_date=parse_date_option(start),
            end_date=parse_date_option(end) if end else None,
            category_id=resolve_category_id(user_id, category, db_path),
        )
        rule_id = insert_recurring_rule(rule, db_path)
    except ValueError as e:
        _invalid(e)
    except sqlite3.Error as e:
        _database_error(e)

    console.print(
        f"[green]✓[/green] Recurring expense added (ID: {rule_id}): {rule.description} "
        f"{display_money(rule.amount)} {rule.frequency.value.lower()}, first due {rule.next_due_date}"
    )


def list_recurring_command(all: bool = False) -> None:
    """List recurring expense rules."""
    db_path = get_db_path()
    user_id = get_user_id()

    try:
        rules = get_recurring_rules(user_id, db_path, active_only=not all)
        names = category_names(user_id, db_path)
    except sqlite3.Error as e:
        _database_error(e)

    if not rules:
        console.print("[dim]No recurring expenses set up[/dim]")
        return

    table = Table(title="Recurring expenses")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Description", style="white")
    table.add_column("Frequency", style="cyan")
    table.add_column("Next due", style="cyan")
    table.add_column("Category", style="magenta")
    table.add_column("Amount", justify="right")
    table.add_column("Status", justify="center")

    for rule in rules:
        category = names.get(rule.category_id, "[dim]-[/dim]") if rule.category_id else "[dim]-[/dim]"
        status = "✓" if rule.active else f"[dim]stopped {rule.end_date}[/dim]"
        table.add_row(
            str(rule.id),
            rule.description,
            rule.frequency.value,
            rule.next_due_date.strftime("%b %d, %Y"),
            category,
            display_money(rule.amount),
            status,
        )

    console.print(table)


def _load_rule(user_id: UserId, rule_id: int) -> RecurringExpenseRule:
    try:
        rule = get_recurring_rule(user_id, rule_id, get_db_path())
    except sqlite3.Error as e:
        _database_error(e)
    if rule is None:
        console.print(f"[red]Recurring expense {rule_id} not found[/red]", style="bold")
        sys.exit(1)
    return rule


def edit_recurring_command(
    rule_id: int,
    description: str | None = None,
    amount: str | None = None,
    frequency: str | None = None,
    start: str | None = None,
    end: str | None = None,
    category: str | None = None,
) -> None:
    """Edit a recurring expense; a new start date restarts its schedule."""
    db_path = get_db_path()
    user_id = get_user_id()
    rule = _load_rule(user_id, rule_id)

    try:
        edited = edit_rule(
            rule,
            description=description,
            amount=parse_amount_option(amount) if amount else None,
            frequency=parse_frequency(frequency) if frequency else None,
            start_date=parse_date_option(start) if start else None,
            end_date=parse_date_option(end) if end else None,
            category_id=resolve_category_id(user_id, category, db_path),
        )
        update_recurring_rule(edited, db_path)
    except ValueError as e:
        _invalid(e)
    except sqlite3.Error as e:
        _database_error(e)

    console.print(
        f"[green]✓[/green] Recurring expense {rule_id} updated: {edited.description} "
        f"{display_money(edited.amount)} {edited.frequency.value.lower()}, next due {edited.next_due_date}"
    )


def pay_recurring_command(
    rule_id: int,
    amount: str | None = None,
    on: str | None = None,
    description: str | None = None,
) -> None:
    """Mark the current occurrence of a recurring expense as paid."""
    db_path = get_db_path()
    user_id = get_user_id()
    rule = _load_rule(user_id, rule_id)

    try:
        txn, advanced = honor_rule(
            rule,
            description=description,
            amount=parse_amount_option(amount) if amount else None,
            paid_on=parse_date_option(on) if on else None,
        )
        record_rule_payment(txn, advanced, db_path)
    except ValueError as e:
        _invalid(e)
    except LookupError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)
    except sqlite3.Error as e:
        _database_error(e)

    console.print(f"[green]✓[/green] Paid {txn.description} {display_money(txn.amount)} on {txn.date}")
    console.print(f"[dim]Next due: {advanced.next_due_date}[/dim]")


def skip_recurring_command(rule_id: int) -> None:
    """Skip the next occurrence of a recurring expense."""
    user_id = get_user_id()
    rule = _load_rule(user_id, rule_id)
    advanced = skip_rule(rule)

    try:
        update_recurring_rule(advanced, get_db_path())
    except sqlite3.Error as e:
        _database_error(e)

    console.print(f"[green]✓[/green] Skipped {rule.next_due_date}; next due {advanced.next_due_date}")


def stop_recurring_command(rule_id: int) -> None:
    """Stop a recurring expense, keeping its history."""
    user_id = get_user_id()
    rule = _load_rule(user_id, rule_id)
    stopped = stop_rule(rule, date.today())

    try:
        update_recurring_rule(stopped, get_db_path())
    except sqlite3.Error as e:
        _database_error(e)

    console.print(f"[green]✓[/green] Stopped {rule.description} (ended {stopped.end_date})")


def delete_recurring_command(rule_id: int) -> None:
    """Delete a recurring expense; its logged payments are kept."""
    try:
        deleted = delete_recurring_rule(get_user_id(), rule_id, get_db_path())
    except sqlite3.Error as e:
        _database_error(e)

    if not deleted:
        console.print(f"[yellow]Recurring expense {rule_id} not found[/yellow]")
        sys.exit(1)
    console.print(f"[green]✓[/green] Recurring expense {rule_id} deleted")


def seed_categories_command() -> None:
    """Create the default budget categories."""
    try:
        created = seed_default_categories(get_user_id(), get_db_path())
    except sqlite3.Error as e:
        _database_error(e)

    if created:
        console.print(f"[green]✓[/green] Created {created} categories")
    else:
        console.print("[dim]Default categories already exist[/dim]")


def add_category_command(name: str, category_type: str = "VARIABLE") -> None:
    """Add a budget category."""
    if not name.strip():
        _invalid(ValueError("Category name is required"))
    if category_type.upper() not in CATEGORY_TYPES:
        _invalid(ValueError(f"Unknown category type '{category_type}' (expected one of: {', '.join(CATEGORY_TYPES)})"))

    try:
        category_id = add_category(get_user_id(), name.strip(), category_type.upper(), get_db_path())
    except sqlite3.IntegrityError:
        console.print(f"[yellow]Category '{name}' already exists[/yellow]")
        sys.exit(1)
    except sqlite3.Error as e:
        _database_error(e)

    console.print(f"[green]✓[/green] Category '{name.strip()}' added (ID: {category_id})")


def list_categories_command() -> None:
    """List budget categories."""
    try:
        categories = get_all_categories(get_user_id(), get_db_path())
    except sqlite3.Error as e:
        _database_error(e)

    if not categories:
        console.print("[dim]No categories yet (run 'paytrack categories seed')[/dim]")
        return

    table = Table(title="Categories")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Name", style="white")
    table.add_column("Type", style="magenta")
    for category in categories:
        table.add_row(str(category["id"]), category["name"], category["type"])
    console.print(table)
