"""Paycheck commands: add, list, project, edit, delete and import from a paystub."""

import sqlite3
import sys
from dataclasses import replace
from datetime import date
from pathlib import Path

import PyPDF2
import typer
from rich.console import Console
from rich.table import Table

from paytrack.commands.shared import display_money, get_user_id, parse_amount_option, parse_date_option
from paytrack.config import get_setting
from paytrack.domain.models import PAY_FREQUENCIES, Money, UserId, parse_deduction_category, parse_frequency
from paytrack.domain.money import to_cents
from paytrack.domain.paychecks import (
    DeductionRecord,
    PaycheckRecord,
    build_paycheck,
    deductions_by_category,
    project_paycheck,
)
from paytrack.domain.paystub import PartialPaycheck, extract_paystub
from paytrack.pdf import read_paystub_text
from paytrack.store.queries import (
    delete_paycheck,
    get_paycheck,
    get_paychecks,
    insert_paycheck,
    insert_paychecks,
    update_paycheck,
)
from paytrack.store.schema import get_db_path

console = Console()

PRE_TAX_MARKERS = ("pretax", "pre-tax", "pre_tax")


def parse_deduction_option(option: str) -> DeductionRecord:
    """Parse a NAME:AMOUNT:CATEGORY[:pretax] deduction option.

    Examples: "FITW:73.30:TAX", "401k:150:RETIREMENT:pretax".

    Raises:
        ValueError: If the option is malformed.
    """
    parts = [part.strip() for part in option.split(":")]
    if len(parts) not in (3, 4) or not parts[0]:
        raise ValueError(f"Invalid deduction '{option}' (expected NAME:AMOUNT:CATEGORY[:pretax])")

    name, amount_text, category_text = parts[:3]
    pre_tax = len(parts) == 4
    if pre_tax and parts[3].lower() not in PRE_TAX_MARKERS:
        raise ValueError(f"Invalid deduction flag '{parts[3]}' (expected 'pretax')")

    amount = to_cents(amount_text)
    if amount < 0:
        raise ValueError(f"Deduction '{name}' amount must not be negative")

    return DeductionRecord(
        name=name,
        amount=amount,
        category=parse_deduction_category(category_text),
        pre_tax=pre_tax,
    )


def render_paycheck(paycheck: PaycheckRecord) -> None:
    """Render one paycheck with its deductions."""
    status = " [yellow](projected)[/yellow]" if paycheck.projected else ""
    title = f"{paycheck.employer_name} - {paycheck.pay_date.isoformat()}{status}"
    table = Table(title=title)
    table.add_column("Deduction", style="white")
    table.add_column("Category", style="magenta")
    table.add_column("Pre-tax", justify="center")
    table.add_column("Amount", justify="right")

    for deduction in paycheck.deductions:
        table.add_row(
            deduction.name,
            deduction.category.value,
            "✓" if deduction.pre_tax else "",
            f"[red]{display_money(deduction.amount)}[/red]",
        )

    console.print(table)
    totals = deductions_by_category(paycheck.deductions)
    if totals:
        summary = ", ".join(f"{category.value} {display_money(amount)}" for category, amount in totals.items())
        console.print(f"[dim]By category: {summary}[/dim]")
    console.print(f"[bold]Gross:[/bold] {display_money(paycheck.gross_amount)}")
    console.print(f"[bold]Net:[/bold] [green]{display_money(paycheck.net_amount)}[/green]")


def add_paycheck_command(
    employer: str,
    pay_date: str | None,
    gross: str,
    deductions: list[str],
) -> None:
    """Add a paycheck manually."""
    db_path = get_db_path()
    user_id = get_user_id()

    try:
        paycheck = build_paycheck(
            user_id=user_id,
            employer_name=employer,
            pay_date=parse_date_option(pay_date),
            gross_amount=parse_amount_option(gross),
            deductions=[parse_deduction_option(option) for option in deductions],
        )
    except ValueError as e:
        console.print(f"[red]Invalid paycheck: {e}[/red]", style="bold")
        sys.exit(1)

    try:
        paycheck_id = insert_paycheck(paycheck, db_path)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    render_paycheck(paycheck)
    console.print(f"\n[green]✓[/green] Paycheck saved (ID: {paycheck_id})")


def list_paychecks_command(year: int | None = None, limit: int = 20) -> None:
    """List paychecks, newest first."""
    db_path = get_db_path()
    user_id = get_user_id()

    since = date(year, 1, 1) if year else None
    until = date(year, 12, 31) if year else None

    try:
        paychecks = get_paychecks(user_id, db_path, since, until, limit)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    if not paychecks:
        console.print("[yellow]No paychecks found[/yellow]")
        return

    table = Table(title=f"Paychecks (showing {len(paychecks)})")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Pay date", style="cyan")
    table.add_column("Employer", style="white")
    table.add_column("Gross", justify="right")
    table.add_column("Deductions", justify="right")
    table.add_column("Net", justify="right")
    table.add_column("Status", justify="center")

    for paycheck in paychecks:
        table.add_row(
            str(paycheck.id),
            paycheck.pay_date.isoformat(),
            paycheck.employer_name,
            display_money(paycheck.gross_amount),
            f"[red]{display_money(Money(paycheck.gross_amount - paycheck.net_amount))}[/red]",
            f"[green]{display_money(paycheck.net_amount)}[/green]",
            "[yellow]projected[/yellow]" if paycheck.projected else "✓",
        )

    console.print(table)


def project_paycheck_command(paycheck_id: int, frequency: str | None = None) -> None:
    """Project a paycheck forward through the end of its year."""
    db_path = get_db_path()
    user_id = get_user_id()

    try:
        pay_frequency = parse_frequency(frequency or str(get_setting("pay_frequency")))
        if pay_frequency not in PAY_FREQUENCIES:
            raise ValueError(f"Paychecks cannot be projected {pay_frequency.value}")
    except ValueError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)

    try:
        source = get_paycheck(user_id, paycheck_id, db_path)
        if source is None:
            console.print(f"[red]Paycheck {paycheck_id} not found[/red]", style="bold")
            sys.exit(1)

        projections = project_paycheck(source, pay_frequency)
        if not projections:
            console.print(f"[yellow]No pay dates left in {source.pay_date.year} after {source.pay_date}[/yellow]")
            return

        insert_paychecks(projections, db_path)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    console.print(
        f"[green]✓[/green] Projected {len(projections)} {pay_frequency.value.lower()} paychecks "
        f"({projections[0].pay_date} to {projections[-1].pay_date})"
    )


def edit_paycheck_command(
    paycheck_id: int,
    employer: str | None = None,
    pay_date: str | None = None,
    gross: str | None = None,
    deductions: list[str] | None = None,
    clear_deductions: bool = False,
) -> None:
    """Edit a paycheck; given deductions replace the whole stored set.

    Net pay is recomputed. A projected paycheck stays projected.
    """
    db_path = get_db_path()
    user_id = get_user_id()

    try:
        existing = get_paycheck(user_id, paycheck_id, db_path)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)
    if existing is None:
        console.print(f"[red]Paycheck {paycheck_id} not found[/red]", style="bold")
        sys.exit(1)

    try:
        if deductions:
            new_deductions = [parse_deduction_option(option) for option in deductions]
        elif clear_deductions:
            new_deductions = []
        else:
            new_deductions = list(existing.deductions)

        edited = build_paycheck(
            user_id=user_id,
            employer_name=employer if employer is not None else existing.employer_name,
            pay_date=parse_date_option(pay_date) if pay_date else existing.pay_date,
            gross_amount=parse_amount_option(gross) if gross else existing.gross_amount,
            deductions=new_deductions,
            paycheck_id=existing.id,
        )
    except ValueError as e:
        console.print(f"[red]Invalid paycheck: {e}[/red]", style="bold")
        sys.exit(1)
    edited = replace(edited, projected=existing.projected, source_id=existing.source_id)

    try:
        update_paycheck(edited, db_path)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    render_paycheck(edited)
    console.print(f"\n[green]✓[/green] Paycheck {paycheck_id} updated")


def delete_paycheck_command(paycheck_id: int) -> None:
    """Delete a paycheck and its deductions."""
    db_path = get_db_path()

    try:
        deleted = delete_paycheck(get_user_id(), paycheck_id, db_path)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    if not deleted:
        console.print(f"[yellow]Paycheck {paycheck_id} not found[/yellow]")
        sys.exit(1)
    console.print(f"[green]✓[/green] Paycheck {paycheck_id} deleted")


def render_extracted(extracted: PartialPaycheck) -> None:
    """Show what the extractor found before the user confirms it."""
    pay_date = extracted.pay_date.isoformat() if extracted.pay_date else "[dim]not found[/dim]"
    gross = display_money(extracted.gross_amount) if extracted.gross_amount is not None else "[dim]not found[/dim]"
    console.print(f"[bold]Pay date:[/bold] {pay_date}")
    console.print(f"[bold]Gross:[/bold] {gross}")

    if not extracted.deductions:
        console.print("[dim]No deductions found[/dim]")
        return

    table = Table(title="Deductions found")
    table.add_column("Name", style="white")
    table.add_column("Category", style="magenta")
    table.add_column("Pre-tax", justify="center")
    table.add_column("Amount", justify="right")
    for deduction in extracted.deductions:
        table.add_row(
            deduction.name,
            deduction.category.value,
            "✓" if deduction.pre_tax else "",
            display_money(deduction.amount),
        )
    console.print(table)


def complete_paycheck(
    extracted: PartialPaycheck,
    user_id: UserId,
    employer: str | None,
) -> PaycheckRecord:
    """Fill the fields the extractor could not infer by prompting.

    Raises:
        ValueError: If the completed paycheck is invalid.
    """
    employer_name = employer or typer.prompt("Employer name", type=str)

    pay_date = extracted.pay_date
    if pay_date is None:
        pay_date = parse_date_option(typer.prompt("Pay date (YYYY-MM-DD)", type=str))

    gross = extracted.gross_amount
    if gross is None:
        gross = parse_amount_option(typer.prompt("Gross amount", type=str))

    return build_paycheck(
        user_id=user_id,
        employer_name=employer_name,
        pay_date=pay_date,
        gross_amount=gross,
        deductions=list(extracted.deductions),
    )


def import_paystub_command(path: str, employer: str | None = None, yes: bool = False) -> None:
    """Extract a paycheck from a paystub PDF or text file, confirm and save it."""
    db_path = get_db_path()
    user_id = get_user_id()
    stub_path = Path(path).expanduser()

    try:
        text = read_paystub_text(stub_path)
    except (OSError, PyPDF2.errors.PdfReadError) as e:
        console.print(f"[red]Failed to read paystub: {e}[/red]", style="bold")
        console.print("[dim]Use 'paytrack paycheck add' to enter it manually[/dim]")
        sys.exit(1)

    extracted = extract_paystub(text)
    if extracted.is_empty:
        console.print("[yellow]Nothing recognisable found in the paystub; enter the details manually[/yellow]")
    else:
        render_extracted(extracted)
    console.print()

    try:
        paycheck = complete_paycheck(extracted, user_id, employer)
    except ValueError as e:
        console.print(f"[red]Invalid paycheck: {e}[/red]", style="bold")
        sys.exit(1)

    render_paycheck(paycheck)

    if not yes and not typer.confirm("\nSave this paycheck?", default=True):
        console.print("[dim]Not saved[/dim]")
        return

    try:
        paycheck_id = insert_paycheck(paycheck, db_path)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    console.print(f"[green]✓[/green] Paycheck saved (ID: {paycheck_id})")
