"""Admin commands for init, backup and settings."""

import shutil
import sqlite3
import sys
import tomllib
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.table import Table

from paytrack.commands.shared import get_user_id
from paytrack.config import DEFAULT_SETTINGS, create_default_config, get_config_path, get_setting, set_setting
from paytrack.domain.models import PAY_FREQUENCIES, parse_frequency
from paytrack.store.queries import seed_default_categories
from paytrack.store.schema import get_db_path, init_database

console = Console()


def backup_command(
    output_dir: str | None = None,
) -> None:
    """Backup database and configuration files."""
    db_path = get_db_path()
    config_path = get_config_path()

    if not db_path.exists():
        console.print("[red]Database not found. Run 'paytrack init' first.[/red]", style="bold")
        sys.exit(1)

    if output_dir:
        backup_dir = Path(output_dir).expanduser()
    else:
        backup_dir = db_path.parent / "backups"

    backup_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    try:
        db_backup = backup_dir / f"paytrack_{timestamp}.db"
        shutil.copy2(db_path, db_backup)
        console.print(f"[green]✓[/green] Database backed up to: {db_backup}")

        # Config is optional; defaults apply without it
        if config_path.exists():
            config_backup = backup_dir / f"config_{timestamp}.toml"
            shutil.copy2(config_path, config_backup)
            console.print(f"[green]✓[/green] Config backed up to: {config_backup}")

        console.print("\n[green]Backup complete![/green]", style="bold")
        console.print(f"[dim]Backup directory: {backup_dir}[/dim]")

    except OSError as e:
        console.print(f"[red]Backup failed: {e}[/red]", style="bold")
        sys.exit(1)


def run_migration(db_path: Path) -> None:
    """Bring an existing database up to the current schema."""
    console.print(f"[cyan]Running migrations on {db_path}...[/cyan]")
    init_database(db_path)
    console.print("[green]✓[/green] Migrations complete")


def run_full_init(db_path: Path, config_path: Path, seed: bool) -> None:
    """Initialize new database and config."""
    console.print(f"[cyan]Initializing database at {db_path}...[/cyan]")
    init_database(db_path)
    console.print("[green]✓[/green] Database initialized")

    console.print(f"[cyan]Creating config file at {config_path}...[/cyan]")
    create_default_config(config_path)
    console.print("[green]✓[/green] Config file created (permissions: 600)")

    if seed:
        created = seed_default_categories(get_user_id(config_path), db_path)
        console.print(f"[green]✓[/green] {created} default categories created")

    console.print("\n[green]Initialization complete![/green]", style="bold")
    console.print(f"[dim]Database: {db_path}[/dim]")
    console.print(f"[dim]Config: {config_path}[/dim]")


def init_command(force: bool = False, migrate: bool = False, seed: bool = True) -> None:
    """Initialize paytrack database and configuration."""
    db_path = get_db_path()
    config_path = get_config_path()

    db_exists = db_path.exists()
    config_exists = config_path.exists()

    try:
        if migrate:
            if not db_exists:
                console.print("[red]No database found to migrate[/red]", style="bold")
                console.print(f"[dim]Expected location: {db_path}[/dim]")
                sys.exit(1)
            run_migration(db_path)
            return

        if not force and (db_exists or config_exists):
            console.print("[red]Initialization failed:[/red]", style="bold")
            if db_exists:
                console.print(f"  Database already exists: {db_path}")
            if config_exists:
                console.print(f"  Config already exists: {config_path}")
            console.print("\n[yellow]Use 'paytrack init --force' to overwrite[/yellow]")
            console.print("[yellow]Or 'paytrack init --migrate' to update database schema only[/yellow]")
            sys.exit(1)

        if force and db_exists:
            db_path.unlink()

        run_full_init(db_path, config_path, seed)

    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)
    except OSError as e:
        console.print(f"[red]Filesystem error: {e}[/red]", style="bold")
        sys.exit(1)


def config_command(key: str | None = None, value: str | None = None) -> None:
    """Show settings, or set one when a value is given."""
    config_path = get_config_path()

    try:
        if key is None:
            table = Table(title="Settings")
            table.add_column("Key", style="cyan")
            table.add_column("Value", style="white")
            for name in DEFAULT_SETTINGS:
                table.add_row(name, str(get_setting(name, config_path)))
            console.print(table)
            return

        if value is None:
            console.print(f"{key} = {get_setting(key, config_path)}")
            return

        parsed: str | int = value
        if key == "savings_target":
            parsed = int(value)
            if not 0 <= parsed <= 100:
                raise ValueError("savings_target must be between 0 and 100")
        elif key == "pay_frequency":
            frequency = parse_frequency(value)
            if frequency not in PAY_FREQUENCIES:
                raise ValueError(f"{frequency.value} is not a pay frequency")
            parsed = frequency.value

        set_setting(key, parsed, config_path)
    except KeyError as e:
        console.print(f"[red]{e.args[0]}[/red]", style="bold")
        sys.exit(1)
    except ValueError as e:
        console.print(f"[red]Invalid value for {key}: {e}[/red]", style="bold")
        sys.exit(1)
    except (OSError, tomllib.TOMLDecodeError) as e:
        console.print(f"[red]Config error: {e}[/red]", style="bold")
        sys.exit(1)

    console.print(f"[green]✓[/green] {key} set to {parsed}")
