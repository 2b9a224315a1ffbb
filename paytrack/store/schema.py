"""Database schema initialization and migrations."""

import os
import sqlite3
from pathlib import Path

from paytrack.domain.models import DeductionCategory, Frequency, TransactionType


def get_xdg_data_home() -> Path:
    """Get XDG data directory, with fallback to ~/.local/share."""
    xdg_data = os.environ.get("XDG_DATA_HOME")
    if xdg_data:
        return Path(xdg_data)
    return Path.home() / ".local" / "share"


def get_db_path() -> Path:
    """Get the default database path (XDG compliant)."""
    return get_xdg_data_home() / "paytrack" / "paytrack.db"


def _enum_check(column: str, enum_cls: type) -> str:
    values = ", ".join(f"'{member.value}'" for member in enum_cls)
    return f"CHECK ({column} IN ({values}))"


def init_database(db_path: Path | None = None) -> None:
    """Initialize the database with the required schema.

    Args:
        db_path: Path to the database file. If None, uses default location.

    Raises:
        sqlite3.Error: If database initialization fails.
    """
    if db_path is None:
        db_path = get_db_path()

    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()

    try:
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS categories (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT NOT NULL,
                name TEXT NOT NULL,
                type TEXT NOT NULL DEFAULT 'VARIABLE',
                target_amount INTEGER NOT NULL DEFAULT 0,
                UNIQUE (user_id, name)
            )
        """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS paychecks (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT NOT NULL,
                pay_date TEXT NOT NULL,
                gross_amount INTEGER NOT NULL,
                net_amount INTEGER NOT NULL,
                employer_name TEXT NOT NULL,
                projected INTEGER NOT NULL DEFAULT 0,
                source_id INTEGER REFERENCES paychecks(id) ON DELETE SET NULL,
                created_at TEXT NOT NULL DEFAULT (datetime('now'))
            )
        """
        )

        cursor.execute(
            f"""
            CREATE TABLE IF NOT EXISTS paycheck_deductions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                paycheck_id INTEGER NOT NULL REFERENCES paychecks(id) ON DELETE CASCADE,
                name TEXT NOT NULL,
                amount INTEGER NOT NULL,
                category TEXT NOT NULL {_enum_check("category", DeductionCategory)},
                is_pre_tax INTEGER NOT NULL DEFAULT 0
            )
        """
        )

        cursor.execute(
            f"""
            CREATE TABLE IF NOT EXISTS recurring_expenses (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT NOT NULL,
                description TEXT NOT NULL,
                amount INTEGER NOT NULL,
                frequency TEXT NOT NULL {_enum_check("frequency", Frequency)},
                start_date TEXT NOT NULL,
                next_due_date TEXT NOT NULL,
                end_date TEXT,
                is_active INTEGER NOT NULL DEFAULT 1,
                category_id INTEGER REFERENCES categories(id) ON DELETE SET NULL
            )
        """
        )

        cursor.execute(
            f"""
            CREATE TABLE IF NOT EXISTS transactions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT NOT NULL,
                description TEXT NOT NULL,
                amount INTEGER NOT NULL,
                date TEXT NOT NULL,
                type TEXT NOT NULL {_enum_check("type", TransactionType)},
                category_id INTEGER REFERENCES categories(id) ON DELETE SET NULL,
                recurring_rule_id INTEGER REFERENCES recurring_expenses(id) ON DELETE SET NULL,
                due_date TEXT,
                created_at TEXT NOT NULL DEFAULT (datetime('now'))
            )
        """
        )

        # Migrations for older databases
        cursor.execute("PRAGMA table_info(transactions)")
        columns = [row[1] for row in cursor.fetchall()]

        # Migration: Add 'due_date' column if missing
        if "due_date" not in columns:
            cursor.execute("ALTER TABLE transactions ADD COLUMN due_date TEXT")

        cursor.execute("CREATE INDEX IF NOT EXISTS idx_paycheck_user_date ON paychecks(user_id, pay_date)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_deduction_paycheck ON paycheck_deductions(paycheck_id)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_txn_user_date ON transactions(user_id, date)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_txn_rule ON transactions(recurring_rule_id)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_recurring_user ON recurring_expenses(user_id, is_active)")

        conn.commit()

    except sqlite3.Error:
        conn.rollback()
        raise
    finally:
        conn.close()
