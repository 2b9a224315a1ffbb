"""Database query functions.

Every query is scoped to one user. Money crosses this boundary as integer
cents and dates as ISO YYYY-MM-DD strings. Writes that touch more than one
row run in a single transaction and roll back as a whole on failure.
"""

import logging
import sqlite3
from datetime import date
from pathlib import Path
from typing import Any

from paytrack.dates import format_iso_date, parse_iso_date
from paytrack.domain.models import DeductionCategory, Frequency, Money, TransactionType, UserId
from paytrack.domain.paychecks import DeductionRecord, PaycheckRecord
from paytrack.domain.transactions import RecurringExpenseRule, Transaction
from paytrack.store.schema import get_db_path

logger = logging.getLogger(__name__)

CATEGORY_TYPES = ("FIXED", "VARIABLE", "SAVINGS_GOAL")

DEFAULT_CATEGORIES: tuple[tuple[str, str], ...] = (
    ("Housing/Rent", "FIXED"),
    ("Utilities", "FIXED"),
    ("Internet", "FIXED"),
    ("Groceries", "VARIABLE"),
    ("Dining Out", "VARIABLE"),
    ("Transportation/Gas", "VARIABLE"),
    ("Entertainment", "VARIABLE"),
    ("Health", "FIXED"),
    ("Insurance", "FIXED"),
    ("Savings", "SAVINGS_GOAL"),
)


def _connect(db_path: Path | None = None) -> sqlite3.Connection:
    """Create a database connection with row factory and foreign keys enforced.

    Args:
        db_path: Path to the database file. If None, uses default location.

    Returns:
        Database connection with row_factory configured.
    """
    if db_path is None:
        db_path = get_db_path()
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def _optional_date(value: str | None) -> date | None:
    return parse_iso_date(value) if value else None


def _optional_iso(value: date | None) -> str | None:
    return format_iso_date(value) if value else None


def _deduction_from_row(row: sqlite3.Row) -> DeductionRecord:
    return DeductionRecord(
        name=row["name"],
        amount=Money(row["amount"]),
        category=DeductionCategory(row["category"]),
        pre_tax=bool(row["is_pre_tax"]),
    )


def _paycheck_from_row(row: sqlite3.Row, deductions: list[DeductionRecord]) -> PaycheckRecord:
    return PaycheckRecord(
        id=row["id"],
        user_id=UserId(row["user_id"]),
        employer_name=row["employer_name"],
        pay_date=parse_iso_date(row["pay_date"]),
        gross_amount=Money(row["gross_amount"]),
        net_amount=Money(row["net_amount"]),
        deductions=tuple(deductions),
        projected=bool(row["projected"]),
        source_id=row["source_id"],
    )


def _rule_from_row(row: sqlite3.Row) -> RecurringExpenseRule:
    return RecurringExpenseRule(
        id=row["id"],
        user_id=UserId(row["user_id"]),
        description=row["description"],
        amount=Money(row["amount"]),
        frequency=Frequency(row["frequency"]),
        start_date=parse_iso_date(row["start_date"]),
        next_due_date=parse_iso_date(row["next_due_date"]),
        end_date=_optional_date(row["end_date"]),
        active=bool(row["is_active"]),
        category_id=row["category_id"],
    )


def _transaction_from_row(row: sqlite3.Row) -> Transaction:
    return Transaction(
        id=row["id"],
        user_id=UserId(row["user_id"]),
        description=row["description"],
        amount=Money(row["amount"]),
        date=parse_iso_date(row["date"]),
        type=TransactionType(row["type"]),
        category_id=row["category_id"],
        recurring_rule_id=row["recurring_rule_id"],
        due_date=_optional_date(row["due_date"]),
    )


def _insert_deductions(cursor: sqlite3.Cursor, paycheck_id: int, deductions: tuple[DeductionRecord, ...]) -> None:
    cursor.executemany(
        "INSERT INTO paycheck_deductions (paycheck_id, name, amount, category, is_pre_tax) VALUES (?, ?, ?, ?, ?)",
        [(paycheck_id, d.name, d.amount, d.category.value, int(d.pre_tax)) for d in deductions],
    )


def _insert_paycheck(cursor: sqlite3.Cursor, paycheck: PaycheckRecord) -> int:
    cursor.execute(
        """
        INSERT INTO paychecks (user_id, pay_date, gross_amount, net_amount, employer_name, projected, source_id)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        """,
        (
            paycheck.user_id,
            format_iso_date(paycheck.pay_date),
            paycheck.gross_amount,
            paycheck.net_amount,
            paycheck.employer_name,
            int(paycheck.projected),
            paycheck.source_id,
        ),
    )
    paycheck_id = cursor.lastrowid
    assert paycheck_id is not None
    _insert_deductions(cursor, paycheck_id, paycheck.deductions)
    return paycheck_id


def insert_paychecks(paychecks: list[PaycheckRecord], db_path: Path | None = None) -> list[int]:
    """Insert paychecks with their deductions, all or nothing.

    Args:
        paychecks: Paychecks to insert (ids are ignored).
        db_path: Path to the database file. If None, uses default location.

    Returns:
        New paycheck ids, in input order.

    Raises:
        sqlite3.Error: If any insert fails; nothing is written in that case.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            ids = [_insert_paycheck(cursor, paycheck) for paycheck in paychecks]
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise
    logger.debug("Inserted %d paychecks", len(ids))
    return ids


def insert_paycheck(paycheck: PaycheckRecord, db_path: Path | None = None) -> int:
    """Insert one paycheck with its deductions.

    Returns:
        The new paycheck id.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    return insert_paychecks([paycheck], db_path)[0]


def update_paycheck(paycheck: PaycheckRecord, db_path: Path | None = None) -> bool:
    """Overwrite a stored paycheck and replace its deduction set.

    The row update and the deduction swap commit together. Only the owning
    user's paycheck is touched.

    Returns:
        True if the paycheck was found and updated.

    Raises:
        sqlite3.Error: If database operation fails; nothing is written in that case.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute(
                """
                UPDATE paychecks
                SET pay_date = ?, gross_amount = ?, net_amount = ?, employer_name = ?, projected = ?, source_id = ?
                WHERE id = ? AND user_id = ?
                """,
                (
                    format_iso_date(paycheck.pay_date),
                    paycheck.gross_amount,
                    paycheck.net_amount,
                    paycheck.employer_name,
                    int(paycheck.projected),
                    paycheck.source_id,
                    paycheck.id,
                    paycheck.user_id,
                ),
            )
            if cursor.rowcount == 0:
                conn.rollback()
                return False

            assert paycheck.id is not None
            cursor.execute("DELETE FROM paycheck_deductions WHERE paycheck_id = ?", (paycheck.id,))
            _insert_deductions(cursor, paycheck.id, paycheck.deductions)
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise
    logger.debug("Paycheck %s updated with %d deductions", paycheck.id, len(paycheck.deductions))
    return True


def delete_paycheck(user_id: UserId, paycheck_id: int, db_path: Path | None = None) -> bool:
    """Delete a paycheck; its deductions go with it.

    Returns:
        True if a paycheck was deleted.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute("DELETE FROM paychecks WHERE id = ? AND user_id = ?", (paycheck_id, user_id))
            conn.commit()
            return cursor.rowcount > 0
        except sqlite3.Error:
            conn.rollback()
            raise


def _load_deductions(cursor: sqlite3.Cursor, paycheck_ids: list[int]) -> dict[int, list[DeductionRecord]]:
    deductions: dict[int, list[DeductionRecord]] = {pid: [] for pid in paycheck_ids}
    if not paycheck_ids:
        return deductions

    placeholders = ", ".join("?" for _ in paycheck_ids)
    cursor.execute(
        f"SELECT * FROM paycheck_deductions WHERE paycheck_id IN ({placeholders}) ORDER BY id",
        paycheck_ids,
    )
    for row in cursor.fetchall():
        deductions[row["paycheck_id"]].append(_deduction_from_row(row))
    return deductions


def get_paychecks(
    user_id: UserId,
    db_path: Path | None = None,
    since_date: date | None = None,
    until_date: date | None = None,
    limit: int | None = None,
) -> list[PaycheckRecord]:
    """Get paychecks with their deductions.

    Args:
        user_id: Owning user.
        db_path: Path to the database file. If None, uses default location.
        since_date: Optional first pay date (inclusive).
        until_date: Optional last pay date (inclusive).
        limit: Maximum number of paychecks to return. If None, returns all.

    Returns:
        Paychecks ordered by pay date descending.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        query = "SELECT * FROM paychecks WHERE user_id = ?"
        params: list[Any] = [user_id]

        if since_date:
            query += " AND pay_date >= ?"
            params.append(format_iso_date(since_date))
        if until_date:
            query += " AND pay_date <= ?"
            params.append(format_iso_date(until_date))

        query += " ORDER BY pay_date DESC, id DESC"
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        cursor.execute(query, params)
        rows = cursor.fetchall()
        deductions = _load_deductions(cursor, [row["id"] for row in rows])
        return [_paycheck_from_row(row, deductions[row["id"]]) for row in rows]


def get_paycheck(user_id: UserId, paycheck_id: int, db_path: Path | None = None) -> PaycheckRecord | None:
    """Get one paycheck with its deductions, or None if not found.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM paychecks WHERE id = ? AND user_id = ?", (paycheck_id, user_id))
        row = cursor.fetchone()
        if row is None:
            return None
        return _paycheck_from_row(row, _load_deductions(cursor, [paycheck_id])[paycheck_id])


def _insert_transaction(cursor: sqlite3.Cursor, txn: Transaction) -> int:
    cursor.execute(
        """
        INSERT INTO transactions (user_id, description, amount, date, type, category_id, recurring_rule_id, due_date)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            txn.user_id,
            txn.description,
            txn.amount,
            format_iso_date(txn.date),
            txn.type.value,
            txn.category_id,
            txn.recurring_rule_id,
            _optional_iso(txn.due_date),
        ),
    )
    txn_id = cursor.lastrowid
    assert txn_id is not None
    return txn_id


def insert_transaction(txn: Transaction, db_path: Path | None = None) -> int:
    """Insert a transaction.

    Returns:
        The new transaction id.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            txn_id = _insert_transaction(cursor, txn)
            conn.commit()
            return txn_id
        except sqlite3.Error:
            conn.rollback()
            raise


def update_transaction(txn: Transaction, db_path: Path | None = None) -> bool:
    """Edit a transaction's description, amount, date and category.

    Returns:
        True if the transaction existed for this user and was updated.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute(
                """
                UPDATE transactions SET description = ?, amount = ?, date = ?, category_id = ?
                WHERE id = ? AND user_id = ?
                """,
                (txn.description, txn.amount, format_iso_date(txn.date), txn.category_id, txn.id, txn.user_id),
            )
            conn.commit()
            return cursor.rowcount > 0
        except sqlite3.Error:
            conn.rollback()
            raise


def delete_transaction(user_id: UserId, txn_id: int, db_path: Path | None = None) -> bool:
    """Delete a transaction.

    Returns:
        True if a transaction was deleted.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute("DELETE FROM transactions WHERE id = ? AND user_id = ?", (txn_id, user_id))
            conn.commit()
            return cursor.rowcount > 0
        except sqlite3.Error:
            conn.rollback()
            raise


def get_transaction(user_id: UserId, txn_id: int, db_path: Path | None = None) -> Transaction | None:
    """Get one transaction, or None if not found.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM transactions WHERE id = ? AND user_id = ?", (txn_id, user_id))
        row = cursor.fetchone()
        return _transaction_from_row(row) if row else None


def get_transactions(
    user_id: UserId,
    db_path: Path | None = None,
    since_date: date | None = None,
    until_date: date | None = None,
    txn_type: TransactionType | None = None,
    limit: int | None = None,
) -> list[Transaction]:
    """Get transactions.

    Args:
        user_id: Owning user.
        db_path: Path to the database file. If None, uses default location.
        since_date: Optional first date (inclusive).
        until_date: Optional last date (inclusive).
        txn_type: Optional INCOME/EXPENSE filter.
        limit: Maximum number of transactions to return. If None, returns all.

    Returns:
        Transactions ordered by date descending.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        query = "SELECT * FROM transactions WHERE user_id = ?"
        params: list[Any] = [user_id]

        if since_date:
            query += " AND date >= ?"
            params.append(format_iso_date(since_date))
        if until_date:
            query += " AND date <= ?"
            params.append(format_iso_date(until_date))
        if txn_type:
            query += " AND type = ?"
            params.append(txn_type.value)

        query += " ORDER BY date DESC, id DESC"
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        cursor.execute(query, params)
        return [_transaction_from_row(row) for row in cursor.fetchall()]


def insert_recurring_rule(rule: RecurringExpenseRule, db_path: Path | None = None) -> int:
    """Insert a recurring expense rule.

    Returns:
        The new rule id.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute(
                """
                INSERT INTO recurring_expenses
                    (user_id, description, amount, frequency, start_date, next_due_date, end_date, is_active, category_id)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    rule.user_id,
                    rule.description,
                    rule.amount,
                    rule.frequency.value,
                    format_iso_date(rule.start_date),
                    format_iso_date(rule.next_due_date),
                    _optional_iso(rule.end_date),
                    int(rule.active),
                    rule.category_id,
                ),
            )
            conn.commit()
            rule_id = cursor.lastrowid
            assert rule_id is not None
            return rule_id
        except sqlite3.Error:
            conn.rollback()
            raise


def _update_rule(cursor: sqlite3.Cursor, rule: RecurringExpenseRule) -> int:
    cursor.execute(
        """
        UPDATE recurring_expenses
        SET description = ?, amount = ?, frequency = ?, start_date = ?, next_due_date = ?,
            end_date = ?, is_active = ?, category_id = ?
        WHERE id = ? AND user_id = ?
        """,
        (
            rule.description,
            rule.amount,
            rule.frequency.value,
            format_iso_date(rule.start_date),
            format_iso_date(rule.next_due_date),
            _optional_iso(rule.end_date),
            int(rule.active),
            rule.category_id,
            rule.id,
            rule.user_id,
        ),
    )
    return cursor.rowcount


def update_recurring_rule(rule: RecurringExpenseRule, db_path: Path | None = None) -> bool:
    """Persist a rule's current state (edit, skip or stop).

    Returns:
        True if the rule existed for this user and was updated.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            updated = _update_rule(cursor, rule)
            conn.commit()
            return updated > 0
        except sqlite3.Error:
            conn.rollback()
            raise


def record_rule_payment(txn: Transaction, rule: RecurringExpenseRule, db_path: Path | None = None) -> int:
    """Store a "mark as paid" result: the expense and the advanced rule together.

    Args:
        txn: Expense transaction referencing the rule.
        rule: Rule with its advanced next due date.
        db_path: Path to the database file. If None, uses default location.

    Returns:
        The new transaction id.

    Raises:
        LookupError: If the rule does not exist for this user.
        sqlite3.Error: If database operation fails; nothing is written.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            if _update_rule(cursor, rule) == 0:
                conn.rollback()
                raise LookupError(f"Recurring expense {rule.id} not found")
            txn_id = _insert_transaction(cursor, txn)
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise
    logger.debug("Rule %s paid, next due %s", rule.id, rule.next_due_date)
    return txn_id


def delete_recurring_rule(user_id: UserId, rule_id: int, db_path: Path | None = None) -> bool:
    """Delete a rule. Transactions it generated are kept, unlinked.

    Returns:
        True if a rule was deleted.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute(
                "UPDATE transactions SET recurring_rule_id = NULL WHERE recurring_rule_id = ? AND user_id = ?",
                (rule_id, user_id),
            )
            cursor.execute("DELETE FROM recurring_expenses WHERE id = ? AND user_id = ?", (rule_id, user_id))
            deleted = cursor.rowcount > 0
            conn.commit()
            return deleted
        except sqlite3.Error:
            conn.rollback()
            raise


def get_recurring_rule(user_id: UserId, rule_id: int, db_path: Path | None = None) -> RecurringExpenseRule | None:
    """Get one rule, or None if not found.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM recurring_expenses WHERE id = ? AND user_id = ?", (rule_id, user_id))
        row = cursor.fetchone()
        return _rule_from_row(row) if row else None


def get_recurring_rules(
    user_id: UserId, db_path: Path | None = None, active_only: bool = False
) -> list[RecurringExpenseRule]:
    """Get recurring rules ordered by next due date.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        query = "SELECT * FROM recurring_expenses WHERE user_id = ?"
        if active_only:
            query += " AND is_active = 1"
        query += " ORDER BY next_due_date, id"
        cursor.execute(query, (user_id,))
        return [_rule_from_row(row) for row in cursor.fetchall()]


def add_category(user_id: UserId, name: str, category_type: str = "VARIABLE", db_path: Path | None = None) -> int:
    """Add a budget category.

    Returns:
        The new category id.

    Raises:
        sqlite3.IntegrityError: If the user already has a category with this name.
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute(
                "INSERT INTO categories (user_id, name, type) VALUES (?, ?, ?)",
                (user_id, name, category_type),
            )
            conn.commit()
            category_id = cursor.lastrowid
            assert category_id is not None
            return category_id
        except sqlite3.Error:
            conn.rollback()
            raise


def seed_default_categories(user_id: UserId, db_path: Path | None = None) -> int:
    """Create the default category set, skipping names that already exist.

    Returns:
        Number of categories created.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            before = conn.total_changes
            cursor.executemany(
                "INSERT OR IGNORE INTO categories (user_id, name, type) VALUES (?, ?, ?)",
                [(user_id, name, category_type) for name, category_type in DEFAULT_CATEGORIES],
            )
            conn.commit()
            return conn.total_changes - before
        except sqlite3.Error:
            conn.rollback()
            raise


def get_all_categories(user_id: UserId, db_path: Path | None = None) -> list[dict[str, Any]]:
    """Get all categories for a user.

    Returns:
        List of category dictionaries (id, name, type) ordered by name.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT id, name, type FROM categories WHERE user_id = ? ORDER BY name", (user_id,))
        return [dict(row) for row in cursor.fetchall()]
