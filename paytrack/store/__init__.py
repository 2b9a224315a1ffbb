"""Database store layer - provides persistence for the application.

This module re-exports all public database functions for easy importing.
"""

from paytrack.store.queries import (
    CATEGORY_TYPES,
    DEFAULT_CATEGORIES,
    add_category,
    delete_paycheck,
    delete_recurring_rule,
    delete_transaction,
    get_all_categories,
    get_paycheck,
    get_paychecks,
    get_recurring_rule,
    get_recurring_rules,
    get_transaction,
    get_transactions,
    insert_paycheck,
    insert_paychecks,
    insert_recurring_rule,
    insert_transaction,
    record_rule_payment,
    seed_default_categories,
    update_paycheck,
    update_recurring_rule,
    update_transaction,
)
from paytrack.store.schema import get_db_path, init_database

__all__ = [
    # Schema
    "get_db_path",
    "init_database",
    # Queries
    "CATEGORY_TYPES",
    "DEFAULT_CATEGORIES",
    "add_category",
    "delete_paycheck",
    "delete_recurring_rule",
    "delete_transaction",
    "get_all_categories",
    "get_paycheck",
    "get_paychecks",
    "get_recurring_rule",
    "get_recurring_rules",
    "get_transaction",
    "get_transactions",
    "insert_paycheck",
    "insert_paychecks",
    "insert_recurring_rule",
    "insert_transaction",
    "record_rule_payment",
    "seed_default_categories",
    "update_paycheck",
    "update_recurring_rule",
    "update_transaction",
]
