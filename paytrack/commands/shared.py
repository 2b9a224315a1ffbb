"""Helpers shared by the command modules: user context and input parsing."""

from datetime import date
from pathlib import Path

from paytrack.config import get_setting
from paytrack.dates import parse_iso_date
from paytrack.domain.models import Money, UserId
from paytrack.domain.money import format_cents, to_cents
from paytrack.store.queries import get_all_categories


def get_user_id(config_path: Path | None = None) -> UserId:
    """The user the CLI acts for, from the config file."""
    return UserId(str(get_setting("user_id", config_path)))


def display_money(amount: Money, include_sign: bool = False) -> str:
    """Format cents with the configured currency symbol."""
    return format_cents(amount, symbol=str(get_setting("currency_symbol")), include_sign=include_sign)


def parse_date_option(value: str | None, default: date | None = None) -> date:
    """Parse a YYYY-MM-DD option, defaulting to ``default`` or today.

    Raises:
        ValueError: If the value is not a valid ISO date.
    """
    if not value:
        return default if default is not None else date.today()
    return parse_iso_date(value)


def parse_amount_option(value: str) -> Money:
    """Parse a dollar amount option into positive cents.

    Raises:
        ValueError: If the amount is malformed or not positive.
    """
    amount = to_cents(value)
    if amount <= 0:
        raise ValueError("Amount must be positive")
    return amount


def resolve_category_id(user_id: UserId, name: str | None, db_path: Path) -> int | None:
    """Look up a category id by name, case-insensitively.

    Raises:
        ValueError: If a name is given but no such category exists.
    """
    if not name:
        return None
    for category in get_all_categories(user_id, db_path):
        if category["name"].lower() == name.lower():
            return int(category["id"])
    raise ValueError(f"Category '{name}' not found (run 'paytrack categories seed' or check the name)")


def category_names(user_id: UserId, db_path: Path) -> dict[int, str]:
    """Map of category id to name for display."""
    return {int(c["id"]): c["name"] for c in get_all_categories(user_id, db_path)}
