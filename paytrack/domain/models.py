"""Domain type definitions for paytrack.

These NewTypes and enums provide semantic clarity and help with type checking:
- Money: Amount in cents (minor units)
- Month: Month in YYYY-MM format
- UserId: Opaque identifier of the owning user
- Frequency: Recurrence rule for pay dates and expense due dates
- DeductionCategory: Classification of a payroll deduction
- TransactionType: Direction of a logged transaction
"""

from enum import StrEnum
from typing import NewType

# Money amounts are stored as cents (minor units) to avoid floating point errors
Money = NewType("Money", int)

# Month is always in YYYY-MM format (e.g., "2025-01")
Month = NewType("Month", str)

# Supplied by the authentication layer, never interpreted
UserId = NewType("UserId", str)


class Frequency(StrEnum):
    """How often a paycheck or recurring expense repeats."""

    WEEKLY = "WEEKLY"
    BIWEEKLY = "BIWEEKLY"
    SEMIMONTHLY = "SEMIMONTHLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


class DeductionCategory(StrEnum):
    """Payroll deduction classification.

    Shared by validation, the store mapping and report aggregation, so a new
    category only needs adding here.
    """

    TAX = "TAX"
    BENEFIT = "BENEFIT"
    RETIREMENT = "RETIREMENT"
    HSA = "HSA"
    GARNISHMENT = "GARNISHMENT"


class TransactionType(StrEnum):
    """Direction of a transaction."""

    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


# Deductions counted as savings on the dashboard
PRE_TAX_SAVINGS_CATEGORIES = frozenset({DeductionCategory.RETIREMENT, DeductionCategory.HSA})

# Frequencies a recurring expense may use
RECURRING_EXPENSE_FREQUENCIES = (Frequency.MONTHLY, Frequency.YEARLY)

# Frequencies offered when projecting a paycheck forward
PAY_FREQUENCIES = (Frequency.WEEKLY, Frequency.BIWEEKLY, Frequency.SEMIMONTHLY, Frequency.MONTHLY)


def _parse_enum(enum_cls: type[StrEnum], value: str, label: str) -> StrEnum:
    normalized = value.strip().upper().replace("-", "").replace("_", "")
    for member in enum_cls:
        if member.value.replace("_", "") == normalized:
            return member
    choices = ", ".join(m.value for m in enum_cls)
    raise ValueError(f"Unknown {label} '{value}' (expected one of: {choices})")


def parse_frequency(value: str) -> Frequency:
    """Parse a frequency name, case-insensitively.

    Raises:
        ValueError: If the value is not a known frequency.
    """
    return Frequency(_parse_enum(Frequency, value, "frequency"))


def parse_deduction_category(value: str) -> DeductionCategory:
    """Parse a deduction category name, case-insensitively.

    Raises:
        ValueError: If the value is not a known category.
    """
    return DeductionCategory(_parse_enum(DeductionCategory, value, "deduction category"))
