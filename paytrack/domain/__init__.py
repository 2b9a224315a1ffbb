"""Domain models and types for paytrack.

This package contains the functional core:
- Pure functions with no side effects
- No I/O operations
- Easy to test
- Business logic separated from infrastructure
"""

from paytrack.domain.models import (
    DeductionCategory,
    Frequency,
    Money,
    Month,
    TransactionType,
    UserId,
)

__all__ = ["DeductionCategory", "Frequency", "Money", "Month", "TransactionType", "UserId"]
