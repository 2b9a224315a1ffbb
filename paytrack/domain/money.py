"""Conversion between cents and decimal display strings.

Stored and compared amounts are always integer cents. Decimal values only
exist at the display and input boundaries, and are rounded half-up to the
nearest cent.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from paytrack.domain.models import Money

CENT = Decimal("0.01")


def to_cents(value: str | int | Decimal) -> Money:
    """Convert a decimal amount to cents.

    Args:
        value: Amount in dollars, e.g. "1,520.00", "$12.5", 7 or Decimal("3.333").

    Returns:
        Amount in cents, rounded half-up.

    Raises:
        ValueError: If the value is not a finite number.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid amount: {value!r}")

    if isinstance(value, int):
        return Money(value * 100)

    if isinstance(value, str):
        cleaned = value.strip().replace(",", "").replace("$", "").replace(" ", "")
        try:
            amount = Decimal(cleaned)
        except InvalidOperation as e:
            raise ValueError(f"Invalid amount: {value!r}") from e
    else:
        amount = value

    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")

    cents = (amount * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return Money(int(cents))


def from_cents(amount: Money) -> Decimal:
    """Convert cents to an exact two-place Decimal."""
    return (Decimal(amount) / 100).quantize(CENT)


def format_cents(amount: Money, symbol: str = "", include_sign: bool = False) -> str:
    """Format cents for display.

    Args:
        amount: Amount in cents.
        symbol: Currency symbol prefix (e.g. "$").
        include_sign: Whether to prefix "+" for non-negative amounts.

    Returns:
        Formatted string (e.g., "1,520.00", "-$12.00" or "+$3.50").
    """
    formatted = f"{symbol}{from_cents(Money(abs(amount))):,.2f}"

    if amount < 0:
        return f"-{formatted}"
    if include_sign:
        return f"+{formatted}"
    return formatted
