"""Tests for paytrack.domain.money conversions."""

from decimal import Decimal

import pytest

from paytrack.domain.models import Money
from paytrack.domain.money import format_cents, from_cents, to_cents


class TestToCents:
    """Tests for to_cents."""

    def test_parses_plain_decimal(self) -> None:
        """Should convert a two-place string to cents."""
        assert to_cents("1520.00") == 152000

    def test_strips_thousands_separators_and_symbol(self) -> None:
        """Should ignore commas, currency symbol and spaces."""
        assert to_cents("$1,520.00") == 152000
        assert to_cents(" 9,120.5 ") == 912050

    def test_integer_is_whole_dollars(self) -> None:
        """Should treat ints as whole currency units."""
        assert to_cents(7) == 700

    def test_rounds_half_up(self) -> None:
        """Should round to the nearest cent, halves up."""
        assert to_cents(Decimal("3.335")) == 334
        assert to_cents("0.004") == 0

    def test_negative_amounts(self) -> None:
        """Should keep the sign."""
        assert to_cents("-12.00") == -1200

    @pytest.mark.parametrize("value", ["", "abc", "1.2.3", "NaN", "Infinity"])
    def test_rejects_invalid_strings(self, value: str) -> None:
        """Should raise ValueError for non-numeric or non-finite input."""
        with pytest.raises(ValueError):
            to_cents(value)

    def test_rejects_booleans(self) -> None:
        """Should not treat True as one dollar."""
        with pytest.raises(ValueError):
            to_cents(True)


class TestFromCents:
    """Tests for from_cents and format_cents."""

    def test_from_cents_is_exact(self) -> None:
        """Should give an exact two-place Decimal."""
        assert from_cents(Money(152000)) == Decimal("1520.00")
        assert str(from_cents(Money(5))) == "0.05"

    @pytest.mark.parametrize("cents", [0, 1, 99, 100, 152000, 123456789, 10**9])
    def test_display_string_converts_back(self, cents: int) -> None:
        """Converting cents to a display string and back should be lossless."""
        assert to_cents(format_cents(Money(cents))) == cents

    def test_format_with_symbol(self) -> None:
        """Should group thousands and prefix the symbol."""
        assert format_cents(Money(152000), symbol="$") == "$1,520.00"

    def test_format_negative(self) -> None:
        """Should put the minus sign before the symbol."""
        assert format_cents(Money(-1200), symbol="$") == "-$12.00"

    def test_format_with_sign(self) -> None:
        """Should prefix + for non-negative amounts when asked."""
        assert format_cents(Money(350), symbol="$", include_sign=True) == "+$3.50"
        assert format_cents(Money(-350), symbol="$", include_sign=True) == "-$3.50"
