"""
Unit tests for integer-cent money handling.

Verifies:
- Display amount to cents conversion with half-up rounding
- Float prohibition at every entry point
- Formatting and parsing at the display boundary
- Money value object arithmetic
"""

from decimal import Decimal

import pytest

from budget_kernel.domain.values import (
    Money,
    format_cents,
    format_compact,
    from_cents,
    parse_currency,
    to_cents,
)


class TestToCents:
    """Tests for to_cents."""

    def test_decimal(self):
        assert to_cents(Decimal("10.50")) == 1050

    def test_string(self):
        assert to_cents("12.34") == 1234

    def test_int_is_whole_units(self):
        assert to_cents(7) == 700

    def test_rounds_half_up(self):
        assert to_cents(Decimal("0.005")) == 1
        assert to_cents(Decimal("0.004")) == 0

    def test_negative(self):
        assert to_cents("-3.10") == -310

    def test_float_rejected(self):
        with pytest.raises(TypeError):
            to_cents(10.5)

    def test_bool_rejected(self):
        with pytest.raises(TypeError):
            to_cents(True)

    def test_invalid_string_raises(self):
        with pytest.raises(ValueError):
            to_cents("not a number")

    def test_non_finite_raises(self):
        with pytest.raises(ValueError):
            to_cents(Decimal("Infinity"))


class TestFromCents:
    def test_two_places(self):
        assert from_cents(1050) == Decimal("10.50")
        assert str(from_cents(5)) == "0.05"

    def test_float_rejected(self):
        with pytest.raises(TypeError):
            from_cents(10.0)


class TestFormatting:
    def test_format_cents(self):
        assert format_cents(123456) == "$1234.56"

    def test_format_negative(self):
        assert format_cents(-1250) == "-$12.50"

    def test_format_without_symbol(self):
        assert format_cents(500, show_symbol=False) == "5.00"

    def test_format_without_cents(self):
        assert format_cents(1250, show_cents=False) == "$13"

    def test_format_compact_thousands(self):
        assert format_compact(150_000) == "$1.5K"

    def test_format_compact_millions(self):
        assert format_compact(230_000_000) == "$2.3M"

    def test_format_compact_small(self):
        assert format_compact(999) == "$9.99"


class TestParseCurrency:
    def test_symbol_and_separators(self):
        assert parse_currency("$1,234.56") == 123456

    def test_plain(self):
        assert parse_currency(" 42 ") == 4200

    def test_empty_raises(self):
        with pytest.raises(ValueError):
            parse_currency("$")

    def test_garbage_raises(self):
        with pytest.raises(ValueError):
            parse_currency("abc")


class TestMoney:
    def test_arithmetic_is_exact(self):
        total = Money(10) + Money(20)
        assert total == Money(30)
        assert (Money(10) - Money(30)).cents == -20

    def test_of_display_amount(self):
        assert Money.of("0.10") + Money.of("0.20") == Money.of("0.30")

    def test_predicates(self):
        assert Money.zero().is_zero
        assert Money(1).is_positive
        assert (-Money(1)).is_negative

    def test_ordering(self):
        assert Money(5) < Money(6)

    def test_non_int_rejected(self):
        with pytest.raises(TypeError):
            Money(Decimal("1"))

    def test_str(self):
        assert str(Money(199)) == "$1.99"
