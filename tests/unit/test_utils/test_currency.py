"""Tests for pt-BR currency helpers."""

import pytest

from utils.currency import (
    format_currency,
    format_percentage,
    format_signed,
    parse_currency,
    split_in_cents,
)


class TestFormatting:
    """Test formatting of amounts for display."""

    @pytest.mark.currency
    def test_format_currency(self):
        """Test thousands and decimal separators follow pt-BR."""
        assert format_currency(1234.56) == "R$ 1.234,56"
        assert format_currency(0.5) == "R$ 0,50"
        assert format_currency(1234567.891) == "R$ 1.234.567,89"
        assert format_currency(0) == "R$ 0,00"

    @pytest.mark.currency
    def test_format_currency_negative(self):
        """Test the sign goes in front of the symbol."""
        assert format_currency(-5) == "-R$ 5,00"

    @pytest.mark.currency
    def test_format_signed(self):
        assert format_signed(10) == "+R$ 10,00"
        assert format_signed(-10) == "-R$ 10,00"

    def test_format_percentage(self):
        assert format_percentage(12.34) == "12,3%"
        assert format_percentage(50, decimals=0) == "50%"


class TestParsing:
    """Test parsing of user-typed amounts."""

    @pytest.mark.currency
    @pytest.mark.parametrize("text,expected", [
        ("R$ 1.234,56", 1234.56),
        ("1,234.56", 1234.56),
        ("12,5", 12.5),
        ("12.50", 12.5),
        ("12", 12.0),
        ("1.234", 1234.0),
        ("R$ 0,05", 0.05),
        ("-12,34", -12.34),
    ])
    def test_parse_currency(self, text, expected):
        """Test the right-most separator with 1-2 digits is the decimal one."""
        assert parse_currency(text) == pytest.approx(expected)

    @pytest.mark.currency
    def test_parse_currency_numbers_pass_through(self):
        assert parse_currency(45.99) == 45.99
        assert parse_currency(7) == 7.0

    @pytest.mark.currency
    @pytest.mark.parametrize("text", ["", "abc", "R$", None])
    def test_parse_currency_rejects_non_numeric(self, text):
        with pytest.raises(ValueError):
            parse_currency(text)


class TestSplitInCents:
    """Test installment splitting."""

    @pytest.mark.currency
    def test_remainder_goes_to_last_part(self):
        assert split_in_cents(100.0, 3) == [33.33, 33.33, 33.34]

    @pytest.mark.currency
    def test_parts_sum_to_total(self):
        parts = split_in_cents(2800.01, 7)
        assert len(parts) == 7
        assert round(sum(parts), 2) == 2800.01

    def test_single_part(self):
        assert split_in_cents(59.9, 1) == [59.9]

    def test_zero_parts_rejected(self):
        with pytest.raises(ValueError):
            split_in_cents(10.0, 0)
