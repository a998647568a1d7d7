"""
Tests for quantity_formatter.py.
"""

from potluck.models.shopping import Amount, Label, MergedAmount, QuantityUnit
from potluck.services.quantity_formatter import format_amount, format_number


def merged(*fragments) -> MergedAmount:
    return MergedAmount(fragments=list(fragments))


class TestFormatNumber:
    def test_integers_have_no_decimals(self):
        assert format_number(500.0) == "500"

    def test_trailing_zeros_trimmed(self):
        assert format_number(1.50, ",") == "1,5"

    def test_rounded_to_two_decimals(self):
        assert format_number(0.1 + 0.2, ".") == "0.3"
        assert format_number(1.23456, ".") == "1.23"

    def test_default_separator_is_comma(self):
        assert format_number(2.25) == "2,25"


class TestFormatAmount:
    def test_none_is_empty_string(self):
        assert format_amount(None) == ""

    def test_mass(self):
        assert format_amount(merged(Amount(value=500, unit=QuantityUnit.GRAMS))) == "500 g"

    def test_decimal_kg(self):
        assert format_amount(merged(Amount(value=1.5, unit=QuantityUnit.KG))) == "1,5 kg"

    def test_count_has_no_unit(self):
        assert format_amount(merged(Amount(value=3, unit=QuantityUnit.NONE))) == "3"

    def test_label(self):
        assert format_amount(merged(Label(text="au choix"))) == "au choix"

    def test_fragments_joined(self):
        amount = merged(
            Amount(value=200, unit=QuantityUnit.GRAMS),
            Amount(value=2, unit=QuantityUnit.NONE),
            Label(text="bio"),
        )
        assert format_amount(amount) == "200 g + 2 + bio"

    def test_custom_separators(self):
        amount = merged(
            Amount(value=0.75, unit=QuantityUnit.LITERS),
            Label(text="frais"),
        )
        assert format_amount(amount, decimal_separator=".", separator=" / ") == "0.75 l / frais"
