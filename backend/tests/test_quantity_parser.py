"""
Tests for quantity_parser.py: free text in, Amount / Label / NoQuantity out.
"""

import pytest

from potluck.models.shopping import Amount, Label, NoQuantity, QuantityUnit
from potluck.services.quantity_parser import lookup_unit, parse_quantity


class TestParseNumbersAndUnits:
    def test_bare_number_is_count(self):
        assert parse_quantity("3") == Amount(value=3, unit=QuantityUnit.NONE)

    def test_decimal_point_and_comma(self):
        assert parse_quantity("4.5") == Amount(value=4.5, unit=QuantityUnit.NONE)
        assert parse_quantity("4,5") == Amount(value=4.5, unit=QuantityUnit.NONE)

    def test_unit_glued_to_number(self):
        assert parse_quantity("200g") == Amount(value=200, unit=QuantityUnit.GRAMS)

    def test_unit_after_space(self):
        assert parse_quantity("0.3 kg") == Amount(value=0.3, unit=QuantityUnit.KG)

    def test_uppercase_unit(self):
        assert parse_quantity("1.5L") == Amount(value=1.5, unit=QuantityUnit.LITERS)

    def test_surrounding_whitespace(self):
        assert parse_quantity("  25 cl ") == Amount(value=25, unit=QuantityUnit.CL)

    @pytest.mark.parametrize(
        "token, unit",
        [
            ("g", QuantityUnit.GRAMS),
            ("gr", QuantityUnit.GRAMS),
            ("gr.", QuantityUnit.GRAMS),
            ("grammes", QuantityUnit.GRAMS),
            ("kilos", QuantityUnit.KG),
            ("ml", QuantityUnit.ML),
            ("centilitres", QuantityUnit.CL),
            ("litre", QuantityUnit.LITERS),
            ("pièce", QuantityUnit.NONE),
            ("Pièces", QuantityUnit.NONE),
            ("unités", QuantityUnit.NONE),
        ],
    )
    def test_synonyms(self, token, unit):
        assert lookup_unit(token) == unit

    def test_count_word(self):
        assert parse_quantity("1 pièce") == Amount(value=1, unit=QuantityUnit.NONE)

    def test_unknown_unit_falls_back_to_count(self):
        assert parse_quantity("2 bouteilles") == Amount(value=2, unit=QuantityUnit.NONE)

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("1 kg de farine", Amount(value=1, unit=QuantityUnit.KG)),
            ("500 g environ", Amount(value=500, unit=QuantityUnit.GRAMS)),
            ("2 l de lait", Amount(value=2, unit=QuantityUnit.LITERS)),
            ("250g/personne", Amount(value=250, unit=QuantityUnit.GRAMS)),
            ("3 bouteilles de 75 cl", Amount(value=3, unit=QuantityUnit.NONE)),
        ],
    )
    def test_only_first_word_is_the_unit(self, text, expected):
        assert parse_quantity(text) == expected


class TestParseFallbacks:
    def test_empty_and_none(self):
        assert parse_quantity("") == NoQuantity()
        assert parse_quantity(None) == NoQuantity()
        assert parse_quantity("   ") == NoQuantity()

    def test_text_becomes_label(self):
        assert parse_quantity("au choix") == Label(text="au choix")

    def test_label_keeps_original_case_trimmed(self):
        assert parse_quantity("  Quelques Feuilles ") == Label(text="Quelques Feuilles")

    def test_fraction_is_label(self):
        assert parse_quantity("1/2") == Label(text="1/2")

    def test_thousands_separator_is_label(self):
        assert parse_quantity("1.000,5 g") == Label(text="1.000,5 g")

    def test_signed_number_is_label(self):
        assert parse_quantity("-3") == Label(text="-3")

    def test_overflowing_number_is_label(self):
        text = "9" * 400 + " kg"
        assert parse_quantity(text) == Label(text=text)

    @pytest.mark.parametrize(
        "text",
        ["", "abc", "1 1/2", "½", "..", ",", "12,", "3 - 4", "\n", "9" * 400, "1e5", "∞ g"],
    )
    def test_never_raises(self, text):
        result = parse_quantity(text)
        assert isinstance(result, (Amount, Label, NoQuantity))
