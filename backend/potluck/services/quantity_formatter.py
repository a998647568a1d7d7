from typing import Optional

from .. import config
from ..models.shopping import Amount, Label, MergedAmount, QuantityUnit

UNIT_LABELS: dict[QuantityUnit, str] = {
    QuantityUnit.GRAMS: "g",
    QuantityUnit.KG: "kg",
    QuantityUnit.ML: "ml",
    QuantityUnit.CL: "cl",
    QuantityUnit.LITERS: "l",
    QuantityUnit.NONE: "",
}


def format_number(value: float, decimal_separator: Optional[str] = None) -> str:
    """2 decimals at most, no trailing zeros: 500.0 → "500", 1.25 → "1,25"."""
    separator = decimal_separator if decimal_separator is not None else config.SHOPPING_DECIMAL_SEPARATOR
    text = f"{round(value, 2):.2f}".rstrip("0").rstrip(".")
    if text == "-0":
        text = "0"
    return text.replace(".", separator)


def format_fragment(fragment: Amount | Label, decimal_separator: Optional[str] = None) -> str:
    if isinstance(fragment, Label):
        return fragment.text
    number = format_number(fragment.value, decimal_separator)
    unit = UNIT_LABELS[fragment.unit]
    return f"{number} {unit}" if unit else number


def format_amount(
    merged: Optional[MergedAmount],
    decimal_separator: Optional[str] = None,
    separator: Optional[str] = None,
) -> str:
    """Render a merged amount for display; "" when there is nothing to show."""
    if merged is None or not merged.fragments:
        return ""
    joiner = separator if separator is not None else config.SHOPPING_FRAGMENT_SEPARATOR
    return joiner.join(format_fragment(f, decimal_separator) for f in merged.fragments)
