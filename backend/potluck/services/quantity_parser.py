"""
Free-text quantity parsing.

People type whatever they like in the quantity box ("200g", "1,5 L",
"3", "au choix", "1 kg de farine"). We only understand one shape:

    [decimal number] [whitespace] [unit token] [anything]

Only the first word after the number is looked up as a unit; the rest of
the text is ignored. Anything else is kept as a Label so it still shows on
the shopping list. This module never raises.
"""

import math
import re
from typing import Optional, Union

from ..models.shopping import Amount, Label, NoQuantity, QuantityUnit
from .normalizer import strip_accents

# The character after the number must not continue a number ("1/2", "1 1/2",
# "1.2.3"), otherwise the whole string is treated as a label. Group 2 is the
# first word when it is made of letters ("kg" in "1 kg de farine").
QUANTITY_PATTERN = re.compile(
    r"^(\d+(?:[.,]\d+)?)(?:\s*(?:([^\W\d_]+\.?)|[^\d\s/.,]).*)?$",
    re.DOTALL,
)

# Keys are lowercase and accent-free
UNIT_SYNONYMS: dict[str, QuantityUnit] = {
    # Mass
    "g": QuantityUnit.GRAMS,
    "gr": QuantityUnit.GRAMS,
    "gramme": QuantityUnit.GRAMS,
    "grammes": QuantityUnit.GRAMS,
    "gram": QuantityUnit.GRAMS,
    "grams": QuantityUnit.GRAMS,
    "kg": QuantityUnit.KG,
    "kilo": QuantityUnit.KG,
    "kilos": QuantityUnit.KG,
    "kilogramme": QuantityUnit.KG,
    "kilogrammes": QuantityUnit.KG,
    # Volume
    "ml": QuantityUnit.ML,
    "millilitre": QuantityUnit.ML,
    "millilitres": QuantityUnit.ML,
    "cl": QuantityUnit.CL,
    "centilitre": QuantityUnit.CL,
    "centilitres": QuantityUnit.CL,
    "l": QuantityUnit.LITERS,
    "litre": QuantityUnit.LITERS,
    "litres": QuantityUnit.LITERS,
    "liter": QuantityUnit.LITERS,
    "liters": QuantityUnit.LITERS,
    # Count
    "piece": QuantityUnit.NONE,
    "pieces": QuantityUnit.NONE,
    "pc": QuantityUnit.NONE,
    "pcs": QuantityUnit.NONE,
    "unite": QuantityUnit.NONE,
    "unites": QuantityUnit.NONE,
    "u": QuantityUnit.NONE,
}

ParseResult = Union[Amount, Label, NoQuantity]


def lookup_unit(token: str) -> Optional[QuantityUnit]:
    """Match a unit token against the synonym table ("Gr." → g, "pièces" → count)."""
    key = strip_accents(token.strip().lower()).rstrip(".")
    return UNIT_SYNONYMS.get(key)


def parse_quantity(text: Optional[str]) -> ParseResult:
    """
    Parse a quantity string.

    Returns:
        Amount for "<number>[unit] [rest]" (unknown or missing unit → count),
        Label for anything without a leading number,
        NoQuantity for empty input.
    """
    if not text:
        return NoQuantity()

    trimmed = text.strip()
    if not trimmed:
        return NoQuantity()

    match = QUANTITY_PATTERN.match(trimmed)
    if not match:
        return Label(text=trimmed)

    value = float(match.group(1).replace(",", "."))
    if not math.isfinite(value):
        # A digit run too long for a float overflows to inf
        return Label(text=trimmed)
    token = match.group(2) or ""
    # An unrecognised token ("2 boîtes") still counts as a bare number
    unit = lookup_unit(token) or QuantityUnit.NONE
    return Amount(value=value, unit=unit)
