"""
Unit aggregation: merge every parsed quantity of one shopping row.

Design:
- Amounts are summed only inside their family (mass, volume, count).
  "200 g" and "2 pièces" of the same ingredient stay side by side instead of
  being turned into a meaningless number.
- Mass and volume are summed in their base unit (g, ml) and re-expressed in
  the largest unit that still reads naturally.
- Labels are kept verbatim (deduplicated) after the numeric fragments.
"""

import logging
from typing import Iterable, List, Optional

from ..models.shopping import (
    Amount,
    Label,
    MergedAmount,
    NoQuantity,
    QuantityUnit,
    UnitFamily,
)

logger = logging.getLogger(__name__)

# (threshold in base unit, display unit), largest first
DISPLAY_UNITS: dict[UnitFamily, list[tuple[float, QuantityUnit]]] = {
    UnitFamily.MASS: [
        (1000.0, QuantityUnit.KG),
        (0.0, QuantityUnit.GRAMS),
    ],
    UnitFamily.VOLUME: [
        (1000.0, QuantityUnit.LITERS),
        (100.0, QuantityUnit.CL),
        (0.0, QuantityUnit.ML),
    ],
    UnitFamily.COUNT: [
        (0.0, QuantityUnit.NONE),
    ],
}


def to_display_unit(total: float, family: UnitFamily) -> Amount:
    """Express a base-unit total (g, ml, count) in the family's display unit."""
    for threshold, unit in DISPLAY_UNITS[family]:
        if total >= threshold:
            return Amount(value=total / unit.factor, unit=unit)
    # Negative totals cannot come out of the parser; keep the base unit anyway
    base = DISPLAY_UNITS[family][-1][1]
    return Amount(value=total, unit=base)


def merge_quantities(
    quantities: Iterable[Amount | Label | NoQuantity],
) -> Optional[MergedAmount]:
    """
    Merge a row's parsed quantities.

    Returns None when nothing numeric or textual was given at all.
    """
    totals: dict[UnitFamily, float] = {}  # insertion order = first-seen family
    labels: List[str] = []

    for quantity in quantities:
        if isinstance(quantity, Amount):
            family = quantity.unit.family
            totals[family] = totals.get(family, 0.0) + quantity.value * quantity.unit.factor
        elif isinstance(quantity, Label):
            if quantity.text not in labels:
                labels.append(quantity.text)

    fragments: list[Amount | Label] = [
        to_display_unit(total, family) for family, total in totals.items()
    ]
    fragments.extend(Label(text=text) for text in labels)

    if not fragments:
        return None
    if len(totals) > 1:
        logger.debug("Keeping %d unit families apart: %s", len(totals), list(totals))
    return MergedAmount(fragments=fragments)
