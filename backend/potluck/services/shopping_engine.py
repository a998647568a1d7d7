"""
Shopping list aggregation engine.

Responsibility: turn "who is bringing what" into one line per thing to buy.

Pipeline (all pure, recomputed on every call):
1. flatten_leaves:  walk meals → services → dishes and emit one leaf per
                   ingredient, or one leaf for a dish with no ingredients.
2. group_leaves:    bucket leaves by normalized name in first-seen order,
                   merge quantities, apply the all-checked rule.
3. build_shopping_list / format_shopping_text: views over the rows.

Nothing here touches the database; toggling lives in toggle_fanout.py.
"""

import logging
from typing import List

from ..models.plan import DishEntry, Ingredients, Meal, NoIngredients, PlanSnapshot, Service
from ..models.shopping import (
    AggregatedRow,
    EveryoneScope,
    LeafKind,
    PersonProgress,
    PersonScope,
    ShoppingLeaf,
    ShoppingList,
    ShoppingProgress,
    ShoppingRowView,
    ShoppingScope,
)
from .normalizer import normalize_name
from .quantity_formatter import format_amount
from .quantity_parser import parse_quantity
from .unit_aggregator import merge_quantities

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Step 1: Flatten
# ---------------------------------------------------------------------------


def _in_scope(dish: DishEntry, scope: ShoppingScope) -> bool:
    if dish.person_id is None:
        return False
    if isinstance(scope, PersonScope):
        return dish.person_id == scope.person_id
    return True


def _dish_leaves(dish: DishEntry, meal: Meal, service: Service) -> List[ShoppingLeaf]:
    context = dict(
        meal_title=meal.caption,
        service_title=service.title,
        dish_id=dish.id,
        dish_name=dish.name,
        person_id=dish.person_id,
    )
    decomposition = dish.decomposition
    if isinstance(decomposition, Ingredients):
        return [
            ShoppingLeaf(
                kind=LeafKind.INGREDIENT,
                name=ingredient.name,
                quantity=ingredient.quantity,
                checked=ingredient.checked,
                ingredient_id=ingredient.id,
                **context,
            )
            for ingredient in decomposition.items
        ]
    if isinstance(decomposition, NoIngredients):
        return [
            ShoppingLeaf(
                kind=LeafKind.ITEM,
                name=dish.name,
                quantity=dish.quantity,
                checked=dish.checked,
                **context,
            )
        ]
    raise TypeError(f"Unknown decomposition for dish {dish.id}: {decomposition!r}")


def flatten_leaves(snapshot: PlanSnapshot, scope: ShoppingScope) -> List[ShoppingLeaf]:
    """
    Collect the leaves for a scope in plan display order.

    The order produced here is what "first seen" means for grouping.
    """
    leaves: List[ShoppingLeaf] = []
    for meal in snapshot.meals:
        for service in meal.services:
            for dish in service.dishes:
                if _in_scope(dish, scope):
                    leaves.extend(_dish_leaves(dish, meal, service))
    return leaves


# ---------------------------------------------------------------------------
# Step 2: Group
# ---------------------------------------------------------------------------


def group_leaves(leaves: List[ShoppingLeaf]) -> List[AggregatedRow]:
    """
    Merge leaves that share a normalized name.

    - Row name comes from the first leaf; later spellings join silently.
    - A row is checked only if ALL its leaves are checked.
    - Rows come out in the order their name was first met.
    """
    buckets: dict[str, list[ShoppingLeaf]] = {}
    for leaf in leaves:
        buckets.setdefault(normalize_name(leaf.name), []).append(leaf)

    rows: List[AggregatedRow] = []
    for key, sources in buckets.items():
        rows.append(
            AggregatedRow(
                key=key,
                name=sources[0].name,
                amount=merge_quantities(parse_quantity(leaf.quantity) for leaf in sources),
                checked=all(leaf.checked for leaf in sources),
                sources=sources,
            )
        )
    return rows


def flatten_and_aggregate(snapshot: PlanSnapshot, scope: ShoppingScope) -> List[AggregatedRow]:
    """Leaves for the scope, grouped into shopping list rows."""
    leaves = flatten_leaves(snapshot, scope)
    rows = group_leaves(leaves)
    logger.debug(
        "Event %s (%s): %d leaves → %d rows",
        snapshot.event_id, scope.kind, len(leaves), len(rows),
    )
    return rows


def find_row(rows: List[AggregatedRow], key: str) -> AggregatedRow | None:
    for row in rows:
        if row.key == key:
            return row
    return None


# ---------------------------------------------------------------------------
# Step 3: Views
# ---------------------------------------------------------------------------


def summarize(rows: List[AggregatedRow]) -> ShoppingProgress:
    """How many rows are done, and the rounded percentage."""
    total = len(rows)
    checked_count = sum(1 for row in rows if row.checked)
    percentage = round(checked_count / total * 100) if total > 0 else 0
    return ShoppingProgress(checked_count=checked_count, total=total, percentage=percentage)


def summarize_people(snapshot: PlanSnapshot) -> List[PersonProgress]:
    """
    Progress of each person's own list, in person order.

    People who claimed nothing are left out. Rows are counted per person, so
    an ingredient shared by two people counts once for each of them.
    """
    people: List[PersonProgress] = []
    for person in snapshot.people:
        rows = flatten_and_aggregate(snapshot, PersonScope(person_id=person.id))
        if rows:
            people.append(
                PersonProgress(person_id=person.id, name=person.name, progress=summarize(rows))
            )
    return people


def to_row_view(row: AggregatedRow) -> ShoppingRowView:
    leaf = row.single_source
    return ShoppingRowView(
        key=row.key,
        name=row.name,
        quantity=format_amount(row.amount),
        checked=row.checked,
        source_count=row.source_count,
        meal_title=leaf.meal_title if leaf else None,
        service_title=leaf.service_title if leaf else None,
        sources=row.sources,
    )


def scope_title(snapshot: PlanSnapshot, scope: ShoppingScope) -> str:
    if isinstance(scope, EveryoneScope):
        return "Liste globale"
    person = snapshot.find_person(scope.person_id)
    return person.name if person else f"#{scope.person_id}"


def build_shopping_list(snapshot: PlanSnapshot, scope: ShoppingScope) -> ShoppingList:
    """The full payload for one scope: display rows, progress, and per-person
    progress when the scope is everyone."""
    rows = flatten_and_aggregate(snapshot, scope)
    return ShoppingList(
        event_id=snapshot.event_id,
        scope=scope,
        title=scope_title(snapshot, scope),
        rows=[to_row_view(row) for row in rows],
        progress=summarize(rows),
        people=summarize_people(snapshot) if isinstance(scope, EveryoneScope) else [],
    )


def format_shopping_text(rows: List[AggregatedRow], title: str = "Liste de courses") -> str:
    """
    Render rows as a markdown checklist for copy/paste sharing.

        ## Liste de courses
        - [x] Farine: 500 g
        - [ ] Vin rouge: au choix
    """
    if not rows:
        return f"## {title}\n\nRien à acheter."

    lines: list[str] = [f"## {title}", ""]
    for row in rows:
        box = "[x]" if row.checked else "[ ]"
        quantity = format_amount(row.amount)
        lines.append(f"- {box} {row.name}: {quantity}" if quantity else f"- {box} {row.name}")

    progress = summarize(rows)
    lines.append("")
    lines.append(f"{progress.checked_count}/{progress.total} ({progress.percentage}%)")
    return "\n".join(lines)
