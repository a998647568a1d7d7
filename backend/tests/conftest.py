"""
Shared fixtures for all test modules.
"""

from typing import Optional

import pytest

from potluck.models.plan import DishEntry, IngredientEntry, Meal, Person, PlanSnapshot, Service
from potluck.models.shopping import LeafKind, LeafRef, ShoppingLeaf


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def make_leaf(
    name: str,
    quantity: Optional[str] = None,
    checked: bool = False,
    record_id: int = 1,
    kind: LeafKind = LeafKind.INGREDIENT,
    meal_title: str = "Réveillon",
    service_title: str = "Plat",
) -> ShoppingLeaf:
    """A leaf with just enough provenance to be realistic."""
    return ShoppingLeaf(
        kind=kind,
        name=name,
        quantity=quantity,
        checked=checked,
        meal_title=meal_title,
        service_title=service_title,
        dish_id=100 + record_id,
        dish_name="Dish",
        ingredient_id=record_id if kind == LeafKind.INGREDIENT else None,
        person_id=1,
    )


def ingredient(id: int, dish_id: int, name: str, quantity: Optional[str] = None, checked: bool = False):
    return IngredientEntry(id=id, dish_id=dish_id, name=name, quantity=quantity, checked=checked)


def dish(id: int, name: str, person_id: Optional[int], ingredients=(), **fields) -> DishEntry:
    return DishEntry.with_ingredients(
        list(ingredients), id=id, meal_id=fields.pop("meal_id", 1),
        service_id=fields.pop("service_id", 1), name=name,
        person_id=person_id, **fields,
    )


class InMemoryPlanStore:
    """Stands in for PlanStore: same two methods, backed by a snapshot."""

    def __init__(self, snapshot: PlanSnapshot, failing: frozenset = frozenset()):
        self.snapshot = snapshot
        self.failing = set(failing)
        self.calls: list[tuple[LeafRef, bool]] = []

    async def load_snapshot(self, event_id: int) -> Optional[PlanSnapshot]:
        if event_id != self.snapshot.event_id:
            return None
        return self.snapshot.model_copy(deep=True)

    async def update_leaf_checked(self, ref: LeafRef, checked: bool) -> None:
        self.calls.append((ref, checked))
        if ref.record_id in self.failing:
            raise ConnectionError("database unavailable")
        for meal in self.snapshot.meals:
            for service in meal.services:
                for d in service.dishes:
                    if d.id != ref.dish_id:
                        continue
                    if ref.kind == LeafKind.ITEM and d.id == ref.record_id:
                        d.checked = checked
                        return
                    for ing in d.ingredients:
                        if ref.kind == LeafKind.INGREDIENT and ing.id == ref.record_id:
                            ing.checked = checked
                            return
        raise LookupError(f"{ref.kind.value} {ref.record_id} not found")


# ---------------------------------------------------------------------------
# Snapshot fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_snapshot() -> PlanSnapshot:
    """
    Two meals, two people.

    Alice (1): Tarte (farine + beurre), Crêpes (farine, oeufs), Vin rouge.
    Bob (2): Citrons, Salade. One dish nobody claimed.
    """
    return PlanSnapshot(
        event_id=7,
        name="Noël",
        people=[Person(id=1, name="Alice"), Person(id=2, name="Bob")],
        meals=[
            Meal(
                id=1,
                date="2025-12-24",
                title="Réveillon",
                services=[
                    Service(
                        id=1,
                        title="Dessert",
                        dishes=[
                            dish(
                                10, "Tarte", 1,
                                ingredients=[
                                    ingredient(101, 10, "Farine", "200g"),
                                    ingredient(102, 10, "Beurre", "125 g"),
                                ],
                            ),
                            dish(11, "Citron", 2, quantity="2"),
                        ],
                    ),
                    Service(
                        id=2,
                        title="Boissons",
                        dishes=[
                            dish(12, "Vin rouge", 1, quantity="au choix", service_id=2),
                            dish(13, "Champagne", None, quantity="2 bouteilles", service_id=2),
                        ],
                    ),
                ],
            ),
            Meal(
                id=2,
                date="2025-12-25",
                title=None,
                services=[
                    Service(
                        id=3,
                        title="Petit-déjeuner",
                        dishes=[
                            dish(
                                14, "Crêpes", 1, meal_id=2, service_id=3,
                                ingredients=[
                                    ingredient(103, 14, "farine", "0.3kg"),
                                    ingredient(104, 14, "Oeufs", "4"),
                                ],
                            ),
                            dish(15, "Citrons", 2, quantity="1 pièce", meal_id=2, service_id=3),
                            dish(16, "Salade", 2, meal_id=2, service_id=3),
                        ],
                    ),
                ],
            ),
        ],
    )


@pytest.fixture
def memory_store(sample_snapshot) -> InMemoryPlanStore:
    return InMemoryPlanStore(sample_snapshot)
