from .plan import DishEntry, IngredientEntry, Meal, Person, PlanSnapshot, Service
from .shopping import AggregatedRow, LeafRef, ShoppingLeaf, ToggleResult

__all__ = [
    "PlanSnapshot",
    "Meal",
    "Service",
    "DishEntry",
    "IngredientEntry",
    "Person",
    "ShoppingLeaf",
    "AggregatedRow",
    "LeafRef",
    "ToggleResult",
]
