"""
Plan snapshot models: meals → services → dishes → ingredients.

These mirror what the persistence layer stores. The shopping engine only ever
reads them; they are rebuilt from the store on every request.

Design notes:
- An IngredientEntry points at its dish by `dish_id` only, never by object.
- Whether a dish was broken into ingredients is a tagged variant
  (NoIngredients | Ingredients) rather than an empty-list convention, so the
  flattener has to handle both branches explicitly.
"""

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class IngredientEntry(BaseModel):
    """A sub-component of a dish."""

    id: int
    dish_id: int
    name: str
    quantity: Optional[str] = None
    checked: bool = False


class NoIngredients(BaseModel):
    kind: Literal["whole"] = "whole"


class Ingredients(BaseModel):
    kind: Literal["decomposed"] = "decomposed"
    items: List[IngredientEntry] = Field(min_length=1)


Decomposition = Annotated[Union[NoIngredients, Ingredients], Field(discriminator="kind")]


class DishEntry(BaseModel):
    """A food item someone claimed within a service."""

    id: int
    meal_id: int
    service_id: int
    name: str
    quantity: Optional[str] = None
    note: Optional[str] = None
    price: Optional[float] = None
    # Ignored for shopping purposes once the dish is decomposed
    checked: bool = False
    person_id: Optional[int] = None
    decomposition: Decomposition = Field(default_factory=NoIngredients)

    @property
    def ingredients(self) -> List[IngredientEntry]:
        if isinstance(self.decomposition, Ingredients):
            return self.decomposition.items
        return []

    @classmethod
    def with_ingredients(cls, ingredients: List[IngredientEntry], **fields) -> "DishEntry":
        """Build a dish, choosing the decomposition variant from the ingredient list."""
        decomposition = Ingredients(items=ingredients) if ingredients else NoIngredients()
        return cls(decomposition=decomposition, **fields)


class Service(BaseModel):
    """A section of a meal (starter, main, dessert, drinks...)."""

    id: int
    title: str
    dishes: List[DishEntry] = Field(default_factory=list)


class Meal(BaseModel):
    id: int
    date: str
    title: Optional[str] = None
    services: List[Service] = Field(default_factory=list)

    @property
    def caption(self) -> str:
        return self.title or self.date


class Person(BaseModel):
    id: int
    name: str


class PlanSnapshot(BaseModel):
    """Everything the shopping list needs for one event, in display order."""

    event_id: int
    name: str = ""
    meals: List[Meal] = Field(default_factory=list)
    people: List[Person] = Field(default_factory=list)

    def find_person(self, person_id: int) -> Optional[Person]:
        for person in self.people:
            if person.id == person_id:
                return person
        return None
