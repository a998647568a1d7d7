from enum import Enum
from typing import Annotated, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class UnitFamily(str, Enum):
    MASS = "mass"
    VOLUME = "volume"
    COUNT = "count"


class QuantityUnit(str, Enum):
    # Mass
    GRAMS = "g"
    KG = "kg"
    # Volume
    ML = "ml"
    CL = "cl"
    LITERS = "l"
    # Count (bare number, "pièces", "unités")
    NONE = "none"

    @property
    def family(self) -> UnitFamily:
        return UNIT_FAMILIES[self]

    @property
    def factor(self) -> float:
        """Multiplier to the family's base unit (g, ml, or 1 for counts)."""
        return UNIT_FACTORS[self]


UNIT_FAMILIES: dict[QuantityUnit, UnitFamily] = {
    QuantityUnit.GRAMS: UnitFamily.MASS,
    QuantityUnit.KG: UnitFamily.MASS,
    QuantityUnit.ML: UnitFamily.VOLUME,
    QuantityUnit.CL: UnitFamily.VOLUME,
    QuantityUnit.LITERS: UnitFamily.VOLUME,
    QuantityUnit.NONE: UnitFamily.COUNT,
}

UNIT_FACTORS: dict[QuantityUnit, float] = {
    QuantityUnit.GRAMS: 1.0,
    QuantityUnit.KG: 1000.0,
    QuantityUnit.ML: 1.0,
    QuantityUnit.CL: 10.0,
    QuantityUnit.LITERS: 1000.0,
    QuantityUnit.NONE: 1.0,
}


# ---------------------------------------------------------------------------
# Parsed quantities
# ---------------------------------------------------------------------------


class Amount(BaseModel):
    """A numeric quantity with a recognised unit."""

    kind: Literal["amount"] = "amount"
    value: float
    unit: QuantityUnit


class Label(BaseModel):
    """Free text that carries no number we can add up ("au choix", "1/2")."""

    kind: Literal["label"] = "label"
    text: str


class NoQuantity(BaseModel):
    kind: Literal["none"] = "none"


ParsedQuantity = Annotated[Union[Amount, Label, NoQuantity], Field(discriminator="kind")]
Fragment = Annotated[Union[Amount, Label], Field(discriminator="kind")]


class MergedAmount(BaseModel):
    """
    Everything we know about how much to buy for one row.

    Usually a single Amount. Several fragments appear when contributors used
    different unit families, or wrote free text next to numbers.
    """

    fragments: List[Fragment] = Field(min_length=1)

    @property
    def amount(self) -> Optional[Amount]:
        """The single numeric amount, when the row merged cleanly into one."""
        if len(self.fragments) == 1 and isinstance(self.fragments[0], Amount):
            return self.fragments[0]
        return None

    @property
    def labels(self) -> List[str]:
        return [f.text for f in self.fragments if isinstance(f, Label)]


# ---------------------------------------------------------------------------
# Shopping leaves and rows (computed, never stored)
# ---------------------------------------------------------------------------


class LeafKind(str, Enum):
    INGREDIENT = "ingredient"
    ITEM = "item"


class LeafRef(BaseModel):
    """Points at the one persisted record a leaf's checkbox lives on."""

    model_config = ConfigDict(frozen=True)

    kind: LeafKind
    record_id: int  # ingredient id, or dish id for whole-dish leaves
    dish_id: int


class ShoppingLeaf(BaseModel):
    """One ingredient, or one whole dish that was never decomposed."""

    kind: LeafKind
    name: str
    quantity: Optional[str] = None
    checked: bool
    meal_title: str
    service_title: str
    dish_id: int
    dish_name: str
    ingredient_id: Optional[int] = None
    person_id: Optional[int] = None

    @property
    def ref(self) -> LeafRef:
        if self.kind == LeafKind.INGREDIENT:
            return LeafRef(kind=self.kind, record_id=self.ingredient_id, dish_id=self.dish_id)
        return LeafRef(kind=self.kind, record_id=self.dish_id, dish_id=self.dish_id)


class AggregatedRow(BaseModel):
    """A single shopping list line after merging same-named leaves."""

    key: str
    name: str
    amount: Optional[MergedAmount] = None
    checked: bool
    sources: List[ShoppingLeaf] = Field(min_length=1)

    @property
    def source_count(self) -> int:
        return len(self.sources)

    @property
    def single_source(self) -> Optional[ShoppingLeaf]:
        """The only contributing leaf, or None when several were merged."""
        if len(self.sources) == 1:
            return self.sources[0]
        return None

    @property
    def provenance(self) -> Union[Tuple[str, str], int]:
        """(meal title, service title) for one source, else the number of sources."""
        leaf = self.single_source
        if leaf is not None:
            return leaf.meal_title, leaf.service_title
        return self.source_count


# ---------------------------------------------------------------------------
# Scopes
# ---------------------------------------------------------------------------


class PersonScope(BaseModel):
    kind: Literal["person"] = "person"
    person_id: int


class EveryoneScope(BaseModel):
    """Every dish claimed by somebody."""

    kind: Literal["everyone"] = "everyone"


ShoppingScope = Annotated[Union[PersonScope, EveryoneScope], Field(discriminator="kind")]


# ---------------------------------------------------------------------------
# Toggle fan-out
# ---------------------------------------------------------------------------


class LeafFailure(BaseModel):
    ref: LeafRef
    error: str


class ToggleResult(BaseModel):
    """Per-leaf outcome of a fan-out. Partial success is a normal outcome."""

    checked: bool
    succeeded: List[LeafRef] = Field(default_factory=list)
    failed: List[LeafFailure] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def failed_refs(self) -> List[LeafRef]:
        return [f.ref for f in self.failed]


# ---------------------------------------------------------------------------
# Whole list
# ---------------------------------------------------------------------------


class ShoppingProgress(BaseModel):
    checked_count: int
    total: int
    percentage: int


class PersonProgress(BaseModel):
    """One person's share of the global list: their own rows and how many are done."""

    person_id: int
    name: str
    progress: ShoppingProgress


class ShoppingRowView(BaseModel):
    """An AggregatedRow plus the strings a client displays."""

    key: str
    name: str
    quantity: str
    checked: bool
    source_count: int
    meal_title: Optional[str] = None
    service_title: Optional[str] = None
    sources: List[ShoppingLeaf]


class ShoppingList(BaseModel):
    """Final output for one scope: rows in plan order plus progress.

    `people` is only filled for the everyone scope.
    """

    event_id: int
    scope: ShoppingScope
    title: str
    rows: List[ShoppingRowView]
    progress: ShoppingProgress
    people: List[PersonProgress] = Field(default_factory=list)
