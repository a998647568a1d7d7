from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from potluck.db.models import Event, IngredientRow, ItemRow, MealRow, ServiceRow
from potluck.models.plan import DishEntry, IngredientEntry, Meal, Person, PlanSnapshot, Service
from potluck.models.shopping import LeafKind, LeafRef

logger = logging.getLogger(__name__)


class LeafNotFoundError(LookupError):
    """The record behind a shopping leaf no longer exists."""

    def __init__(self, ref: LeafRef):
        super().__init__(f"{ref.kind.value} {ref.record_id} not found")
        self.ref = ref


class PlanStore:
    """Postgres-backed plan snapshots and per-leaf checkbox updates.

    Every call opens its own AsyncSession. The toggle fan-out runs updates
    concurrently and an AsyncSession must not be shared between them.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def load_snapshot(self, event_id: int) -> Optional[PlanSnapshot]:
        async with self._session_factory() as db:
            event = await self._get_event(event_id, db)
            if event is None:
                return None
            return self._event_to_snapshot(event)

    async def update_leaf_checked(self, ref: LeafRef, checked: bool) -> None:
        # The record must still belong to the dish the ref names
        if ref.kind == LeafKind.INGREDIENT:
            statement = update(IngredientRow).where(
                IngredientRow.id == ref.record_id, IngredientRow.item_id == ref.dish_id
            )
        else:
            statement = update(ItemRow).where(ItemRow.id == ref.record_id, ItemRow.id == ref.dish_id)
        async with self._session_factory() as db:
            result = await db.execute(statement.values(checked=checked))
            if result.rowcount == 0:
                await db.rollback()
                raise LeafNotFoundError(ref)
            await db.commit()
        logger.debug("Set checked=%s on %s %s", checked, ref.kind.value, ref.record_id)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _get_event(self, event_id: int, db: AsyncSession) -> Optional[Event]:
        result = await db.execute(
            select(Event)
            .where(Event.id == event_id)
            .options(
                selectinload(Event.people),
                selectinload(Event.meals)
                .selectinload(MealRow.services)
                .selectinload(ServiceRow.items)
                .selectinload(ItemRow.ingredients),
            )
        )
        return result.scalar_one_or_none()

    def _event_to_snapshot(self, event: Event) -> PlanSnapshot:
        meals = sorted(event.meals, key=lambda m: (m.date, m.id))
        return PlanSnapshot(
            event_id=event.id,
            name=event.name,
            people=[Person(id=p.id, name=p.name) for p in sorted(event.people, key=lambda p: p.id)],
            meals=[
                Meal(
                    id=meal.id,
                    date=meal.date,
                    title=meal.title,
                    services=[
                        self._service_to_model(service)
                        for service in sorted(meal.services, key=lambda s: (s.order, s.id))
                    ],
                )
                for meal in meals
            ],
        )

    def _service_to_model(self, service: ServiceRow) -> Service:
        return Service(
            id=service.id,
            title=service.title,
            dishes=[
                self._item_to_dish(item, service.meal_id)
                for item in sorted(service.items, key=lambda i: (i.order, i.id))
            ],
        )

    def _item_to_dish(self, item: ItemRow, meal_id: int) -> DishEntry:
        ingredients = [
            IngredientEntry(
                id=ing.id,
                dish_id=item.id,
                name=ing.name,
                quantity=ing.quantity,
                checked=ing.checked,
            )
            for ing in sorted(item.ingredients, key=lambda i: (i.order, i.id))
        ]
        return DishEntry.with_ingredients(
            ingredients,
            id=item.id,
            meal_id=meal_id,
            service_id=item.service_id,
            name=item.name,
            quantity=item.quantity,
            note=item.note,
            price=item.price,
            checked=item.checked,
            person_id=item.person_id,
        )
