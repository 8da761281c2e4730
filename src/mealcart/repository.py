"""Repository mapping shopping lists onto the relational store."""

from collections.abc import Iterable
from datetime import date
from fractions import Fraction

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from mealcart.logging_config import get_logger
from mealcart.models import ShoppingListItemRecord, ShoppingListRecord
from mealcart.plan.aggregation import AggregationKey
from mealcart.plan.categorize import Category
from mealcart.plan.shopping_list import AggregatedIngredient, ShoppingList, sort_items

logger = get_logger(__name__)


# =========================================================================
# Conversion
# =========================================================================


def encode_quantity(quantity: Fraction) -> str:
    """Exact text form of a quantity, e.g. ``"45359/50"``."""
    return f"{quantity.numerator}/{quantity.denominator}"


def decode_quantity(text: str) -> Fraction:
    return Fraction(text)


def item_from_record(record: ShoppingListItemRecord) -> AggregatedIngredient:
    return AggregatedIngredient(
        name=record.ingredient_name,
        unit=record.unit,
        quantity=decode_quantity(record.quantity),
        formatted_quantity=record.formatted_quantity,
        category=Category(record.category),
        is_ambiguous=record.is_ambiguous,
        collected=record.is_collected,
    )


def apply_item(record: ShoppingListItemRecord, item: AggregatedIngredient) -> None:
    """Copy an item's state onto an item row."""
    record.ingredient_name = item.name
    record.unit = item.unit
    record.quantity = encode_quantity(item.quantity)
    record.formatted_quantity = item.formatted_quantity
    record.category = item.category.value
    record.is_ambiguous = item.is_ambiguous
    record.is_collected = item.collected


def record_from_item(item: AggregatedIngredient) -> ShoppingListItemRecord:
    record = ShoppingListItemRecord()
    apply_item(record, item)
    return record


def shopping_list_from_record(record: ShoppingListRecord) -> ShoppingList:
    return ShoppingList(
        id=record.id,
        user_id=record.user_id,
        meal_plan_id=record.meal_plan_id,
        week_start_date=record.week_start_date,
        items=sort_items(item_from_record(item) for item in record.items),
        generated_at=record.generated_at,
        updated_at=record.updated_at,
    )


def sync_items(record: ShoppingListRecord, items: Iterable[AggregatedIngredient]) -> None:
    """
    Bring a list's item rows in line with ``items``.

    Rows are matched by (ingredient_name, unit): matching rows are updated in
    place and keep their ids, rows whose key is gone are removed and new keys
    get new rows.
    """
    wanted = {item.key: item for item in items}
    existing = {
        AggregationKey(row.ingredient_name, row.unit): row for row in record.items
    }

    for key, row in existing.items():
        if key not in wanted:
            record.items.remove(row)

    for key, item in wanted.items():
        row = existing.get(key)
        if row is None:
            record.items.append(record_from_item(item))
        else:
            apply_item(row, item)


# =========================================================================
# Repository
# =========================================================================


class ShoppingListRepository:
    """SQLAlchemy-backed store for shopping lists."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _load(self, shopping_list_id: str, for_update: bool = False) -> ShoppingListRecord | None:
        query = (
            select(ShoppingListRecord)
            .where(ShoppingListRecord.id == shopping_list_id)
            .options(selectinload(ShoppingListRecord.items))
        )
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get(self, shopping_list_id: str, for_update: bool = False) -> ShoppingList | None:
        """
        Load a shopping list by id.

        With ``for_update`` the list row stays locked until the session commits
        or rolls back.
        """
        record = await self._load(shopping_list_id, for_update=for_update)
        if record is None:
            return None
        return shopping_list_from_record(record)

    async def get_by_week(self, user_id: str, week_start_date: date) -> ShoppingList | None:
        result = await self.session.execute(
            select(ShoppingListRecord)
            .where(
                ShoppingListRecord.user_id == user_id,
                ShoppingListRecord.week_start_date == week_start_date,
            )
            .options(selectinload(ShoppingListRecord.items))
        )
        record = result.scalar_one_or_none()
        if record is None:
            return None
        return shopping_list_from_record(record)

    async def add(self, shopping_list: ShoppingList) -> None:
        record = ShoppingListRecord(
            id=shopping_list.id,
            user_id=shopping_list.user_id,
            meal_plan_id=shopping_list.meal_plan_id,
            week_start_date=shopping_list.week_start_date,
            generated_at=shopping_list.generated_at,
            updated_at=shopping_list.updated_at,
            items=[record_from_item(item) for item in shopping_list.items],
        )
        self.session.add(record)
        await self.session.flush()

    async def save(self, shopping_list: ShoppingList) -> None:
        """Write back a loaded list's items and timestamps."""
        record = await self._load(shopping_list.id)
        if record is None:
            raise LookupError(f"Shopping list {shopping_list.id} is not stored")

        sync_items(record, shopping_list.items)
        record.updated_at = shopping_list.updated_at
        await self.session.flush()

    async def delete(self, shopping_list: ShoppingList) -> None:
        record = await self._load(shopping_list.id)
        if record is None:
            return
        await self.session.delete(record)
        # Flush now so a replacement for the same week can be inserted
        await self.session.flush()

    async def prune_weeks(self, user_id: str, keep: int) -> int:
        """Delete a user's lists beyond the ``keep`` most recent weeks."""
        result = await self.session.execute(
            select(ShoppingListRecord.id)
            .where(ShoppingListRecord.user_id == user_id)
            .order_by(ShoppingListRecord.week_start_date.desc())
            .offset(keep)
        )
        stale_ids = list(result.scalars().all())
        if not stale_ids:
            return 0

        await self.session.execute(
            delete(ShoppingListItemRecord).where(
                ShoppingListItemRecord.shopping_list_id.in_(stale_ids)
            )
        )
        await self.session.execute(
            delete(ShoppingListRecord).where(ShoppingListRecord.id.in_(stale_ids))
        )
        logger.info(f"Pruned {len(stale_ids)} shopping lists for user {user_id}")
        return len(stale_ids)

    async def commit(self) -> None:
        await self.session.commit()
