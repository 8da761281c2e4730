"""Tests for shopping list use cases against an in-memory store."""

from datetime import date, timedelta

import pytest

from mealcart.normalize.quantity import QuantityParseError
from mealcart.plan.aggregation import IngredientLine
from mealcart.plan.service import (
    InvalidWeekError,
    ItemNotFoundError,
    PastWeekError,
    ShoppingListNotFoundError,
    ShoppingListService,
    WeekOutOfRangeError,
    validate_week_date,
    week_monday,
)

TODAY = date(2026, 10, 21)  # A Wednesday
THIS_MONDAY = date(2026, 10, 19)


class TestValidateWeekDate:
    """Tests for validate_week_date function."""

    def test_week_monday(self):
        """Any day maps to the Monday of its week."""
        assert week_monday(TODAY) == THIS_MONDAY
        assert week_monday(THIS_MONDAY) == THIS_MONDAY

    def test_current_and_future_weeks(self):
        """This week and up to four weeks ahead are valid."""
        assert validate_week_date("2026-10-19", today=TODAY) == THIS_MONDAY
        assert validate_week_date(THIS_MONDAY + timedelta(weeks=4), today=TODAY) == date(
            2026, 11, 16
        )

    def test_malformed_date(self):
        """Non-ISO strings are rejected."""
        with pytest.raises(InvalidWeekError, match="Invalid date format"):
            validate_week_date("19/10/2026", today=TODAY)

    def test_not_a_monday(self):
        """Week starts must be Mondays."""
        with pytest.raises(InvalidWeekError, match="Monday"):
            validate_week_date("2026-10-20", today=TODAY)

    def test_past_week(self):
        """Past weeks are rejected."""
        with pytest.raises(PastWeekError):
            validate_week_date("2026-10-12", today=TODAY)

    def test_too_far_ahead(self):
        """Weeks beyond the limit are rejected."""
        with pytest.raises(WeekOutOfRangeError) as exc_info:
            validate_week_date(THIS_MONDAY + timedelta(weeks=5), today=TODAY)
        assert exc_info.value.max_weeks_ahead == 4

    def test_custom_limit(self):
        """The limit can be overridden."""
        week = THIS_MONDAY + timedelta(weeks=6)
        assert validate_week_date(week, today=TODAY, max_weeks_ahead=8) == week


class TestShoppingListServiceGenerate:
    """Tests for ShoppingListService.generate."""

    @pytest.mark.asyncio
    async def test_generate_stores_list(self, store, weekly_plan_lines):
        """A generated list is stored and committed."""
        service = ShoppingListService(store, retention_weeks=5)

        shopping_list = await service.generate("user-1", "plan-1", THIS_MONDAY, weekly_plan_lines)

        assert shopping_list.id in store.lists
        assert store.commits == 1
        assert [item.name for item in shopping_list.items] == ["chicken", "onion", "tomato"]

    @pytest.mark.asyncio
    async def test_regenerate_replaces_week(self, store, weekly_plan_lines):
        """A second list for the same week replaces the first and its check marks."""
        service = ShoppingListService(store, retention_weeks=5)
        first = await service.generate("user-1", "plan-1", THIS_MONDAY, weekly_plan_lines)
        await service.set_collected(first.id, "onion", "item", True)

        second = await service.generate("user-1", "plan-2", THIS_MONDAY, weekly_plan_lines)

        assert list(store.lists) == [second.id]
        assert second.collected_count == 0

    @pytest.mark.asyncio
    async def test_retention(self, store):
        """Only the most recent weeks are kept per user."""
        service = ShoppingListService(store, retention_weeks=2)
        lines = [IngredientLine("rice", "1", "cup")]

        for weeks in range(3):
            week = THIS_MONDAY + timedelta(weeks=weeks)
            await service.generate("user-1", f"plan-{weeks}", week, lines)
        await service.generate("user-2", "plan-x", THIS_MONDAY, lines)

        kept = sorted((s.user_id, s.week_start_date) for s in store.lists.values())
        assert kept == [
            ("user-1", THIS_MONDAY + timedelta(weeks=1)),
            ("user-1", THIS_MONDAY + timedelta(weeks=2)),
            ("user-2", THIS_MONDAY),
        ]

    @pytest.mark.asyncio
    async def test_parse_error_stores_nothing(self, store):
        """An unparsable quantity leaves the store untouched."""
        service = ShoppingListService(store, retention_weeks=5)

        with pytest.raises(QuantityParseError):
            await service.generate(
                "user-1", "plan-1", THIS_MONDAY, [IngredientLine("flour", "1/0", "cup")]
            )

        assert store.lists == {}
        assert store.commits == 0


class TestShoppingListServiceUpdates:
    """Tests for recalculation, check-off and reset."""

    @pytest.mark.asyncio
    async def test_recalculate(
        self, store, weekly_plan_lines, chicken_recipe_lines, beef_recipe_lines
    ):
        """A swap is applied under a row lock and saved."""
        service = ShoppingListService(store, retention_weeks=5)
        created = await service.generate("user-1", "plan-1", THIS_MONDAY, weekly_plan_lines)

        updated = await service.recalculate(created.id, chicken_recipe_lines, beef_recipe_lines)

        assert store.locked == [created.id]
        assert updated.updated_at is not None
        stored = store.lists[created.id]
        assert {item.name for item in stored.items} == {"beef", "chicken", "onion", "tomato"}

    @pytest.mark.asyncio
    async def test_recalculate_missing_list(self, store):
        """Swapping on an unknown list raises not found."""
        service = ShoppingListService(store, retention_weeks=5)

        with pytest.raises(ShoppingListNotFoundError):
            await service.recalculate("missing", [], [])

    @pytest.mark.asyncio
    async def test_set_collected_normalizes_key(self, store, weekly_plan_lines):
        """Items are looked up by their normalized name and unit."""
        service = ShoppingListService(store, retention_weeks=5)
        created = await service.generate("user-1", "plan-1", THIS_MONDAY, weekly_plan_lines)

        updated = await service.set_collected(created.id, "  Onion ", "ITEM", True)

        assert updated.get_item("onion", "item").collected
        assert store.lists[created.id].collected_count == 1

    @pytest.mark.asyncio
    async def test_set_collected_opaque_unit(self, store):
        """Opaque units are matched with the same cleaning they were stored with."""
        service = ShoppingListService(store, retention_weeks=5)
        long_unit = "heaped serving spoon from the large ceramic jar on the top shelf"
        created = await service.generate(
            "user-1",
            "plan-1",
            THIS_MONDAY,
            [IngredientLine("beans", "1", "large  can"), IngredientLine("lentils", "2", long_unit)],
        )

        await service.set_collected(created.id, "beans", "Large  Can", True)
        updated = await service.set_collected(created.id, "lentils", long_unit, True)

        assert updated.get_item("beans", "large can").collected
        assert updated.get_item("lentils", long_unit).collected

    @pytest.mark.asyncio
    async def test_set_collected_any_spelling_of_unit(self, store):
        """Recognized units are matched on their base unit."""
        service = ShoppingListService(store, retention_weeks=5)
        created = await service.generate(
            "user-1", "plan-1", THIS_MONDAY, [IngredientLine("rice", "1", "cup")]
        )

        updated = await service.set_collected(created.id, "rice", "Cups", True)

        assert updated.get_item("rice", "ml").collected

    @pytest.mark.asyncio
    async def test_set_collected_unknown_item(self, store, weekly_plan_lines):
        """Unknown items raise not found."""
        service = ShoppingListService(store, retention_weeks=5)
        created = await service.generate("user-1", "plan-1", THIS_MONDAY, weekly_plan_lines)

        with pytest.raises(ItemNotFoundError):
            await service.set_collected(created.id, "garlic", "item", True)

    @pytest.mark.asyncio
    async def test_reset(self, store, weekly_plan_lines):
        """Reset unchecks everything."""
        service = ShoppingListService(store, retention_weeks=5)
        created = await service.generate("user-1", "plan-1", THIS_MONDAY, weekly_plan_lines)
        for item in created.items:
            await service.set_collected(created.id, item.name, item.unit, True)
        assert store.lists[created.id].is_complete

        reset = await service.reset(created.id)

        assert reset.collected_count == 0
        assert store.lists[created.id].collected_count == 0

    @pytest.mark.asyncio
    async def test_get_missing(self, store):
        """Unknown ids raise not found."""
        service = ShoppingListService(store, retention_weeks=5)

        with pytest.raises(ShoppingListNotFoundError):
            await service.get("missing")

    @pytest.mark.asyncio
    async def test_get_for_week(self, store):
        """Lists are found by user and validated week."""
        service = ShoppingListService(store, retention_weeks=5)
        monday = week_monday(date.today())
        created = await service.generate(
            "user-1", "plan-1", monday, [IngredientLine("rice", "1", "cup")]
        )

        found = await service.get_for_week("user-1", monday.isoformat())

        assert found.id == created.id
        with pytest.raises(ShoppingListNotFoundError):
            await service.get_for_week("user-2", monday.isoformat())
        with pytest.raises(PastWeekError):
            await service.get_for_week("user-1", monday - timedelta(weeks=1))
