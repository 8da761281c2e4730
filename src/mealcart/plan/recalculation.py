"""Incremental shopping list recalculation on meal swaps."""

from collections.abc import Iterable
from dataclasses import replace
from fractions import Fraction

from mealcart.logging_config import get_logger
from mealcart.plan.aggregation import AggregationKey, IngredientLine, group_lines
from mealcart.plan.categorize import CategoryLookup, categorize
from mealcart.plan.rounding import format_quantity
from mealcart.plan.shopping_list import AggregatedIngredient, make_item, sort_items

logger = get_logger(__name__)


def _index_items(items: Iterable[AggregatedIngredient]) -> dict[AggregationKey, AggregatedIngredient]:
    indexed: dict[AggregationKey, AggregatedIngredient] = {}
    for item in items:
        if item.key in indexed:
            raise ValueError(f"Duplicate shopping list item for {item.name!r} ({item.unit})")
        # Copies, so the caller's items are untouched if anything fails later
        indexed[item.key] = replace(item)
    return indexed


def recalculate(
    current_items: Iterable[AggregatedIngredient],
    old_lines: Iterable[IngredientLine],
    new_lines: Iterable[IngredientLine],
    categorizer: CategoryLookup = categorize,
) -> list[AggregatedIngredient]:
    """
    Swap one recipe's ingredients for another's on an existing item set.

    The removed recipe's quantities are subtracted (clamped at zero, a key the
    list does not know is ignored) and the added recipe's quantities are
    added, creating unchecked items for new keys. Touched items that end at
    zero are dropped unless the added recipe lists them too, so an unmeasured
    or explicitly zero amount survives a swap as it survives aggregation.
    Every surviving item keeps its ``collected`` flag, and only touched items
    are re-formatted.

    Raises:
        QuantityParseError: If either line set has an unparsable quantity.
            Nothing is applied in that case.
        ValueError: If ``current_items`` holds two items with the same key.
    """
    old_deltas = group_lines(old_lines)
    new_deltas = group_lines(new_lines)

    items = _index_items(current_items)
    touched: set[AggregationKey] = set()

    for key, delta in old_deltas.items():
        item = items.get(key)
        if item is None:
            logger.debug(f"Removed recipe lists {key.name!r} ({key.unit}) which is not on the list")
            continue
        item.quantity = max(item.quantity - delta.quantity, Fraction(0))
        touched.add(key)

    for key, delta in new_deltas.items():
        item = items.get(key)
        if item is None:
            items[key] = make_item(key, delta, categorizer)
            touched.add(key)
            continue
        item.quantity += delta.quantity
        item.is_ambiguous = item.is_ambiguous or delta.is_ambiguous
        touched.add(key)

    removed: list[AggregationKey] = []
    for key in touched:
        item = items[key]
        still_needed = key in new_deltas
        if item.quantity <= 0 and not still_needed:
            removed.append(key)
            del items[key]
            continue
        item.formatted_quantity = format_quantity(item.quantity, item.unit)

    logger.info(
        f"Recalculated shopping list: {len(old_deltas)} removed keys, "
        f"{len(new_deltas)} added keys, {len(removed)} items dropped, {len(items)} items remain"
    )

    return sort_items(items.values())
