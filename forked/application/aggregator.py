# forked_api/forked/application/aggregator.py
from __future__ import annotations

from typing import Dict, Iterable, List

from forked.application.ingredient_normalizer import IdentityKey, identity_key
from forked.domain.entities import Recipe, ShoppingListEntry


def aggregate(recipes: Iterable[Recipe], people: int) -> List[ShoppingListEntry]:
    """
    Fold the ingredient lines of `recipes` into one entry per identity key.

    Each line contributes `quantity * people` to its (name, unit) total.
    Entries come out in order of first occurrence (recipes in input order,
    lines in stored order). Quantities are plain float sums, never rounded.

    `people` is not validated here; negative or zero line quantities are
    summed like any other number.
    """
    # dict keeps insertion order -> first-seen ordering for free
    totals: Dict[IdentityKey, float] = {}

    for recipe in recipes:
        for line in recipe.ingredients:
            key = identity_key(line)
            totals[key] = totals.get(key, 0.0) + line.quantity * people

    return [
        ShoppingListEntry(name=name, quantity=qty, unit=unit)
        for (name, unit), qty in totals.items()
    ]
