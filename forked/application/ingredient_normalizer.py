# forked_api/forked/application/ingredient_normalizer.py
from __future__ import annotations

from typing import Tuple

from forked.domain.entities import Ingredient

IdentityKey = Tuple[str, str]


def identity_key(ingredient: Ingredient) -> IdentityKey:
    """
    Merge key for shopping-list aggregation: the raw (name, unit) pair.

    No casing, whitespace or unit conversion is applied, so "Milk"/"l" and
    "milk"/"l" stay distinct, as do "milk"/"l" and "milk"/"ml". A tuple is
    used rather than a joined string so "A-B"/"g" and "A"/"B-g" cannot collide.
    """
    return (ingredient.name, ingredient.unit)
