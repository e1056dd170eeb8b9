# forked_api/forked/application/shopping_list_builder.py
from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional

from bson import ObjectId

from forked.application.aggregator import aggregate
from forked.domain.entities import ShoppingListRequest, ShoppingListResult
from forked.domain.errors import NotFoundError, ValidationError
from forked.domain.repositories import RecipeReadRepo, ShoppingListRepo

log = logging.getLogger("app.shopping_list_builder")

# largest party a single list is computed for
MAX_PEOPLE = 10_000


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ----------------------------
# Request validation
# ----------------------------
def _canonical_id(raw: str) -> str:
    # ObjectId hex is case-insensitive in the store
    return raw.lower() if ObjectId.is_valid(raw) else raw


def distinct_recipe_ids(raw_ids: Any) -> List[str]:
    """Strip, drop blanks, dedupe on the canonical id keeping first-seen order."""
    if not isinstance(raw_ids, (list, tuple, set, frozenset)):
        raise ValidationError("ricette must be a list of recipe ids")
    cleaned = [_canonical_id(str(x).strip()) for x in raw_ids if x is not None]
    return list(dict.fromkeys(x for x in cleaned if x))


def coerce_people(value: Any) -> int:
    """Accept whole numbers (int, integral float, numeric string) in 1..MAX_PEOPLE."""
    if value is None or isinstance(value, bool):
        raise ValidationError("persone must be a whole number >= 1")

    if isinstance(value, str):
        s = value.strip()
        try:
            value = int(s)
        except ValueError:
            try:
                value = float(s)
            except ValueError:
                raise ValidationError(f"persone is not a number: {s!r}") from None

    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            raise ValidationError(f"persone must be a whole number, got {value}")
        value = int(value)

    if not isinstance(value, int):
        raise ValidationError("persone must be a whole number >= 1")
    if value < 1:
        raise ValidationError(f"persone must be >= 1, got {value}")
    if value > MAX_PEOPLE:
        raise ValidationError(f"persone must be <= {MAX_PEOPLE}")
    return value


# ----------------------------
# Builder
# ----------------------------
class ShoppingListBuilder:
    """Shopping list: validate -> resolve recipes (one batched lookup) -> aggregate -> shape."""

    def __init__(
        self,
        recipe_repo: RecipeReadRepo,
        list_repo: Optional[ShoppingListRepo] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.recipe_repo = recipe_repo
        self.list_repo = list_repo
        self.clock = clock

    def build(self, request: ShoppingListRequest, persist: bool = False) -> ShoppingListResult:
        recipe_ids = distinct_recipe_ids(request.recipe_ids)
        if not recipe_ids:
            raise ValidationError("ricette must contain at least one recipe id")
        people = coerce_people(request.people)

        # StoreUnavailable propagates untouched: it is transient, not a NotFound
        recipes = self.recipe_repo.find_by_ids(recipe_ids)
        if len(recipes) != len(recipe_ids):
            log.info("shopping list: resolved %d of %d recipes", len(recipes), len(recipe_ids))
            raise NotFoundError("Some recipes were not found")

        result = ShoppingListResult(
            recipe_names=[r.name for r in recipes],
            entries=aggregate(recipes, people),
            people=people,
            generated_at=self.clock(),
        )

        if persist:
            if self.list_repo is None:
                raise RuntimeError("shopping list store not configured")
            result = result.with_id(self.list_repo.insert(result))
            log.info("shopping list %s stored (%d entries)", result.id, len(result.entries))
        return result
