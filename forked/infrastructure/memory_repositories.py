# =========================
# FILE: forked_api/forked/infrastructure/memory_repositories.py
# In-process stores with the same contracts as the Mongo repositories.
# Used for STORE_BACKEND=memory and by the test suite.
# =========================
from __future__ import annotations

import json
import logging
import time
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId

from forked.domain.entities import Comment, Recipe, ShoppingListResult, User
from forked.domain.repositories import CommentRepo, RecipeRepo, ShoppingListRepo, UserRepo
from forked.infrastructure.mongo_repositories import parse_recipe

log = logging.getLogger("infra.memory_repo")


def _new_id() -> str:
    return str(ObjectId())


class InMemoryRecipeRepository(RecipeRepo):
    def __init__(self, recipes: Optional[Iterable[Recipe]] = None) -> None:
        self._data: Dict[str, Recipe] = {}
        for r in recipes or []:
            self._data[r.id] = r
        # counts batched lookups so callers can check for N+1 access
        self.find_calls = 0

    def find_by_ids(self, ids: Iterable[str]) -> List[Recipe]:
        self.find_calls += 1
        wanted = set(ids)
        return [r for rid, r in self._data.items() if rid in wanted]

    def by_id(self, recipe_id: str) -> Recipe | None:
        return self._data.get(recipe_id)

    def all(self) -> List[Recipe]:
        return list(self._data.values())

    def by_owner(self, user_id: str) -> List[Recipe]:
        return [r for r in self._data.values() if r.user_id == user_id]

    def insert(self, fields: Dict[str, Any]) -> Recipe:
        doc = dict(fields)
        doc["_id"] = doc.get("_id") or _new_id()
        recipe = parse_recipe(doc)
        self._data[recipe.id] = recipe
        return recipe

    def update(self, recipe_id: str, updates: Dict[str, Any]) -> bool:
        cur = self._data.get(recipe_id)
        if cur is None:
            return False
        doc = cur.to_dict()
        doc.update(updates)
        self._data[recipe_id] = parse_recipe(doc)
        return True

    def delete(self, recipe_id: str) -> bool:
        return self._data.pop(recipe_id, None) is not None


class InMemoryCommentRepository(CommentRepo):
    def __init__(self) -> None:
        self._data: Dict[str, Comment] = {}

    def insert(self, fields: Dict[str, Any]) -> Comment:
        comment = Comment(
            id=_new_id(),
            recipe_id=fields["recipeId"],
            user_id=fields["userId"],
            user_name=fields.get("userNome"),
            text=fields.get("testo") or "",
            created_at=fields.get("createdAt") or datetime.now(timezone.utc),
        )
        self._data[comment.id] = comment
        return comment

    def by_recipe(self, recipe_id: str) -> List[Comment]:
        out = [c for c in self._data.values() if c.recipe_id == recipe_id]
        out.sort(key=lambda c: c.created_at, reverse=True)
        return out

    def delete(self, comment_id: str, recipe_id: str, user_id: str) -> bool:
        c = self._data.get(comment_id)
        if c is None or c.recipe_id != recipe_id or c.user_id != user_id:
            return False
        del self._data[comment_id]
        return True

    def delete_by_recipe(self, recipe_id: str) -> int:
        doomed = [k for k, c in self._data.items() if c.recipe_id == recipe_id]
        for k in doomed:
            self._data.pop(k, None)
        return len(doomed)


class InMemoryUserRepository(UserRepo):
    def __init__(self, users: Optional[Iterable[User]] = None) -> None:
        self._data: Dict[str, User] = {u.id: u for u in users or []}

    def add(self, name: str, email: str, user_id: Optional[str] = None) -> User:
        now = datetime.now(timezone.utc)
        user = User(id=user_id or _new_id(), name=name, email=email, created_at=now, updated_at=now)
        self._data[user.id] = user
        return user

    def by_id(self, user_id: str) -> User | None:
        return self._data.get(user_id)

    def update(self, user_id: str, updates: Dict[str, Any]) -> bool:
        cur = self._data.get(user_id)
        if cur is None:
            return False
        self._data[user_id] = replace(
            cur,
            name=updates.get("name", cur.name),
            email=updates.get("email", cur.email),
            updated_at=updates.get("updatedAt", cur.updated_at),
        )
        return True


class InMemoryShoppingListRepository(ShoppingListRepo):
    def __init__(self) -> None:
        self._data: Dict[str, ShoppingListResult] = {}

    def insert(self, result: ShoppingListResult) -> str:
        list_id = _new_id()
        self._data[list_id] = result.with_id(list_id)
        return list_id

    def by_id(self, list_id: str) -> Optional[ShoppingListResult]:
        return self._data.get(list_id)

    def __len__(self) -> int:
        return len(self._data)


def load_seed(path: str, recipes: InMemoryRecipeRepository, users: InMemoryUserRepository) -> None:
    """
    Fill in-memory stores from a JSON file:
      {"users": [{"_id", "name", "email"}], "recipes": [<recipe documents>]}
    """
    t0 = time.time()
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    for u in data.get("users") or []:
        users.add(name=u.get("name", ""), email=u.get("email", ""), user_id=u.get("_id"))
    for doc in data.get("recipes") or []:
        recipes.insert(doc)
    log.info(
        "Seeded %d users, %d recipes from %s in %.3fs",
        len(data.get("users") or []), len(data.get("recipes") or []), path, time.time() - t0,
    )
