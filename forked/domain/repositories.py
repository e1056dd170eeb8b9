# forked_api/forked/domain/repositories.py
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from forked.domain.entities import Comment, Recipe, ShoppingListResult, User


class RecipeReadRepo(ABC):
    @abstractmethod
    def find_by_ids(self, ids: Iterable[str]) -> List[Recipe]:
        """
        Batched lookup. Returns exactly the subset of ids that exist, without
        duplicates and in no particular order. Missing ids are not an error.
        """

    @abstractmethod
    def by_id(self, recipe_id: str) -> Recipe | None: ...

    @abstractmethod
    def all(self) -> List[Recipe]: ...

    @abstractmethod
    def by_owner(self, user_id: str) -> List[Recipe]: ...


class RecipeRepo(RecipeReadRepo):
    @abstractmethod
    def insert(self, fields: Dict[str, Any]) -> Recipe: ...

    @abstractmethod
    def update(self, recipe_id: str, updates: Dict[str, Any]) -> bool: ...

    @abstractmethod
    def delete(self, recipe_id: str) -> bool: ...


class CommentRepo(ABC):
    @abstractmethod
    def insert(self, fields: Dict[str, Any]) -> Comment: ...

    @abstractmethod
    def by_recipe(self, recipe_id: str) -> List[Comment]:
        """Newest first."""

    @abstractmethod
    def delete(self, comment_id: str, recipe_id: str, user_id: str) -> bool: ...

    @abstractmethod
    def delete_by_recipe(self, recipe_id: str) -> int: ...


class UserRepo(ABC):
    @abstractmethod
    def by_id(self, user_id: str) -> User | None: ...

    @abstractmethod
    def update(self, user_id: str, updates: Dict[str, Any]) -> bool: ...


class ShoppingListRepo(ABC):
    """Append-only: stored lists are never mutated."""

    @abstractmethod
    def insert(self, result: ShoppingListResult) -> str: ...

    @abstractmethod
    def by_id(self, list_id: str) -> Optional[ShoppingListResult]: ...
