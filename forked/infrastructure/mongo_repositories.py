# forked_api/forked/infrastructure/mongo_repositories.py
from __future__ import annotations
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Optional
import logging
from pymongo.collection import Collection
from pymongo.errors import PyMongoError
from bson import ObjectId
from forked.domain.entities import Comment, Ingredient, Recipe, ShoppingListEntry, ShoppingListResult, User
from forked.domain.errors import StoreDataError, StoreUnavailable
from forked.domain.repositories import CommentRepo, RecipeRepo, ShoppingListRepo, UserRepo

log = logging.getLogger("infra.mongo_repo")


def _as_str_id(v: Any) -> str:
    if isinstance(v, ObjectId):
        return str(v)
    return str(v)


def _oid(v: Any) -> Optional[ObjectId]:
    """ObjectId for a valid id string, None otherwise (such ids cannot exist)."""
    if isinstance(v, ObjectId):
        return v
    s = str(v or "").strip()
    return ObjectId(s) if ObjectId.is_valid(s) else None


@contextmanager
def _store_call(what: str) -> Iterator[None]:
    try:
        yield
    except PyMongoError as e:
        log.exception("Mongo %s failed", what)
        raise StoreUnavailable(f"{what} failed: {e}") from e


def parse_ingredient(i: Dict[str, Any]) -> Ingredient:
    # stored with the app's Italian keys; English keys accepted too
    name = i.get("nome", i.get("name"))
    qty = i.get("quantita", i.get("quantity"))
    unit = i.get("unita", i.get("unit"))
    return Ingredient(
        name=str(name or ""),
        quantity=float(qty or 0),
        unit=str(unit or ""),
    )


def parse_recipe(doc: Dict[str, Any]) -> Recipe:
    try:
        return Recipe(
            id=_as_str_id(doc.get("_id") or doc.get("id")),
            name=(doc.get("name") or "").strip(),
            ingredients=[parse_ingredient(i) for i in (doc.get("ingredients") or [])],
            instructions=doc.get("instructions"),
            image_url=doc.get("imageUrl"),
            user_id=_as_str_id(doc["userId"]) if doc.get("userId") is not None else None,
            user_name=doc.get("userName"),
            created_at=doc.get("createdAt"),
            updated_at=doc.get("updatedAt"),
        )
    except (TypeError, ValueError, AttributeError) as e:
        log.exception("Invalid recipe document: %s", doc.get("_id"))
        raise StoreDataError(f"Invalid recipe document: {e}") from e


def _parse_comment(doc: Dict[str, Any]) -> Comment:
    return Comment(
        id=_as_str_id(doc.get("_id")),
        recipe_id=_as_str_id(doc.get("recipeId")),
        user_id=_as_str_id(doc.get("userId")),
        user_name=doc.get("userNome"),
        text=doc.get("testo") or "",
        created_at=doc.get("createdAt"),
    )


def _parse_user(doc: Dict[str, Any]) -> User:
    return User(
        id=_as_str_id(doc.get("_id")),
        name=doc.get("name") or doc.get("username") or "",
        email=doc.get("email") or "",
        created_at=doc.get("createdAt"),
        updated_at=doc.get("updatedAt"),
    )


def _parse_shopping_list(doc: Dict[str, Any]) -> ShoppingListResult:
    return ShoppingListResult(
        recipe_names=list(doc.get("ricette") or []),
        entries=[
            ShoppingListEntry(name=e.get("nome", ""), quantity=float(e.get("quantita") or 0), unit=e.get("unita", ""))
            for e in (doc.get("listaSpesa") or [])
        ],
        people=int(doc.get("persone") or 0),
        generated_at=doc.get("createdAt"),
        id=_as_str_id(doc.get("_id")),
    )


class MongoRecipeRepository(RecipeRepo):
    """Recipe documents in the `ricette` collection, queried live (no startup cache)."""

    def __init__(self, col: Collection) -> None:
        self._col = col

    def find_by_ids(self, ids: Iterable[str]) -> List[Recipe]:
        oids = list(dict.fromkeys(o for o in (_oid(i) for i in ids) if o is not None))
        if not oids:
            return []
        with _store_call("recipes.find_by_ids"):
            docs = list(self._col.find({"_id": {"$in": oids}}))
        return [parse_recipe(d) for d in docs]

    def by_id(self, recipe_id: str) -> Recipe | None:
        oid = _oid(recipe_id)
        if oid is None:
            return None
        with _store_call("recipes.by_id"):
            doc = self._col.find_one({"_id": oid})
        return parse_recipe(doc) if doc else None

    def all(self) -> List[Recipe]:
        with _store_call("recipes.all"):
            docs = list(self._col.find({}))
        return [parse_recipe(d) for d in docs]

    def by_owner(self, user_id: str) -> List[Recipe]:
        oid = _oid(user_id)
        owner: Any = oid if oid is not None else user_id
        with _store_call("recipes.by_owner"):
            docs = list(self._col.find({"userId": owner}))
        return [parse_recipe(d) for d in docs]

    def insert(self, fields: Dict[str, Any]) -> Recipe:
        doc = dict(fields)
        uid = _oid(doc.get("userId"))
        if uid is not None:
            doc["userId"] = uid
        with _store_call("recipes.insert"):
            res = self._col.insert_one(doc)
        doc["_id"] = res.inserted_id
        return parse_recipe(doc)

    def update(self, recipe_id: str, updates: Dict[str, Any]) -> bool:
        oid = _oid(recipe_id)
        if oid is None:
            return False
        with _store_call("recipes.update"):
            res = self._col.update_one({"_id": oid}, {"$set": updates})
        return res.matched_count > 0

    def delete(self, recipe_id: str) -> bool:
        oid = _oid(recipe_id)
        if oid is None:
            return False
        with _store_call("recipes.delete"):
            res = self._col.delete_one({"_id": oid})
        return res.deleted_count > 0


class MongoCommentRepository(CommentRepo):

    def __init__(self, col: Collection) -> None:
        self._col = col

    def insert(self, fields: Dict[str, Any]) -> Comment:
        doc = dict(fields)
        uid = _oid(doc.get("userId"))
        if uid is not None:
            doc["userId"] = uid
        with _store_call("comments.insert"):
            res = self._col.insert_one(doc)
        doc["_id"] = res.inserted_id
        return _parse_comment(doc)

    def by_recipe(self, recipe_id: str) -> List[Comment]:
        with _store_call("comments.by_recipe"):
            docs = list(self._col.find({"recipeId": recipe_id}).sort("createdAt", -1))
        return [_parse_comment(d) for d in docs]

    def delete(self, comment_id: str, recipe_id: str, user_id: str) -> bool:
        oid = _oid(comment_id)
        if oid is None:
            return False
        uid = _oid(user_id)
        with _store_call("comments.delete"):
            res = self._col.delete_one(
                {"_id": oid, "recipeId": recipe_id, "userId": uid if uid is not None else user_id}
            )
        return res.deleted_count > 0

    def delete_by_recipe(self, recipe_id: str) -> int:
        with _store_call("comments.delete_by_recipe"):
            res = self._col.delete_many({"recipeId": recipe_id})
        return res.deleted_count


class MongoUserRepository(UserRepo):
    """Reads/updates profiles only. Registration and credentials live elsewhere."""

    def __init__(self, col: Collection) -> None:
        self._col = col

    def by_id(self, user_id: str) -> User | None:
        oid = _oid(user_id)
        if oid is None:
            return None
        with _store_call("users.by_id"):
            doc = self._col.find_one({"_id": oid}, {"password": 0})
        return _parse_user(doc) if doc else None

    def update(self, user_id: str, updates: Dict[str, Any]) -> bool:
        oid = _oid(user_id)
        if oid is None:
            return False
        with _store_call("users.update"):
            res = self._col.update_one({"_id": oid}, {"$set": updates})
        return res.matched_count > 0


class MongoShoppingListRepository(ShoppingListRepo):
    """Append-only store for generated lists (`liste-spesa`)."""

    def __init__(self, col: Collection) -> None:
        self._col = col

    def insert(self, result: ShoppingListResult) -> str:
        doc = result.to_document()
        with _store_call("shopping_lists.insert"):
            res = self._col.insert_one(doc)
        return _as_str_id(res.inserted_id)

    def by_id(self, list_id: str) -> Optional[ShoppingListResult]:
        oid = _oid(list_id)
        if oid is None:
            return None
        with _store_call("shopping_lists.by_id"):
            doc = self._col.find_one({"_id": oid})
        return _parse_shopping_list(doc) if doc else None
