from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import ServerSelectionTimeoutError

from forked.application.shopping_list_builder import ShoppingListBuilder
from forked.domain.entities import ShoppingListEntry, ShoppingListRequest, ShoppingListResult
from forked.domain.errors import StoreDataError, StoreUnavailable
from forked.infrastructure.mongo_repositories import (
    MongoCommentRepository,
    MongoRecipeRepository,
    MongoShoppingListRepository,
    MongoUserRepository,
    parse_recipe,
)

NOW = datetime(2024, 5, 1, tzinfo=timezone.utc)


def _recipe_doc(oid: ObjectId, name: str, ingredients):
    return {
        "_id": oid,
        "name": name,
        "ingredients": ingredients,
        "instructions": "Bake.",
        "imageUrl": None,
        "userId": ObjectId(),
        "userName": "Alice",
        "createdAt": NOW,
        "updatedAt": NOW,
    }


class TestParseRecipe:
    def test_italian_keys(self):
        oid = ObjectId()
        r = parse_recipe(_recipe_doc(oid, "Pane", [{"nome": "farina", "quantita": 500, "unita": "g"}]))
        assert r.id == str(oid)
        assert r.ingredients[0].name == "farina"
        assert r.ingredients[0].quantity == 500.0
        assert r.ingredients[0].unit == "g"

    def test_english_keys_and_missing_values(self):
        r = parse_recipe(_recipe_doc(ObjectId(), "Bread", [{"name": "yeast"}, {"name": "water", "quantity": 0.3, "unit": "l"}]))
        assert [(i.name, i.quantity, i.unit) for i in r.ingredients] == [("yeast", 0.0, ""), ("water", 0.3, "l")]

    def test_invalid_quantity(self):
        with pytest.raises(StoreDataError):
            parse_recipe(_recipe_doc(ObjectId(), "Bad", [{"nome": "x", "quantita": "lots", "unita": "g"}]))


class TestMongoRecipeRepository:
    def test_find_by_ids_single_in_query(self):
        a, b = ObjectId(), ObjectId()
        col = MagicMock()
        col.find.return_value = [_recipe_doc(a, "A", []), _recipe_doc(b, "B", [])]
        repo = MongoRecipeRepository(col)

        out = repo.find_by_ids([str(a), str(b), str(a)])

        col.find.assert_called_once_with({"_id": {"$in": [a, b]}})
        assert {r.name for r in out} == {"A", "B"}

    def test_invalid_ids_are_treated_as_missing(self):
        a = ObjectId()
        col = MagicMock()
        col.find.return_value = [_recipe_doc(a, "A", [])]
        repo = MongoRecipeRepository(col)

        out = repo.find_by_ids([str(a), "not-an-object-id"])

        col.find.assert_called_once_with({"_id": {"$in": [a]}})
        assert len(out) == 1

    def test_builder_counts_mixed_case_ids_once(self):
        a = ObjectId()
        col = MagicMock()
        col.find.return_value = [_recipe_doc(a, "A", [{"nome": "farina", "quantita": 100, "unita": "g"}])]
        builder = ShoppingListBuilder(recipe_repo=MongoRecipeRepository(col))

        result = builder.build(ShoppingListRequest(recipe_ids=[str(a), str(a).upper()], people=2))

        col.find.assert_called_once_with({"_id": {"$in": [a]}})
        assert result.totals() == {("farina", "g"): 200}

    def test_only_invalid_ids_skip_the_query(self):
        col = MagicMock()
        assert MongoRecipeRepository(col).find_by_ids(["nope", ""]) == []
        col.find.assert_not_called()

    def test_store_error_becomes_store_unavailable(self):
        col = MagicMock()
        col.find.side_effect = ServerSelectionTimeoutError("no servers")
        with pytest.raises(StoreUnavailable):
            MongoRecipeRepository(col).find_by_ids([str(ObjectId())])

    def test_by_id_missing(self):
        col = MagicMock()
        col.find_one.return_value = None
        repo = MongoRecipeRepository(col)
        assert repo.by_id(str(ObjectId())) is None
        assert repo.by_id("garbage") is None

    def test_insert_sets_id_and_owner_oid(self):
        new_id, owner = ObjectId(), ObjectId()
        col = MagicMock()
        col.insert_one.return_value.inserted_id = new_id
        repo = MongoRecipeRepository(col)

        r = repo.insert({"name": "Soup", "ingredients": [], "userId": str(owner)})

        stored = col.insert_one.call_args.args[0]
        assert stored["userId"] == owner
        assert r.id == str(new_id)
        assert r.user_id == str(owner)

    def test_update_and_delete_report_match(self):
        col = MagicMock()
        col.update_one.return_value.matched_count = 0
        col.delete_one.return_value.deleted_count = 1
        repo = MongoRecipeRepository(col)
        oid = str(ObjectId())
        assert repo.update(oid, {"name": "x"}) is False
        assert repo.delete(oid) is True


class TestOtherRepositories:
    def test_comments_sorted_newest_first(self):
        col = MagicMock()
        col.find.return_value.sort.return_value = []
        MongoCommentRepository(col).by_recipe("r1")
        col.find.assert_called_once_with({"recipeId": "r1"})
        col.find.return_value.sort.assert_called_once_with("createdAt", -1)

    def test_comment_delete_scoped_to_author(self):
        cid, uid = ObjectId(), ObjectId()
        col = MagicMock()
        col.delete_one.return_value.deleted_count = 1
        assert MongoCommentRepository(col).delete(str(cid), "r1", str(uid)) is True
        col.delete_one.assert_called_once_with({"_id": cid, "recipeId": "r1", "userId": uid})

    def test_user_projection_hides_password(self):
        uid = ObjectId()
        col = MagicMock()
        col.find_one.return_value = {"_id": uid, "name": "Alice", "email": "a@example.com"}
        user = MongoUserRepository(col).by_id(str(uid))
        col.find_one.assert_called_once_with({"_id": uid}, {"password": 0})
        assert user.to_dict()["name"] == "Alice"
        assert "password" not in user.to_dict()

    def test_shopping_list_insert_document(self):
        new_id = ObjectId()
        col = MagicMock()
        col.insert_one.return_value.inserted_id = new_id
        result = ShoppingListResult(
            recipe_names=["A"],
            entries=[ShoppingListEntry("flour", 400.0, "g")],
            people=2,
            generated_at=NOW,
        )

        assert MongoShoppingListRepository(col).insert(result) == str(new_id)
        col.insert_one.assert_called_once_with(
            {
                "ricette": ["A"],
                "listaSpesa": [{"nome": "flour", "quantita": 400.0, "unita": "g"}],
                "persone": 2,
                "createdAt": NOW,
            }
        )
