# =========================
# FILE: forked_api/forked/application/usecases.py
# =========================
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from forked.domain.errors import NotFoundError, ValidationError
from forked.domain.repositories import CommentRepo, RecipeRepo, ShoppingListRepo, UserRepo

log = logging.getLogger("app.usecases")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _require_user(user_repo: UserRepo, user_id: str):
    user = user_repo.by_id(user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def _clean_ingredients(ingredients: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for ing in ingredients or []:
        name = str(ing.get("nome") or "").strip()
        if not name:
            raise ValidationError("every ingredient needs a nome")
        out.append(
            {
                "nome": name,
                "quantita": float(ing.get("quantita") or 0),
                "unita": str(ing.get("unita") or "").strip(),
            }
        )
    return out


# ----------------------------
# Recipes
# ----------------------------
@dataclass(frozen=True)
class ListRecipes:
    recipe_repo: RecipeRepo

    def __call__(self) -> List[Dict[str, Any]]:
        return [r.to_dict() for r in self.recipe_repo.all()]


@dataclass(frozen=True)
class ListMyRecipes:
    recipe_repo: RecipeRepo

    def __call__(self, user_id: str) -> List[Dict[str, Any]]:
        return [r.to_public_dict() for r in self.recipe_repo.by_owner(user_id)]


@dataclass(frozen=True)
class GetRecipeDetail:
    """Recipe with its author joined in as `creatore: {_id, name}`."""
    recipe_repo: RecipeRepo
    user_repo: UserRepo

    def __call__(self, recipe_id: str) -> Dict[str, Any]:
        key = (recipe_id or "").strip()
        if not key:
            raise ValidationError("recipe_id is required")
        recipe = self.recipe_repo.by_id(key)
        if not recipe:
            raise NotFoundError(f"Recipe not found: {recipe_id}")

        # fall back to the name stored on the recipe when the author is gone
        author = self.user_repo.by_id(recipe.user_id) if recipe.user_id else None
        out = recipe.to_public_dict()
        out["creatore"] = {
            "_id": recipe.user_id,
            "name": author.name if author else recipe.user_name,
        }
        return out


@dataclass(frozen=True)
class CreateRecipe:
    recipe_repo: RecipeRepo
    user_repo: UserRepo

    def __call__(
        self,
        user_id: str,
        name: str,
        ingredients: List[Dict[str, Any]],
        instructions: Any,
        image_url: Optional[str] = None,
    ) -> Dict[str, Any]:
        name = (name or "").strip()
        if not name or not ingredients or not instructions:
            raise ValidationError("name, ingredients and instructions are required")

        user = _require_user(self.user_repo, user_id)
        now = _now()
        recipe = self.recipe_repo.insert(
            {
                "name": name,
                "ingredients": _clean_ingredients(ingredients),
                "instructions": instructions,
                "imageUrl": image_url or None,
                "userId": user.id,
                "userName": user.name or "Unknown user",
                "createdAt": now,
                "updatedAt": now,
            }
        )
        log.info("recipe %s created by %s", recipe.id, user.id)
        return recipe.to_dict()


@dataclass(frozen=True)
class UpdateRecipe:
    recipe_repo: RecipeRepo

    def __call__(self, user_id: str, recipe_id: str, changes: Dict[str, Any]) -> None:
        """
        Partial update by the owner. Only truthy name/ingredients/instructions are
        applied; imageUrl is applied whenever present, so it can be cleared.
        """
        recipe = self.recipe_repo.by_id(recipe_id)
        if not recipe or recipe.user_id != user_id:
            raise NotFoundError("Recipe not found or not authorized")

        updates: Dict[str, Any] = {"updatedAt": _now()}
        if changes.get("name"):
            updates["name"] = str(changes["name"]).strip()
        if changes.get("ingredients"):
            updates["ingredients"] = _clean_ingredients(changes["ingredients"])
        if changes.get("instructions"):
            updates["instructions"] = changes["instructions"]
        if "imageUrl" in changes:
            updates["imageUrl"] = changes["imageUrl"]

        if not self.recipe_repo.update(recipe_id, updates):
            raise NotFoundError("Recipe not found")


@dataclass(frozen=True)
class DeleteRecipe:
    recipe_repo: RecipeRepo
    comment_repo: CommentRepo

    def __call__(self, user_id: str, recipe_id: str) -> None:
        recipe = self.recipe_repo.by_id(recipe_id)
        if not recipe or recipe.user_id != user_id:
            raise NotFoundError("Recipe not found or not authorized")
        if not self.recipe_repo.delete(recipe_id):
            raise NotFoundError("Recipe not found")
        removed = self.comment_repo.delete_by_recipe(recipe_id)
        log.info("recipe %s deleted with %d comments", recipe_id, removed)


# ----------------------------
# Comments
# ----------------------------
@dataclass(frozen=True)
class AddComment:
    recipe_repo: RecipeRepo
    comment_repo: CommentRepo
    user_repo: UserRepo

    def __call__(self, user_id: str, recipe_id: str, text: str) -> Dict[str, Any]:
        if not (text or "").strip():
            raise ValidationError("comment text cannot be empty")
        if not (recipe_id or "").strip():
            raise ValidationError("recipeId is required")
        if not self.recipe_repo.by_id(recipe_id):
            raise NotFoundError("Recipe not found")

        user = _require_user(self.user_repo, user_id)
        comment = self.comment_repo.insert(
            {
                "recipeId": recipe_id,
                "userId": user.id,
                "userNome": user.name,
                "testo": text,
                "createdAt": _now(),
            }
        )
        return comment.to_dict()


@dataclass(frozen=True)
class ListComments:
    comment_repo: CommentRepo

    def __call__(self, recipe_id: str) -> List[Dict[str, Any]]:
        if not (recipe_id or "").strip():
            raise ValidationError("recipeId is required")
        return [c.to_dict() for c in self.comment_repo.by_recipe(recipe_id)]


@dataclass(frozen=True)
class DeleteComment:
    comment_repo: CommentRepo

    def __call__(self, user_id: str, comment_id: str, recipe_id: str) -> None:
        if not (recipe_id or "").strip():
            raise ValidationError("recipeId is required")
        if not self.comment_repo.delete(comment_id, recipe_id, user_id):
            raise NotFoundError("Comment not found or not authorized")


# ----------------------------
# Profile
# ----------------------------
@dataclass(frozen=True)
class GetProfile:
    user_repo: UserRepo

    def __call__(self, user_id: str) -> Dict[str, Any]:
        return _require_user(self.user_repo, user_id).to_dict()


@dataclass(frozen=True)
class UpdateProfile:
    user_repo: UserRepo

    def __call__(self, user_id: str, name: Optional[str] = None, email: Optional[str] = None) -> None:
        updates: Dict[str, Any] = {"updatedAt": _now()}
        if name:
            updates["name"] = name
        if email:
            updates["email"] = email
        if not self.user_repo.update(user_id, updates):
            raise NotFoundError("User not found")


# ----------------------------
# Stored shopping lists
# ----------------------------
@dataclass(frozen=True)
class GetShoppingList:
    list_repo: ShoppingListRepo

    def __call__(self, list_id: str) -> Dict[str, Any]:
        stored = self.list_repo.by_id(list_id)
        if not stored:
            raise NotFoundError("Shopping list not found")
        return stored.to_dict()


# ----------------------------
# Wiring bundle (stored on app.state.usecases)
# ----------------------------
@dataclass(frozen=True)
class AppUsecases:
    list_recipes: ListRecipes
    list_my_recipes: ListMyRecipes
    recipe_detail: GetRecipeDetail
    create_recipe: CreateRecipe
    update_recipe: UpdateRecipe
    delete_recipe: DeleteRecipe
    add_comment: AddComment
    list_comments: ListComments
    delete_comment: DeleteComment
    get_profile: GetProfile
    update_profile: UpdateProfile
    get_shopping_list: GetShoppingList

    @classmethod
    def wire(
        cls,
        recipe_repo: RecipeRepo,
        comment_repo: CommentRepo,
        user_repo: UserRepo,
        list_repo: ShoppingListRepo,
    ) -> "AppUsecases":
        return cls(
            list_recipes=ListRecipes(recipe_repo),
            list_my_recipes=ListMyRecipes(recipe_repo),
            recipe_detail=GetRecipeDetail(recipe_repo, user_repo),
            create_recipe=CreateRecipe(recipe_repo, user_repo),
            update_recipe=UpdateRecipe(recipe_repo),
            delete_recipe=DeleteRecipe(recipe_repo, comment_repo),
            add_comment=AddComment(recipe_repo, comment_repo, user_repo),
            list_comments=ListComments(comment_repo),
            delete_comment=DeleteComment(comment_repo),
            get_profile=GetProfile(user_repo),
            update_profile=UpdateProfile(user_repo),
            get_shopping_list=GetShoppingList(list_repo),
        )
