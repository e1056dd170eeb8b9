# forked_api/forked/api/routes.py
from __future__ import annotations

import logging
from contextlib import contextmanager
from functools import partial
from typing import Any, Iterator, List, Optional

import anyio
from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from forked.api.schemas import (
    CommentCreateRequest,
    MessageResponse,
    ProfileUpdateRequest,
    RecipeCreateRequest,
    RecipeUpdateRequest,
    RootResponse,
    ShoppingListCreateRequest,
    ShoppingListResponse,
)
from forked.core.config import API_PREFIX, USER_ID_HEADER
from forked.domain.entities import ShoppingListRequest
from forked.domain.errors import StoreDataError, StoreUnavailable

log = logging.getLogger("api.routes")
router = APIRouter()


# -------------------------
# Dependencies via app.state (wired once in main.py, no global store handle)
# -------------------------
def get_shopping_list_builder(request: Request):
    builder = getattr(request.app.state, "shopping_list_builder", None)
    if builder is None:
        raise RuntimeError("shopping_list_builder not initialized. Check app startup wiring.")
    return builder


def get_usecases(request: Request):
    uc = getattr(request.app.state, "usecases", None)
    if uc is None:
        raise RuntimeError("usecases not initialized. Check app startup wiring.")
    return uc


def get_current_user_id(x_user_id: Optional[str] = Header(default=None, alias=USER_ID_HEADER)) -> str:
    # authenticated upstream; the gateway forwards the caller id
    uid = (x_user_id or "").strip()
    if not uid:
        raise HTTPException(status_code=401, detail="Missing user identity")
    return uid


@contextmanager
def _http_errors(what: str) -> Iterator[None]:
    """ValidationError -> 400, NotFoundError -> 404, StoreUnavailable -> 503, StoreDataError and rest -> 500."""
    try:
        yield
    except HTTPException:
        raise
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StoreUnavailable as e:
        log.warning("%s: store unavailable: %s", what, e)
        raise HTTPException(status_code=503, detail="Store unavailable, retry later")
    except StoreDataError:
        log.exception("%s: unreadable stored document", what)
        raise HTTPException(status_code=500, detail="Stored data is invalid")
    except Exception as e:
        log.exception("Processing %s error", what)
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/", response_model=RootResponse)
def root() -> Any:
    return {"message": "Forked API is running", "docs": f"Use {API_PREFIX}/... for the API"}


# -------------------------
# Recipes
# -------------------------
@router.get(f"{API_PREFIX}/recipes")
def list_recipes(uc=Depends(get_usecases)) -> List[dict]:
    with _http_errors("GET /recipes"):
        return uc.list_recipes()


@router.post(f"{API_PREFIX}/recipes", status_code=status.HTTP_201_CREATED)
def create_recipe(
    req: RecipeCreateRequest,
    user_id: str = Depends(get_current_user_id),
    uc=Depends(get_usecases),
) -> dict:
    with _http_errors("POST /recipes"):
        return uc.create_recipe(
            user_id=user_id,
            name=req.name,
            ingredients=[i.model_dump() for i in req.ingredients],
            instructions=req.instructions,
            image_url=req.imageUrl,
        )


@router.get(f"{API_PREFIX}/myrecipes")
def my_recipes(user_id: str = Depends(get_current_user_id), uc=Depends(get_usecases)) -> List[dict]:
    with _http_errors("GET /myrecipes"):
        return uc.list_my_recipes(user_id)


@router.get(f"{API_PREFIX}/recipes/by-id/{{recipe_id}}")
def recipe_detail(recipe_id: str, uc=Depends(get_usecases)) -> dict:
    with _http_errors("GET /recipes/by-id"):
        return uc.recipe_detail(recipe_id)


@router.put(f"{API_PREFIX}/recipes/by-id/{{recipe_id}}", response_model=MessageResponse)
def update_recipe(
    recipe_id: str,
    req: RecipeUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    uc=Depends(get_usecases),
) -> Any:
    changes = req.model_dump(exclude_unset=True)
    with _http_errors("PUT /recipes/by-id"):
        uc.update_recipe(user_id, recipe_id, changes)
    return {"message": "Recipe updated"}


@router.delete(f"{API_PREFIX}/recipes/by-id/{{recipe_id}}", response_model=MessageResponse)
def delete_recipe(
    recipe_id: str,
    user_id: str = Depends(get_current_user_id),
    uc=Depends(get_usecases),
) -> Any:
    with _http_errors("DELETE /recipes/by-id"):
        uc.delete_recipe(user_id, recipe_id)
    return {"message": "Recipe deleted"}


# -------------------------
# Comments
# -------------------------
@router.post(f"{API_PREFIX}/comments", status_code=status.HTTP_201_CREATED)
def add_comment(
    req: CommentCreateRequest,
    user_id: str = Depends(get_current_user_id),
    uc=Depends(get_usecases),
) -> dict:
    with _http_errors("POST /comments"):
        return uc.add_comment(user_id, req.recipeId, req.testo)


@router.get(f"{API_PREFIX}/comments")
def list_comments(recipeId: str = "", uc=Depends(get_usecases)) -> List[dict]:
    with _http_errors("GET /comments"):
        return uc.list_comments(recipeId)


@router.delete(f"{API_PREFIX}/comments/{{comment_id}}", response_model=MessageResponse)
def delete_comment(
    comment_id: str,
    recipeId: str = "",
    user_id: str = Depends(get_current_user_id),
    uc=Depends(get_usecases),
) -> Any:
    with _http_errors("DELETE /comments"):
        uc.delete_comment(user_id, comment_id, recipeId)
    return {"message": "Comment deleted"}


# -------------------------
# Profile
# -------------------------
@router.get(f"{API_PREFIX}/users/profile")
def get_profile(user_id: str = Depends(get_current_user_id), uc=Depends(get_usecases)) -> dict:
    with _http_errors("GET /users/profile"):
        return uc.get_profile(user_id)


@router.put(f"{API_PREFIX}/users/profile", response_model=MessageResponse)
def update_profile(
    req: ProfileUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    uc=Depends(get_usecases),
) -> Any:
    with _http_errors("PUT /users/profile"):
        uc.update_profile(user_id, name=req.name, email=req.email)
    return {"message": "Profile updated"}


# -------------------------
# Shopping list (async; builder runs in a worker thread so a blocking
# store lookup never stalls the event loop)
# -------------------------
@router.get(
    f"{API_PREFIX}/lista-spesa",
    response_model=ShoppingListResponse,
    response_model_exclude_none=True,
)
async def preview_shopping_list(
    ricette: str = "",
    persone: Optional[str] = None,
    builder=Depends(get_shopping_list_builder),
) -> Any:
    req = ShoppingListRequest(recipe_ids=ricette.split(","), people=persone)
    with _http_errors("GET /lista-spesa"):
        result = await anyio.to_thread.run_sync(builder.build, req)
    return result.to_dict()


@router.post(
    f"{API_PREFIX}/lista-spesa",
    response_model=ShoppingListResponse,
    response_model_exclude_none=True,
)
async def create_shopping_list(
    body: ShoppingListCreateRequest,
    builder=Depends(get_shopping_list_builder),
) -> Any:
    req = ShoppingListRequest(recipe_ids=body.ricette, people=body.persone)
    with _http_errors("POST /lista-spesa"):
        result = await anyio.to_thread.run_sync(partial(builder.build, req, persist=True))
    return result.to_dict()


@router.get(
    f"{API_PREFIX}/lista-spesa/{{list_id}}",
    response_model=ShoppingListResponse,
    response_model_exclude_none=True,
)
def get_shopping_list(list_id: str, uc=Depends(get_usecases)) -> Any:
    with _http_errors("GET /lista-spesa/{id}"):
        return uc.get_shopping_list(list_id)
