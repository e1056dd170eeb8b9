# =========================
# FILE: forked_api/forked/api/schemas.py
# Wire names follow the app's existing JSON (Italian keys for ingredients,
# comments and shopping lists).
# =========================
from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class IngredientIn(BaseModel):
    nome: str
    quantita: float = Field(default=0, ge=0, description="Quantity for one person")
    unita: str = ""


class RecipeCreateRequest(BaseModel):
    name: str = ""
    ingredients: List[IngredientIn] = Field(default_factory=list)
    instructions: Union[str, List[str], None] = None
    imageUrl: Optional[str] = None


class RecipeUpdateRequest(BaseModel):
    name: Optional[str] = None
    ingredients: Optional[List[IngredientIn]] = None
    instructions: Union[str, List[str], None] = None
    imageUrl: Optional[str] = None


class CommentCreateRequest(BaseModel):
    testo: str = ""
    recipeId: str = ""


class ProfileUpdateRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None


class MessageResponse(BaseModel):
    message: str


class ShoppingListCreateRequest(BaseModel):
    ricette: Any = Field(default=None, description="List of recipe ids")
    # raw value; whole-number check happens in the builder
    persone: Any = Field(default=None, examples=[4])


class ShoppingListItem(BaseModel):
    nome: str
    quantita: float
    unita: str


class ShoppingListResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(default=None, alias="_id")
    ricette: List[str]
    listaSpesa: List[ShoppingListItem]
    persone: int
    createdAt: datetime


class RootResponse(BaseModel):
    message: str
    docs: str
