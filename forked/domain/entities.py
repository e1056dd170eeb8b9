# forked_api/forked/domain/entities.py
from __future__ import annotations
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple


@dataclass(frozen=True)
class Ingredient:
    name: str
    quantity: float  # per person
    unit: str

    def to_dict(self) -> Dict[str, Any]:
        return {"nome": self.name, "quantita": self.quantity, "unita": self.unit}


@dataclass(frozen=True)
class Recipe:
    id: str
    name: str
    ingredients: List[Ingredient]
    instructions: Any = None
    image_url: str | None = None
    user_id: str | None = None
    user_name: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "_id": self.id,
            "name": self.name,
            "ingredients": [i.to_dict() for i in self.ingredients],
            "instructions": self.instructions,
            "imageUrl": self.image_url,
            "userId": self.user_id,
            "userName": self.user_name,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    def to_public_dict(self) -> Dict[str, Any]:
        """Recipe fields without the owner columns."""
        out = self.to_dict()
        del out["userId"], out["userName"]
        return out


@dataclass(frozen=True)
class Comment:
    id: str
    recipe_id: str
    user_id: str
    user_name: str | None
    text: str
    created_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "_id": self.id,
            "testo": self.text,
            "createdAt": self.created_at,
            "user": {"_id": self.user_id, "name": self.user_name},
        }


@dataclass(frozen=True)
class User:
    id: str
    name: str
    email: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> Dict[str, Any]:
        # password hash never leaves the store
        return {
            "_id": self.id,
            "name": self.name,
            "email": self.email,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


# ----------------------------
# Shopping list
# ----------------------------
@dataclass(frozen=True)
class ShoppingListEntry:
    name: str
    quantity: float
    unit: str

    def to_dict(self) -> Dict[str, Any]:
        return {"nome": self.name, "quantita": self.quantity, "unita": self.unit}


@dataclass(frozen=True)
class ShoppingListRequest:
    recipe_ids: Sequence[str]
    people: Any  # validated and coerced to int by the builder


@dataclass(frozen=True)
class ShoppingListResult:
    recipe_names: List[str]
    entries: List[ShoppingListEntry]
    people: int
    generated_at: datetime
    id: Optional[str] = None

    def to_document(self) -> Dict[str, Any]:
        """Persisted/wire shape: {ricette, listaSpesa, persone, createdAt}."""
        return {
            "ricette": list(self.recipe_names),
            "listaSpesa": [e.to_dict() for e in self.entries],
            "persone": self.people,
            "createdAt": self.generated_at,
        }

    def to_dict(self) -> Dict[str, Any]:
        out = self.to_document()
        if self.id is not None:
            out["_id"] = self.id
        return out

    def with_id(self, list_id: str) -> "ShoppingListResult":
        return replace(self, id=list_id)

    def totals(self) -> Dict[Tuple[str, str], float]:
        return {(e.name, e.unit): e.quantity for e in self.entries}
