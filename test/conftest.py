"""
Pytest fixtures for the Forked API tests.

- in-memory repositories seeded with a few recipes and users
- a ShoppingListBuilder with a fixed clock
- a TestClient over a FastAPI app wired the same way main.py does it
"""
from __future__ import annotations

import os
from datetime import datetime, timezone

import pytest

os.environ.setdefault("STORE_BACKEND", "memory")

from fastapi import FastAPI
from fastapi.testclient import TestClient

from forked.api.routes import router
from forked.application.shopping_list_builder import ShoppingListBuilder
from forked.application.usecases import AppUsecases
from forked.domain.entities import Ingredient, Recipe
from forked.infrastructure.memory_repositories import (
    InMemoryCommentRepository,
    InMemoryRecipeRepository,
    InMemoryShoppingListRepository,
    InMemoryUserRepository,
)

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

ALICE_ID = "64b000000000000000000001"
BOB_ID = "64b000000000000000000002"


def make_recipe(recipe_id: str, name: str, *lines, user_id: str = ALICE_ID) -> Recipe:
    return Recipe(
        id=recipe_id,
        name=name,
        ingredients=[Ingredient(name=n, quantity=q, unit=u) for (n, q, u) in lines],
        instructions="Mix and cook.",
        user_id=user_id,
        user_name="Alice",
    )


@pytest.fixture
def pancakes() -> Recipe:
    return make_recipe("r-pancakes", "Pancakes", ("flour", 200, "g"))


@pytest.fixture
def cookies() -> Recipe:
    return make_recipe("r-cookies", "Cookies", ("flour", 100, "g"), ("sugar", 50, "g"))


@pytest.fixture
def water() -> Recipe:
    return make_recipe("r-water", "Glass of water")


@pytest.fixture
def recipe_repo(pancakes, cookies, water) -> InMemoryRecipeRepository:
    return InMemoryRecipeRepository([pancakes, cookies, water])


@pytest.fixture
def user_repo() -> InMemoryUserRepository:
    users = InMemoryUserRepository()
    users.add("Alice", "alice@example.com", user_id=ALICE_ID)
    users.add("Bob", "bob@example.com", user_id=BOB_ID)
    return users


@pytest.fixture
def comment_repo() -> InMemoryCommentRepository:
    return InMemoryCommentRepository()


@pytest.fixture
def list_repo() -> InMemoryShoppingListRepository:
    return InMemoryShoppingListRepository()


@pytest.fixture
def builder(recipe_repo, list_repo) -> ShoppingListBuilder:
    return ShoppingListBuilder(recipe_repo=recipe_repo, list_repo=list_repo, clock=lambda: FIXED_NOW)


@pytest.fixture
def app(recipe_repo, comment_repo, user_repo, list_repo, builder) -> FastAPI:
    test_app = FastAPI()
    test_app.include_router(router)
    test_app.state.shopping_list_builder = builder
    test_app.state.usecases = AppUsecases.wire(
        recipe_repo=recipe_repo,
        comment_repo=comment_repo,
        user_repo=user_repo,
        list_repo=list_repo,
    )
    return test_app


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def alice() -> dict:
    return {"X-User-Id": ALICE_ID}


@pytest.fixture
def bob() -> dict:
    return {"X-User-Id": BOB_ID}
