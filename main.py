from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
import uvicorn
from fastapi import FastAPI
from pymongo import MongoClient
from dotenv import load_dotenv
load_dotenv()
from forked.api.routes import router
from forked.core.config import (
    HOST, PORT, STORE_BACKEND, MONGO_URI, MONGO_DB, MONGO_TIMEOUT_MS,
    MONGO_RECIPES_COL, MONGO_COMMENTS_COL, MONGO_USERS_COL, MONGO_LISTS_COL,
)

from forked.application.shopping_list_builder import ShoppingListBuilder
from forked.application.usecases import AppUsecases
from forked.infrastructure.mongo_repositories import (
    MongoRecipeRepository, MongoCommentRepository, MongoUserRepository, MongoShoppingListRepository,
)
from forked.infrastructure.memory_repositories import (
    InMemoryRecipeRepository, InMemoryCommentRepository, InMemoryUserRepository,
    InMemoryShoppingListRepository, load_seed,
)

log = logging.getLogger("app")

_mongo_client: MongoClient | None = None


def on_startup(app: FastAPI) -> None:
    global _mongo_client

    if STORE_BACKEND == "memory":
        recipe_repo = InMemoryRecipeRepository()
        comment_repo = InMemoryCommentRepository()
        user_repo = InMemoryUserRepository()
        list_repo = InMemoryShoppingListRepository()
        seed = os.getenv("MEMORY_SEED_PATH")
        if seed:
            load_seed(seed, recipe_repo, user_repo)
        log.warning("Using in-memory store: data is lost on restart")
    else:
        _mongo_client = MongoClient(MONGO_URI, serverSelectionTimeoutMS=MONGO_TIMEOUT_MS, tz_aware=True)
        db = _mongo_client[MONGO_DB]
        recipe_repo = MongoRecipeRepository(db[MONGO_RECIPES_COL])
        comment_repo = MongoCommentRepository(db[MONGO_COMMENTS_COL])
        user_repo = MongoUserRepository(db[MONGO_USERS_COL])
        list_repo = MongoShoppingListRepository(db[MONGO_LISTS_COL])

    # DI for routes.py
    app.state.shopping_list_builder = ShoppingListBuilder(recipe_repo=recipe_repo, list_repo=list_repo)
    app.state.usecases = AppUsecases.wire(
        recipe_repo=recipe_repo,
        comment_repo=comment_repo,
        user_repo=user_repo,
        list_repo=list_repo,
    )
    log.info("Startup complete (store=%s)", STORE_BACKEND)


def on_shutdown() -> None:
    global _mongo_client
    if _mongo_client:
        _mongo_client.close()
        _mongo_client = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    on_startup(app)
    try:
        yield
    finally:
        on_shutdown()


app = FastAPI(title="Forked API", lifespan=lifespan)
app.include_router(router)


if __name__ == "__main__":
    uvicorn.run("main:app", host=HOST, port=PORT, reload=False)
