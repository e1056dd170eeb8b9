# forked_api/forked/core/config.py
from __future__ import annotations
import os
import logging

# Mongo settings
MONGO_URI: str = os.getenv("MONGO_URI", "mongodb://localhost:27017")
MONGO_DB: str = os.getenv("MONGO_DB", "Forked")
MONGO_RECIPES_COL: str = os.getenv("MONGO_RECIPES_COL", "ricette")
MONGO_COMMENTS_COL: str = os.getenv("MONGO_COMMENTS_COL", "commenti")
MONGO_USERS_COL: str = os.getenv("MONGO_USERS_COL", "users")
MONGO_LISTS_COL: str = os.getenv("MONGO_LISTS_COL", "liste-spesa")
MONGO_TIMEOUT_MS: int = int(os.getenv("MONGO_TIMEOUT_MS", "3000"))

# "mongo" for a real deployment, "memory" for local runs without a database
STORE_BACKEND: str = os.getenv("STORE_BACKEND", "mongo").strip().lower()

HOST: str = os.getenv("HOST", "0.0.0.0")
PORT: int = int(os.getenv("PORT", "6000"))

API_PREFIX: str = "/forked"
USER_ID_HEADER: str = "X-User-Id"

# Global logging (module-level loggers inherit this)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
