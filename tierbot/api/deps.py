"""
tierbot.api.deps — FastAPI dependency injection
===============================================
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import Request
from sqlalchemy import Engine

from tierbot.database.engine import create_db_engine
from tierbot.services.store import DocumentStore


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Engine for a standalone API process (``DATABASE_URL``)."""
    return create_db_engine()


def get_store(request: Request) -> DocumentStore:
    """Store over the bot's engine when embedded, else over ``DATABASE_URL``."""
    engine = getattr(request.app.state, "engine", None) or get_engine()
    return DocumentStore(engine)
