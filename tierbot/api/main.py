"""
tierbot.api.main — Read-only status API
=======================================

Small FastAPI app over the document store.  The bot embeds it as its
keep-alive HTTP listener (``status_port`` in config.yaml); it can also
run on its own::

    uvicorn tierbot.api.main:app --port 8080

Reads go straight to the database, so a standalone process always sees
what the bot last persisted.
"""

from __future__ import annotations

import logging

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Query
from sqlalchemy import Engine

from tierbot.api.deps import get_store
from tierbot.constants import POINTS_DOC, TIERS_DOC
from tierbot.services.store import DocumentStore, decode_int_map, decode_tiers

load_dotenv()

logger = logging.getLogger(__name__)


def create_app(engine: Engine | None = None) -> FastAPI:
    """Build the app.  Pass *engine* when embedding in the bot process."""
    app = FastAPI(title="Tierbot Status API", version="1.0.0")
    app.state.engine = engine

    @app.get("/api/health")
    def health():
        return {"status": "ok"}

    @app.get("/api/tiers")
    def list_tiers(store: DocumentStore = Depends(get_store)):
        rules = sorted(decode_tiers(store.load(TIERS_DOC)), key=lambda r: r.required_points)
        return [
            {
                "old_role_id": str(r.old_role_id),
                "new_role_id": str(r.new_role_id),
                "required_points": r.required_points,
            }
            for r in rules
        ]

    @app.get("/api/leaderboard")
    def leaderboard(
        limit: int = Query(10, ge=1, le=100),
        store: DocumentStore = Depends(get_store),
    ):
        points = decode_int_map(store.load(POINTS_DOC))
        top = sorted(points.items(), key=lambda kv: kv[1], reverse=True)[:limit]
        return [
            {"rank": i, "user_id": str(user_id), "points": balance}
            for i, (user_id, balance) in enumerate(top, 1)
        ]

    @app.get("/api/points/{user_id}")
    def user_points(user_id: int, store: DocumentStore = Depends(get_store)):
        points = decode_int_map(store.load(POINTS_DOC))
        return {"user_id": str(user_id), "points": points.get(user_id, 0)}

    return app


app = create_app()
