"""
tierbot.services.store — Durable JSON Document Store
=====================================================

Load/save whole JSON documents from the ``documents`` table, plus the
codecs that turn each collection into JSON and back.  JSON object keys
are always strings, so integer-keyed maps are stringified on the way out
and parsed on the way in.

No business logic lives here.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy.orm import Session

from tierbot.database.engine import get_session
from tierbot.database.models import Document
from tierbot.engine.tiers import TierRule

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


class DocumentStore:
    """Whole-document reads and overwrites, one row per collection name."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def load(self, name: str) -> Any | None:
        """Return the decoded document, or ``None`` if absent or unreadable."""
        with Session(self._engine) as session:
            row = session.get(Document, name)
            if row is None:
                return None
            raw = row.value_json
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            logger.error("Document %r holds invalid JSON, treating as empty", name)
            return None

    def save(self, name: str, value: Any) -> None:
        """Overwrite document *name* with *value*."""
        value_json = json.dumps(value)
        with get_session(self._engine) as session:
            row = session.get(Document, name)
            if row is None:
                session.add(Document(name=name, value_json=value_json))
            else:
                row.value_json = value_json
        logger.debug("Saved document %r (%d bytes)", name, len(value_json))


# ---------------------------------------------------------------------------
# Codecs
# ---------------------------------------------------------------------------
def encode_int_map(mapping: dict[int, int]) -> dict[str, int]:
    return {str(k): v for k, v in mapping.items()}


def decode_int_map(raw: Any) -> dict[int, int]:
    if not raw:
        return {}
    return {int(k): int(v) for k, v in raw.items()}


def encode_id_set(ids: set[int]) -> list[int]:
    return sorted(ids)


def decode_id_set(raw: Any) -> set[int]:
    if not raw:
        return set()
    return {int(v) for v in raw}


def encode_tiers(rules: list[TierRule]) -> list[dict[str, int]]:
    return [
        {
            "old_role_id": r.old_role_id,
            "new_role_id": r.new_role_id,
            "required_points": r.required_points,
        }
        for r in rules
    ]


def decode_tiers(raw: Any) -> list[TierRule]:
    if not raw:
        return []
    return [
        TierRule(
            old_role_id=int(item["old_role_id"]),
            new_role_id=int(item["new_role_id"]),
            required_points=int(item["required_points"]),
        )
        for item in raw
    ]
