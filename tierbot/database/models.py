"""
tierbot.database.models — SQLAlchemy 2.0 Data Models
====================================================

Tables:
- documents — One JSON document per persisted collection (points ledger,
  point-giver roles, tier rules, announce channels, command channels).

The engine never queries inside a document; it loads each one whole at
startup and overwrites it whole on every mutation.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all Tierbot ORM models."""


# ---------------------------------------------------------------------------
# Documents: durable key → JSON value store
# ---------------------------------------------------------------------------
class Document(Base):
    """Key-value JSON document keyed by collection name.

    Values are stored as JSON strings; typed codecs live in
    :mod:`tierbot.services.store`.
    """
    __tablename__ = "documents"

    name: Mapped[str] = mapped_column(String(64), primary_key=True)
    value_json: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<Document name={self.name!r}>"
