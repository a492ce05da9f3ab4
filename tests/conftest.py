"""
tests/conftest.py — Shared Test Fixtures
========================================
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from tierbot.database.models import Base
from tierbot.engine.state import StateManager
from tierbot.services.store import DocumentStore


# Helper to run async tests without pytest-asyncio
def run_async(coro):
    """Run an async coroutine in a new event loop."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@pytest.fixture
def db_engine() -> Engine:
    """In-memory SQLite engine with all Tierbot tables.

    Uses StaticPool so all threads share the same in-memory database
    (required by ``asyncio.to_thread`` used in ``run_db``).
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def db_session(db_engine: Engine):
    with Session(db_engine) as session:
        yield session
        session.rollback()


@pytest.fixture
def store(db_engine: Engine) -> DocumentStore:
    return DocumentStore(db_engine)


@pytest.fixture
def state(store: DocumentStore) -> StateManager:
    mgr = StateManager(store)
    mgr.load_all()
    return mgr


# ---------------------------------------------------------------------------
# Discord doubles
# ---------------------------------------------------------------------------
def http_error(cls: type[discord.HTTPException], status: int, text: str = "error"):
    response = MagicMock()
    response.status = status
    response.reason = text
    return cls(response, text)


def make_role(role_id: int, name: str | None = None) -> MagicMock:
    role = MagicMock(spec=discord.Role)
    role.id = role_id
    role.name = name or f"Role{role_id}"
    role.color = discord.Color.default()
    return role


def make_guild(guild_id: int = 100, roles: list | None = None, channels: dict | None = None) -> MagicMock:
    """Mock guild whose ``get_role``/``get_member``/``get_channel`` read from dicts.

    ``fetch_member`` answers like the REST API: a fresh member object
    whose ``roles`` reflect every role call made so far.
    """
    guild = MagicMock(spec=discord.Guild)
    guild.id = guild_id
    guild._roles_by_id = {r.id: r for r in roles or []}
    guild._members_by_id = {}
    guild._channels_by_id = dict(channels or {})
    guild.get_role = lambda rid: guild._roles_by_id.get(rid)
    guild.get_member = lambda uid: guild._members_by_id.get(uid)
    guild.get_channel = lambda cid: guild._channels_by_id.get(cid)
    guild.members = []

    async def _fetch_member(uid):
        member = guild._members_by_id.get(uid)
        if member is None:
            raise http_error(discord.NotFound, 404, "Unknown Member")
        return _refetched(member)

    guild.fetch_member = AsyncMock(side_effect=_fetch_member)
    return guild


def make_member(
    guild: MagicMock,
    user_id: int,
    *,
    name: str | None = None,
    roles: list | None = None,
    is_admin: bool = False,
    bot: bool = False,
) -> MagicMock:
    """Mock member with discord.py's caching behaviour.

    ``add_roles``/``remove_roles`` change the server-side role list
    (see :func:`live_role_ids`) but not ``member.roles``, which is the
    gateway cache and stays as it was.
    """
    member = MagicMock(spec=discord.Member)
    member.id = user_id
    member.guild = guild
    member.bot = bot
    member.display_name = name or f"User{user_id}"
    member.roles = list(roles or [])
    member.guild_permissions = discord.Permissions(administrator=is_admin)
    member.display_avatar = MagicMock()
    member.display_avatar.url = f"https://cdn.example/{user_id}.png"
    member._live_roles = list(roles or [])

    async def _add_roles(*new_roles, reason=None):
        for r in new_roles:
            if r not in member._live_roles:
                member._live_roles.append(r)

    async def _remove_roles(*old_roles, reason=None):
        for r in old_roles:
            if r in member._live_roles:
                member._live_roles.remove(r)

    member.add_roles = AsyncMock(side_effect=_add_roles)
    member.remove_roles = AsyncMock(side_effect=_remove_roles)
    member.send = AsyncMock()

    guild._members_by_id[user_id] = member
    guild.members.append(member)
    return member


def _refetched(member: MagicMock) -> MagicMock:
    fresh = MagicMock(spec=discord.Member)
    for attr in ("id", "guild", "bot", "display_name", "guild_permissions",
                 "display_avatar", "add_roles", "remove_roles", "send", "_live_roles"):
        setattr(fresh, attr, getattr(member, attr))
    fresh.roles = list(member._live_roles)
    return fresh


def live_role_ids(member: MagicMock) -> set[int]:
    """Role IDs the member holds on Discord after every call so far."""
    return {r.id for r in member._live_roles}


def make_text_channel(channel_id: int) -> MagicMock:
    ch = MagicMock(spec=discord.TextChannel)
    ch.id = channel_id
    ch.send = AsyncMock()
    return ch
