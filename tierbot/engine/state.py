"""
tierbot.engine.state — Shared Points & Tier State
==================================================

In-memory owner of the five persisted collections:

* points ledger          user_id → balance
* point-giver roles      {role_id}
* tier rules             [TierRule]
* announce channels      guild_id → channel_id
* command channels       guild_id → channel_id

Each collection has its own :class:`threading.Lock`.  Every mutation does
its read-modify-write **and** the durable save while holding that lock,
so two concurrent grants for the same member can never both read the
pre-grant balance, and a method only returns once the change is on disk.
Mutations build the new collection as a copy, save it, and only then
swap it in; a failed save leaves memory exactly as it was.

Methods are synchronous; cogs call them through
:func:`tierbot.database.engine.run_db`.

Usage::

    state = StateManager(DocumentStore(engine))
    state.load_all()
    state.grant(user_id, 5)
    rule = resolve(state.get_points(user_id), state.tiers())
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from tierbot.constants import (
    ANNOUNCE_CHANNELS_DOC,
    COMMAND_CHANNELS_DOC,
    DEFAULT_GRANT_AMOUNT,
    DEFAULT_LEADERBOARD_SIZE,
    POINT_GIVERS_DOC,
    POINTS_DOC,
    TIERS_DOC,
)
from tierbot.engine import tiers as tier_table
from tierbot.engine.tiers import TierRule
from tierbot.services.store import (
    decode_id_set,
    decode_int_map,
    decode_tiers,
    encode_id_set,
    encode_int_map,
    encode_tiers,
)

if TYPE_CHECKING:
    from tierbot.services.store import DocumentStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MemberSnapshot:
    """A guild member as the leaderboard sees them."""

    user_id: int
    name: str
    role_ids: frozenset[int] = frozenset()


@dataclass(frozen=True, slots=True)
class LeaderboardEntry:
    user_id: int
    name: str
    points: int


class StateManager:
    """Thread-safe, write-through owner of all persisted collections."""

    def __init__(self, store: DocumentStore, *, allow_negative_balances: bool = True) -> None:
        self._store = store
        self.allow_negative_balances = allow_negative_balances

        self._points_lock = threading.Lock()
        self._givers_lock = threading.Lock()
        self._tiers_lock = threading.Lock()
        self._announce_lock = threading.Lock()
        self._command_lock = threading.Lock()

        self._points: dict[int, int] = {}
        self._point_givers: set[int] = set()
        self._tiers: list[TierRule] = []
        self._announce_channels: dict[int, int] = {}
        self._command_channels: dict[int, int] = {}

    # -------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------
    def load_all(self) -> None:
        """Load every collection from the store.  Absent documents are empty."""
        with self._points_lock:
            self._points = decode_int_map(self._store.load(POINTS_DOC))
        with self._givers_lock:
            self._point_givers = decode_id_set(self._store.load(POINT_GIVERS_DOC))
        with self._tiers_lock:
            self._tiers = decode_tiers(self._store.load(TIERS_DOC))
        with self._announce_lock:
            self._announce_channels = decode_int_map(self._store.load(ANNOUNCE_CHANNELS_DOC))
        with self._command_lock:
            self._command_channels = decode_int_map(self._store.load(COMMAND_CHANNELS_DOC))
        logger.info(
            "State loaded: %d balances, %d point-giver roles, %d tiers, "
            "%d announce channels, %d command channels",
            len(self._points),
            len(self._point_givers),
            len(self._tiers),
            len(self._announce_channels),
            len(self._command_channels),
        )

    # -------------------------------------------------------------------
    # Points ledger
    # -------------------------------------------------------------------
    def get_points(self, user_id: int) -> int:
        with self._points_lock:
            return self._points.get(user_id, 0)

    def points_snapshot(self) -> dict[int, int]:
        with self._points_lock:
            return dict(self._points)

    def grant(self, user_id: int, amount: int = DEFAULT_GRANT_AMOUNT) -> int:
        """Add *amount* (may be negative) to a balance and persist.  Returns the new balance."""
        with self._points_lock:
            balance = self._points.get(user_id, 0) + amount
            if not self.allow_negative_balances and balance < 0:
                balance = 0
            points = {**self._points, user_id: balance}
            self._store.save(POINTS_DOC, encode_int_map(points))
            self._points = points
        logger.info("Granted %+d points to %d → %d", amount, user_id, balance)
        return balance

    def reset(self, user_id: int) -> int:
        with self._points_lock:
            points = {**self._points, user_id: 0}
            self._store.save(POINTS_DOC, encode_int_map(points))
            self._points = points
        logger.info("Reset points for %d", user_id)
        return 0

    def leaderboard(
        self,
        members: Iterable[MemberSnapshot],
        *,
        role_id: int | None = None,
        limit: int = DEFAULT_LEADERBOARD_SIZE,
    ) -> list[LeaderboardEntry]:
        """Top *limit* members by balance, optionally only holders of *role_id*.

        Equal balances keep the order *members* was given in; Discord's
        member enumeration order is not stable, so neither are ties.
        """
        points = self.points_snapshot()
        entries = [
            LeaderboardEntry(m.user_id, m.name, points.get(m.user_id, 0))
            for m in members
            if role_id is None or role_id in m.role_ids
        ]
        entries.sort(key=lambda e: e.points, reverse=True)
        return entries[:limit]

    # -------------------------------------------------------------------
    # Tier rules
    # -------------------------------------------------------------------
    def tiers(self) -> list[TierRule]:
        with self._tiers_lock:
            return list(self._tiers)

    def set_tier(self, rule: TierRule) -> None:
        with self._tiers_lock:
            rules = tier_table.add_or_replace(self._tiers, rule)
            self._store.save(TIERS_DOC, encode_tiers(rules))
            self._tiers = rules
        logger.info(
            "Tier set: %d → %d at %d points",
            rule.old_role_id, rule.new_role_id, rule.required_points,
        )

    def remove_tier(self, old_role_id: int, new_role_id: int) -> bool:
        """Remove a tier rule.  Returns whether one existed."""
        with self._tiers_lock:
            rules, removed = tier_table.remove(self._tiers, old_role_id, new_role_id)
            self._store.save(TIERS_DOC, encode_tiers(rules))
            self._tiers = rules
        logger.info("Tier %d → %d removed (existed=%s)", old_role_id, new_role_id, removed)
        return removed

    # -------------------------------------------------------------------
    # Point-giver roles
    # -------------------------------------------------------------------
    def point_giver_roles(self) -> frozenset[int]:
        with self._givers_lock:
            return frozenset(self._point_givers)

    def add_point_giver_role(self, role_id: int) -> None:
        with self._givers_lock:
            givers = self._point_givers | {role_id}
            self._store.save(POINT_GIVERS_DOC, encode_id_set(givers))
            self._point_givers = givers
        logger.info("Point-giver role added: %d", role_id)

    # -------------------------------------------------------------------
    # Channel routing
    # -------------------------------------------------------------------
    def command_channel(self, guild_id: int) -> int | None:
        with self._command_lock:
            return self._command_channels.get(guild_id)

    def command_channels(self) -> dict[int, int]:
        with self._command_lock:
            return dict(self._command_channels)

    def set_command_channel(self, guild_id: int, channel_id: int) -> None:
        with self._command_lock:
            channels = {**self._command_channels, guild_id: channel_id}
            self._store.save(COMMAND_CHANNELS_DOC, encode_int_map(channels))
            self._command_channels = channels
        logger.info("Command channel for guild %d set to %d", guild_id, channel_id)

    def announce_channel(self, guild_id: int) -> int | None:
        with self._announce_lock:
            return self._announce_channels.get(guild_id)

    def set_announce_channel(self, guild_id: int, channel_id: int) -> None:
        with self._announce_lock:
            channels = {**self._announce_channels, guild_id: channel_id}
            self._store.save(ANNOUNCE_CHANNELS_DOC, encode_int_map(channels))
            self._announce_channels = channels
        logger.info("Announce channel for guild %d set to %d", guild_id, channel_id)
