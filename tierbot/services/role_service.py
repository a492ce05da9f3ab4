"""
tierbot.services.role_service — Applying Role Deltas
=====================================================

Bridges the pure reconciler and Discord.  For one member:

1. Re-fetch the member over HTTP.  discord.py's ``member.roles`` cache
   only changes when the gateway's member-update event arrives, so two
   reconciliations in quick succession would otherwise both see the
   roles held before the first one ran.
2. Read their balance and the current tier rules (in-memory state).
3. Compute a :class:`~tierbot.engine.reconciler.RoleDelta`.
4. Remove stale tier roles, then add the wanted ones, **one call per
   role**.  A role that no longer exists or that the bot may not manage
   is logged and skipped; the remaining calls still run.
5. Announce the promotion if the delta carries one.

Reconciliations for the same member are serialised with a per-member
``asyncio.Lock``, dropped again once nobody holds or waits for it.
Callers must have persisted the balance/tier change before calling in,
so a Discord failure never loses ledger state.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import discord

from tierbot.engine.reconciler import NoTierPolicy, RoleDelta, reconcile
from tierbot.services.announcement_service import announce_promotion

if TYPE_CHECKING:
    from tierbot.engine.state import StateManager

logger = logging.getLogger(__name__)

AUDIT_REASON = "Points tier update"


@dataclass
class ApplyResult:
    """What actually happened when a delta was pushed to Discord."""

    removed: list[int] = field(default_factory=list)
    added: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)


class RoleService:
    """Keeps members' tier roles in line with their balances."""

    def __init__(self, state: StateManager, policy: NoTierPolicy = NoTierPolicy.BARE) -> None:
        self.state = state
        self.policy = policy
        self._locks: dict[tuple[int, int], asyncio.Lock] = {}
        self._lock_users: dict[tuple[int, int], int] = {}

    @asynccontextmanager
    async def _member_lock(self, key: tuple[int, int]) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[key] -= 1
            if not self._lock_users[key]:
                del self._lock_users[key]
                del self._locks[key]

    def compute(self, member: discord.Member) -> RoleDelta:
        return reconcile(
            (r.id for r in member.roles),
            self.state.get_points(member.id),
            self.state.tiers(),
            self.policy,
        )

    async def _fresh(self, member: discord.Member) -> discord.Member | None:
        """Current view of *member* from the API, ``None`` if they left."""
        try:
            return await member.guild.fetch_member(member.id)
        except discord.NotFound:
            logger.info("Member %d left guild %d; skipping role update", member.id, member.guild.id)
            return None
        except discord.HTTPException as exc:
            logger.warning(
                "Could not fetch member %d (%s); using cached roles", member.id, exc
            )
            return member

    async def reconcile_member(self, member: discord.Member) -> RoleDelta:
        """Bring *member*'s tier roles in line with their balance."""
        async with self._member_lock((member.guild.id, member.id)):
            fresh = await self._fresh(member)
            if fresh is None:
                return RoleDelta()

            delta = self.compute(fresh)
            if delta.empty:
                logger.debug("Member %d already in the right tier", member.id)
                return delta

            result = await self.apply(fresh, delta)
            logger.info(
                "Reconciled member %d: -%s +%s (failed: %s)",
                member.id, result.removed, result.added, result.failed,
            )

            if delta.promoted_role_id is not None and delta.promoted_role_id in result.added:
                role = fresh.guild.get_role(delta.promoted_role_id)
                if role is not None:
                    await announce_promotion(self.state, fresh, role)
            return delta

    async def apply(self, member: discord.Member, delta: RoleDelta) -> ApplyResult:
        """Push *delta* to Discord, one role at a time, never raising."""
        result = ApplyResult()
        guild = member.guild

        for role_id in sorted(delta.to_remove):
            role = guild.get_role(role_id)
            if role is None:
                logger.warning("Tier role %d not found in guild %d", role_id, guild.id)
                result.failed.append(role_id)
                continue
            try:
                await member.remove_roles(role, reason=AUDIT_REASON)
                result.removed.append(role_id)
            except discord.HTTPException as exc:
                logger.warning("Could not remove role %d from %d: %s", role_id, member.id, exc)
                result.failed.append(role_id)

        for role_id in sorted(delta.to_add):
            role = guild.get_role(role_id)
            if role is None:
                logger.warning("Tier role %d not found in guild %d", role_id, guild.id)
                result.failed.append(role_id)
                continue
            try:
                await member.add_roles(role, reason=AUDIT_REASON)
                result.added.append(role_id)
            except discord.HTTPException as exc:
                logger.warning("Could not add role %d to %d: %s", role_id, member.id, exc)
                result.failed.append(role_id)

        return result
