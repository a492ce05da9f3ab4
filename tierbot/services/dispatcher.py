"""
tierbot.services.dispatcher — Action Dispatch
==============================================

One entry point for both command surfaces.  The text cog and the slash
cogs build an :class:`Invocation` (who / where) and an
:data:`~tierbot.engine.actions.Action` (what), then::

    reply = await dispatcher.dispatch(invocation, action)

Pipeline per action:

1. Channel gate — unprivileged members only in the command channel.
2. Capability gate — privileged / configure as the command demands.
3. Malformed input → usage hint.
4. State mutation (persisted before returning, on a worker thread).
5. Reconcile every affected member still in the guild.

Rejections come back as ``Reply(ok=False)``; nothing is raised to the
cog except genuinely unexpected errors.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import discord

from tierbot.constants import (
    DEFAULT_LEADERBOARD_SIZE,
    HELP_ADMIN,
    HELP_EVERYONE,
    HELP_PRIVILEGED,
    HELP_TITLE,
    MSG_ADMINS_ONLY,
    MSG_ANNOUNCE_CHANNEL_SET,
    MSG_COMMAND_CHANNEL_SET,
    MSG_NO_COMMAND_CHANNEL,
    MSG_NO_PERMISSION,
    MSG_POINT_GIVER_ADDED,
    MSG_POINTS_GIVEN,
    MSG_POINTS_RESET,
    MSG_UPGRADE_REMOVED,
    MSG_UPGRADE_SET,
    MSG_WRONG_CHANNEL,
)
from tierbot.database.engine import run_db
from tierbot.engine.actions import (
    Action,
    AddPointGiver,
    GivePoints,
    Help,
    Malformed,
    RemoveUpgrade,
    RestorePoints,
    SetAnnounceChannel,
    SetCommandChannel,
    SetUpgrade,
    ShowLeaderboard,
    ShowPoints,
)
from tierbot.engine.policy import (
    COMMAND_CAPABILITY,
    Actor,
    Capability,
    can_configure,
    can_privileged,
    can_use_commands,
    has_capability,
)
from tierbot.engine.state import MemberSnapshot
from tierbot.engine.tiers import TierRule
from tierbot.errors import (
    ConfigurationMissing,
    MalformedInput,
    PermissionDenied,
    TierbotError,
)

if TYPE_CHECKING:
    from tierbot.engine.state import StateManager
    from tierbot.services.role_service import RoleService

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Invocation:
    """Who issued an action, in which guild and channel, via which surface."""

    actor: Actor
    guild: discord.Guild
    channel_id: int
    prefix: str = "/"


@dataclass
class Reply:
    text: str
    ok: bool = True


class Dispatcher:
    """Runs :data:`Action` values against the shared state."""

    def __init__(
        self,
        state: StateManager,
        roles: RoleService,
        *,
        leaderboard_size: int = DEFAULT_LEADERBOARD_SIZE,
    ) -> None:
        self.state = state
        self.roles = roles
        self.leaderboard_size = leaderboard_size

        self._handlers: dict[type, Callable[[Invocation, Any], Awaitable[Reply]]] = {
            ShowPoints: self._show_points,
            GivePoints: self._give_points,
            RestorePoints: self._restore_points,
            ShowLeaderboard: self._show_leaderboard,
            SetUpgrade: self._set_upgrade,
            RemoveUpgrade: self._remove_upgrade,
            AddPointGiver: self._add_point_giver,
            SetCommandChannel: self._set_command_channel,
            SetAnnounceChannel: self._set_announce_channel,
            Help: self._help,
        }

    # -------------------------------------------------------------------
    # Gates
    # -------------------------------------------------------------------
    def check_channel(self, inv: Invocation) -> None:
        """Raise unless the actor may issue commands in this channel."""
        if can_use_commands(
            inv.actor,
            inv.channel_id,
            self.state.point_giver_roles(),
            self.state.command_channels(),
        ):
            return
        configured = self.state.command_channel(inv.actor.guild_id)
        if configured is None:
            raise ConfigurationMissing(MSG_NO_COMMAND_CHANNEL)
        raise PermissionDenied(MSG_WRONG_CHANNEL.format(channel_id=configured))

    def check_capability(self, actor: Actor, command: str) -> None:
        capability = COMMAND_CAPABILITY.get(command, Capability.CONFIGURE)
        if has_capability(actor, capability, self.state.point_giver_roles()):
            return
        if capability is Capability.CONFIGURE:
            raise PermissionDenied(MSG_ADMINS_ONLY)
        raise PermissionDenied(MSG_NO_PERMISSION)

    # -------------------------------------------------------------------
    # Entry point
    # -------------------------------------------------------------------
    async def dispatch(self, inv: Invocation, action: Action) -> Reply:
        try:
            self.check_channel(inv)
            self.check_capability(inv.actor, action.command)
            if isinstance(action, Malformed):
                raise MalformedInput(f"⚠️ Usage: `{action.usage}`")
            handler = self._handlers[type(action)]
            return await handler(inv, action)
        except TierbotError as exc:
            logger.info(
                "Rejected %s from %d in guild %d: %s (%s)",
                action.command, inv.actor.user_id, inv.actor.guild_id,
                type(exc).__name__, exc.reply,
            )
            return Reply(exc.reply, ok=False)

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    async def _reconcile_user(self, guild: discord.Guild, user_id: int) -> None:
        member = guild.get_member(user_id)
        if member is None:
            logger.debug("User %d not in guild %d — skipping role update", user_id, guild.id)
            return
        await self.roles.reconcile_member(member)

    # -------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------
    async def _show_points(self, inv: Invocation, action: ShowPoints) -> Reply:
        user_id = action.user_id or inv.actor.user_id
        member = inv.guild.get_member(user_id)
        name = member.display_name if member is not None else f"<@{user_id}>"
        return Reply(f"{name} has {self.state.get_points(user_id)} points.")

    async def _give_points(self, inv: Invocation, action: GivePoints) -> Reply:
        for user_id in action.user_ids:
            await run_db(self.state.grant, user_id, action.amount)
            await self._reconcile_user(inv.guild, user_id)
        return Reply(MSG_POINTS_GIVEN)

    async def _restore_points(self, inv: Invocation, action: RestorePoints) -> Reply:
        for user_id in action.user_ids:
            await run_db(self.state.reset, user_id)
            await self._reconcile_user(inv.guild, user_id)
        return Reply(MSG_POINTS_RESET)

    async def _show_leaderboard(self, inv: Invocation, action: ShowLeaderboard) -> Reply:
        members = [
            MemberSnapshot(m.id, m.display_name, frozenset(r.id for r in m.roles))
            for m in inv.guild.members
            if not m.bot
        ]
        entries = self.state.leaderboard(
            members, role_id=action.role_id, limit=self.leaderboard_size
        )
        lines = [f"{i}. **{e.name}** — {e.points}" for i, e in enumerate(entries, 1)]
        return Reply("\n".join(["**Leaderboard**", *lines]))

    async def _set_upgrade(self, inv: Invocation, action: SetUpgrade) -> Reply:
        rule = TierRule(action.old_role_id, action.new_role_id, action.required_points)
        await run_db(self.state.set_tier, rule)
        return Reply(MSG_UPGRADE_SET)

    async def _remove_upgrade(self, inv: Invocation, action: RemoveUpgrade) -> Reply:
        await run_db(self.state.remove_tier, action.old_role_id, action.new_role_id)
        return Reply(MSG_UPGRADE_REMOVED)

    async def _add_point_giver(self, inv: Invocation, action: AddPointGiver) -> Reply:
        for role_id in action.role_ids:
            await run_db(self.state.add_point_giver_role, role_id)
        return Reply(MSG_POINT_GIVER_ADDED)

    async def _set_command_channel(self, inv: Invocation, action: SetCommandChannel) -> Reply:
        await run_db(self.state.set_command_channel, inv.actor.guild_id, inv.channel_id)
        return Reply(MSG_COMMAND_CHANNEL_SET)

    async def _set_announce_channel(self, inv: Invocation, action: SetAnnounceChannel) -> Reply:
        await run_db(self.state.set_announce_channel, inv.actor.guild_id, inv.channel_id)
        return Reply(MSG_ANNOUNCE_CHANNEL_SET)

    async def _help(self, inv: Invocation, action: Help) -> Reply:
        sections = [HELP_EVERYONE]
        if can_privileged(inv.actor, self.state.point_giver_roles()):
            sections.append(HELP_PRIVILEGED)
        if can_configure(inv.actor):
            sections.append(HELP_ADMIN)

        lines = [HELP_TITLE]
        for section in sections:
            lines.extend(f"`{inv.prefix}{usage}` - {desc}" for usage, desc in section)
        return Reply("\n".join(lines))
