"""
tierbot.engine.policy — Authorization Policy
=============================================

Three capability levels:

* **Configure** — Discord administrators only.  Needed for adding
  point-giver roles and routing the command / announce channels.
* **Privileged** — administrators or anyone holding a point-giver role.
  Needed for granting/resetting points, the leaderboard and tier edits.
* **Use commands** — privileged actors anywhere; everyone else only in
  the community's configured command channel.  No configured channel
  means no access for unprivileged members.
"""

from __future__ import annotations

import enum
from collections.abc import Collection, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import discord


class Capability(enum.StrEnum):
    """What an action demands of its actor (channel gate aside)."""
    ANYONE = "anyone"
    PRIVILEGED = "privileged"
    CONFIGURE = "configure"


# command name → capability required to run it
COMMAND_CAPABILITY: dict[str, Capability] = {
    "points": Capability.ANYONE,
    "help": Capability.ANYONE,
    "givepoints": Capability.PRIVILEGED,
    "restorepoints": Capability.PRIVILEGED,
    "showpoints": Capability.PRIVILEGED,
    "upgrade": Capability.PRIVILEGED,
    "removeupgrade": Capability.PRIVILEGED,
    "addpointgiver": Capability.CONFIGURE,
    "setcommandchannel": Capability.CONFIGURE,
    "setannouncechannel": Capability.CONFIGURE,
}


@dataclass(frozen=True, slots=True)
class Actor:
    """The member performing an action, reduced to what the policy needs."""

    user_id: int
    guild_id: int
    role_ids: frozenset[int]
    is_admin: bool = False

    @classmethod
    def from_member(cls, member: discord.Member) -> Actor:
        return cls(
            user_id=member.id,
            guild_id=member.guild.id,
            role_ids=frozenset(r.id for r in member.roles),
            is_admin=member.guild_permissions.administrator,
        )


def is_point_giver(actor: Actor, point_giver_roles: Collection[int]) -> bool:
    return any(role_id in point_giver_roles for role_id in actor.role_ids)


def can_privileged(actor: Actor, point_giver_roles: Collection[int]) -> bool:
    """Admin, or holds any configured point-giver role."""
    return actor.is_admin or is_point_giver(actor, point_giver_roles)


def can_configure(actor: Actor) -> bool:
    """Point-giver status is not enough for configuration changes."""
    return actor.is_admin


def can_use_commands(
    actor: Actor,
    channel_id: int,
    point_giver_roles: Collection[int],
    command_channels: Mapping[int, int],
) -> bool:
    """True for privileged actors, else only in the configured command channel."""
    if can_privileged(actor, point_giver_roles):
        return True
    configured = command_channels.get(actor.guild_id)
    return configured is not None and configured == channel_id


def has_capability(
    actor: Actor, capability: Capability, point_giver_roles: Collection[int]
) -> bool:
    if capability is Capability.CONFIGURE:
        return can_configure(actor)
    if capability is Capability.PRIVILEGED:
        return can_privileged(actor, point_giver_roles)
    return True
