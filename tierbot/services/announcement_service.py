"""
tierbot.services.announcement_service — Promotion Announcements
================================================================

Routes promotion messages to the community's configured announce channel
(set with ``setannouncechannel``).  No channel configured, or the channel
has since been deleted, means the promotion is simply not announced.

The mention goes in the message content so the member is pinged; the
embed built by :mod:`tierbot.services.embeds` carries the presentation.
Throttle logic lives in :mod:`tierbot.services.throttle`.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import discord
from discord.abc import Messageable

from tierbot.constants import PROMOTION_TEXT
from tierbot.services.embeds import build_promotion_embed
from tierbot.services.throttle import AnnouncementThrottle

if TYPE_CHECKING:
    from tierbot.engine.state import StateManager

logger = logging.getLogger(__name__)

# Module-level throttle instance
_throttle = AnnouncementThrottle()


def start_queue(loop: asyncio.AbstractEventLoop) -> None:
    """Start the throttle drain task. Call from on_ready."""
    _throttle.start(loop)


def stop_queue() -> None:
    _throttle.stop()


# ---------------------------------------------------------------------------
# Channel resolution
# ---------------------------------------------------------------------------
def resolve_announce_channel(guild: discord.Guild, state: StateManager) -> Messageable | None:
    channel_id = state.announce_channel(guild.id)
    if channel_id is None:
        logger.debug("No announce channel configured for guild %d", guild.id)
        return None
    channel = guild.get_channel(channel_id)
    if channel is None or not isinstance(channel, Messageable):
        logger.warning(
            "Announce channel %d for guild %d is missing or not messageable",
            channel_id, guild.id,
        )
        return None
    return channel


# ---------------------------------------------------------------------------
# Sending helper (handles throttle + queue)
# ---------------------------------------------------------------------------
async def _send(channel: Messageable | None, content: str, embed: discord.Embed) -> None:
    if channel is None:
        return
    channel_id = getattr(channel, "id", 0)
    if not _throttle.is_allowed(channel_id):
        _throttle.enqueue(channel_id, channel, content, embed)
        return
    try:
        await channel.send(content, embed=embed)
    except discord.HTTPException:
        logger.exception("Failed to send announcement to channel %d", channel_id)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
async def announce_promotion(
    state: StateManager,
    member: discord.Member,
    role: discord.Role,
) -> None:
    """Post "<@member> is now <role>" to the member's community announce channel."""
    target = resolve_announce_channel(member.guild, state)
    if target is None:
        return
    content = PROMOTION_TEXT.format(user_id=member.id, role_name=role.name)
    embed = build_promotion_embed(
        member.display_name,
        role.name,
        avatar_url=member.display_avatar.url,
        role_color=role.color,
    )
    await _send(target, content, embed)
    logger.info("Announced promotion of %s to %s", member.id, role.name)
