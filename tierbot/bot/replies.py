"""
tierbot.bot.replies — Slash-command plumbing shared by the cogs
===============================================================

Turns an :class:`discord.Interaction` into an
:class:`~tierbot.services.dispatcher.Invocation` and sends a
:class:`~tierbot.services.dispatcher.Reply` back, ephemerally.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands

from tierbot.engine.actions import Action
from tierbot.engine.policy import Actor
from tierbot.services.dispatcher import Invocation, Reply

if TYPE_CHECKING:
    from tierbot.bot.core import TierBot

logger = logging.getLogger(__name__)


def invocation_from_interaction(interaction: discord.Interaction) -> Invocation | None:
    """``None`` outside a guild (DMs)."""
    if interaction.guild is None or not isinstance(interaction.user, discord.Member):
        return None
    return Invocation(
        actor=Actor.from_member(interaction.user),
        guild=interaction.guild,
        channel_id=interaction.channel_id or 0,
        prefix="/",
    )


async def send_reply(interaction: discord.Interaction, reply: Reply) -> None:
    if interaction.response.is_done():
        await interaction.followup.send(reply.text, ephemeral=True)
    else:
        await interaction.response.send_message(reply.text, ephemeral=True)


async def run_action(
    bot: TierBot,
    interaction: discord.Interaction,
    action: Action,
    *,
    defer: bool = False,
) -> None:
    """Dispatch *action* for *interaction* and reply with the outcome.

    Pass ``defer=True`` for actions that may touch many roles, so the
    interaction doesn't time out while Discord calls run.
    """
    inv = invocation_from_interaction(interaction)
    if inv is None:
        await interaction.response.send_message(
            "❌ This command can only be used in a server.", ephemeral=True
        )
        return
    if defer:
        await interaction.response.defer(ephemeral=True, thinking=True)
    reply = await bot.dispatcher.dispatch(inv, action)
    await send_reply(interaction, reply)


async def report_command_error(
    interaction: discord.Interaction, error: app_commands.AppCommandError
) -> None:
    """Shared ``cog_app_command_error`` body: log, then tell the caller."""
    logger.error("Slash command %s failed: %s", getattr(interaction.command, "name", "?"), error)
    message = "❌ Something went wrong while running that command."
    if interaction.response.is_done():
        await interaction.followup.send(message, ephemeral=True)
    else:
        await interaction.response.send_message(message, ephemeral=True)
