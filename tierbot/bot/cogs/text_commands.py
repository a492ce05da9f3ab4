"""
tierbot.bot.cogs.text_commands — Prefix Commands (``!points`` …)
================================================================

Listens for on_message, turns prefix-shaped messages into Actions and
hands them to the shared dispatcher.

Wrong-channel policy: a member without point-giver/admin rights who
types a prefix command outside the community's command channel has the
message deleted and gets a DM pointing at the right channel.  If no
command channel has been configured the message is only deleted.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from tierbot.engine.actions import is_command_shaped, parse_command
from tierbot.engine.policy import Actor
from tierbot.errors import ConfigurationMissing, TierbotError
from tierbot.services.dispatcher import Invocation

if TYPE_CHECKING:
    from tierbot.bot.core import TierBot

logger = logging.getLogger(__name__)


class TextCommands(commands.Cog, name="TextCommands"):
    """Prefix command surface."""

    def __init__(self, bot: TierBot) -> None:
        self.bot = bot

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message) -> None:
        try:
            await self._handle_message(message)
        except Exception:
            logger.exception(
                "Error processing message %s from user %s",
                message.id, message.author.id,
            )

    async def _handle_message(self, message: discord.Message) -> None:
        if message.author.bot or message.guild is None:
            return
        if not isinstance(message.author, discord.Member):
            return

        prefix = self.bot.cfg.bot_prefix
        if not is_command_shaped(message.content, prefix):
            return

        inv = Invocation(
            actor=Actor.from_member(message.author),
            guild=message.guild,
            channel_id=message.channel.id,
            prefix=prefix,
        )

        try:
            self.bot.dispatcher.check_channel(inv)
        except TierbotError as exc:
            await self._exclude(message, exc)
            return

        action = parse_command(message.content, prefix)
        if action is None:
            return

        reply = await self.bot.dispatcher.dispatch(inv, action)
        await message.channel.send(reply.text)

    async def _exclude(self, message: discord.Message, exc: TierbotError) -> None:
        """Delete a misplaced command and DM the author where to go instead."""
        logger.info(
            "Misplaced command from %d in channel %d: %s",
            message.author.id, message.channel.id, type(exc).__name__,
        )
        if self.bot.cfg.delete_misplaced_commands:
            try:
                await message.delete()
            except discord.HTTPException as err:
                logger.warning("Could not delete message %d: %s", message.id, err)

        if isinstance(exc, ConfigurationMissing):
            return
        try:
            await message.author.send(exc.reply)
        except discord.HTTPException as err:
            logger.warning("Could not DM %d: %s", message.author.id, err)


async def setup(bot: TierBot) -> None:
    await bot.add_cog(TextCommands(bot))
