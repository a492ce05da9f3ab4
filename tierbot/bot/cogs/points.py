"""
tierbot.bot.cogs.points — Points Slash Commands
===============================================

- /points — show a balance
- /givepoints — add points (point-givers and admins)
- /restorepoints — reset a balance to zero (point-givers and admins)
- /showpoints — leaderboard, optionally for one role (point-givers and admins)
- /help — commands available to the caller

Permission and channel checks live in the dispatcher, so these behave
exactly like their ``!`` counterparts.  Replies are ephemeral.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from tierbot.bot.replies import report_command_error, run_action
from tierbot.engine.actions import (
    GivePoints,
    Help,
    RestorePoints,
    ShowLeaderboard,
    ShowPoints,
)

if TYPE_CHECKING:
    from tierbot.bot.core import TierBot


class Points(commands.Cog, name="Points"):
    """Balance lookups and point grants."""

    def __init__(self, bot: TierBot) -> None:
        self.bot = bot

    @app_commands.command(name="points", description="Show points")
    @app_commands.describe(user="Whose points to show (defaults to you)")
    @app_commands.guild_only()
    async def points(
        self, interaction: discord.Interaction, user: discord.Member | None = None
    ) -> None:
        await run_action(self.bot, interaction, ShowPoints(user_id=user.id if user else None))

    @app_commands.command(name="givepoints", description="Give points")
    @app_commands.describe(user="Member to give points to", amount="How many points (default 1)")
    @app_commands.guild_only()
    async def givepoints(
        self, interaction: discord.Interaction, user: discord.Member, amount: int = 1
    ) -> None:
        await run_action(
            self.bot, interaction, GivePoints(user_ids=(user.id,), amount=amount), defer=True
        )

    @app_commands.command(name="restorepoints", description="Reset points")
    @app_commands.describe(user="Member whose points to reset")
    @app_commands.guild_only()
    async def restorepoints(self, interaction: discord.Interaction, user: discord.Member) -> None:
        await run_action(self.bot, interaction, RestorePoints(user_ids=(user.id,)), defer=True)

    @app_commands.command(name="showpoints", description="Show leaderboard")
    @app_commands.describe(role="Only rank members holding this role")
    @app_commands.guild_only()
    async def showpoints(
        self, interaction: discord.Interaction, role: discord.Role | None = None
    ) -> None:
        await run_action(
            self.bot, interaction, ShowLeaderboard(role_id=role.id if role else None)
        )

    @app_commands.command(name="help", description="Show available commands")
    @app_commands.guild_only()
    async def help(self, interaction: discord.Interaction) -> None:
        await run_action(self.bot, interaction, Help())

    async def cog_app_command_error(
        self, interaction: discord.Interaction, error: app_commands.AppCommandError
    ) -> None:
        await report_command_error(interaction, error)


async def setup(bot: TierBot) -> None:
    await bot.add_cog(Points(bot))
