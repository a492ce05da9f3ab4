"""
tierbot.bot.cogs.tiers — Tier & Routing Slash Commands
======================================================

- /upgrade — create or replace an upgrade path (point-givers and admins)
- /removeupgrade — delete an upgrade path (point-givers and admins)
- /addpointgiver — let a role grant points (admins)
- /setcommandchannel — where regular members may use commands (admins)
- /setannouncechannel — where promotions are announced (admins)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from tierbot.bot.replies import report_command_error, run_action
from tierbot.engine.actions import (
    AddPointGiver,
    RemoveUpgrade,
    SetAnnounceChannel,
    SetCommandChannel,
    SetUpgrade,
)

if TYPE_CHECKING:
    from tierbot.bot.core import TierBot


class Tiers(commands.Cog, name="Tiers"):
    """Upgrade paths, point-giver roles and channel routing."""

    def __init__(self, bot: TierBot) -> None:
        self.bot = bot

    @app_commands.command(name="upgrade", description="Create upgrade path")
    @app_commands.describe(
        old_role="Role members start from",
        new_role="Role granted once the threshold is reached",
        points="Points required",
    )
    @app_commands.guild_only()
    async def upgrade(
        self,
        interaction: discord.Interaction,
        old_role: discord.Role,
        new_role: discord.Role,
        points: int,
    ) -> None:
        await run_action(
            self.bot,
            interaction,
            SetUpgrade(old_role_id=old_role.id, new_role_id=new_role.id, required_points=points),
        )

    @app_commands.command(name="removeupgrade", description="Remove upgrade path")
    @app_commands.guild_only()
    async def removeupgrade(
        self,
        interaction: discord.Interaction,
        old_role: discord.Role,
        new_role: discord.Role,
    ) -> None:
        await run_action(
            self.bot,
            interaction,
            RemoveUpgrade(old_role_id=old_role.id, new_role_id=new_role.id),
        )

    @app_commands.command(name="addpointgiver", description="Add point giver role")
    @app_commands.guild_only()
    async def addpointgiver(self, interaction: discord.Interaction, role: discord.Role) -> None:
        await run_action(self.bot, interaction, AddPointGiver(role_ids=(role.id,)))

    @app_commands.command(name="setcommandchannel", description="Set command channel")
    @app_commands.guild_only()
    async def setcommandchannel(self, interaction: discord.Interaction) -> None:
        await run_action(self.bot, interaction, SetCommandChannel())

    @app_commands.command(name="setannouncechannel", description="Set announce channel")
    @app_commands.guild_only()
    async def setannouncechannel(self, interaction: discord.Interaction) -> None:
        await run_action(self.bot, interaction, SetAnnounceChannel())

    # -------------------------------------------------------------------
    # Error handler
    # -------------------------------------------------------------------
    async def cog_app_command_error(
        self, interaction: discord.Interaction, error: app_commands.AppCommandError
    ) -> None:
        await report_command_error(interaction, error)


async def setup(bot: TierBot) -> None:
    await bot.add_cog(Tiers(bot))
