"""
tests/test_slash_commands.py — Slash command cogs and reply plumbing
=====================================================================

Calls the app-command callbacks directly with a mocked interaction and a
real dispatcher.
"""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import discord
import pytest
from discord import app_commands

from tierbot.bot.cogs.points import Points
from tierbot.bot.cogs.tiers import Tiers
from tierbot.bot.replies import report_command_error, run_action
from tierbot.constants import (
    MSG_ANNOUNCE_CHANNEL_SET,
    MSG_COMMAND_CHANNEL_SET,
    MSG_NO_PERMISSION,
    MSG_POINTS_GIVEN,
    MSG_POINTS_RESET,
    MSG_UPGRADE_SET,
)
from tierbot.engine.actions import ShowPoints
from tierbot.engine.tiers import TierRule
from tierbot.services.dispatcher import Dispatcher
from tierbot.services.role_service import RoleService
from tierbot.services.throttle import AnnouncementThrottle

from conftest import live_role_ids, make_guild, make_member, make_role, run_async

CHANNEL = 555
ROLE_A, ROLE_B = 11, 22


@pytest.fixture(autouse=True)
def fresh_throttle():
    with patch("tierbot.services.announcement_service._throttle", AnnouncementThrottle()):
        yield


def _interaction(user, guild=None, channel_id=CHANNEL):
    """Mock interaction whose response flips to done once answered or deferred."""
    interaction = MagicMock(spec=discord.Interaction)
    interaction.guild = guild if guild is not None else getattr(user, "guild", None)
    interaction.user = user
    interaction.channel_id = channel_id
    interaction.command = SimpleNamespace(name="test")

    done = {"value": False}

    async def _answer(*args, **kwargs):
        done["value"] = True

    interaction.response = MagicMock()
    interaction.response.is_done = MagicMock(side_effect=lambda: done["value"])
    interaction.response.send_message = AsyncMock(side_effect=_answer)
    interaction.response.defer = AsyncMock(side_effect=_answer)
    interaction.followup = MagicMock()
    interaction.followup.send = AsyncMock()
    return interaction


def _bot(state):
    return SimpleNamespace(dispatcher=Dispatcher(state, RoleService(state)))


@pytest.fixture
def guild():
    return make_guild(roles=[make_role(ROLE_A), make_role(ROLE_B, "Silver")])


@pytest.fixture
def admin(guild):
    return make_member(guild, 1, name="Admin", is_admin=True)


# ===========================================================================
# Test: run_action / send_reply
# ===========================================================================
class TestRunAction:
    def test_dm_is_refused(self, state):
        user = MagicMock(spec=discord.User)
        interaction = _interaction(user, guild=None)
        interaction.guild = None

        run_async(run_action(_bot(state), interaction, ShowPoints()))

        interaction.response.send_message.assert_awaited_once_with(
            "❌ This command can only be used in a server.", ephemeral=True
        )
        interaction.followup.send.assert_not_awaited()

    def test_reply_is_ephemeral(self, state, admin):
        state.grant(1, 4)
        interaction = _interaction(admin)

        run_async(run_action(_bot(state), interaction, ShowPoints()))

        interaction.response.send_message.assert_awaited_once_with(
            "Admin has 4 points.", ephemeral=True
        )

    def test_deferred_reply_goes_through_followup(self, state, admin):
        interaction = _interaction(admin)

        run_async(run_action(_bot(state), interaction, ShowPoints(), defer=True))

        interaction.response.defer.assert_awaited_once_with(ephemeral=True, thinking=True)
        interaction.response.send_message.assert_not_awaited()
        interaction.followup.send.assert_awaited_once_with("Admin has 0 points.", ephemeral=True)

    def test_rejection_is_sent_as_reply(self, state, guild):
        state.set_command_channel(guild.id, CHANNEL)
        member = make_member(guild, 2)
        interaction = _interaction(member)

        cog = Points(_bot(state))
        run_async(cog.givepoints.callback(cog, interaction, member, 5))

        interaction.followup.send.assert_awaited_once_with(MSG_NO_PERMISSION, ephemeral=True)
        assert state.get_points(2) == 0


class TestReportCommandError:
    def test_answers_fresh_interaction(self, admin):
        interaction = _interaction(admin)
        run_async(report_command_error(interaction, app_commands.AppCommandError("boom")))
        interaction.response.send_message.assert_awaited_once()
        assert interaction.response.send_message.await_args.kwargs == {"ephemeral": True}

    def test_uses_followup_after_defer(self, admin):
        interaction = _interaction(admin)
        run_async(interaction.response.defer())
        run_async(report_command_error(interaction, app_commands.AppCommandError("boom")))
        interaction.followup.send.assert_awaited_once()


# ===========================================================================
# Test: Points cog
# ===========================================================================
class TestPointsCog:
    def test_givepoints_grants_and_promotes(self, state, guild, admin):
        state.set_tier(TierRule(ROLE_A, ROLE_B, 5))
        target = make_member(guild, 2, roles=[guild.get_role(ROLE_A)])
        interaction = _interaction(admin)

        cog = Points(_bot(state))
        run_async(cog.givepoints.callback(cog, interaction, target, 5))

        assert state.get_points(2) == 5
        assert live_role_ids(target) == {ROLE_B}
        interaction.response.defer.assert_awaited_once()
        interaction.followup.send.assert_awaited_once_with(MSG_POINTS_GIVEN, ephemeral=True)

    def test_restorepoints(self, state, guild, admin):
        target = make_member(guild, 2)
        state.grant(2, 9)
        interaction = _interaction(admin)

        cog = Points(_bot(state))
        run_async(cog.restorepoints.callback(cog, interaction, target))

        assert state.get_points(2) == 0
        interaction.followup.send.assert_awaited_once_with(MSG_POINTS_RESET, ephemeral=True)

    def test_points_for_other_member(self, state, guild, admin):
        target = make_member(guild, 2, name="Bob")
        state.grant(2, 3)
        interaction = _interaction(admin)

        cog = Points(_bot(state))
        run_async(cog.points.callback(cog, interaction, target))

        interaction.response.send_message.assert_awaited_once_with("Bob has 3 points.", ephemeral=True)

    def test_showpoints_filtered_by_role(self, state, guild, admin):
        make_member(guild, 2, name="Bob", roles=[guild.get_role(ROLE_B)])
        make_member(guild, 3, name="Cat")
        state.grant(2, 2)
        state.grant(3, 7)
        interaction = _interaction(admin)

        cog = Points(_bot(state))
        run_async(cog.showpoints.callback(cog, interaction, guild.get_role(ROLE_B)))

        interaction.response.send_message.assert_awaited_once_with(
            "**Leaderboard**\n1. **Bob** — 2", ephemeral=True
        )


# ===========================================================================
# Test: Tiers cog
# ===========================================================================
class TestTiersCog:
    def test_upgrade(self, state, guild, admin):
        interaction = _interaction(admin)

        cog = Tiers(_bot(state))
        run_async(cog.upgrade.callback(cog, interaction, guild.get_role(ROLE_A), guild.get_role(ROLE_B), 10))

        assert state.tiers() == [TierRule(ROLE_A, ROLE_B, 10)]
        interaction.response.send_message.assert_awaited_once_with(MSG_UPGRADE_SET, ephemeral=True)

    def test_channels_use_invoking_channel(self, state, guild, admin):
        cog = Tiers(_bot(state))

        interaction = _interaction(admin, channel_id=777)
        run_async(cog.setcommandchannel.callback(cog, interaction))
        interaction.response.send_message.assert_awaited_once_with(MSG_COMMAND_CHANNEL_SET, ephemeral=True)

        interaction = _interaction(admin, channel_id=778)
        run_async(cog.setannouncechannel.callback(cog, interaction))
        interaction.response.send_message.assert_awaited_once_with(MSG_ANNOUNCE_CHANNEL_SET, ephemeral=True)

        assert state.command_channel(guild.id) == 777
        assert state.announce_channel(guild.id) == 778

    def test_addpointgiver_requires_admin(self, state, guild):
        giver = make_member(guild, 2, roles=[guild.get_role(ROLE_A)])
        state.add_point_giver_role(ROLE_A)
        interaction = _interaction(giver)

        cog = Tiers(_bot(state))
        run_async(cog.addpointgiver.callback(cog, interaction, guild.get_role(ROLE_B)))

        assert state.point_giver_roles() == {ROLE_A}
        interaction.response.send_message.assert_awaited_once()
        assert interaction.response.send_message.await_args.args[0].startswith("❌")
