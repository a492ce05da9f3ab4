"""
tierbot.constants — Shared Constants & Reply Text
==================================================

Single source of truth for collection names, user-facing reply strings,
and help text.  Import from here instead of duplicating in cogs and
services.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Persisted collections (one JSON document each)
# ---------------------------------------------------------------------------
POINTS_DOC = "points"
POINT_GIVERS_DOC = "point_giver_roles"
TIERS_DOC = "tiers"
ANNOUNCE_CHANNELS_DOC = "announce_channels"
COMMAND_CHANNELS_DOC = "command_channels"

# ---------------------------------------------------------------------------
# Engine defaults
# ---------------------------------------------------------------------------
DEFAULT_GRANT_AMOUNT = 1
DEFAULT_LEADERBOARD_SIZE = 10

# ---------------------------------------------------------------------------
# Replies
# ---------------------------------------------------------------------------
MSG_NO_PERMISSION = "❌ No permission."
MSG_ADMINS_ONLY = "❌ Admins only."
MSG_POINTS_GIVEN = "✅ Points given."
MSG_POINTS_RESET = "♻ Points reset."
MSG_UPGRADE_SET = "✅ Upgrade path set."
MSG_UPGRADE_REMOVED = "✅ Upgrade removed."
MSG_POINT_GIVER_ADDED = "✅ Point giver role added."
MSG_COMMAND_CHANNEL_SET = "\U0001f6e0 Command channel set."
MSG_ANNOUNCE_CHANNEL_SET = "\U0001f4e2 Announcement channel set."
MSG_WRONG_CHANNEL = "❌ Commands can only be used in <#{channel_id}>"
MSG_NO_COMMAND_CHANNEL = "❌ No command channel has been set up yet."

PROMOTION_TEXT = "\U0001f389 <@{user_id}> is now **{role_name}**!"

# ---------------------------------------------------------------------------
# Usage hints (shown for malformed input)
# ---------------------------------------------------------------------------
USAGE: dict[str, str] = {
    "points": "{prefix}points [@user]",
    "givepoints": "{prefix}givepoints @user... [amount]",
    "restorepoints": "{prefix}restorepoints @user...",
    "showpoints": "{prefix}showpoints [@role]",
    "upgrade": "{prefix}upgrade @oldRole @newRole <points>",
    "removeupgrade": "{prefix}removeupgrade @oldRole @newRole",
    "addpointgiver": "{prefix}addpointgiver @role",
    "setcommandchannel": "{prefix}setcommandchannel",
    "setannouncechannel": "{prefix}setannouncechannel",
    "help": "{prefix}help",
}

# ---------------------------------------------------------------------------
# Help text, grouped by the capability needed to use the command
# ---------------------------------------------------------------------------
HELP_TITLE = "**Discord Points Bot Commands**"

HELP_EVERYONE: list[tuple[str, str]] = [
    ("points [user]", "Show your or another user's points."),
]

HELP_PRIVILEGED: list[tuple[str, str]] = [
    ("givepoints <user> [amount]", "Give points."),
    ("restorepoints <user>", "Reset points."),
    ("upgrade <oldRole> <newRole> <points>", "Create upgrade path."),
    ("removeupgrade <oldRole> <newRole>", "Remove upgrade path."),
    ("showpoints [role]", "Leaderboard."),
]

HELP_ADMIN: list[tuple[str, str]] = [
    ("addpointgiver <role>", "Add a point giver role."),
    ("setcommandchannel", "Set command channel."),
    ("setannouncechannel", "Set announcement channel."),
]
