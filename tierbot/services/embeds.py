"""
tierbot.services.embeds — Discord embed builders
================================================

Layout only; callers supply the data.  Mentions inside an embed do not
ping anyone, so announcements put the ``<@id>`` text in the message
content and the embed carries the presentation.
"""

from __future__ import annotations

import discord


def build_promotion_embed(
    display_name: str,
    role_name: str,
    avatar_url: str | None = None,
    role_color: discord.Color | None = None,
) -> discord.Embed:
    """Tier promotion celebration card."""
    embed = discord.Embed(
        title="⬆️ Tier Up!",
        description=f"**{display_name}** reached **{role_name}**.",
        color=role_color if role_color and role_color.value else discord.Color.gold(),
    )
    if avatar_url:
        embed.set_thumbnail(url=avatar_url)
    return embed
