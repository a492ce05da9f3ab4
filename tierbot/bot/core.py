"""
tierbot.bot.core — Bot Instance & Cog Loader
============================================

Defines :class:`TierBot`, a ``commands.Bot`` subclass that:

1. Carries the shared config, DB engine, state manager, role service and
   dispatcher so every Cog can reach them via ``self.bot.*``.
2. Loads every Cog listed in :data:`EXTENSIONS`.
3. Starts the embedded status API (keep-alive HTTP listener) when
   ``status_port`` is configured.
4. Syncs the slash-command tree on startup (guild-scoped for dev, global
   for production — controlled by the ``DEV_GUILD_ID`` env var).
5. Starts the announcement throttle drain task.

The prefix-command machinery of ``commands.Bot`` is unused: text
commands are parsed by :mod:`tierbot.engine.actions` so both surfaces
share one dispatcher.
"""

from __future__ import annotations

import asyncio
import logging
import os

import discord
import uvicorn
from discord.ext import commands
from sqlalchemy import Engine

from tierbot.config import TierBotConfig
from tierbot.engine.state import StateManager
from tierbot.services.announcement_service import start_queue, stop_queue
from tierbot.services.dispatcher import Dispatcher
from tierbot.services.role_service import RoleService

logger = logging.getLogger(__name__)

# Cog modules to load on startup.
EXTENSIONS: list[str] = [
    "tierbot.bot.cogs.text_commands",
    "tierbot.bot.cogs.points",
    "tierbot.bot.cogs.tiers",
]


class TierBot(commands.Bot):
    """Custom Bot subclass that carries project-wide state.

    Parameters
    ----------
    cfg:
        The parsed :class:`TierBotConfig` from ``config.yaml``.
    engine:
        A SQLAlchemy :class:`Engine` holding the document store.
    state:
        The loaded :class:`StateManager`.
    """

    def __init__(self, cfg: TierBotConfig, engine: Engine, state: StateManager) -> None:
        # Privileged intents (must enable in Developer Portal):
        #   MESSAGE_CONTENT: text commands
        #   GUILD_MEMBERS:   member cache for role updates and leaderboards
        intents = discord.Intents.default()
        intents.message_content = True
        intents.members = True
        intents.presences = False

        super().__init__(
            # Text commands are handled by the TextCommands cog, not by the
            # commands extension; a mention prefix keeps discord.py quiet.
            command_prefix=commands.when_mentioned,
            intents=intents,
            description=f"{cfg.community_name} — points & tiers",
            help_command=None,
        )

        self.cfg = cfg
        self.engine = engine
        self.state = state
        self.roles = RoleService(state, cfg.no_tier_policy)
        self.dispatcher = Dispatcher(
            state, self.roles, leaderboard_size=cfg.leaderboard_size
        )

        self._status_server: uvicorn.Server | None = None
        self._status_task: asyncio.Task | None = None

    # -----------------------------------------------------------------------
    # Lifecycle hooks
    # -----------------------------------------------------------------------
    async def setup_hook(self) -> None:
        """Load Cog extensions and start the status API.

        A Cog that fails to load is logged and skipped.
        """
        for ext in EXTENSIONS:
            try:
                await self.load_extension(ext)
                logger.info("Loaded extension: %s", ext)
            except Exception as exc:
                logger.error("Failed to load extension %s: %s", ext, exc)

        if self.cfg.status_port:
            await self._start_status_api(self.cfg.status_port)

    async def on_ready(self) -> None:
        assert self.user is not None  # guaranteed after on_ready
        logger.info("Logged in as %s (ID: %s)", self.user.name, self.user.id)

        dev_guild_id = os.getenv("DEV_GUILD_ID")
        if dev_guild_id:
            guild = discord.Object(id=int(dev_guild_id))
            self.tree.copy_global_to(guild=guild)
            synced = await self.tree.sync(guild=guild)
            logger.info("Synced %d commands to dev guild %s", len(synced), dev_guild_id)
        else:
            synced = await self.tree.sync()
            logger.info("Synced %d commands globally", len(synced))

        start_queue(asyncio.get_running_loop())
        logger.info("Announcement throttle drain task started.")

    async def close(self) -> None:
        logger.info("Bot shutting down…")
        stop_queue()
        if self._status_server is not None:
            self._status_server.should_exit = True
        if self._status_task is not None:
            await asyncio.gather(self._status_task, return_exceptions=True)
        await super().close()

    # -----------------------------------------------------------------------
    # Embedded status API
    # -----------------------------------------------------------------------
    async def _start_status_api(self, port: int) -> None:
        from tierbot.api.main import create_app

        app = create_app(self.engine)
        config = uvicorn.Config(app, host="0.0.0.0", port=port, log_level="warning")
        self._status_server = uvicorn.Server(config)
        self._status_task = asyncio.create_task(
            self._status_server.serve(), name="status-api"
        )
        logger.info("Status API listening on port %d", port)
