"""
tierbot.services.throttle — Sliding-window announcement throttle
================================================================

A burst of grants (``!givepoints @a @b @c … 50``) can promote many
members at once.  This caps promotion messages per channel and queues
the overflow for a background task that drains it every ~10 seconds.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import defaultdict, deque

import discord
from discord.abc import Messageable

logger = logging.getLogger(__name__)


class AnnouncementThrottle:
    """At most ``max_per_window`` messages per channel per ``window`` seconds."""

    def __init__(self, max_per_window: int = 5, window: int = 60, drain_interval: float = 10) -> None:
        self.max_per_window = max_per_window
        self.window = window
        self.drain_interval = drain_interval
        self._sent: dict[int, deque[float]] = defaultdict(deque)
        self._pending: dict[int, deque[tuple[Messageable, str, discord.Embed]]] = defaultdict(deque)
        self._drain_task: asyncio.Task | None = None

    def is_allowed(self, channel_id: int) -> bool:
        """Claim a send slot for *channel_id* if one is free."""
        now = time.monotonic()
        sent = self._sent[channel_id]
        while sent and sent[0] <= now - self.window:
            sent.popleft()
        if len(sent) >= self.max_per_window:
            return False
        sent.append(now)
        return True

    def enqueue(
        self, channel_id: int, channel: Messageable, content: str, embed: discord.Embed
    ) -> None:
        self._pending[channel_id].append((channel, content, embed))
        logger.debug(
            "Announcement queued for channel %d (%d pending)",
            channel_id, len(self._pending[channel_id]),
        )

    def pending(self, channel_id: int) -> int:
        return len(self._pending.get(channel_id, ()))

    async def drain_once(self) -> None:
        """Send queued messages for channels whose window has room again."""
        for channel_id, queue in list(self._pending.items()):
            while queue and self.is_allowed(channel_id):
                channel, content, embed = queue.popleft()
                try:
                    await channel.send(content, embed=embed)
                except discord.HTTPException:
                    logger.exception("Failed to send queued announcement to channel %d", channel_id)

    def start(self, loop: asyncio.AbstractEventLoop) -> None:
        if self._drain_task is not None:
            return

        async def _drain_loop() -> None:
            while True:
                await asyncio.sleep(self.drain_interval)
                try:
                    await self.drain_once()
                except Exception:
                    logger.exception("Announcement drain error")

        self._drain_task = loop.create_task(_drain_loop(), name="announce-drain")

    def stop(self) -> None:
        if self._drain_task:
            self._drain_task.cancel()
            self._drain_task = None
