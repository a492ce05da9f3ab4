"""
tierbot.bot.__main__ — Entry point for ``python -m tierbot.bot``
================================================================

Wiring:
1. Load .env (secrets).
2. Load config.yaml (community settings).
3. Create the SQLAlchemy engine and ensure tables exist.
4. Load the five persisted collections into the StateManager.
5. Create the TierBot and hand it config + engine + state.
6. Start the bot (blocking — runs the asyncio event loop).

Run with::

    python -m tierbot.bot
"""

from __future__ import annotations

import logging
import os
import sys

from dotenv import load_dotenv

from tierbot.bot.core import TierBot
from tierbot.config import load_config
from tierbot.database.engine import create_db_engine, init_db
from tierbot.engine.state import StateManager
from tierbot.services.store import DocumentStore

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("tierbot")


def main() -> None:
    """Bootstrap and run the bot."""

    # 1. Environment variables (secrets).
    load_dotenv()

    token = os.getenv("DISCORD_TOKEN")
    if not token or token == "your-discord-bot-token-here":
        logger.critical(
            "DISCORD_TOKEN is not set.  "
            "Copy .env.example → .env and paste your bot token."
        )
        sys.exit(1)

    # 2. Community configuration.
    cfg = load_config(os.getenv("TIERBOT_CONFIG", "config.yaml"))
    logger.info(
        "Config loaded — Community: %s (no-tier policy: %s)",
        cfg.community_name, cfg.no_tier_policy,
    )

    # 3. Database.
    engine = create_db_engine()
    init_db(engine)

    # 4. State.
    state = StateManager(
        DocumentStore(engine),
        allow_negative_balances=cfg.allow_negative_balances,
    )
    state.load_all()

    # 5. Bot.
    bot = TierBot(cfg=cfg, engine=engine, state=state)

    # 6. Run (blocks until Ctrl+C or SIGTERM).
    logger.info("Starting bot…")
    try:
        bot.run(token, log_handler=None)
    except KeyboardInterrupt:
        logger.info("Shutting down gracefully…")


if __name__ == "__main__":
    main()
