"""
tierbot.config — YAML Configuration Loader
==========================================

Reads ``config.yaml`` for community identity and engine policy knobs.
Secrets (``DISCORD_TOKEN``, ``DATABASE_URL``) come from the environment,
never from this file.

Usage::

    from tierbot.config import load_config

    cfg = load_config()          # reads ./config.yaml by default
    print(cfg.bot_prefix)        # "!"
    print(cfg.no_tier_policy)    # NoTierPolicy.BARE
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

from tierbot.engine.reconciler import NoTierPolicy


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class TierBotConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Identity
    community_name: str

    # Discord
    bot_prefix: str = "!"

    # Engine policy
    leaderboard_size: int = 10
    no_tier_policy: NoTierPolicy = NoTierPolicy.BARE
    allow_negative_balances: bool = True
    delete_misplaced_commands: bool = True

    # Embedded status API (None disables it)
    status_port: int | None = 8080


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> TierBotConfig:
    """Read *path* and return a :class:`TierBotConfig` instance.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If ``community_name`` is missing.
    ValueError
        If ``no_tier_policy`` is not one of ``bare`` / ``restore_source``.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    status_port = raw.get("status_port", 8080)
    return TierBotConfig(
        community_name=raw["community_name"],
        bot_prefix=str(raw.get("bot_prefix", "!")),
        leaderboard_size=int(raw.get("leaderboard_size", 10)),
        no_tier_policy=NoTierPolicy(raw.get("no_tier_policy", NoTierPolicy.BARE.value)),
        allow_negative_balances=bool(raw.get("allow_negative_balances", True)),
        delete_misplaced_commands=bool(raw.get("delete_misplaced_commands", True)),
        status_port=int(status_port) if status_port else None,
    )
