"""
tests/test_config.py — YAML configuration loading
==================================================
"""

from __future__ import annotations

from pathlib import Path

import pytest

from tierbot.config import TierBotConfig, load_config
from tierbot.engine.reconciler import NoTierPolicy


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_minimal_config_uses_defaults(tmp_path):
    cfg = load_config(_write(tmp_path, 'community_name: "Test"\n'))
    assert cfg == TierBotConfig(community_name="Test")
    assert cfg.no_tier_policy is NoTierPolicy.BARE
    assert cfg.status_port == 8080


def test_full_config(tmp_path):
    cfg = load_config(_write(tmp_path, (
        'community_name: "Test"\n'
        'bot_prefix: "?"\n'
        "leaderboard_size: 5\n"
        "no_tier_policy: restore_source\n"
        "allow_negative_balances: false\n"
        "delete_misplaced_commands: false\n"
        "status_port: null\n"
    )))
    assert cfg.bot_prefix == "?"
    assert cfg.leaderboard_size == 5
    assert cfg.no_tier_policy is NoTierPolicy.RESTORE_SOURCE
    assert cfg.allow_negative_balances is False
    assert cfg.delete_misplaced_commands is False
    assert cfg.status_port is None


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError, match="config.yaml.example"):
        load_config(tmp_path / "nope.yaml")


def test_missing_community_name(tmp_path):
    with pytest.raises(KeyError):
        load_config(_write(tmp_path, "bot_prefix: '!'\n"))


def test_unknown_policy(tmp_path):
    with pytest.raises(ValueError):
        load_config(_write(tmp_path, 'community_name: "T"\nno_tier_policy: strip\n'))


def test_example_config_loads():
    example = Path(__file__).resolve().parent.parent / "config.yaml.example"
    cfg = load_config(example)
    assert cfg.community_name == "My Community"
