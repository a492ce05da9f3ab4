"""
tierbot.engine.tiers — Tier Rules & Threshold Resolution
=========================================================

A tier rule says: once a member's balance reaches ``required_points``,
they should hold ``new_role_id`` (having come from ``old_role_id``).
At most one rule exists per (old, new) role pair.

Everything here is pure — no Discord I/O, no DB I/O.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

__all__ = ["TierRule", "add_or_replace", "managed_roles", "remove", "resolve"]


@dataclass(frozen=True, slots=True)
class TierRule:
    """One upgrade path: ``old_role_id`` → ``new_role_id`` at ``required_points``."""

    old_role_id: int
    new_role_id: int
    required_points: int

    @property
    def pair(self) -> tuple[int, int]:
        return self.old_role_id, self.new_role_id


def resolve(balance: int, rules: Iterable[TierRule]) -> TierRule | None:
    """Return the rule with the highest threshold not exceeding *balance*.

    Ties on ``required_points`` go to the first rule encountered.
    Returns ``None`` when no threshold is met.
    """
    best: TierRule | None = None
    for rule in rules:
        if rule.required_points > balance:
            continue
        if best is None or rule.required_points > best.required_points:
            best = rule
    return best


def add_or_replace(rules: Iterable[TierRule], rule: TierRule) -> list[TierRule]:
    """Drop any rule sharing *rule*'s (old, new) pair, then append *rule*."""
    kept = [r for r in rules if r.pair != rule.pair]
    kept.append(rule)
    return kept


def remove(
    rules: Iterable[TierRule], old_role_id: int, new_role_id: int
) -> tuple[list[TierRule], bool]:
    """Delete the rule for (old, new) if present.

    Returns ``(remaining_rules, removed)``.  A missing pair is not an error.
    """
    rules = list(rules)
    kept = [r for r in rules if r.pair != (old_role_id, new_role_id)]
    return kept, len(kept) != len(rules)


def managed_roles(rules: Iterable[TierRule]) -> set[int]:
    """Every role id that appears on either side of any rule."""
    roles: set[int] = set()
    for rule in rules:
        roles.add(rule.old_role_id)
        roles.add(rule.new_role_id)
    return roles
