"""
tierbot.engine.reconciler — Role Reconciliation
================================================

Given the roles a member holds and their balance, work out which
tier-managed roles to strip and which to grant so the member ends up in
exactly the tier their balance implies.

Pure calculation, like the tier table.  Applying the delta against
Discord is :mod:`tierbot.services.role_service`'s job.

No-tier policy
--------------
When no rule's threshold is met the member can either hold no
tier-managed role at all (``BARE``) or get their base roles back
(``RESTORE_SOURCE``).  Base roles are the ``old_role_id`` values that are
not themselves the target of some other rule, so a chain A→B→C restores
only A.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass, field

from tierbot.engine.tiers import TierRule, managed_roles, resolve

__all__ = ["NoTierPolicy", "RoleDelta", "base_roles", "desired_roles", "reconcile"]


class NoTierPolicy(enum.StrEnum):
    """What a member holds when their balance meets no tier."""
    BARE = "bare"
    RESTORE_SOURCE = "restore_source"


@dataclass(frozen=True, slots=True)
class RoleDelta:
    """Role mutations needed to bring one member in line with their tier."""

    to_remove: frozenset[int] = field(default_factory=frozenset)
    to_add: frozenset[int] = field(default_factory=frozenset)
    tier: TierRule | None = None
    promoted_role_id: int | None = None

    @property
    def empty(self) -> bool:
        return not self.to_remove and not self.to_add


def base_roles(rules: Iterable[TierRule]) -> set[int]:
    """Source roles that no rule promotes *into*."""
    rules = list(rules)
    targets = {r.new_role_id for r in rules}
    return {r.old_role_id for r in rules if r.old_role_id not in targets}


def desired_roles(
    tier: TierRule | None,
    rules: Iterable[TierRule],
    policy: NoTierPolicy,
) -> set[int]:
    if tier is not None:
        return {tier.new_role_id}
    if policy is NoTierPolicy.RESTORE_SOURCE:
        return base_roles(rules)
    return set()


def reconcile(
    held_role_ids: Iterable[int],
    balance: int,
    rules: Iterable[TierRule],
    policy: NoTierPolicy = NoTierPolicy.BARE,
) -> RoleDelta:
    """Compute the minimal role delta for a member.

    Every tier-managed role the member holds that is not wanted is
    removed; wanted roles the member lacks are added.  Running this again
    after the delta has been applied yields an empty delta.

    ``promoted_role_id`` is set only when the resolved tier's role is
    newly granted, which is what drives the promotion announcement.
    """
    rules = list(rules)
    held = set(held_role_ids)
    universe = managed_roles(rules)

    tier = resolve(balance, rules)
    wanted = desired_roles(tier, rules, policy)

    to_remove = (held & universe) - wanted
    to_add = wanted - held
    promoted = tier.new_role_id if tier is not None and tier.new_role_id in to_add else None

    return RoleDelta(
        to_remove=frozenset(to_remove),
        to_add=frozenset(to_add),
        tier=tier,
        promoted_role_id=promoted,
    )
