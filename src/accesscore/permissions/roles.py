"""Role and tier ordering.

Both orders are total. Anything unrecognized ranks lowest, so comparisons
fail toward least privilege.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from .actor import normalize_actor
from .constants import ROLE_HIERARCHY, TIER_HIERARCHY, SubscriptionTier

_ROLE_RANKS: dict[str, int] = {role.value: idx for idx, role in enumerate(ROLE_HIERARCHY)}
_TIER_RANKS: dict[str, int] = {tier.value: idx for idx, tier in enumerate(TIER_HIERARCHY)}


def _value(item: Any) -> Any:
    return item.value if isinstance(item, Enum) else item


def rank(role: Any) -> int:
    """Rank of a role: public=0, basic_user=1, professional_user=2, super_admin=3.

    Unknown or missing roles rank as ``public``.
    """
    value = _value(role)
    if not isinstance(value, str):
        return 0
    return _ROLE_RANKS.get(value, 0)


def tier_rank(tier: Any) -> int:
    """Rank of a tier: free=0, professional=1, premium=2. Unknown → 0."""
    value = _value(tier)
    if not isinstance(value, str):
        return 0
    return _TIER_RANKS.get(value, 0)


def has_min_role(actor: Any, min_role: Any) -> bool:
    """True if the actor's role is at least ``min_role``."""
    return rank(normalize_actor(actor).role) >= rank(min_role)


def has_min_tier(actor: Any, min_tier: Any) -> bool:
    """True if the actor's subscription tier is at least ``min_tier``.

    A missing requirement (``None``) is always satisfied.
    """
    if min_tier is None:
        return True
    return tier_rank(normalize_actor(actor).tier) >= tier_rank(min_tier)


def needs_upgrade(actor: Any, required_tier: Any = SubscriptionTier.PROFESSIONAL) -> bool:
    """True if the actor's tier is below ``required_tier``."""
    return not has_min_tier(actor, required_tier)


__all__ = [
    "has_min_role",
    "has_min_tier",
    "needs_upgrade",
    "rank",
    "tier_rank",
]
