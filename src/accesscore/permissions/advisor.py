"""Upgrade advice for denied decisions.

Turns a ``requires_upgrade`` denial into an actionable suggestion: buy a
higher subscription tier, or switch professional type. Suggestions come
from the requirement index and never change the decision itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .access import AccessDecision
from .actor import ActorDescriptor, normalize_actor
from .constants import ReasonCode, SubscriptionTier
from .matrix import REACHABLE_PROFILES
from .roles import tier_rank
from .store import Policy, PolicyStore, get_policy_store


class UpgradeType:
    """Kind of change that would unlock a capability."""

    SUBSCRIPTION = "subscription"
    ROLE = "role"


@dataclass(frozen=True)
class UpgradeSuggestion:
    """What the actor could change to gain a denied capability."""

    can_upgrade: bool
    upgrade_type: Optional[str] = None
    current_tier: Optional[str] = None
    target_tier: Optional[str] = None
    current_type: Optional[str] = None
    target_type: Optional[str] = None
    reason: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"canUpgrade": self.can_upgrade}
        if self.upgrade_type is not None:
            data["upgradeType"] = self.upgrade_type
        if self.upgrade_type == UpgradeType.SUBSCRIPTION:
            data["currentTier"] = self.current_tier
            data["targetTier"] = self.target_tier
        elif self.upgrade_type == UpgradeType.ROLE:
            data["currentType"] = self.current_type
            data["targetType"] = self.target_type
        if self.reason is not None:
            data["reason"] = self.reason
        return data


NO_UPGRADE = UpgradeSuggestion(can_upgrade=False)


class UpgradeAdvisor:
    """Derive upgrade suggestions from the requirement index."""

    def __init__(self, store: Optional[PolicyStore] = None) -> None:
        self._store = store

    @property
    def store(self) -> PolicyStore:
        return self._store if self._store is not None else get_policy_store()

    def suggest(self, decision: AccessDecision, actor: Any, *, policy: Optional[Policy] = None) -> UpgradeSuggestion:
        """Suggest an upgrade for a denied decision.

        - Not ``requires_upgrade`` → no suggestion.
        - Tier below the indexed minimum → subscription upgrade.
        - Type differs from the indexed type → switch professional type.
        - Otherwise the actor already meets the requirement, which means
          matrix and index disagree.
        """
        if decision.reason_code != ReasonCode.REQUIRES_UPGRADE:
            return NO_UPGRADE

        actor = normalize_actor(actor)
        if policy is None:
            policy = self.store.current()
        requirement = policy.requirements.get(decision.capability)
        if requirement is None:
            return UpgradeSuggestion(can_upgrade=False, reason="requirement_unknown")

        if requirement.min_tier is not None and tier_rank(actor.tier) < tier_rank(requirement.min_tier):
            return UpgradeSuggestion(
                can_upgrade=True,
                upgrade_type=UpgradeType.SUBSCRIPTION,
                current_tier=actor.tier,
                target_tier=requirement.min_tier,
            )

        if requirement.type is not None and actor.professional_type != requirement.type:
            return UpgradeSuggestion(
                can_upgrade=True,
                upgrade_type=UpgradeType.ROLE,
                current_type=actor.professional_type,
                target_type=requirement.type,
            )

        return UpgradeSuggestion(can_upgrade=False, reason="already has access")


def find_advice_gaps(policy: Policy) -> list[tuple[str, str]]:
    """Denied capabilities whose indexed requirement the profile already meets.

    Each entry is ``("role/tier/type", capability)``. For these the
    advisor can only answer "already has access", so matrix and index
    disagree. Advisory: a gap never changes a decision.
    """
    advisor = UpgradeAdvisor()
    gaps: list[tuple[str, str]] = []
    for key in REACHABLE_PROFILES:
        _, caps = policy.matrix.find(*key)
        if caps is None:
            continue
        actor = ActorDescriptor.create(*key)
        for name in sorted(caps):
            if caps[name] is not False or name not in policy.requirements:
                continue
            decision = AccessDecision(False, ReasonCode.REQUIRES_UPGRADE, name)
            if not advisor.suggest(decision, actor, policy=policy).can_upgrade:
                gaps.append((f"{key[0]}/{key[1]}/{key[2]}", name))
    return gaps


def upgrade_message(suggestion: UpgradeSuggestion) -> str:
    """User-facing sentence for an upgrade prompt."""
    if suggestion.upgrade_type == UpgradeType.SUBSCRIPTION:
        if suggestion.target_tier == SubscriptionTier.PROFESSIONAL.value:
            return "Upgrade to Professional plan to unlock this feature and more."
        if suggestion.target_tier == SubscriptionTier.PREMIUM.value:
            return "This is a Premium feature. Upgrade to access advanced capabilities."

    if suggestion.upgrade_type == UpgradeType.ROLE and suggestion.target_type:
        label = suggestion.target_type.replace("_", " ")
        return f"This feature is available for {label}s. Switch your professional type or upgrade your plan."

    return "This feature is not available for your current plan. Upgrade to access more features."


_default_advisor = UpgradeAdvisor()


def suggest(decision: AccessDecision, actor: Any) -> UpgradeSuggestion:
    """Suggest against the process-wide policy store."""
    return _default_advisor.suggest(decision, actor)


__all__ = [
    "NO_UPGRADE",
    "UpgradeAdvisor",
    "UpgradeSuggestion",
    "UpgradeType",
    "find_advice_gaps",
    "suggest",
    "upgrade_message",
]
