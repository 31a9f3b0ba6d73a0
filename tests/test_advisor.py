"""Tests for upgrade suggestions and prompt messages."""

from __future__ import annotations

from accesscore.permissions import (
    CAPABILITY_CATEGORIES,
    DEFAULT_POLICY,
    DEFAULT_REQUIREMENTS,
    AccessDecision,
    AccessMatrix,
    Capabilities,
    Limits,
    Policy,
    PolicyStore,
    ReasonCode,
    RequirementDescriptor,
    RequirementIndex,
    UpgradeAdvisor,
    UpgradeSuggestion,
    UpgradeType,
    category_for,
    find_advice_gaps,
    resolve,
    suggest,
    upgrade_message,
)

BASIC = {"role": "basic_user", "subscription_tier": "free"}
AGENT = {"role": "professional_user", "subscription_tier": "professional", "professional_type": "agent"}
PREMIUM_AGENT = {"role": "professional_user", "subscription_tier": "premium", "professional_type": "agent"}
INVESTOR = {"role": "professional_user", "subscription_tier": "professional", "professional_type": "investor"}


class TestUpgradeAdvisor:
    """Tests for UpgradeAdvisor.suggest."""

    def test_subscription_upgrade(self) -> None:
        decision = resolve(BASIC, Capabilities.LIST_PROPERTIES)
        suggestion = suggest(decision, BASIC)
        assert suggestion.can_upgrade
        assert suggestion.upgrade_type == UpgradeType.SUBSCRIPTION
        assert suggestion.current_tier == "free"
        assert suggestion.target_tier == "professional"

    def test_premium_upgrade(self) -> None:
        decision = resolve(AGENT, Capabilities.API_ACCESS)
        suggestion = suggest(decision, AGENT)
        assert suggestion.to_dict() == {
            "canUpgrade": True,
            "upgradeType": "subscription",
            "currentTier": "professional",
            "targetTier": "premium",
        }

    def test_type_switch(self) -> None:
        decision = resolve(AGENT, Capabilities.MANAGE_AGENTS)
        suggestion = suggest(decision, AGENT)
        assert suggestion.to_dict() == {
            "canUpgrade": True,
            "upgradeType": "role",
            "currentType": "agent",
            "targetType": "broker",
        }

    def test_tier_checked_before_type(self) -> None:
        """A free user lacking a broker feature is told to subscribe first."""
        decision = resolve(BASIC, Capabilities.MANAGE_AGENTS)
        suggestion = suggest(decision, BASIC)
        assert suggestion.upgrade_type == UpgradeType.SUBSCRIPTION
        assert suggestion.target_tier == "professional"

    def test_higher_tier_satisfies_lower_minimum(self) -> None:
        """Premium meets a professional minimum; only the type differs."""
        decision = resolve(PREMIUM_AGENT, Capabilities.MANAGE_AGENTS)
        suggestion = suggest(decision, PREMIUM_AGENT)
        assert suggestion.upgrade_type == UpgradeType.ROLE
        assert suggestion.target_type == "broker"

    def test_allowed_decision_has_no_suggestion(self) -> None:
        decision = resolve(AGENT, Capabilities.LIST_PROPERTIES)
        assert suggest(decision, AGENT) == UpgradeSuggestion(can_upgrade=False)

    def test_non_upgrade_denials_have_no_suggestion(self) -> None:
        for reason in (
            ReasonCode.INVALID_ROLE,
            ReasonCode.TIER_NOT_FOUND,
            ReasonCode.TYPE_NOT_SUPPORTED,
            ReasonCode.CAPABILITY_UNKNOWN,
        ):
            decision = AccessDecision(False, reason, Capabilities.LIST_PROPERTIES)
            assert suggest(decision, BASIC).to_dict() == {"canUpgrade": False}

    def test_unindexed_capability(self) -> None:
        decision = resolve(AGENT, Capabilities.EXPORT_CONTACTS)
        assert decision.reason_code == ReasonCode.REQUIRES_UPGRADE
        suggestion = suggest(decision, AGENT)
        assert not suggestion.can_upgrade
        assert suggestion.reason == "requirement_unknown"

    def test_already_has_access(self) -> None:
        """Investor meets the indexed minimum for list:properties but the matrix denies it."""
        decision = resolve(INVESTOR, Capabilities.LIST_PROPERTIES)
        suggestion = suggest(decision, INVESTOR)
        assert suggestion.to_dict() == {"canUpgrade": False, "reason": "already has access"}

    def test_custom_store(self) -> None:
        requirements = RequirementIndex({"save:properties": RequirementDescriptor.create("basic_user", "premium")})
        store = PolicyStore(Policy(DEFAULT_POLICY.matrix, requirements), strict=False)
        decision = AccessDecision(False, ReasonCode.REQUIRES_UPGRADE, "save:properties")
        suggestion = UpgradeAdvisor(store).suggest(decision, BASIC)
        assert suggestion.target_tier == "premium"

    def test_suggestion_never_changes_decision(self) -> None:
        decision = resolve(BASIC, Capabilities.LIST_PROPERTIES)
        suggest(decision, BASIC)
        assert decision.allowed is False
        assert decision.reason_code == ReasonCode.REQUIRES_UPGRADE


class TestUpgradeMessage:
    """Tests for user-facing upgrade prompts."""

    def test_professional_message(self) -> None:
        suggestion = UpgradeSuggestion(True, UpgradeType.SUBSCRIPTION, "free", "professional")
        assert upgrade_message(suggestion) == "Upgrade to Professional plan to unlock this feature and more."

    def test_premium_message(self) -> None:
        suggestion = UpgradeSuggestion(True, UpgradeType.SUBSCRIPTION, "professional", "premium")
        assert upgrade_message(suggestion) == "This is a Premium feature. Upgrade to access advanced capabilities."

    def test_type_message(self) -> None:
        suggestion = UpgradeSuggestion(True, UpgradeType.ROLE, current_type="agent", target_type="realtor_partner")
        assert upgrade_message(suggestion) == (
            "This feature is available for realtor partners. Switch your professional type or upgrade your plan."
        )

    def test_fallback_message(self) -> None:
        assert upgrade_message(UpgradeSuggestion(False)) == (
            "This feature is not available for your current plan. Upgrade to access more features."
        )


class TestAdviceGaps:
    """Matrix and requirement index consistency."""

    def test_built_in_gaps(self) -> None:
        gaps = find_advice_gaps(DEFAULT_POLICY)
        assert gaps == [
            ("professional_user/professional/broker", "list:properties"),
            ("professional_user/professional/broker", "manage:listings"),
            ("professional_user/professional/investor", "list:properties"),
            ("professional_user/premium/agent", "api:access"),
            ("professional_user/premium/agent", "white_label"),
            ("professional_user/premium/broker", "list:properties"),
            ("professional_user/premium/broker", "manage:listings"),
            ("professional_user/premium/investor", "list:properties"),
        ]

    def test_basic_user_has_no_gaps(self) -> None:
        profiles = {profile for profile, _ in find_advice_gaps(DEFAULT_POLICY)}
        assert "basic_user/free/None" not in profiles

    def test_consistent_policy_has_no_gaps(self) -> None:
        matrix = AccessMatrix.from_nested({"basic_user": {"free": {None: {"list:properties": False}}}})
        policy = Policy(matrix, DEFAULT_REQUIREMENTS, source="test")
        assert find_advice_gaps(policy) == []


class TestCategories:
    """Tests for capability grouping."""

    def test_category_lookup(self) -> None:
        assert category_for(Capabilities.MANAGE_AGENTS).key == "broker"
        assert category_for(Limits.FEATURED_LISTINGS).key == "agent"
        assert category_for("teleport:users") is None

    def test_category_keys_unique(self) -> None:
        keys = [category.key for category in CAPABILITY_CATEGORIES]
        assert len(keys) == len(set(keys))

    def test_requirement_index_round_trip(self) -> None:
        rebuilt = RequirementIndex.from_dict(DEFAULT_REQUIREMENTS.to_dict())
        assert rebuilt.to_dict() == DEFAULT_REQUIREMENTS.to_dict()
        assert rebuilt.get(Capabilities.MANAGE_AGENTS) == RequirementDescriptor("professional_user", "professional", "broker")

    def test_requirement_index_snake_case(self) -> None:
        index = RequirementIndex.from_dict({"x": {"min_role": "professional_user", "min_tier": "premium"}})
        assert index.get("x") == RequirementDescriptor("professional_user", "premium", None)
        assert index.get(None) is None
