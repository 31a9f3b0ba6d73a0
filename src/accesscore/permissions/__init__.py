"""Feature-access policy and resolution.

Defines:
- Role / SubscriptionTier / ProfessionalType: the three actor dimensions
- FEATURE_MATRIX / AccessMatrix: role → tier → type → capability map
- FEATURE_REQUIREMENTS / RequirementIndex: advisory upgrade metadata
- AccessResolver: resolve() and limit() over the current policy
- UpgradeAdvisor: turn a denial into an upgrade suggestion
- PolicyStore: the current policy, replaced atomically on reload
"""

from .access import (
    AccessDecision,
    AccessResolver,
    BatchDecision,
    available_capabilities,
    limit,
    resolve,
    resolve_many,
)
from .actor import ActorDescriptor, normalize_actor
from .advisor import (
    UpgradeAdvisor,
    UpgradeSuggestion,
    UpgradeType,
    find_advice_gaps,
    suggest,
    upgrade_message,
)
from .constants import (
    ROLE_HIERARCHY,
    TIER_HIERARCHY,
    UNLIMITED,
    WILDCARD,
    Capabilities,
    Limits,
    ProfessionalType,
    ReasonCode,
    Role,
    SubscriptionTier,
)
from .matrix import (
    DEFAULT_MATRIX,
    FEATURE_MATRIX,
    REACHABLE_PROFILES,
    AccessMatrix,
    find_monotonicity_violations,
    validate_matrix,
)
from .requirements import (
    CAPABILITY_CATEGORIES,
    DEFAULT_REQUIREMENTS,
    FEATURE_REQUIREMENTS,
    CapabilityCategory,
    RequirementDescriptor,
    RequirementIndex,
    category_for,
)
from .roles import has_min_role, has_min_tier, needs_upgrade, rank, tier_rank
from .store import (
    DEFAULT_POLICY,
    Policy,
    PolicyStore,
    get_policy_store,
    load_policy,
    policy_from_dict,
    set_policy_store,
)

__all__ = [
    "AccessDecision",
    "AccessMatrix",
    "AccessResolver",
    "ActorDescriptor",
    "BatchDecision",
    "CAPABILITY_CATEGORIES",
    "Capabilities",
    "CapabilityCategory",
    "DEFAULT_MATRIX",
    "DEFAULT_POLICY",
    "DEFAULT_REQUIREMENTS",
    "FEATURE_MATRIX",
    "FEATURE_REQUIREMENTS",
    "Limits",
    "Policy",
    "PolicyStore",
    "ProfessionalType",
    "REACHABLE_PROFILES",
    "ROLE_HIERARCHY",
    "ReasonCode",
    "RequirementDescriptor",
    "RequirementIndex",
    "Role",
    "SubscriptionTier",
    "TIER_HIERARCHY",
    "UNLIMITED",
    "UpgradeAdvisor",
    "UpgradeSuggestion",
    "UpgradeType",
    "WILDCARD",
    "available_capabilities",
    "category_for",
    "find_advice_gaps",
    "find_monotonicity_violations",
    "get_policy_store",
    "has_min_role",
    "has_min_tier",
    "limit",
    "load_policy",
    "needs_upgrade",
    "normalize_actor",
    "policy_from_dict",
    "rank",
    "resolve",
    "resolve_many",
    "set_policy_store",
    "suggest",
    "tier_rank",
    "upgrade_message",
    "validate_matrix",
]
