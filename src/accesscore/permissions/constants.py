"""Role, tier, and capability constants.

Provides:
- ``Role``: authentication role, totally ordered by ``ROLE_HIERARCHY``.
- ``SubscriptionTier``: paid plan, totally ordered by ``TIER_HIERARCHY``.
- ``ProfessionalType``: optional specialization, unordered.
- ``ReasonCode``: diagnostic reason attached to every decision.
- ``Capabilities`` / ``Limits``: canonical capability and limit keys.
"""

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Coarse authentication role."""

    PUBLIC = "public"
    BASIC_USER = "basic_user"
    PROFESSIONAL_USER = "professional_user"
    SUPER_ADMIN = "super_admin"


# Lowest to highest; index is the rank.
ROLE_HIERARCHY: tuple[Role, ...] = (
    Role.PUBLIC,
    Role.BASIC_USER,
    Role.PROFESSIONAL_USER,
    Role.SUPER_ADMIN,
)


class SubscriptionTier(str, Enum):
    """Subscription plan."""

    FREE = "free"
    PROFESSIONAL = "professional"  # Monthly $29 / yearly $290
    PREMIUM = "premium"  # Monthly $99 / yearly $990


TIER_HIERARCHY: tuple[SubscriptionTier, ...] = (
    SubscriptionTier.FREE,
    SubscriptionTier.PROFESSIONAL,
    SubscriptionTier.PREMIUM,
)


class ProfessionalType(str, Enum):
    """Professional specialization. Actors without one carry ``None``."""

    AGENT = "agent"
    BROKER = "broker"
    INVESTOR = "investor"
    REALTOR_PARTNER = "realtor_partner"


class ReasonCode(str, Enum):
    """Why a decision came out the way it did.

    Reason codes drive messaging only. Security decisions must branch on
    ``AccessDecision.allowed`` and nothing finer.
    """

    # Allowed
    ADMIN = "admin"
    FULL_ACCESS = "full_access"
    FEATURE_AVAILABLE = "feature_available"

    # Denied
    INVALID_ROLE = "invalid_role"
    TIER_NOT_FOUND = "tier_not_found"
    TYPE_NOT_SUPPORTED = "type_not_supported"
    CAPABILITY_UNKNOWN = "capability_unknown"
    REQUIRES_UPGRADE = "requires_upgrade"

    @property
    def allowed(self) -> bool:
        return self in _ALLOWED_REASONS


_ALLOWED_REASONS = frozenset({ReasonCode.ADMIN, ReasonCode.FULL_ACCESS, ReasonCode.FEATURE_AVAILABLE})


# Matrix key granting every capability. Reserved for super_admin.
WILDCARD = "*"


class Capabilities:
    """Canonical boolean capability keys.

    Format: ``{resource}:{action}``, except for a few legacy flat keys
    (``white_label``) kept for compatibility with stored policy documents.
    """

    # ── Browsing ────────────────────────────────────────
    VIEW_LISTINGS = "view:listings"
    VIEW_PUBLIC_PROFILES = "view:public_profiles"
    VIEW_INTERESTS = "view:interests"
    VIEW_SAVED_SEARCHES = "view:saved_searches"
    CONTACT_FORM = "contact:form"
    CONTACT_PROFESSIONALS = "contact:professionals"
    SAVE_PROPERTIES = "save:properties"

    # ── Account ─────────────────────────────────────────
    ACCESS_DASHBOARD = "access:dashboard"
    MANAGE_OWN_PROFILE = "manage:own_profile"
    MANAGE_PROFESSIONAL_PROFILE = "manage:professional_profile"

    # ── Agent ───────────────────────────────────────────
    LIST_PROPERTIES = "list:properties"
    MANAGE_LISTINGS = "manage:listings"
    VIEW_ANALYTICS = "view:analytics"
    CRM_ACCESS = "crm:access"
    EMAIL_CAMPAIGNS = "email:campaigns"

    # ── Broker ──────────────────────────────────────────
    MANAGE_AGENTS = "manage:agents"
    COMPANY_BRANDING = "company:branding"
    EXPORT_CONTACTS = "export:contacts"

    # ── Investor ────────────────────────────────────────
    PORTFOLIO_MANAGEMENT = "portfolio:management"
    FRACTIONAL_INVESTING = "fractional:investing"
    EXPORT_PORTFOLIO = "export:portfolio"
    PERFORMANCE_REPORTS = "performance:reports"

    # ── Premium ─────────────────────────────────────────
    ADVANCED_ANALYTICS = "advanced:analytics"
    API_ACCESS = "api:access"
    WHITE_LABEL = "white_label"
    CUSTOM_DOMAIN = "custom:domain"


class Limits:
    """Numeric quota keys. ``-1`` means unlimited."""

    MAX_LISTINGS = "max_listings"
    MAX_AGENTS = "max_agents"
    FEATURED_LISTINGS = "featured:listings"

    ALL = frozenset({"max_listings", "max_agents", "featured:listings"})


UNLIMITED = -1


__all__ = [
    "Capabilities",
    "Limits",
    "ProfessionalType",
    "ROLE_HIERARCHY",
    "ReasonCode",
    "Role",
    "SubscriptionTier",
    "TIER_HIERARCHY",
    "UNLIMITED",
    "WILDCARD",
]
