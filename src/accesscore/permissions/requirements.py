"""Requirement index and capability categories.

Advisory metadata only: the index tells the upgrade advisor what a denied
capability would take. It never grants or denies anything; the access
matrix is the single authority.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional

from .constants import Capabilities, Limits, ProfessionalType, Role, SubscriptionTier

_R = Role
_T = SubscriptionTier
_P = ProfessionalType
_C = Capabilities


def _value(item: Any) -> Optional[str]:
    if item is None:
        return None
    return item.value if isinstance(item, Enum) else str(item)


@dataclass(frozen=True)
class RequirementDescriptor:
    """Minimal profile expected to unlock a capability.

    Attributes:
        min_role: Lowest role that can have the capability.
        min_tier: Lowest subscription tier, or None if any tier will do.
        type: Required professional type, or None if any type will do.
    """

    min_role: str = _R.BASIC_USER.value
    min_tier: Optional[str] = None
    type: Optional[str] = None

    @classmethod
    def create(cls, min_role: Any = None, min_tier: Any = None, type: Any = None) -> RequirementDescriptor:
        return cls(
            min_role=_value(min_role) or _R.BASIC_USER.value,
            min_tier=_value(min_tier),
            type=_value(type),
        )

    def to_dict(self) -> dict[str, str]:
        data = {"minRole": self.min_role}
        if self.min_tier is not None:
            data["minTier"] = self.min_tier
        if self.type is not None:
            data["type"] = self.type
        return data


class RequirementIndex:
    """Immutable ``capability → RequirementDescriptor`` map."""

    __slots__ = ("_index",)

    def __init__(self, index: Mapping[str, RequirementDescriptor]) -> None:
        self._index: Mapping[str, RequirementDescriptor] = MappingProxyType(dict(index))

    @classmethod
    def from_dict(cls, data: Mapping[str, Mapping[str, Any]]) -> RequirementIndex:
        """Build from ``{capability: {"minRole", "minTier", "type"}}``.

        Snake-case keys (``min_role``, ``min_tier``) are accepted as well.
        """
        index = {}
        for capability, entry in data.items():
            entry = entry or {}
            index[str(capability)] = RequirementDescriptor.create(
                min_role=entry.get("minRole", entry.get("min_role")),
                min_tier=entry.get("minTier", entry.get("min_tier")),
                type=entry.get("type"),
            )
        return cls(index)

    def to_dict(self) -> dict[str, dict[str, str]]:
        return {capability: req.to_dict() for capability, req in sorted(self._index.items())}

    def get(self, capability: Any) -> Optional[RequirementDescriptor]:
        if not isinstance(capability, str):
            return None
        return self._index.get(capability)

    def __contains__(self, capability: object) -> bool:
        return capability in self._index

    def __iter__(self) -> Iterator[str]:
        return iter(self._index)

    def __len__(self) -> int:
        return len(self._index)


# ── Built-in Requirements ───────────────────────────────

FEATURE_REQUIREMENTS: dict[str, RequirementDescriptor] = {
    # Available to every authenticated user
    _C.VIEW_LISTINGS: RequirementDescriptor.create(_R.BASIC_USER),
    _C.SAVE_PROPERTIES: RequirementDescriptor.create(_R.BASIC_USER),
    _C.CONTACT_PROFESSIONALS: RequirementDescriptor.create(_R.BASIC_USER),
    # Professional plan
    _C.LIST_PROPERTIES: RequirementDescriptor.create(_R.PROFESSIONAL_USER, _T.PROFESSIONAL),
    _C.MANAGE_LISTINGS: RequirementDescriptor.create(_R.PROFESSIONAL_USER, _T.PROFESSIONAL),
    _C.VIEW_ANALYTICS: RequirementDescriptor.create(_R.PROFESSIONAL_USER, _T.PROFESSIONAL),
    # Broker
    _C.MANAGE_AGENTS: RequirementDescriptor.create(_R.PROFESSIONAL_USER, _T.PROFESSIONAL, _P.BROKER),
    _C.COMPANY_BRANDING: RequirementDescriptor.create(_R.PROFESSIONAL_USER, _T.PROFESSIONAL, _P.BROKER),
    # Premium only
    _C.ADVANCED_ANALYTICS: RequirementDescriptor.create(_R.PROFESSIONAL_USER, _T.PREMIUM),
    _C.API_ACCESS: RequirementDescriptor.create(_R.PROFESSIONAL_USER, _T.PREMIUM),
    _C.WHITE_LABEL: RequirementDescriptor.create(_R.PROFESSIONAL_USER, _T.PREMIUM),
}

DEFAULT_REQUIREMENTS = RequirementIndex(FEATURE_REQUIREMENTS)


# ── Categories ──────────────────────────────────────────
# Grouping for pricing pages and upgrade prompts.


@dataclass(frozen=True)
class CapabilityCategory:
    key: str
    label: str
    capabilities: tuple[str, ...]


CAPABILITY_CATEGORIES: tuple[CapabilityCategory, ...] = (
    CapabilityCategory(
        "basic",
        "Basic Features",
        (_C.VIEW_LISTINGS, _C.VIEW_PUBLIC_PROFILES, _C.SAVE_PROPERTIES, _C.ACCESS_DASHBOARD),
    ),
    CapabilityCategory(
        "agent",
        "Agent Features",
        (_C.LIST_PROPERTIES, _C.MANAGE_LISTINGS, _C.VIEW_ANALYTICS, Limits.FEATURED_LISTINGS),
    ),
    CapabilityCategory(
        "broker",
        "Broker Features",
        (_C.MANAGE_AGENTS, _C.COMPANY_BRANDING, _C.EXPORT_CONTACTS, _C.CRM_ACCESS),
    ),
    CapabilityCategory(
        "investor",
        "Investor Features",
        (_C.PORTFOLIO_MANAGEMENT, _C.FRACTIONAL_INVESTING, _C.ADVANCED_ANALYTICS),
    ),
    CapabilityCategory(
        "premium",
        "Premium Features",
        (_C.API_ACCESS, _C.WHITE_LABEL, _C.CUSTOM_DOMAIN, _C.EMAIL_CAMPAIGNS),
    ),
)


def category_for(capability: str) -> Optional[CapabilityCategory]:
    """First category listing ``capability``, or None."""
    for category in CAPABILITY_CATEGORIES:
        if capability in category.capabilities:
            return category
    return None


__all__ = [
    "CAPABILITY_CATEGORIES",
    "CapabilityCategory",
    "DEFAULT_REQUIREMENTS",
    "FEATURE_REQUIREMENTS",
    "RequirementDescriptor",
    "RequirementIndex",
    "category_for",
]
