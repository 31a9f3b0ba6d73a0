"""Access matrix: role → tier → professional type → capability map.

Provides:
- ``FEATURE_MATRIX``: the built-in policy table in nested form.
- ``AccessMatrix``: immutable table keyed by ``(role, tier, type)``.
- ``REACHABLE_PROFILES``: every combination user management can produce.
- ``validate_matrix()`` / ``find_monotonicity_violations()``: load-time
  completeness checks.

Values are ``True``/``False`` for capabilities and integers for limits
(``-1`` = unlimited). A combination absent from the table is an
intentional denial, never an implicit grant.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional, Union

from .constants import (
    WILDCARD,
    Capabilities,
    Limits,
    ProfessionalType,
    ReasonCode,
    Role,
    SubscriptionTier,
)

CapabilityValue = Union[bool, int]
MatrixKey = tuple[str, str, Optional[str]]

# Shorthand aliases
_R = Role
_T = SubscriptionTier
_P = ProfessionalType
_C = Capabilities
_L = Limits

# ── Built-in Table ──────────────────────────────────────
# basic_user only exists on the free tier: buying a plan promotes the
# account to professional_user. super_admin is resolved before lookup and
# carries the wildcard only so the table documents it.

FEATURE_MATRIX: dict[Any, dict[Any, dict[Any, dict[str, CapabilityValue]]]] = {
    _R.PUBLIC: {
        _T.FREE: {
            None: {
                _C.VIEW_LISTINGS: True,
                _C.VIEW_PUBLIC_PROFILES: True,
                _C.CONTACT_FORM: True,
            },
        },
    },
    _R.BASIC_USER: {
        _T.FREE: {
            None: {
                _C.VIEW_LISTINGS: True,
                _C.VIEW_PUBLIC_PROFILES: True,
                _C.SAVE_PROPERTIES: True,
                _C.CONTACT_PROFESSIONALS: True,
                _C.ACCESS_DASHBOARD: True,
                _C.MANAGE_OWN_PROFILE: True,
                _C.VIEW_INTERESTS: True,
                _C.VIEW_SAVED_SEARCHES: True,
                # Professional features
                _C.MANAGE_PROFESSIONAL_PROFILE: False,
                _C.LIST_PROPERTIES: False,
                _C.MANAGE_LISTINGS: False,
                _C.VIEW_ANALYTICS: False,
                _C.MANAGE_AGENTS: False,
                _C.PORTFOLIO_MANAGEMENT: False,
            },
        },
    },
    _R.PROFESSIONAL_USER: {
        _T.PROFESSIONAL: {
            _P.AGENT: {
                _C.VIEW_LISTINGS: True,
                _C.VIEW_PUBLIC_PROFILES: True,
                _C.SAVE_PROPERTIES: True,
                _C.CONTACT_PROFESSIONALS: True,
                _C.ACCESS_DASHBOARD: True,
                _C.MANAGE_OWN_PROFILE: True,
                _C.MANAGE_PROFESSIONAL_PROFILE: True,
                _C.LIST_PROPERTIES: True,
                _L.MAX_LISTINGS: 5,
                _C.MANAGE_LISTINGS: True,
                _C.VIEW_ANALYTICS: True,
                _L.FEATURED_LISTINGS: 1,
                _C.EXPORT_CONTACTS: False,
                _C.API_ACCESS: False,
                _C.WHITE_LABEL: False,
                # Broker
                _C.MANAGE_AGENTS: False,
                _C.COMPANY_BRANDING: False,
                # Investor
                _C.PORTFOLIO_MANAGEMENT: False,
                _C.FRACTIONAL_INVESTING: False,
            },
            _P.BROKER: {
                _C.VIEW_LISTINGS: True,
                _C.VIEW_PUBLIC_PROFILES: True,
                _C.SAVE_PROPERTIES: True,
                _C.CONTACT_PROFESSIONALS: True,
                _C.ACCESS_DASHBOARD: True,
                _C.MANAGE_OWN_PROFILE: True,
                _C.MANAGE_PROFESSIONAL_PROFILE: True,
                # Agent
                _C.LIST_PROPERTIES: False,
                _C.MANAGE_LISTINGS: False,
                _C.VIEW_ANALYTICS: True,
                # Broker
                _C.MANAGE_AGENTS: True,
                _L.MAX_AGENTS: 5,
                _C.COMPANY_BRANDING: True,
                _C.EXPORT_CONTACTS: True,
                _C.API_ACCESS: False,
                _C.WHITE_LABEL: False,
                # Investor
                _C.PORTFOLIO_MANAGEMENT: False,
                _C.FRACTIONAL_INVESTING: False,
            },
            _P.INVESTOR: {
                _C.VIEW_LISTINGS: True,
                _C.VIEW_PUBLIC_PROFILES: True,
                _C.SAVE_PROPERTIES: True,
                _C.CONTACT_PROFESSIONALS: True,
                _C.ACCESS_DASHBOARD: True,
                _C.MANAGE_OWN_PROFILE: True,
                _C.MANAGE_PROFESSIONAL_PROFILE: True,
                # Agent / broker
                _C.LIST_PROPERTIES: False,
                _C.MANAGE_AGENTS: False,
                # Investor
                _C.PORTFOLIO_MANAGEMENT: True,
                _C.FRACTIONAL_INVESTING: True,
                _C.ADVANCED_ANALYTICS: False,
                _C.EXPORT_PORTFOLIO: False,
                _C.API_ACCESS: False,
            },
            _P.REALTOR_PARTNER: {
                _C.VIEW_LISTINGS: True,
                _C.VIEW_PUBLIC_PROFILES: True,
                _C.SAVE_PROPERTIES: True,
                _C.CONTACT_PROFESSIONALS: True,
                _C.ACCESS_DASHBOARD: True,
                _C.MANAGE_OWN_PROFILE: True,
                _C.MANAGE_PROFESSIONAL_PROFILE: True,
                _C.API_ACCESS: True,
                _C.WHITE_LABEL: False,
                _C.EXPORT_CONTACTS: True,
            },
        },
        _T.PREMIUM: {
            _P.AGENT: {
                _C.VIEW_LISTINGS: True,
                _C.VIEW_PUBLIC_PROFILES: True,
                _C.SAVE_PROPERTIES: True,
                _C.CONTACT_PROFESSIONALS: True,
                _C.ACCESS_DASHBOARD: True,
                _C.MANAGE_OWN_PROFILE: True,
                _C.MANAGE_PROFESSIONAL_PROFILE: True,
                _C.LIST_PROPERTIES: True,
                _L.MAX_LISTINGS: -1,
                _C.MANAGE_LISTINGS: True,
                _C.VIEW_ANALYTICS: True,
                _C.ADVANCED_ANALYTICS: True,
                _L.FEATURED_LISTINGS: -1,
                _C.EXPORT_CONTACTS: True,
                _C.API_ACCESS: False,
                _C.WHITE_LABEL: False,
                _C.CRM_ACCESS: True,
                _C.EMAIL_CAMPAIGNS: True,
                # Broker
                _C.MANAGE_AGENTS: False,
                _C.COMPANY_BRANDING: False,
                # Investor
                _C.PORTFOLIO_MANAGEMENT: False,
                _C.FRACTIONAL_INVESTING: False,
            },
            _P.BROKER: {
                _C.VIEW_LISTINGS: True,
                _C.VIEW_PUBLIC_PROFILES: True,
                _C.SAVE_PROPERTIES: True,
                _C.CONTACT_PROFESSIONALS: True,
                _C.ACCESS_DASHBOARD: True,
                _C.MANAGE_OWN_PROFILE: True,
                _C.MANAGE_PROFESSIONAL_PROFILE: True,
                # Agent
                _C.LIST_PROPERTIES: False,
                _C.MANAGE_LISTINGS: False,
                _C.VIEW_ANALYTICS: True,
                # Broker
                _C.MANAGE_AGENTS: True,
                _L.MAX_AGENTS: -1,
                _C.COMPANY_BRANDING: True,
                _C.EXPORT_CONTACTS: True,
                _C.API_ACCESS: True,
                _C.WHITE_LABEL: True,
                _C.CUSTOM_DOMAIN: True,
                _C.CRM_ACCESS: True,
                _C.ADVANCED_ANALYTICS: True,
                # Investor
                _C.PORTFOLIO_MANAGEMENT: False,
                _C.FRACTIONAL_INVESTING: False,
            },
            _P.INVESTOR: {
                _C.VIEW_LISTINGS: True,
                _C.VIEW_PUBLIC_PROFILES: True,
                _C.SAVE_PROPERTIES: True,
                _C.CONTACT_PROFESSIONALS: True,
                _C.ACCESS_DASHBOARD: True,
                _C.MANAGE_OWN_PROFILE: True,
                _C.MANAGE_PROFESSIONAL_PROFILE: True,
                # Agent / broker
                _C.LIST_PROPERTIES: False,
                _C.MANAGE_AGENTS: False,
                # Investor
                _C.PORTFOLIO_MANAGEMENT: True,
                _C.FRACTIONAL_INVESTING: True,
                _C.ADVANCED_ANALYTICS: True,
                _C.EXPORT_PORTFOLIO: True,
                _C.API_ACCESS: True,
                _C.PERFORMANCE_REPORTS: True,
            },
            _P.REALTOR_PARTNER: {
                _C.VIEW_LISTINGS: True,
                _C.VIEW_PUBLIC_PROFILES: True,
                _C.SAVE_PROPERTIES: True,
                _C.CONTACT_PROFESSIONALS: True,
                _C.ACCESS_DASHBOARD: True,
                _C.MANAGE_OWN_PROFILE: True,
                _C.MANAGE_PROFESSIONAL_PROFILE: True,
                _C.API_ACCESS: True,
                _C.WHITE_LABEL: True,
                _C.EXPORT_CONTACTS: True,
                _C.CUSTOM_DOMAIN: True,
                _C.ADVANCED_ANALYTICS: True,
            },
        },
    },
    _R.SUPER_ADMIN: {
        _T.FREE: {
            None: {WILDCARD: True},
        },
    },
}


# ── Reachable Profiles ──────────────────────────────────
# Every (role, tier, type) user management can hand us. Each must have a
# branch; anything else denies with a precise reason.

_PROFESSIONAL_TYPES = tuple(ProfessionalType)

REACHABLE_PROFILES: tuple[MatrixKey, ...] = (
    (_R.PUBLIC.value, _T.FREE.value, None),
    (_R.BASIC_USER.value, _T.FREE.value, None),
    *(
        (_R.PROFESSIONAL_USER.value, tier.value, ptype.value)
        for tier in (_T.PROFESSIONAL, _T.PREMIUM)
        for ptype in _PROFESSIONAL_TYPES
    ),
    (_R.SUPER_ADMIN.value, _T.FREE.value, None),
)


def _key(item: Any) -> Any:
    return item.value if isinstance(item, Enum) else item


class AccessMatrix:
    """Immutable policy table keyed by ``(role, tier, professional_type)``.

    Declared roles and ``(role, tier)`` pairs are tracked separately from
    the leaf entries so that a miss can be attributed to the level where
    it happened.
    """

    __slots__ = ("_entries", "_roles", "_tiers")

    def __init__(
        self,
        entries: Mapping[MatrixKey, Mapping[str, CapabilityValue]],
        *,
        roles: Optional[frozenset[str]] = None,
        tiers: Optional[frozenset[tuple[str, str]]] = None,
    ) -> None:
        frozen = {
            (_key(role), _key(tier), _key(ptype)): MappingProxyType({_key(k): v for k, v in caps.items()})
            for (role, tier, ptype), caps in entries.items()
        }
        self._entries: Mapping[MatrixKey, Mapping[str, CapabilityValue]] = MappingProxyType(frozen)
        self._tiers: frozenset[tuple[str, str]] = frozenset(tiers or ()) | {(r, t) for r, t, _ in frozen}
        self._roles: frozenset[str] = frozenset(roles or ()) | {r for r, _ in self._tiers}

    @classmethod
    def from_nested(cls, data: Mapping[Any, Mapping[Any, Mapping[Any, Mapping[str, CapabilityValue]]]]) -> AccessMatrix:
        """Build from the nested ``role → tier → type → caps`` form.

        Empty role or tier branches are preserved so validation can
        report them.
        """
        entries: dict[MatrixKey, Mapping[str, CapabilityValue]] = {}
        roles: set[str] = set()
        tiers: set[tuple[str, str]] = set()
        for role, tier_map in data.items():
            role_key = _key(role)
            roles.add(role_key)
            for tier, type_map in (tier_map or {}).items():
                tier_key = _key(tier)
                tiers.add((role_key, tier_key))
                for ptype, caps in (type_map or {}).items():
                    entries[(role_key, tier_key, _key(ptype))] = caps or {}
        return cls(entries, roles=frozenset(roles), tiers=frozenset(tiers))

    def to_nested(self) -> dict[str, dict[str, dict[Optional[str], dict[str, CapabilityValue]]]]:
        """Inverse of :meth:`from_nested`, with plain dicts."""
        nested: dict[str, dict[str, dict[Optional[str], dict[str, CapabilityValue]]]] = {
            role: {} for role in sorted(self._roles)
        }
        for role, tier in sorted(self._tiers):
            nested[role][tier] = {}
        for (role, tier, ptype), caps in self._entries.items():
            nested[role][tier][ptype] = dict(caps)
        return nested

    def find(self, role: str, tier: str, ptype: Optional[str]) -> tuple[Optional[ReasonCode], Optional[Mapping[str, CapabilityValue]]]:
        """Locate the capability map for a profile.

        Returns:
            ``(None, caps)`` on a hit, otherwise ``(reason, None)`` with
            ``INVALID_ROLE``, ``TIER_NOT_FOUND`` or ``TYPE_NOT_SUPPORTED``
            naming the first level that is missing.
        """
        if role not in self._roles:
            return ReasonCode.INVALID_ROLE, None
        if (role, tier) not in self._tiers:
            return ReasonCode.TIER_NOT_FOUND, None
        caps = self._entries.get((role, tier, ptype))
        if caps is None:
            return ReasonCode.TYPE_NOT_SUPPORTED, None
        return None, caps

    @property
    def roles(self) -> frozenset[str]:
        return self._roles

    @property
    def tiers(self) -> frozenset[tuple[str, str]]:
        return self._tiers

    def items(self) -> Iterator[tuple[MatrixKey, Mapping[str, CapabilityValue]]]:
        return iter(self._entries.items())

    def capability_names(self) -> frozenset[str]:
        """Every key used anywhere in the table, wildcard excluded."""
        return frozenset(k for caps in self._entries.values() for k in caps if k != WILDCARD)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"AccessMatrix(roles={sorted(self._roles)!r}, entries={len(self._entries)})"


# ── Completeness Checks ─────────────────────────────────


def find_monotonicity_violations(matrix: AccessMatrix) -> list[str]:
    """Capabilities granted at ``professional`` but revoked at ``premium``.

    Only capabilities present in both entries of the same
    ``(role, type)`` are compared.
    """
    violations: list[str] = []
    lower, upper = _T.PROFESSIONAL.value, _T.PREMIUM.value
    for (role, tier, ptype), caps in sorted(matrix.items(), key=lambda kv: repr(kv[0])):
        if tier != lower:
            continue
        _, premium = matrix.find(role, upper, ptype)
        if premium is None:
            continue
        for name, value in sorted(caps.items()):
            if value is True and name in premium and premium[name] is not True:
                violations.append(f"{role}/{ptype}: '{name}' granted at {lower} but not at {upper}")
    return violations


def _check_values(key: MatrixKey, caps: Mapping[str, CapabilityValue], limit_keys: frozenset[str]) -> list[str]:
    role, tier, ptype = key
    where = f"{role}/{tier}/{ptype}"
    problems: list[str] = []
    for name, value in sorted(caps.items()):
        if name == WILDCARD:
            if role != _R.SUPER_ADMIN.value:
                problems.append(f"{where}: wildcard is reserved for {_R.SUPER_ADMIN.value}")
            elif value is not True:
                problems.append(f"{where}: wildcard must be true")
        elif name in limit_keys:
            if isinstance(value, bool) or not isinstance(value, int):
                problems.append(f"{where}: limit '{name}' must be an integer, got {value!r}")
            elif value < -1:
                problems.append(f"{where}: limit '{name}' must be >= -1, got {value}")
        elif not isinstance(value, bool):
            problems.append(f"{where}: capability '{name}' must be a boolean, got {value!r}")
    return problems


def validate_matrix(
    matrix: AccessMatrix,
    reachable: tuple[MatrixKey, ...] = REACHABLE_PROFILES,
    limit_keys: frozenset[str] = Limits.ALL,
) -> list[str]:
    """Run every load-time check and return the violations found.

    Checks:
    1. Every known role has a branch, and every branch has tiers.
    2. Every tier branch has at least one type branch.
    3. Every reachable profile resolves to an entry.
    4. Wildcard only under super_admin; capability values are booleans;
       limit values are integers >= -1.
    5. Tier monotonicity (see :func:`find_monotonicity_violations`).
    """
    violations: list[str] = []

    for role in Role:
        if role.value not in matrix.roles:
            violations.append(f"role '{role.value}' has no branch")

    for role in sorted(matrix.roles):
        if not any(r == role for r, _ in matrix.tiers):
            violations.append(f"role '{role}' has no tiers")

    populated = {(r, t) for (r, t, _), _caps in matrix.items()}
    for role, tier in sorted(matrix.tiers):
        if (role, tier) not in populated:
            violations.append(f"tier '{role}/{tier}' has no professional-type branches")

    for key in reachable:
        reason, _ = matrix.find(*key)
        if reason is not None:
            violations.append(f"reachable profile {key[0]}/{key[1]}/{key[2]} is missing ({reason.value})")

    for key, caps in sorted(matrix.items(), key=lambda kv: repr(kv[0])):
        violations.extend(_check_values(key, caps, limit_keys))

    violations.extend(find_monotonicity_violations(matrix))
    return violations


DEFAULT_MATRIX = AccessMatrix.from_nested(FEATURE_MATRIX)


__all__ = [
    "AccessMatrix",
    "CapabilityValue",
    "DEFAULT_MATRIX",
    "FEATURE_MATRIX",
    "MatrixKey",
    "REACHABLE_PROFILES",
    "find_monotonicity_violations",
    "validate_matrix",
]
