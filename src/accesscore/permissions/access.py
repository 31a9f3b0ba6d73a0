"""Access and limit resolution.

Provides the engine's two entry points:
- ``resolve(actor, capability)`` → :class:`AccessDecision`
- ``limit(actor, limit_name)`` → ``int`` (``-1`` = unlimited)

Both are pure over one policy snapshot and total: malformed actors and
capabilities degrade to the least-privileged interpretation and the
functions never raise. Callers must gate on ``decision.allowed`` only;
reason codes exist for messaging and diagnostics.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional

from ..logging import get_access_logger
from .actor import normalize_actor
from .constants import UNLIMITED, WILDCARD, ReasonCode, Role
from .store import Policy, PolicyStore, get_policy_store

logger = get_access_logger(__name__)


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of one capability check.

    ``required_*`` fields are filled only for ``requires_upgrade``
    denials, and only from the advisory requirement index.
    """

    allowed: bool
    reason_code: ReasonCode
    capability: Optional[str] = None
    required_role: Optional[str] = None
    required_tier: Optional[str] = None
    required_type: Optional[str] = None

    @property
    def denied(self) -> bool:
        return not self.allowed

    def to_dict(self) -> dict[str, Any]:
        """Wire form: ``{allowed, reasonCode, requiredTier?, requiredType?}``."""
        data: dict[str, Any] = {
            "allowed": self.allowed,
            "reasonCode": self.reason_code.value,
        }
        if self.required_tier is not None:
            data["requiredTier"] = self.required_tier
        if self.required_type is not None:
            data["requiredType"] = self.required_type
        return data


@dataclass(frozen=True)
class BatchDecision:
    """Outcome of checking several capabilities for one actor."""

    decisions: tuple[AccessDecision, ...]

    @property
    def all_allowed(self) -> bool:
        return all(d.allowed for d in self.decisions)

    @property
    def available(self) -> tuple[str, ...]:
        return tuple(d.capability or "" for d in self.decisions if d.allowed)

    @property
    def missing(self) -> tuple[str, ...]:
        return tuple(d.capability or "" for d in self.decisions if not d.allowed)


def _capability_key(capability: Any) -> str:
    return capability if isinstance(capability, str) else ""


class AccessResolver:
    """Resolve capabilities and limits against a policy store.

    Stateless apart from the store reference; one instance is safe to
    share between threads and to call from loops.
    """

    def __init__(self, store: Optional[PolicyStore] = None) -> None:
        self._store = store

    @property
    def store(self) -> PolicyStore:
        return self._store if self._store is not None else get_policy_store()

    def resolve(self, actor: Any, capability: Any, *, policy: Optional[Policy] = None) -> AccessDecision:
        """Decide whether ``actor`` may use ``capability``.

        Pass ``policy`` to resolve against a snapshot the caller already
        holds; otherwise the store's current policy is read once.

        Limit keys (``Limits``) are quotas, not capabilities: resolving
        one yields ``requires_upgrade`` for any non-``True`` value, so
        callers should read quotas through :meth:`limit`.

        Order of checks:
        1. ``super_admin`` → allowed (``admin``), no lookup.
        2. Role branch missing → ``invalid_role``.
        3. Tier branch missing → ``tier_not_found``.
        4. Type branch missing → ``type_not_supported``.
        5. Wildcard in the type map → allowed (``full_access``).
        6. Capability absent → ``capability_unknown`` (logged as a policy gap).
        7. Capability ``True`` → allowed (``feature_available``).
        8. Anything else → ``requires_upgrade``, enriched from the
           requirement index.
        """
        actor = normalize_actor(actor)
        name = _capability_key(capability)
        if policy is None:
            policy = self.store.current()

        if actor.role == Role.SUPER_ADMIN.value:
            logger.debug("Admin access granted", actor=actor, capability=name)
            return AccessDecision(True, ReasonCode.ADMIN, name)

        reason, caps = policy.matrix.find(*actor.key)
        if caps is None:
            return AccessDecision(False, reason or ReasonCode.INVALID_ROLE, name)

        if caps.get(WILDCARD) is True:
            return AccessDecision(True, ReasonCode.FULL_ACCESS, name)

        if name not in caps:
            logger.warning(
                "Capability missing from access matrix for %s/%s/%s",
                actor.role,
                actor.tier,
                actor.professional_type,
                actor=actor,
                capability=name,
            )
            return AccessDecision(False, ReasonCode.CAPABILITY_UNKNOWN, name)

        if caps[name] is True:
            return AccessDecision(True, ReasonCode.FEATURE_AVAILABLE, name)

        return self._requires_upgrade(policy, name)

    def limit(self, actor: Any, limit_name: Any) -> int:
        """Numeric quota for ``actor``: ``-1`` unlimited, ``0`` none.

        Any lookup miss yields 0. A boolean or non-integer value under a
        limit key is a configuration error: it is logged and yields 0.
        The wildcard does not apply to limits.
        """
        actor = normalize_actor(actor)
        name = _capability_key(limit_name)
        policy = self.store.current()

        _, caps = policy.matrix.find(*actor.key)
        if caps is None or name not in caps:
            return 0

        value = caps[name]
        if isinstance(value, bool):
            logger.warning("Boolean value stored under limit key", actor=actor, capability=name)
            return 0
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if not isinstance(value, int) or value < UNLIMITED:
            logger.warning("Invalid limit value %r", value, actor=actor, capability=name)
            return 0
        return value

    def resolve_many(self, actor: Any, capabilities: Iterable[Any]) -> BatchDecision:
        """Resolve each capability independently for one actor."""
        actor = normalize_actor(actor)
        return BatchDecision(tuple(self.resolve(actor, capability) for capability in capabilities))

    def available_capabilities(self, actor: Any) -> frozenset[str]:
        """Capabilities set to ``True`` for the actor's profile.

        Returns ``frozenset({"*"})`` for admins and wildcard profiles;
        callers should read it as "everything".
        """
        actor = normalize_actor(actor)
        if actor.role == Role.SUPER_ADMIN.value:
            return frozenset({WILDCARD})
        _, caps = self.store.current().matrix.find(*actor.key)
        if caps is None:
            return frozenset()
        if caps.get(WILDCARD) is True:
            return frozenset({WILDCARD})
        return frozenset(name for name, value in caps.items() if value is True)

    @staticmethod
    def _requires_upgrade(policy: Policy, name: str) -> AccessDecision:
        requirement = policy.requirements.get(name)
        if requirement is None:
            return AccessDecision(False, ReasonCode.REQUIRES_UPGRADE, name)
        return AccessDecision(
            False,
            ReasonCode.REQUIRES_UPGRADE,
            name,
            required_role=requirement.min_role,
            required_tier=requirement.min_tier,
            required_type=requirement.type,
        )


_default_resolver = AccessResolver()


def resolve(actor: Any, capability: Any) -> AccessDecision:
    """Resolve against the process-wide policy store."""
    return _default_resolver.resolve(actor, capability)


def limit(actor: Any, limit_name: Any) -> int:
    """Limit lookup against the process-wide policy store."""
    return _default_resolver.limit(actor, limit_name)


def resolve_many(actor: Any, capabilities: Iterable[Any]) -> BatchDecision:
    return _default_resolver.resolve_many(actor, capabilities)


def available_capabilities(actor: Any) -> frozenset[str]:
    return _default_resolver.available_capabilities(actor)


__all__ = [
    "AccessDecision",
    "AccessResolver",
    "BatchDecision",
    "available_capabilities",
    "limit",
    "resolve",
    "resolve_many",
]
