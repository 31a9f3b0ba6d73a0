"""Actor descriptor consumed by the resolvers.

The descriptor is built per call from the authoritative user record owned
by the user-management service. It is a value: the engine never caches,
re-fetches, or mutates it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from .constants import Role, SubscriptionTier

# Record keys accepted for each field, first match wins.
_ROLE_KEYS = ("role",)
_TIER_KEYS = ("subscription_tier", "tier")
_TYPE_KEYS = ("professional_type", "professionalType", "type")
_ID_KEYS = ("id", "user_id")


def _clean(value: Any) -> str | None:
    """Reduce a raw field to a non-empty string, or None."""
    if isinstance(value, Enum):
        value = value.value
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def _pick(record: Any, keys: tuple[str, ...]) -> Any:
    for key in keys:
        if isinstance(record, Mapping):
            value = record.get(key)
        else:
            value = getattr(record, key, None)
        if value is not None:
            return value
    return None


@dataclass(frozen=True)
class ActorDescriptor:
    """Who is asking.

    Attributes:
        role: Authentication role value (``"public"`` when unknown).
        tier: Subscription tier value (``"free"`` when unknown).
        professional_type: Specialization value, or None.
        id: Opaque actor id, used for logging only.

    Unknown non-empty values are kept verbatim so the resolver can report
    them precisely; they never match a matrix branch and so always deny.
    """

    role: str = Role.PUBLIC.value
    tier: str = SubscriptionTier.FREE.value
    professional_type: str | None = None
    id: str | None = None

    @classmethod
    def create(
        cls,
        role: Any = None,
        tier: Any = None,
        professional_type: Any = None,
        id: Any = None,
    ) -> ActorDescriptor:
        """Build a normalized descriptor from loose field values.

        Missing or non-string role → ``public``, tier → ``free``,
        type → ``None``. Never raises.
        """
        actor_id = id if isinstance(id, str) else (None if id is None else str(id))
        return cls(
            role=_clean(role) or Role.PUBLIC.value,
            tier=_clean(tier) or SubscriptionTier.FREE.value,
            professional_type=_clean(professional_type),
            id=actor_id,
        )

    @classmethod
    def from_record(cls, record: Any) -> ActorDescriptor:
        """Build a descriptor from a user record.

        Accepts None (anonymous), a mapping, any object exposing the
        fields as attributes, or an existing descriptor. The mapping form
        understands both ``subscription_tier`` / ``professional_type``
        (storage naming) and ``tier`` / ``professionalType`` (wire naming).
        """
        if isinstance(record, ActorDescriptor):
            return cls.create(record.role, record.tier, record.professional_type, record.id)
        if record is None:
            return cls()
        return cls.create(
            role=_pick(record, _ROLE_KEYS),
            tier=_pick(record, _TIER_KEYS),
            professional_type=_pick(record, _TYPE_KEYS),
            id=_pick(record, _ID_KEYS),
        )

    @property
    def key(self) -> tuple[str, str, str | None]:
        """Composite matrix key ``(role, tier, professional_type)``."""
        return (self.role, self.tier, self.professional_type)


def normalize_actor(actor: Any) -> ActorDescriptor:
    """Coerce whatever the caller passed into a normalized descriptor."""
    try:
        return ActorDescriptor.from_record(actor)
    except Exception:  # noqa: BLE001
        return ActorDescriptor()


__all__ = [
    "ActorDescriptor",
    "normalize_actor",
]
