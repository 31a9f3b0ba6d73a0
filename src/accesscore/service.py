"""Request/response contract for exposing the engine to other services.

The engine is an in-process library; this module is the shape it takes
when a gateway or API layer calls it with JSON. Models use camelCase
aliases on the wire and snake_case in Python.

Field values that are not strings are treated as absent, so a malformed
request still resolves (to the least-privileged actor) instead of
failing validation.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .logging import get_access_logger
from .permissions.access import AccessResolver
from .permissions.actor import ActorDescriptor
from .permissions.advisor import UpgradeAdvisor, upgrade_message
from .permissions.constants import ReasonCode
from .permissions.store import PolicyStore

logger = get_access_logger(__name__)


class _ActorFields(BaseModel):
    """Actor dimensions shared by every request."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    role: Optional[str] = None
    tier: Optional[str] = None
    professional_type: Optional[str] = Field(default=None, alias="professionalType")
    actor_id: Optional[str] = Field(default=None, alias="actorId")

    @field_validator("role", "tier", "professional_type", "actor_id", mode="before")
    @classmethod
    def drop_non_strings(cls, v: Any) -> Optional[str]:
        return v if isinstance(v, str) else None

    def to_actor(self) -> ActorDescriptor:
        return ActorDescriptor.create(self.role, self.tier, self.professional_type, self.actor_id)


class AccessRequest(_ActorFields):
    """``{role, tier, professionalType, capability}``."""

    capability: Optional[str] = None

    @field_validator("capability", mode="before")
    @classmethod
    def drop_non_string_capability(cls, v: Any) -> Optional[str]:
        return v if isinstance(v, str) else None


class LimitRequest(_ActorFields):
    """``{role, tier, professionalType, limitName}``."""

    limit_name: Optional[str] = Field(default=None, alias="limitName")

    @field_validator("limit_name", mode="before")
    @classmethod
    def drop_non_string_limit(cls, v: Any) -> Optional[str]:
        return v if isinstance(v, str) else None


class UpgradeInfo(BaseModel):
    """Upgrade suggestion attached to ``requires_upgrade`` denials."""

    model_config = ConfigDict(populate_by_name=True)

    can_upgrade: bool = Field(alias="canUpgrade")
    upgrade_type: Optional[str] = Field(default=None, alias="upgradeType")
    target_tier: Optional[str] = Field(default=None, alias="targetTier")
    target_type: Optional[str] = Field(default=None, alias="targetType")
    message: str = ""


class AccessResponse(BaseModel):
    """``{allowed, reasonCode, requiredTier?, requiredType?, upgrade?}``."""

    model_config = ConfigDict(populate_by_name=True)

    allowed: bool
    reason_code: ReasonCode = Field(alias="reasonCode")
    required_tier: Optional[str] = Field(default=None, alias="requiredTier")
    required_type: Optional[str] = Field(default=None, alias="requiredType")
    upgrade: Optional[UpgradeInfo] = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class LimitResponse(BaseModel):
    """``{limit}``: -1 unlimited, 0 none."""

    limit: int = Field(ge=-1)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class AccessService:
    """Glue between the wire contract and the resolver/advisor pair.

    Args:
        store: Policy store to resolve against (default: process-wide).
        include_upgrade: Attach upgrade advice to ``requires_upgrade``
            denials.
    """

    def __init__(self, store: Optional[PolicyStore] = None, *, include_upgrade: bool = True) -> None:
        self.resolver = AccessResolver(store)
        self.advisor = UpgradeAdvisor(store)
        self.include_upgrade = include_upgrade

    def check(self, request: AccessRequest) -> AccessResponse:
        actor = request.to_actor()
        # One snapshot for both, so advice matches requiredTier/requiredType.
        policy = self.resolver.store.current()
        decision = self.resolver.resolve(actor, request.capability, policy=policy)
        upgrade = None
        if self.include_upgrade and decision.reason_code == ReasonCode.REQUIRES_UPGRADE:
            suggestion = self.advisor.suggest(decision, actor, policy=policy)
            upgrade = UpgradeInfo(
                can_upgrade=suggestion.can_upgrade,
                upgrade_type=suggestion.upgrade_type,
                target_tier=suggestion.target_tier,
                target_type=suggestion.target_type,
                message=upgrade_message(suggestion),
            )
        return AccessResponse(
            allowed=decision.allowed,
            reason_code=decision.reason_code,
            required_tier=decision.required_tier,
            required_type=decision.required_type,
            upgrade=upgrade,
        )

    def check_limit(self, request: LimitRequest) -> LimitResponse:
        return LimitResponse(limit=self.resolver.limit(request.to_actor(), request.limit_name))

    def handle(self, payload: Any) -> dict[str, Any]:
        """Dispatch a raw JSON payload: ``limitName`` selects a limit check."""
        if not isinstance(payload, dict):
            logger.warning("Non-object access request of type %s", type(payload).__name__)
            payload = {}
        if "limitName" in payload or "limit_name" in payload:
            return self.check_limit(LimitRequest.model_validate(payload)).to_wire()
        return self.check(AccessRequest.model_validate(payload)).to_wire()


__all__ = [
    "AccessRequest",
    "AccessResponse",
    "AccessService",
    "LimitRequest",
    "LimitResponse",
    "UpgradeInfo",
]
