"""Configuration contract for accesscore.

Pydantic-validated settings for the access engine: logging, service
identification, and where the policy table comes from.

All environment reads happen in :func:`load_config_from_env`. Other
modules receive an :class:`AccessConfig` instance and never call
``os.getenv`` themselves.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigurationError

_TRUTHY = ("true", "1", "yes", "on")


class LogLevel(str, Enum):
    """Standard log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class AccessConfig(BaseModel):
    """Settings for the access engine.

    The policy table is process configuration: it is loaded once at
    startup (from ``policy_path`` or the built-in table) and only ever
    replaced as a whole.
    """

    # Logging
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level for the engine",
    )
    log_json: bool = Field(
        default=False,
        description="Use JSON log format (default: plain text)",
    )

    # Service identification
    service_name: Optional[str] = Field(
        default=None,
        description="Service name used as the logger namespace (e.g., 'listing-api')",
    )

    # Policy source
    policy_path: Optional[str] = Field(
        default=None,
        description="Path to a JSON policy document. None = built-in policy table",
    )
    strict_completeness: bool = Field(
        default=True,
        description="Refuse to start when the matrix fails the completeness check",
    )

    @field_validator("policy_path")
    @classmethod
    def validate_policy_path(cls, v: Optional[str]) -> Optional[str]:
        """Only JSON policy documents are supported."""
        if v is None or v == "":
            return None
        if not v.lower().endswith(".json"):
            raise ValueError("Policy path must point to a .json file")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Convert string to LogLevel enum."""
        if isinstance(v, LogLevel):
            return v
        if isinstance(v, str):
            try:
                return LogLevel[v.upper()]
            except KeyError:
                raise ValueError(f"Invalid log level: {v}. Must be one of {[e.value for e in LogLevel]}")
        raise ValueError(f"Log level must be string or LogLevel enum, got {type(v)}")

    model_config = {
        "use_enum_values": True,
        "extra": "forbid",
    }


def load_config_from_env() -> AccessConfig:
    """Load configuration from environment variables.

    Environment variables:
    - LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - LOG_JSON: Use JSON log format (true/false, default: false)
    - SERVICE_NAME: Logger namespace for the hosting service
    - ACCESS_POLICY_PATH: JSON policy document (default: built-in table)
    - ACCESS_STRICT_COMPLETENESS: Fail startup on an incomplete matrix
      (default: true)

    Returns:
        AccessConfig instance with values from environment or defaults.

    Raises:
        ConfigurationError: A variable holds a value AccessConfig rejects.
    """
    import os

    try:
        return AccessConfig(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_json=os.getenv("LOG_JSON", "false").lower() in _TRUTHY,
            service_name=os.getenv("SERVICE_NAME"),
            policy_path=os.getenv("ACCESS_POLICY_PATH"),
            strict_completeness=os.getenv("ACCESS_STRICT_COMPLETENESS", "true").lower() in _TRUTHY,
        )
    except ValidationError as e:
        fields = [".".join(str(loc) for loc in err["loc"]) for err in e.errors()]
        raise ConfigurationError(f"Invalid access configuration: {e}", fields=fields) from e


__all__ = [
    "AccessConfig",
    "LogLevel",
    "load_config_from_env",
]
