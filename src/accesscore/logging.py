"""Centralized logging utilities for accesscore.

This module provides:
- Logging configuration from AccessConfig
- Safe preview utility for values coming from untrusted user records
- Structured formatter that carries actor_id and capability
- Logger adapter that binds the actor of the current resolution

Actor ids are opaque and appear in logs only; they never influence a
decision.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from .config import AccessConfig, LogLevel

# Attributes every LogRecord has; anything else came in through ``extra``.
_RESERVED_ATTRS = frozenset(
    {
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "message", "pathname", "process", "processName", "relativeCreated",
        "thread", "threadName", "exc_info", "exc_text", "stack_info",
        "taskName", "actor_id", "capability",
    }
)


def safe_preview(value: Any, limit: int = 240) -> str:
    """Create a length-bounded, single-line preview of a value for logging.

    Args:
        value: The value to preview (any type)
        limit: Maximum length of the preview (default: 240)

    Returns:
        A truncated string representation
    """
    if value is None:
        return ""

    if isinstance(value, str):
        s = value
    elif isinstance(value, (dict, list, tuple)):
        try:
            s = json.dumps(value, default=str, ensure_ascii=False)
        except (TypeError, ValueError):
            s = str(value)
    else:
        s = str(value)

    s = " ".join(s.split())

    if len(s) > limit:
        return s[: limit - 1] + "…"

    return s


class AccessLogFormatter(logging.Formatter):
    """Formatter that includes actor context, as JSON or plain text."""

    def __init__(
        self,
        include_actor: bool = True,
        json_format: bool = True,
        *args: Any,
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self.include_actor = include_actor
        self.json_format = json_format

    def format(self, record: logging.LogRecord) -> str:
        actor_id = getattr(record, "actor_id", None)
        capability = getattr(record, "capability", None)

        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_actor:
            if actor_id is not None:
                log_data["actor_id"] = safe_preview(actor_id, limit=64)
            if capability is not None:
                log_data["capability"] = safe_preview(capability, limit=128)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = safe_preview(value)

        if self.json_format:
            return json.dumps(log_data, default=str, ensure_ascii=False)

        parts = [
            f"[{log_data['timestamp']}]",
            log_data["level"],
            log_data["logger"],
        ]
        if "actor_id" in log_data:
            parts.append(f"actor_id={log_data['actor_id']}")
        if "capability" in log_data:
            parts.append(f"capability={log_data['capability']}")
        parts.append(f": {log_data['message']}")
        return " ".join(parts)


class AccessLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds actor_id and capability to log records.

    Usage:
        logger = get_access_logger(__name__)
        logger.warning("Capability missing from matrix", actor=actor, capability="list:properties")
    """

    def __init__(self, logger: logging.Logger, actor_id: Optional[str] = None):
        super().__init__(logger, {})
        self.actor_id = actor_id

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        actor_id = kwargs.pop("actor_id", self.actor_id)
        capability = kwargs.pop("capability", None)

        # Anything with an ``id`` attribute (ActorDescriptor, user records)
        actor = kwargs.pop("actor", None)
        if actor is not None and actor_id is None:
            actor_id = getattr(actor, "id", None)

        extra = kwargs.get("extra", {})
        if actor_id is not None:
            extra["actor_id"] = actor_id
        if capability is not None:
            extra["capability"] = capability
        kwargs["extra"] = extra

        return msg, kwargs


def setup_logging(
    config: Optional[AccessConfig] = None,
    json_format: Optional[bool] = None,
) -> None:
    """Configure the root logger for a process hosting the engine.

    Args:
        config: AccessConfig instance (if None, loads from environment)
        json_format: Override ``config.log_json``
    """
    if config is None:
        from .config import load_config_from_env

        config = load_config_from_env()

    log_level = getattr(logging, LogLevel(config.log_level).value, logging.INFO)
    use_json = config.log_json if json_format is None else json_format

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(AccessLogFormatter(include_actor=True, json_format=use_json))
    root_logger.addHandler(console_handler)

    if config.service_name:
        logging.getLogger(config.service_name).setLevel(log_level)


def get_access_logger(name: str, actor_id: Optional[str] = None) -> AccessLoggerAdapter:
    """Get a logger adapter that understands ``actor=`` and ``capability=``.

    Args:
        name: Logger name (typically __name__)
        actor_id: Optional actor id to include in all records

    Returns:
        AccessLoggerAdapter instance
    """
    return AccessLoggerAdapter(logging.getLogger(name), actor_id=actor_id)


__all__ = [
    "AccessLogFormatter",
    "AccessLoggerAdapter",
    "get_access_logger",
    "safe_preview",
    "setup_logging",
]
