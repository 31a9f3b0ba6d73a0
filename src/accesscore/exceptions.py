"""Unified exception hierarchy for accesscore.

Access resolution itself never raises: every malformed input degrades to a
denial. Exceptions are reserved for operator-facing failures that happen
while loading or validating policy tables and configuration.

This module provides:
- Base exception hierarchy with stable error codes

Usage:
    from accesscore.exceptions import (
        AccessCoreError,
        MatrixCompletenessError,
        PolicyLoadError,
    )
"""

from __future__ import annotations

from typing import Any, Iterable

__all__ = [
    "AccessCoreError",
    "ConfigurationError",
    "PolicyError",
    "PolicyLoadError",
    "MatrixCompletenessError",
]


# ---- Exception Hierarchy ----------------------------------------------------


class AccessCoreError(Exception):
    """Base exception for accesscore.

    Attributes:
        code: Stable error code string (e.g. "POLICY_ERROR").
        message: Human-readable error description.
        details: Additional context as keyword arguments.
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An internal error occurred"

    def __init__(self, message: str | None = None, code: str | None = None, **kwargs: Any) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.details = kwargs
        super().__init__(self.message)


class ConfigurationError(AccessCoreError):
    """Invalid or missing configuration."""

    code: str = "CONFIGURATION_ERROR"
    message: str = "Invalid configuration"


class PolicyError(AccessCoreError):
    """Policy table is unusable."""

    code: str = "POLICY_ERROR"
    message: str = "Invalid access policy"


class PolicyLoadError(PolicyError):
    """Policy document could not be read or parsed."""

    code: str = "POLICY_LOAD_ERROR"
    message: str = "Failed to load access policy"


class MatrixCompletenessError(PolicyError):
    """Access matrix failed the load-time completeness check.

    Attributes:
        violations: One human-readable line per problem found.
    """

    code: str = "MATRIX_INCOMPLETE"
    message: str = "Access matrix failed completeness check"

    def __init__(self, violations: Iterable[str], message: str | None = None, **kwargs: Any) -> None:
        self.violations: tuple[str, ...] = tuple(violations)
        if message is None:
            message = f"{self.message}: {len(self.violations)} violation(s)"
            if self.violations:
                message += "; " + "; ".join(self.violations[:5])
        super().__init__(message, **kwargs)
