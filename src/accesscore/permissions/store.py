"""Policy snapshots and the process-wide policy reference.

Provides:
- ``Policy``: immutable pair of access matrix and requirement index.
- ``PolicyStore``: holds the current ``Policy`` and replaces it whole.
- ``load_policy()`` / ``policy_from_dict()``: JSON policy documents.

Resolvers read ``store.current()`` once per call and work on that
snapshot only. A reload builds a complete new ``Policy`` and publishes it
with a single attribute assignment, so a resolution in flight sees either
the old table or the new one, never a mix.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Mapping, Optional

from ..exceptions import MatrixCompletenessError, PolicyLoadError
from .matrix import DEFAULT_MATRIX, AccessMatrix, validate_matrix
from .requirements import DEFAULT_REQUIREMENTS, RequirementIndex

if TYPE_CHECKING:
    from ..config import AccessConfig

logger = logging.getLogger(__name__)

# JSON object keys cannot be null; these spellings mean "no professional type".
_NO_TYPE_KEYS = frozenset({"null", "none", ""})


@dataclass(frozen=True)
class Policy:
    """One consistent version of the policy tables."""

    matrix: AccessMatrix
    requirements: RequirementIndex
    source: str = "builtin"

    def validate(self) -> list[str]:
        return validate_matrix(self.matrix)

    def ensure_complete(self) -> Policy:
        """Raise :class:`MatrixCompletenessError` if validation finds problems."""
        violations = self.validate()
        if violations:
            raise MatrixCompletenessError(violations, source=self.source)
        return self

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form understood by :func:`policy_from_dict`."""
        matrix = {
            role: {
                tier: {("null" if ptype is None else ptype): caps for ptype, caps in types.items()}
                for tier, types in tiers.items()
            }
            for role, tiers in self.matrix.to_nested().items()
        }
        return {"matrix": matrix, "requirements": self.requirements.to_dict()}


DEFAULT_POLICY = Policy(matrix=DEFAULT_MATRIX, requirements=DEFAULT_REQUIREMENTS)


def policy_from_dict(data: Mapping[str, Any], source: str = "dict") -> Policy:
    """Build a policy from ``{"matrix": {...}, "requirements": {...}}``.

    Raises:
        PolicyLoadError: The document does not have the expected shape.
    """
    if not isinstance(data, Mapping):
        raise PolicyLoadError("Policy document must be a JSON object", source=source)
    matrix_data = data.get("matrix")
    if not isinstance(matrix_data, Mapping) or not matrix_data:
        raise PolicyLoadError("Policy document needs a non-empty 'matrix' object", source=source)

    nested: dict[str, dict[str, dict[Optional[str], Any]]] = {}
    for role, tiers in matrix_data.items():
        if not isinstance(tiers, Mapping):
            raise PolicyLoadError(f"matrix['{role}'] must be an object", source=source)
        nested[role] = {}
        for tier, types in tiers.items():
            if not isinstance(types, Mapping):
                raise PolicyLoadError(f"matrix['{role}']['{tier}'] must be an object", source=source)
            nested[role][tier] = {}
            for ptype, caps in types.items():
                if not isinstance(caps, Mapping):
                    raise PolicyLoadError(
                        f"matrix['{role}']['{tier}']['{ptype}'] must be an object",
                        source=source,
                    )
                type_key = None if ptype is None or str(ptype).lower() in _NO_TYPE_KEYS else ptype
                nested[role][tier][type_key] = dict(caps)

    requirements_data = data.get("requirements", {})
    if not isinstance(requirements_data, Mapping):
        raise PolicyLoadError("'requirements' must be an object", source=source)
    for capability, entry in requirements_data.items():
        if entry is not None and not isinstance(entry, Mapping):
            raise PolicyLoadError(f"requirements['{capability}'] must be an object", source=source)

    return Policy(
        matrix=AccessMatrix.from_nested(nested),
        requirements=RequirementIndex.from_dict(requirements_data),
        source=source,
    )


def load_policy(path: str | Path) -> Policy:
    """Read a JSON policy document from disk.

    Raises:
        PolicyLoadError: The file is missing, unreadable, or malformed.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise PolicyLoadError(f"Cannot read policy file {path}: {e}", path=str(path)) from e
    except json.JSONDecodeError as e:
        raise PolicyLoadError(f"Policy file {path} is not valid JSON: {e}", path=str(path)) from e
    return policy_from_dict(data, source=str(path))


class PolicyStore:
    """Holder of the current policy.

    Reads are lock-free. Writers serialize among themselves so two
    concurrent reloads cannot interleave validation and publication.
    """

    def __init__(self, policy: Policy = DEFAULT_POLICY, *, strict: bool = True) -> None:
        self._strict = strict
        self._write_lock = threading.Lock()
        self._policy = self._checked(policy)

    @classmethod
    def from_config(cls, config: AccessConfig) -> PolicyStore:
        """Load the configured policy file, or the built-in policy."""
        policy = load_policy(config.policy_path) if config.policy_path else DEFAULT_POLICY
        return cls(policy, strict=config.strict_completeness)

    @property
    def strict(self) -> bool:
        return self._strict

    def current(self) -> Policy:
        return self._policy

    def swap(self, policy: Policy) -> Policy:
        """Validate ``policy`` and publish it. Returns the previous policy.

        Raises:
            MatrixCompletenessError: In strict mode, when validation fails.
                The current policy stays in place.
        """
        with self._write_lock:
            checked = self._checked(policy)
            previous = self._policy
            self._policy = checked
        logger.info("Access policy replaced: %s -> %s", previous.source, checked.source)
        return previous

    def reload(self, path: str | Path) -> Policy:
        """Load ``path`` and publish it. Returns the previous policy."""
        return self.swap(load_policy(path))

    def _checked(self, policy: Policy) -> Policy:
        violations = policy.validate()
        if not violations:
            return policy
        if self._strict:
            raise MatrixCompletenessError(violations, source=policy.source)
        for violation in violations:
            logger.warning("Access matrix completeness violation (%s): %s", policy.source, violation)
        return policy


_default_store: Optional[PolicyStore] = None
_default_store_lock = threading.Lock()


def get_policy_store() -> PolicyStore:
    """Process-wide store, created on first use with the built-in policy."""
    global _default_store
    if _default_store is None:
        with _default_store_lock:
            if _default_store is None:
                _default_store = PolicyStore()
    return _default_store


def set_policy_store(store: Optional[PolicyStore]) -> None:
    """Install ``store`` as the process-wide store (None resets to default)."""
    global _default_store
    with _default_store_lock:
        _default_store = store


__all__ = [
    "DEFAULT_POLICY",
    "Policy",
    "PolicyStore",
    "get_policy_store",
    "load_policy",
    "policy_from_dict",
    "set_policy_store",
]
