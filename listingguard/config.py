"""
Configuration for listingguard.

Upload limits and collection names are fixed by the rules and are not
configurable here.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from listingguard.exceptions import ConfigurationError


@dataclass
class GuardConfig:
    """
    Configuration for the ListingGuard facade.

    Attributes:
        engine: Registered engine type to evaluate requests with.
        audit_log_path: JSON Lines file for the decision audit log.
            None keeps the audit log in memory.
        log_decisions: Whether to audit decisions at all.
        validate_schemas: Whether allowed creates/updates must also
            match their collection's document schema.

    Example:
        >>> config = GuardConfig.from_dict({
        ...     "audit_log_path": "./audit/decisions.jsonl",
        ...     "validate_schemas": True,
        ... })
    """
    engine: str = "rules"
    audit_log_path: Path | None = None
    log_decisions: bool = True
    validate_schemas: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.engine, str) or not self.engine:
            raise ConfigurationError("engine", "a non-empty engine name", self.engine)
        if self.audit_log_path is not None:
            if not isinstance(self.audit_log_path, (str, Path)):
                raise ConfigurationError("audit_log_path", "a path or None", self.audit_log_path)
            self.audit_log_path = Path(self.audit_log_path)
        for name in ("log_decisions", "validate_schemas"):
            value = getattr(self, name)
            if not isinstance(value, bool):
                raise ConfigurationError(name, "a bool", value)

    @classmethod
    def default(cls) -> GuardConfig:
        """Create default configuration."""
        return cls()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GuardConfig:
        """
        Build a configuration from a plain mapping.

        Raises:
            ConfigurationError: On unknown keys or invalid values.
        """
        known = {f.name for f in fields(cls)}
        for key in data:
            if key not in known:
                raise ConfigurationError(key, f"one of {sorted(known)}", key)
        return cls(**data)

    def engine_config(self) -> dict[str, Any]:
        """Configuration dict handed to the policy engine."""
        return {"validate_schemas": self.validate_schemas}
