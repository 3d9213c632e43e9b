"""
Audit event definitions for listingguard.

A DecisionEvent records one access decision. Document bodies are never
recorded; for updates only the names of the changed fields are kept.
"""

from __future__ import annotations

import hashlib
import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class EventType(Enum):
    """Types of audit events."""
    ACCESS_GRANTED = "access_granted"
    ACCESS_DENIED = "access_denied"


def _utc_now() -> datetime:
    """Get current UTC time with timezone info."""
    return datetime.now(timezone.utc)


def _generate_event_id() -> str:
    return str(uuid.uuid4())


@dataclass
class DecisionEvent:
    """
    Tamper-evident record of one access decision.

    Attributes:
        subject_id: Requesting subject, or None if anonymous.
        role: Role resolved for this evaluation, if any.
        operation: read, create, update or delete.
        kind: document or file.
        path: Document or storage path.
        allowed: Whether access was granted.
        rule: Granting predicate (allowed events only).
        policy: Granting policy class (allowed events only).
        changed_fields: Field names differing between stored and proposed
            document, for document updates.
        sequence_number: Position in the chain, set by the logger.
        previous_hash: Hash of the previous event in the chain.
        event_hash: SHA-256 hash of this event.
    """
    subject_id: str | None
    role: str | None
    operation: str
    kind: str
    path: str
    allowed: bool
    rule: str | None = None
    policy: str | None = None
    changed_fields: list[str] = field(default_factory=list)
    sequence_number: int = 0
    previous_hash: str = ""
    event_id: str = field(default_factory=_generate_event_id)
    timestamp: datetime = field(default_factory=_utc_now)
    event_hash: str = ""

    @property
    def event_type(self) -> EventType:
        return EventType.ACCESS_GRANTED if self.allowed else EventType.ACCESS_DENIED

    def _canonical_dict(self) -> dict[str, Any]:
        return {
            "event_id": self.event_id,
            "timestamp": self.timestamp.isoformat(),
            "sequence_number": self.sequence_number,
            "event_type": self.event_type.value,
            "subject_id": self.subject_id,
            "role": self.role,
            "operation": self.operation,
            "kind": self.kind,
            "path": self.path,
            "allowed": self.allowed,
            "rule": self.rule,
            "policy": self.policy,
            "changed_fields": sorted(self.changed_fields),
            "previous_hash": self.previous_hash,
        }

    def _canonical_json(self) -> str:
        return json.dumps(self._canonical_dict(), sort_keys=True, separators=(",", ":"))

    def _hash(self) -> str:
        digest = hashlib.sha256(self._canonical_json().encode("utf-8")).hexdigest()
        return f"sha256:{digest}"

    def compute_hash(self) -> str:
        """Compute and set the event hash."""
        self.event_hash = self._hash()
        return self.event_hash

    def verify_hash(self) -> bool:
        """Check that the stored hash matches the event's contents."""
        if not self.event_hash:
            return False
        return self.event_hash == self._hash()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data = self._canonical_dict()
        data["event_hash"] = self.event_hash
        return data

    def to_json(self) -> str:
        """Single-line JSON, as written to JSON Lines files."""
        return json.dumps(self.to_dict(), sort_keys=True)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DecisionEvent:
        """Rebuild an event read back from a log file."""
        return cls(
            subject_id=data["subject_id"],
            role=data["role"],
            operation=data["operation"],
            kind=data["kind"],
            path=data["path"],
            allowed=data["allowed"],
            rule=data.get("rule"),
            policy=data.get("policy"),
            changed_fields=list(data.get("changed_fields", [])),
            sequence_number=data["sequence_number"],
            previous_hash=data["previous_hash"],
            event_id=data["event_id"],
            timestamp=datetime.fromisoformat(data["timestamp"]),
            event_hash=data.get("event_hash", ""),
        )
