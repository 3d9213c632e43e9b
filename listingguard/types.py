"""
Core type definitions for listingguard.

This module defines the data structures passed across the engine
boundary: the resolved principal, the access request descriptor, file
metadata for storage writes, and the decision returned to callers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Role(str, Enum):
    """Roles a profile document can grant."""
    USER = "user"
    AGENT = "agent"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: Any) -> Role | None:
        """Return the matching role, or None for anything unrecognised."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value)
        except ValueError:
            return None


class Operation(str, Enum):
    """Operations a request can perform."""
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class ResourceKind(str, Enum):
    """Which store a request targets."""
    DOCUMENT = "document"
    FILE = "file"


@dataclass(frozen=True)
class Principal:
    """
    The resolved identity a request is evaluated on behalf of.

    Attributes:
        subject_id: Authenticated subject id, or None for anonymous callers.
        role: Role read from the subject's profile document for this
            evaluation, or None when it could not be resolved.

    Example:
        >>> agent = Principal(subject_id="u_42", role=Role.AGENT)
        >>> agent.is_agent
        True
    """
    subject_id: str | None = None
    role: Role | None = None

    @classmethod
    def anonymous(cls) -> Principal:
        """Create an unauthenticated principal."""
        return cls()

    @property
    def is_authenticated(self) -> bool:
        return self.subject_id is not None

    @property
    def is_agent(self) -> bool:
        """Agents and admins both count as agents."""
        return self.role in (Role.AGENT, Role.ADMIN)

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def owns(self, owner_id: Any) -> bool:
        """Check whether this principal is the given owner."""
        return self.subject_id is not None and owner_id == self.subject_id

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "subject_id": self.subject_id,
            "role": self.role.value if self.role else None,
        }


@dataclass(frozen=True)
class FileMetadata:
    """
    Metadata of a file being written to object storage.

    Attributes:
        content_type: MIME type reported for the upload.
        size: Size of the upload in bytes.
    """
    content_type: str
    size: int

    def to_dict(self) -> dict[str, Any]:
        return {"content_type": self.content_type, "size": self.size}


@dataclass(frozen=True)
class AccessRequest:
    """
    Describes a single read/write/delete against the document or file store.

    Attributes:
        operation: The operation being attempted.
        kind: Whether the path addresses a document or a stored file.
        path: Slash-separated path, e.g. ``properties/p_1`` or
            ``agent-photos/u_42``.
        subject_id: Authenticated subject id, or None.
        existing: Current document state (None if it does not exist).
        proposed: Document state after the write (None for read/delete).
        file: Upload metadata for file writes.

    Example:
        >>> request = AccessRequest.for_document(
        ...     Operation.UPDATE,
        ...     "properties/p_1",
        ...     subject_id="u_7",
        ...     existing={"agentId": "u_1", "views": 3},
        ...     proposed={"agentId": "u_1", "views": 4},
        ... )
    """
    operation: Operation
    kind: ResourceKind
    path: str
    subject_id: str | None = None
    existing: dict[str, Any] | None = None
    proposed: dict[str, Any] | None = None
    file: FileMetadata | None = None

    @classmethod
    def for_document(
        cls,
        operation: Operation | str,
        path: str,
        subject_id: str | None = None,
        existing: dict[str, Any] | None = None,
        proposed: dict[str, Any] | None = None,
    ) -> AccessRequest:
        """Create a request against the document store."""
        return cls(
            operation=Operation(operation),
            kind=ResourceKind.DOCUMENT,
            path=path,
            subject_id=subject_id,
            existing=existing,
            proposed=proposed,
        )

    @classmethod
    def for_file(
        cls,
        operation: Operation | str,
        path: str,
        subject_id: str | None = None,
        file: FileMetadata | None = None,
    ) -> AccessRequest:
        """Create a request against the file store."""
        return cls(
            operation=Operation(operation),
            kind=ResourceKind.FILE,
            path=path,
            subject_id=subject_id,
            file=file,
        )

    @property
    def segments(self) -> list[str]:
        """
        Path split on ``/`` after dropping one leading slash.

        Empty segments are kept so that paths like ``properties//p_1`` or
        ``agent-photos/u_1/`` can be recognised as malformed.
        """
        path = self.path[1:] if self.path.startswith("/") else self.path
        return path.split("/")

    @property
    def is_well_formed(self) -> bool:
        """True if the path has no empty segments."""
        return all(self.segments)

    @property
    def collection(self) -> str:
        """First path segment: a collection name or storage folder."""
        return self.segments[0]

    @property
    def document_id(self) -> str | None:
        """Document id for ``collection/id`` document paths."""
        segments = self.segments
        if self.kind is ResourceKind.DOCUMENT and self.is_well_formed and len(segments) == 2:
            return segments[1]
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging. Document bodies are omitted."""
        return {
            "operation": self.operation.value,
            "kind": self.kind.value,
            "path": self.path,
            "subject_id": self.subject_id,
            "has_existing": self.existing is not None,
            "has_proposed": self.proposed is not None,
            "file": self.file.to_dict() if self.file else None,
        }


@dataclass(frozen=True)
class Decision:
    """
    Result of evaluating an access request.

    A denial carries no reason: callers only learn that access was refused.

    Attributes:
        allowed: Whether the request may proceed.
        rule: Name of the predicate that granted access (None on deny).
        policy: Name of the policy class that granted access (None on deny).
        metadata: Extra data for audit consumers.
    """
    allowed: bool
    rule: str | None = None
    policy: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def allow(
        cls,
        rule: str | None = None,
        policy: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Decision:
        """Create an allowed decision."""
        return cls(allowed=True, rule=rule, policy=policy, metadata=metadata or {})

    @classmethod
    def deny(cls, metadata: dict[str, Any] | None = None) -> Decision:
        """Create a denied decision."""
        return cls(allowed=False, metadata=metadata or {})

    def __bool__(self) -> bool:
        return self.allowed

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "allowed": self.allowed,
            "rule": self.rule,
            "policy": self.policy,
            "metadata": self.metadata,
        }
