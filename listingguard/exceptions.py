"""
Custom exceptions for listingguard.

The engine itself never raises to its caller: every failure inside an
evaluation collapses to a denial. These exceptions are raised by the
opt-in enforcement helpers, by configuration and path parsing, and by
collaborators (profile stores, schema validation) before the engine
converts them.
"""

from __future__ import annotations

from typing import Any


class ListingGuardError(Exception):
    """
    Base exception for all listingguard errors.

    Attributes:
        message: Human-readable error description.
        details: Additional context about the error.

    Example:
        >>> try:
        ...     guard.enforce(request)
        ... except ListingGuardError as e:
        ...     logger.error(f"listingguard error: {e}")
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class AccessDeniedError(ListingGuardError):
    """
    Raised by ``ListingGuard.enforce`` when a request is denied.

    Deliberately carries no reason: the caller learns who was refused
    what, never which check failed.

    Example:
        >>> raise AccessDeniedError(
        ...     subject_id="u_7",
        ...     operation="delete",
        ...     path="properties/p_1",
        ... )
    """

    def __init__(self, subject_id: str | None, operation: str, path: str) -> None:
        self.subject_id = subject_id
        self.operation = operation
        self.path = path

        who = f"'{subject_id}'" if subject_id else "anonymous caller"
        message = f"Access denied: {who} cannot {operation} '{path}'"
        details = {
            "subject_id": subject_id,
            "operation": operation,
            "path": path,
        }
        super().__init__(message, details)


class PolicyNotFoundError(ListingGuardError):
    """Raised when no policy is registered for a collection or storage path."""

    def __init__(self, resource: str, available: list[str] | None = None) -> None:
        self.resource = resource
        self.available = available or []
        message = f"No policy registered for '{resource}'"
        super().__init__(message, {"resource": resource, "available": self.available})


class ConfigurationError(ListingGuardError):
    """
    Raised when listingguard is misconfigured.

    Attributes:
        config_key: The configuration key at fault.
        expected: Description of a valid value.
        received: The value that was provided.
    """

    def __init__(
        self,
        config_key: str,
        expected: str | None = None,
        received: Any = None,
    ) -> None:
        self.config_key = config_key
        self.expected = expected
        self.received = received

        message = f"Invalid configuration for '{config_key}'"
        if expected:
            message += f": expected {expected}"
        if received is not None:
            message += f", got {received!r}"

        super().__init__(message, {
            "config_key": config_key,
            "expected": expected,
            "received": repr(received) if received is not None else None,
        })


class PrincipalLookupError(ListingGuardError):
    """Raised by a profile store when the backing lookup cannot complete."""

    def __init__(self, subject_id: str, cause: str | None = None) -> None:
        self.subject_id = subject_id
        message = f"Profile lookup failed for subject '{subject_id}'"
        if cause:
            message += f": {cause}"
        super().__init__(message, {"subject_id": subject_id})


class InvalidPathError(ListingGuardError):
    """Raised when a path does not match any known template."""

    def __init__(self, path: str, expected: str | None = None) -> None:
        self.path = path
        message = f"Invalid path '{path}'"
        if expected:
            message += f", expected {expected}"
        super().__init__(message, {"path": path, "expected": expected})


class SchemaValidationError(ListingGuardError):
    """
    Raised when a proposed document does not match its collection schema.

    Attributes:
        collection: The collection the document belongs to.
        validation_errors: Flattened field-level errors.
    """

    def __init__(self, collection: str, validation_errors: list[str] | None = None) -> None:
        self.collection = collection
        self.validation_errors = validation_errors or []
        message = f"Document does not match the '{collection}' schema"
        if self.validation_errors:
            message += f": {'; '.join(self.validation_errors)}"
        super().__init__(message, {
            "collection": collection,
            "validation_errors": self.validation_errors,
        })
