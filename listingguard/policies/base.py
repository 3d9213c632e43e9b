"""
Policy base classes for listingguard.

Each collection (or storage folder) has one policy class. Following the
Pundit pattern, ``can_<operation>`` methods decide whether an operation is
permitted. A ``can_`` method combines named predicate methods with
``any_of``: the first satisfied predicate grants access, and if none is
satisfied the operation is denied.
"""

from __future__ import annotations

import logging
import re
from abc import ABC
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from listingguard.types import Operation

if TYPE_CHECKING:
    from listingguard.types import AccessRequest, Principal

logger = logging.getLogger(__name__)

Predicate = Callable[[], bool]


class Policy(ABC):
    """
    Abstract base class for all listingguard policies.

    A policy instance is built for a single evaluation and discarded
    afterwards, so it may record which predicates it tried.

    Attributes:
        principal: The resolved principal making the request.
        request: The request being evaluated.
        granted_by: Name of the predicate that granted access, if any.
        trace: Predicates tried so far, with their outcomes.

    Example:
        >>> class NotesPolicy(Policy):
        ...     def can_read(self) -> bool:
        ...         return self.any_of(self.is_authenticated)
        ...
        ...     def can_delete(self) -> bool:
        ...         return self.any_of(self.is_admin)
    """

    # Set by the @registry.policy decorator
    _resource_name: str | None = None

    def __init__(self, principal: Principal, request: AccessRequest) -> None:
        self.principal = principal
        self.request = request
        self.granted_by: str | None = None
        self.trace: list[tuple[str, bool]] = []

    def authorize(self, operation: Operation | str) -> bool:
        """
        Check whether the principal may perform an operation.

        Looks up ``can_<operation>``; operations without a method are denied.
        """
        op = Operation(operation)
        method = getattr(self, f"can_{op.value}", None)
        if method is None:
            return False
        return method() is True

    def can(self, operation: Operation | str) -> bool:
        """Alias for authorize() for a more fluent API."""
        return self.authorize(operation)

    def any_of(self, *predicates: Predicate) -> bool:
        """
        Evaluate predicates in order and stop at the first satisfied one.

        A predicate that raises counts as unsatisfied.
        """
        for predicate in predicates:
            name = getattr(predicate, "__name__", repr(predicate))
            try:
                satisfied = predicate() is True
            except Exception as e:
                logger.debug(f"{type(self).__name__}.{name} failed: {e!r}")
                satisfied = False
            self.trace.append((name, satisfied))
            if satisfied:
                self.granted_by = name
                return True
        return False

    # Document accessors

    @property
    def existing(self) -> dict[str, Any] | None:
        return self.request.existing

    @property
    def proposed(self) -> dict[str, Any] | None:
        return self.request.proposed

    # Shared predicates

    def allow_all(self) -> bool:
        return True

    def is_authenticated(self) -> bool:
        return self.principal.is_authenticated

    def is_agent(self) -> bool:
        """Principal currently holds the agent or admin role."""
        return self.principal.is_agent

    def is_admin(self) -> bool:
        return self.principal.is_admin

    @classmethod
    def get_resource_name(cls) -> str:
        """
        Get the resource name this policy handles.

        Defaults to the class name without its ``Policy`` suffix, in
        camelCase, e.g. ``PropertyViewPolicy`` -> ``propertyView``.
        """
        if cls._resource_name:
            return cls._resource_name

        name = cls.__name__
        if name.endswith("Policy"):
            name = name[:-6]
        return re.sub(r"^[A-Z]", lambda m: m.group(0).lower(), name)

    @classmethod
    def get_available_operations(cls) -> list[str]:
        """List the operations this policy defines a ``can_`` method for."""
        return sorted(
            op.value for op in Operation
            if callable(getattr(cls, f"can_{op.value}", None))
        )
