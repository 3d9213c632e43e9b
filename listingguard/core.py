"""
Core ListingGuard class.

This module provides the main entry point for applications: it wires
the principal resolver, the policy engine and the decision audit log
together and offers boolean checks, an enforcing check that raises,
and a decorator for data-access functions.
"""

from __future__ import annotations

import contextvars
import functools
import inspect
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, ParamSpec, TypeVar

from listingguard.audit.logger import AuditLogger, InMemoryAuditLogger, LoggerConfig
from listingguard.config import GuardConfig
from listingguard.engines import create_engine
from listingguard.exceptions import AccessDeniedError
from listingguard.principals import PrincipalResolver, ProfileStore
from listingguard.types import AccessRequest, Decision, Operation, ResourceKind

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

_current_subject: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "listingguard_subject", default=None
)


def get_current_subject() -> str | None:
    """Get the subject id bound by ``ListingGuard.subject``."""
    return _current_subject.get()


class ListingGuard:
    """
    Main entry point for listingguard.

    Example:
        >>> from listingguard import ListingGuard, AccessRequest, InMemoryProfileStore
        >>>
        >>> guard = ListingGuard(InMemoryProfileStore({"u_1": {"role": "agent"}}))
        >>>
        >>> guard.can(AccessRequest.for_document(
        ...     "delete", "properties/p_1", subject_id="u_1",
        ...     existing={"agentId": "u_1"},
        ... ))
        True
        >>>
        >>> @guard.authorize("update")
        ... def save_property(path, proposed, existing=None, subject_id=None):
        ...     return db.set(path, proposed)
    """

    def __init__(
        self,
        profile_store: ProfileStore,
        config: GuardConfig | None = None,
    ) -> None:
        """
        Initialize ListingGuard.

        Args:
            profile_store: Read-only access to ``users`` profile documents.
            config: Configuration; defaults to GuardConfig.default().
        """
        self.config = config or GuardConfig.default()
        self.resolver = PrincipalResolver(profile_store)

        self._audit_logger: InMemoryAuditLogger | None = None
        if self.config.log_decisions:
            if self.config.audit_log_path is not None:
                self._audit_logger = AuditLogger(LoggerConfig.default(self.config.audit_log_path))
            else:
                self._audit_logger = InMemoryAuditLogger()

        self.engine = create_engine(
            self.config.engine,
            self.resolver,
            self.config.engine_config(),
            audit_logger=self._audit_logger,
        )

    @property
    def audit_logger(self) -> InMemoryAuditLogger | None:
        return self._audit_logger

    # ==================== Checks ====================

    def check(self, request: AccessRequest) -> Decision:
        """Evaluate a request. Never raises."""
        return self.engine.evaluate(request)

    async def check_async(self, request: AccessRequest) -> Decision:
        """Evaluate a request from asyncio code. Never raises."""
        return await self.engine.evaluate_async(request)

    def can(self, request: AccessRequest) -> bool:
        """Boolean shortcut for check()."""
        return self.check(request).allowed

    def enforce(self, request: AccessRequest) -> Decision:
        """
        Evaluate a request and raise if it is denied.

        Raises:
            AccessDeniedError: If the request is denied.
        """
        decision = self.check(request)
        if not decision.allowed:
            raise AccessDeniedError(request.subject_id, request.operation.value, request.path)
        return decision

    def explain(self, request: AccessRequest) -> dict[str, Any]:
        """
        Operator-side explanation of a decision.

        Raises:
            NotImplementedError: If the configured engine cannot explain.
        """
        explain = getattr(self.engine, "explain", None)
        if explain is None:
            raise NotImplementedError(f"Engine '{self.engine.name}' cannot explain decisions")
        return explain(request)

    # ==================== Context ====================

    @contextmanager
    def subject(self, subject_id: str | None) -> Iterator[str | None]:
        """
        Bind the authenticated subject for decorated functions.

        Example:
            >>> with guard.subject("u_1"):
            ...     save_property("properties/p_1", proposed, existing)
        """
        token = _current_subject.set(subject_id)
        try:
            yield subject_id
        finally:
            _current_subject.reset(token)

    # ==================== Decorator ====================

    def authorize(
        self,
        operation: Operation | str,
        kind: ResourceKind | str = ResourceKind.DOCUMENT,
        path_param: str = "path",
        subject_param: str = "subject_id",
        existing_param: str = "existing",
        proposed_param: str = "proposed",
        file_param: str = "file",
    ) -> Callable[[Callable[P, T]], Callable[P, T]]:
        """
        Decorator that enforces the rules before a data-access function runs.

        The request is built from the call's arguments: the path from
        ``path_param``, documents from ``existing_param`` and
        ``proposed_param``, upload metadata from ``file_param``. The
        subject comes from ``subject_param`` if passed, otherwise from
        the ``subject()`` context. Works with sync and async functions.

        Raises:
            AccessDeniedError: From the wrapped call, if denied.
        """
        op = Operation(operation)
        resource_kind = ResourceKind(kind)

        def decorator(func: Callable[P, T]) -> Callable[P, T]:
            signature = inspect.signature(func)

            def build_request(args: tuple[Any, ...], kwargs: dict[str, Any]) -> AccessRequest:
                bound = signature.bind_partial(*args, **kwargs)
                arguments = bound.arguments
                subject_id = arguments.get(subject_param) or get_current_subject()
                path = arguments.get(path_param)
                if not isinstance(path, str):
                    raise TypeError(
                        f"{func.__name__}() needs a str '{path_param}' argument to be authorized"
                    )
                return AccessRequest(
                    operation=op,
                    kind=resource_kind,
                    path=path,
                    subject_id=subject_id,
                    existing=arguments.get(existing_param),
                    proposed=arguments.get(proposed_param),
                    file=arguments.get(file_param),
                )

            if inspect.iscoroutinefunction(func):
                @functools.wraps(func)
                async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
                    request = build_request(args, kwargs)
                    decision = await self.check_async(request)
                    if not decision.allowed:
                        raise AccessDeniedError(request.subject_id, op.value, request.path)
                    return await func(*args, **kwargs)  # type: ignore[misc]
                return async_wrapper  # type: ignore[return-value]

            @functools.wraps(func)
            def sync_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
                self.enforce(build_request(args, kwargs))
                return func(*args, **kwargs)
            return sync_wrapper

        return decorator

    def close(self) -> None:
        """Close the audit log file, if one is open."""
        if isinstance(self._audit_logger, AuditLogger):
            self._audit_logger.close()
