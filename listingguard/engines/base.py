"""
Policy engine base classes and protocols for listingguard.

Defines the PolicyEngine protocol that engines implement, so the
facade can run the built-in rule table or a custom engine.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from listingguard.types import AccessRequest, Decision


@runtime_checkable
class PolicyEngine(Protocol):
    """
    Protocol defining the interface for policy engines.

    An engine turns an AccessRequest into a Decision and never raises:
    every failure is a denial.

    Example:
        >>> class ClosedEngine:
        ...     def evaluate(self, request: AccessRequest) -> Decision:
        ...         return Decision.deny()
        ...
        ...     async def evaluate_async(self, request: AccessRequest) -> Decision:
        ...         return self.evaluate(request)
    """

    def evaluate(self, request: AccessRequest) -> Decision:
        """Evaluate a request synchronously."""
        ...

    async def evaluate_async(self, request: AccessRequest) -> Decision:
        """Evaluate a request from asyncio code."""
        ...


class BasePolicyEngine(ABC):
    """
    Abstract base class for policy engines.

    Attributes:
        name: Human-readable name for the engine.
        config: Configuration dictionary passed during initialization.
    """

    name: str = "base"

    def __init__(self, config: dict[str, Any] | None = None) -> None:
        self.config = config or {}
        self._initialized = False

    @abstractmethod
    def evaluate(self, request: AccessRequest) -> Decision:
        """
        Evaluate an access request.

        Subclasses must implement this method and must not raise.
        """
        pass

    async def evaluate_async(self, request: AccessRequest) -> Decision:
        """
        Async version of evaluate.

        Default implementation runs the sync version in the default
        executor so a slow profile store does not block the event loop.
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.evaluate, request)

    def is_initialized(self) -> bool:
        """Check if the engine has been initialized."""
        return self._initialized

    def get_config(self, key: str, default: Any = None) -> Any:
        """Get a configuration value."""
        return self.config.get(key, default)


class PolicyEngineError(Exception):
    """Base exception for policy engine errors."""

    def __init__(self, message: str, engine_name: str | None = None) -> None:
        self.engine_name = engine_name
        super().__init__(f"[{engine_name or 'unknown'}] {message}")


class EngineNotAvailableError(PolicyEngineError):
    """Raised when a requested engine type is not available."""
    pass
