"""
Policy engines for listingguard.

- RuleTableEngine: the built-in engine running the collection and
  storage rule tables

Custom engines can be registered with the EngineFactory.

Quick Start:
    >>> from listingguard.engines import create_engine
    >>> from listingguard.principals import InMemoryProfileStore, PrincipalResolver
    >>>
    >>> resolver = PrincipalResolver(InMemoryProfileStore())
    >>> engine = create_engine("rules", resolver, {"validate_schemas": True})
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from listingguard.engines.base import (
    BasePolicyEngine,
    EngineNotAvailableError,
    PolicyEngine,
    PolicyEngineError,
)
from listingguard.engines.rules import RuleTableEngine

if TYPE_CHECKING:
    from listingguard.principals import PrincipalResolver

logger = logging.getLogger(__name__)


class EngineFactory:
    """
    Factory for creating policy engine instances.

    Engines are constructed with the principal resolver and a
    configuration dict.

    Example:
        >>> EngineFactory.register("custom", MyEngine)
        >>> engine = EngineFactory.create("custom", resolver)
    """

    _engines: dict[str, type[BasePolicyEngine]] = {
        "rules": RuleTableEngine,
    }

    @classmethod
    def create(
        cls,
        engine_type: str,
        resolver: PrincipalResolver,
        config: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> BasePolicyEngine:
        """
        Create a policy engine instance.

        Extra keyword arguments (e.g. ``audit_logger``) are passed to the
        engine constructor.

        Raises:
            EngineNotAvailableError: If the engine type is unknown.
        """
        engine_type = engine_type.lower()
        if engine_type not in cls._engines:
            raise EngineNotAvailableError(
                f"Unknown engine type: '{engine_type}'. "
                f"Available engines: {', '.join(cls.get_available_engines())}",
                engine_name=engine_type,
            )

        engine_class = cls._engines[engine_type]
        return engine_class(resolver, config, **kwargs)  # type: ignore[call-arg]

    @classmethod
    def register(cls, engine_type: str, engine_class: type[BasePolicyEngine]) -> None:
        """Register a custom engine type."""
        cls._engines[engine_type.lower()] = engine_class
        logger.debug(f"Registered engine type: {engine_type}")

    @classmethod
    def unregister(cls, engine_type: str) -> bool:
        """Unregister an engine type. The built-in engine cannot be removed."""
        engine_type = engine_type.lower()
        if engine_type in cls._engines and engine_type != "rules":
            del cls._engines[engine_type]
            return True
        return False

    @classmethod
    def get_available_engines(cls) -> list[str]:
        return sorted(cls._engines)


def create_engine(
    engine_type: str,
    resolver: PrincipalResolver,
    config: dict[str, Any] | None = None,
    **kwargs: Any,
) -> BasePolicyEngine:
    """Create a policy engine instance. Delegates to EngineFactory.create()."""
    return EngineFactory.create(engine_type, resolver, config, **kwargs)


__all__ = [
    "PolicyEngine",
    "BasePolicyEngine",
    "RuleTableEngine",
    "EngineFactory",
    "create_engine",
    "PolicyEngineError",
    "EngineNotAvailableError",
]
