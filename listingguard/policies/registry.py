"""
Policy registry for listingguard.

Maps collection names (or storage folder names) to policy classes.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any

from listingguard.exceptions import PolicyNotFoundError

if TYPE_CHECKING:
    from listingguard.policies.base import Policy

logger = logging.getLogger(__name__)


class PolicyRegistry:
    """
    Registry for policy classes.

    Features:
        - Decorator-based registration (@registry.policy("properties"))
        - Optional default policy for unregistered names
        - Thread-safe operations

    Example:
        >>> registry = PolicyRegistry(default_policy=DenyAllPolicy)
        >>>
        >>> @registry.policy("propertyViews")
        ... class PropertyViewPolicy(Policy):
        ...     def can_read(self) -> bool:
        ...         return self.any_of(self.allow_all)
        >>>
        >>> registry.get_policy("propertyViews")
        <class 'PropertyViewPolicy'>
    """

    def __init__(self, default_policy: type[Policy] | None = None) -> None:
        """
        Initialize the registry.

        Args:
            default_policy: Policy class returned for unregistered names.
                If None, lookups for unregistered names raise
                PolicyNotFoundError.
        """
        self._policies: dict[str, type[Policy]] = {}
        self._default_policy = default_policy
        self._lock = threading.RLock()

    def policy(self, resource_name: str) -> Any:
        """
        Decorator for registering a policy class.

        Example:
            >>> @registry.policy("inquiries")
            ... class InquiryPolicy(Policy):
            ...     ...
        """
        def decorator(policy_class: type[Policy]) -> type[Policy]:
            self.register(resource_name, policy_class)
            return policy_class
        return decorator

    def register(self, resource_name: str, policy_class: type[Policy]) -> None:
        """Register a policy class for a collection or storage folder."""
        with self._lock:
            if resource_name in self._policies:
                existing = self._policies[resource_name].__name__
                logger.warning(
                    f"Overwriting policy for '{resource_name}': "
                    f"{existing} -> {policy_class.__name__}"
                )

            self._policies[resource_name] = policy_class
            policy_class._resource_name = resource_name

            logger.debug(
                f"Registered policy '{policy_class.__name__}' for '{resource_name}'"
            )

    def register_by_convention(self, policy_class: type[Policy]) -> None:
        """Register a policy under the name derived from its class name."""
        self.register(policy_class.get_resource_name(), policy_class)

    def get_policy(self, resource_name: str) -> type[Policy]:
        """
        Get the policy class for a name.

        Raises:
            PolicyNotFoundError: If nothing is registered and no default is set.
        """
        with self._lock:
            if resource_name in self._policies:
                return self._policies[resource_name]

            if self._default_policy is not None:
                logger.debug(
                    f"No policy for '{resource_name}', using default: "
                    f"{self._default_policy.__name__}"
                )
                return self._default_policy

            raise PolicyNotFoundError(resource_name, list(self._policies.keys()))

    def has_policy(self, resource_name: str) -> bool:
        with self._lock:
            return resource_name in self._policies

    def list_policies(self) -> dict[str, str]:
        """
        List all registered policies.

        Example:
            >>> registry.list_policies()
            {'properties': 'PropertyPolicy', 'inquiries': 'InquiryPolicy'}
        """
        with self._lock:
            return {
                resource: policy.__name__
                for resource, policy in self._policies.items()
            }

    def unregister(self, resource_name: str) -> bool:
        """Unregister a policy. Returns True if one was registered."""
        with self._lock:
            if resource_name in self._policies:
                del self._policies[resource_name]
                logger.debug(f"Unregistered policy for '{resource_name}'")
                return True
            return False

    def clear(self) -> None:
        """Clear all registered policies."""
        with self._lock:
            self._policies.clear()
            logger.debug("Cleared all registered policies")

    def set_default_policy(self, policy_class: type[Policy] | None) -> None:
        """Set or clear the default policy."""
        with self._lock:
            self._default_policy = policy_class
