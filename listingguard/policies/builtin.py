"""
Built-in policies for listingguard.

Reusable building blocks for the collection and storage policies.
"""

from __future__ import annotations

import logging
from typing import Any

from listingguard.policies.base import Policy
from listingguard.types import Operation

logger = logging.getLogger(__name__)


class DenyAllPolicy(Policy):
    """
    Policy that denies every operation.

    Used as the registry default so that a collection nobody wrote rules
    for is closed rather than open.
    """

    def authorize(self, operation: Operation | str) -> bool:
        logger.debug(
            f"DenyAllPolicy: denying '{Operation(operation).value}' on '{self.request.path}'"
        )
        return False


class OwnedDocumentPolicy(Policy):
    """
    Base for documents that record their owner in a field.

    The owner is always read from the stored document, never from the
    proposed write, so a writer cannot claim ownership by editing the
    field.

    Attributes:
        owner_field: Name of the field holding the owner's subject id.

    Example:
        >>> class ListingPolicy(OwnedDocumentPolicy):
        ...     owner_field = "agentId"
        ...
        ...     def can_delete(self) -> bool:
        ...         return self.any_of(self.is_document_owner)
    """

    owner_field: str = "ownerId"

    def existing_field(self, name: str, default: Any = None) -> Any:
        """Read a field of the stored document, tolerating a missing document."""
        if not isinstance(self.existing, dict):
            return default
        return self.existing.get(name, default)

    def is_document_owner(self) -> bool:
        """Principal is the owner recorded in the stored document."""
        return self.principal.owns(self.existing_field(self.owner_field))


class ProfilePolicy(Policy):
    """
    Base for profile documents keyed by their owner's subject id.

    Ownership is the document id in the path (``users/{uid}``), which is
    fixed by the request rather than claimed by the write.
    """

    def is_profile_owner(self) -> bool:
        return self.principal.owns(self.request.document_id)
