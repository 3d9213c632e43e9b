"""
Rules for the file store.

Storage paths embed the owner's subject id as their second segment:

- ``properties/{ownerId}/{fileId}``: listing photos
- ``agent-photos/{ownerId}``: agent portrait
- ``users/{ownerId}/{fileId}``: user uploads

Anyone may read stored files. Any authenticated principal may create a
file if it is a valid image upload; only the path owner may overwrite
or delete it. A path with the wrong number of segments, or an empty
segment, matches no rule.
"""

from __future__ import annotations

import logging

from listingguard.policies.base import Policy
from listingguard.policies.builtin import DenyAllPolicy
from listingguard.policies.registry import PolicyRegistry
from listingguard.types import Operation
from listingguard.validation.uploads import is_valid_image_upload

logger = logging.getLogger(__name__)


class StoragePolicy(Policy):
    """
    Base for a storage folder whose second path segment is the owner.

    Attributes:
        segment_count: Exact number of segments a path in this folder has.
    """

    segment_count: int = 3
    owner_segment: int = 1

    def matches_template(self) -> bool:
        return self.request.is_well_formed and len(self.request.segments) == self.segment_count

    @property
    def path_owner(self) -> str | None:
        segments = self.request.segments
        if len(segments) <= self.owner_segment:
            return None
        return segments[self.owner_segment]

    def authorize(self, operation: Operation | str) -> bool:
        if not self.matches_template():
            logger.debug(f"{type(self).__name__}: '{self.request.path}' does not match template")
            return False
        return super().authorize(operation)

    def is_path_owner(self) -> bool:
        return self.principal.owns(self.path_owner)

    def is_authenticated_image_upload(self) -> bool:
        return self.is_authenticated() and is_valid_image_upload(self.request.file)

    def can_read(self) -> bool:
        return self.any_of(self.allow_all)

    def can_create(self) -> bool:
        return self.any_of(self.is_authenticated_image_upload)

    def can_update(self) -> bool:
        return self.any_of(self.is_path_owner)

    def can_delete(self) -> bool:
        return self.any_of(self.is_path_owner)


class PropertyImagePolicy(StoragePolicy):
    """``properties/{ownerId}/{fileId}``"""

    segment_count = 3


class AgentPhotoPolicy(StoragePolicy):
    """``agent-photos/{ownerId}``"""

    segment_count = 2


class UserFilePolicy(StoragePolicy):
    """``users/{ownerId}/{fileId}``"""

    segment_count = 3


STORAGE_POLICIES: dict[str, type[Policy]] = {
    "properties": PropertyImagePolicy,
    "agent-photos": AgentPhotoPolicy,
    "users": UserFilePolicy,
}


def build_storage_registry() -> PolicyRegistry:
    """Create a registry holding the rules for every storage folder."""
    registry = PolicyRegistry(default_policy=DenyAllPolicy)
    for folder, policy_class in STORAGE_POLICIES.items():
        registry.register(folder, policy_class)
    return registry
