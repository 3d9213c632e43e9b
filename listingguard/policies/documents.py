"""
Rules for the document store collections.

Collection names are part of the external contract: ``users``,
``agents``, ``properties``, ``inquiries`` and ``propertyViews``.
"""

from __future__ import annotations

from listingguard.diff import changed_fields, is_single_increment, validates_single_element_change
from listingguard.policies.base import Policy
from listingguard.policies.builtin import DenyAllPolicy, OwnedDocumentPolicy, ProfilePolicy
from listingguard.policies.registry import PolicyRegistry

VIEWS_FIELD = "views"
SAVED_BY_FIELD = "savedBy"


class UserPolicy(ProfilePolicy):
    """
    User profiles (``users/{uid}``): self-service only.

    The role field is not protected separately: an owner may rewrite
    their own role.
    """

    def can_read(self) -> bool:
        return self.any_of(self.is_authenticated)

    def can_create(self) -> bool:
        return self.any_of(self.is_profile_owner)

    def can_update(self) -> bool:
        return self.any_of(self.is_profile_owner)

    def can_delete(self) -> bool:
        return self.any_of(self.is_profile_owner)


class AgentPolicy(ProfilePolicy):
    """Public agent profiles (``agents/{uid}``), written by agents themselves."""

    def can_read(self) -> bool:
        return self.any_of(self.allow_all)

    def is_agent_owner(self) -> bool:
        return self.is_profile_owner() and self.is_agent()

    def can_create(self) -> bool:
        return self.any_of(self.is_agent_owner)

    def can_update(self) -> bool:
        return self.any_of(self.is_agent_owner)

    def can_delete(self) -> bool:
        return self.any_of(self.is_agent_owner)


class PropertyPolicy(OwnedDocumentPolicy):
    """
    Property listings (``properties/{id}``).

    Owners have full write access. Anyone else may only bump the view
    counter by one, or add/remove a single id in ``savedBy``, and only
    when that field is the sole change in the write.
    """

    owner_field = "agentId"

    def can_read(self) -> bool:
        return self.any_of(self.allow_all)

    def can_create(self) -> bool:
        return self.any_of(self.is_authenticated)

    def can_update(self) -> bool:
        return self.any_of(
            self.is_document_owner,
            self.is_view_increment,
            self.is_saved_by_change,
        )

    def can_delete(self) -> bool:
        return self.any_of(self.is_document_owner)

    def is_view_increment(self) -> bool:
        if changed_fields(self.existing, self.proposed) != {VIEWS_FIELD}:
            return False
        return is_single_increment(
            self.existing_field(VIEWS_FIELD),
            self.proposed.get(VIEWS_FIELD),
        )

    def is_saved_by_change(self) -> bool:
        if changed_fields(self.existing, self.proposed) != {SAVED_BY_FIELD}:
            return False
        before = self.existing_field(SAVED_BY_FIELD)
        if before is None and self.existing is not None:
            # A stored listing without the field starts from an empty list.
            before = []
        return validates_single_element_change(before, self.proposed.get(SAVED_BY_FIELD))


class InquiryPolicy(OwnedDocumentPolicy):
    """
    Buyer inquiries (``inquiries/{id}``).

    Visible to the buyer (``userId``) and the listing agent
    (``agentId``). Admins may update and delete but get no read grant.
    """

    owner_field = "agentId"
    buyer_field = "userId"

    def is_buyer(self) -> bool:
        return self.principal.owns(self.existing_field(self.buyer_field))

    def can_read(self) -> bool:
        return self.any_of(self.is_buyer, self.is_document_owner)

    def can_create(self) -> bool:
        return self.any_of(self.is_authenticated)

    def can_update(self) -> bool:
        return self.any_of(self.is_document_owner, self.is_admin)

    def can_delete(self) -> bool:
        return self.any_of(self.is_admin)


class PropertyViewPolicy(Policy):
    # Anonymous analytics; intentionally unrestricted.

    def can_read(self) -> bool:
        return self.any_of(self.allow_all)

    def can_create(self) -> bool:
        return self.any_of(self.allow_all)

    def can_update(self) -> bool:
        return self.any_of(self.allow_all)

    def can_delete(self) -> bool:
        return self.any_of(self.allow_all)


DOCUMENT_POLICIES: dict[str, type[Policy]] = {
    "users": UserPolicy,
    "agents": AgentPolicy,
    "properties": PropertyPolicy,
    "inquiries": InquiryPolicy,
    "propertyViews": PropertyViewPolicy,
}


def build_document_registry() -> PolicyRegistry:
    """Create a registry holding the rules for every document collection."""
    registry = PolicyRegistry(default_policy=DenyAllPolicy)
    for collection, policy_class in DOCUMENT_POLICIES.items():
        registry.register(collection, policy_class)
    return registry
