"""
Policy system for listingguard.

Each collection of the document store, and each folder of the file
store, is governed by one Pundit-style policy class. ``can_<operation>``
methods combine named predicates with ``any_of``; the first satisfied
predicate grants access and anything else is denied.

Quick Start:
    >>> from listingguard.policies import build_document_registry
    >>> from listingguard.types import AccessRequest, Principal, Role
    >>>
    >>> registry = build_document_registry()
    >>> request = AccessRequest.for_document(
    ...     "delete", "inquiries/i_1", subject_id="u_9",
    ...     existing={"userId": "u_2", "agentId": "u_3"},
    ... )
    >>> policy_class = registry.get_policy(request.collection)
    >>> policy_class(Principal("u_9", Role.ADMIN), request).can("delete")
    True
"""

from listingguard.policies.base import Policy, Predicate
from listingguard.policies.builtin import DenyAllPolicy, OwnedDocumentPolicy, ProfilePolicy
from listingguard.policies.documents import (
    DOCUMENT_POLICIES,
    AgentPolicy,
    InquiryPolicy,
    PropertyPolicy,
    PropertyViewPolicy,
    UserPolicy,
    build_document_registry,
)
from listingguard.policies.registry import PolicyRegistry
from listingguard.policies.storage import (
    STORAGE_POLICIES,
    AgentPhotoPolicy,
    PropertyImagePolicy,
    StoragePolicy,
    UserFilePolicy,
    build_storage_registry,
)

__all__ = [
    # Base classes
    "Policy",
    "Predicate",
    "DenyAllPolicy",
    "OwnedDocumentPolicy",
    "ProfilePolicy",
    "StoragePolicy",
    # Registry
    "PolicyRegistry",
    "build_document_registry",
    "build_storage_registry",
    # Document rules
    "DOCUMENT_POLICIES",
    "UserPolicy",
    "AgentPolicy",
    "PropertyPolicy",
    "InquiryPolicy",
    "PropertyViewPolicy",
    # Storage rules
    "STORAGE_POLICIES",
    "PropertyImagePolicy",
    "AgentPhotoPolicy",
    "UserFilePolicy",
]
