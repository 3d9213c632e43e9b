"""
listingguard: access policy engine for a real-estate listings site.

listingguard decides whether a read, create, update or delete against
the document store (users, agents, properties, inquiries, property
views) or the file store (listing photos, agent portraits, user
uploads) is allowed. Every evaluation is a pure function of the
requesting subject, the stored and proposed document, and the path,
plus one lookup of the subject's role. Anything uncertain is denied.

Basic Usage:
    >>> from listingguard import AccessRequest, InMemoryProfileStore, ListingGuard
    >>>
    >>> guard = ListingGuard(InMemoryProfileStore({"u_1": {"role": "agent"}}))
    >>>
    >>> # Any visitor may bump the view counter by exactly one
    >>> guard.can(AccessRequest.for_document(
    ...     "update", "properties/p_1",
    ...     existing={"agentId": "u_1", "views": 10},
    ...     proposed={"agentId": "u_1", "views": 11},
    ... ))
    True
"""

__version__ = "0.1.0"

from listingguard.config import GuardConfig
from listingguard.core import ListingGuard, get_current_subject
from listingguard.diff import changed_fields, is_single_increment, validates_single_element_change
from listingguard.engines import RuleTableEngine, create_engine
from listingguard.exceptions import (
    AccessDeniedError,
    ConfigurationError,
    InvalidPathError,
    ListingGuardError,
    PolicyNotFoundError,
    PrincipalLookupError,
    SchemaValidationError,
)
from listingguard.principals import InMemoryProfileStore, PrincipalResolver, ProfileStore
from listingguard.types import (
    AccessRequest,
    Decision,
    FileMetadata,
    Operation,
    Principal,
    ResourceKind,
    Role,
)

__all__ = [
    # Version
    "__version__",
    # Main class
    "ListingGuard",
    "GuardConfig",
    "get_current_subject",
    # Engine
    "RuleTableEngine",
    "create_engine",
    # Principals
    "PrincipalResolver",
    "ProfileStore",
    "InMemoryProfileStore",
    # Core types
    "AccessRequest",
    "Decision",
    "FileMetadata",
    "Operation",
    "Principal",
    "ResourceKind",
    "Role",
    # Change sets
    "changed_fields",
    "is_single_increment",
    "validates_single_element_change",
    # Exceptions
    "ListingGuardError",
    "AccessDeniedError",
    "ConfigurationError",
    "InvalidPathError",
    "PolicyNotFoundError",
    "PrincipalLookupError",
    "SchemaValidationError",
]
