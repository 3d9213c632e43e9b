"""
Pytest fixtures for listingguard tests.

Provides common fixtures used across all test modules.
"""

from __future__ import annotations

from typing import Any

import pytest

from listingguard import GuardConfig, ListingGuard
from listingguard.audit.logger import InMemoryAuditLogger
from listingguard.engines.rules import RuleTableEngine
from listingguard.principals import InMemoryProfileStore, PrincipalResolver

BUYER = "buyer_1"
AGENT = "agent_1"
OTHER_AGENT = "agent_2"
ADMIN = "admin_1"
NO_PROFILE = "ghost_1"


# ============================================================================
# Profile Store Fixtures
# ============================================================================


@pytest.fixture
def profile_store() -> InMemoryProfileStore:
    """Profiles for a buyer, two agents and an admin."""
    return InMemoryProfileStore({
        BUYER: {"uid": BUYER, "displayName": "Bea Buyer", "role": "user"},
        AGENT: {"uid": AGENT, "displayName": "Al Agent", "role": "agent"},
        OTHER_AGENT: {"uid": OTHER_AGENT, "displayName": "Ann Agent", "role": "agent"},
        ADMIN: {"uid": ADMIN, "displayName": "Ada Admin", "role": "admin"},
    })


@pytest.fixture
def resolver(profile_store: InMemoryProfileStore) -> PrincipalResolver:
    return PrincipalResolver(profile_store)


class FailingProfileStore:
    """Profile store whose backend is always down."""

    def __init__(self) -> None:
        self.calls = 0

    def get_profile(self, subject_id: str) -> dict[str, Any] | None:
        self.calls += 1
        raise ConnectionError("document store unavailable")


@pytest.fixture
def failing_store() -> FailingProfileStore:
    return FailingProfileStore()


# ============================================================================
# Engine Fixtures
# ============================================================================


@pytest.fixture
def audit_logger() -> InMemoryAuditLogger:
    return InMemoryAuditLogger()


@pytest.fixture
def engine(resolver: PrincipalResolver, audit_logger: InMemoryAuditLogger) -> RuleTableEngine:
    return RuleTableEngine(resolver, audit_logger=audit_logger)


@pytest.fixture
def guard(profile_store: InMemoryProfileStore) -> ListingGuard:
    return ListingGuard(profile_store, GuardConfig())


# ============================================================================
# Document Fixtures
# ============================================================================


@pytest.fixture
def property_doc() -> dict[str, Any]:
    """A listing owned by AGENT."""
    return {
        "title": "Riverside farm",
        "description": "40 acres with water rights",
        "price": 250000,
        "location": "Nakuru",
        "type": "farm",
        "size": 40,
        "sizeUnit": "acres",
        "features": ["borehole", "fenced"],
        "images": [],
        "agentId": AGENT,
        "status": "active",
        "views": 7,
        "savedBy": [BUYER],
    }


@pytest.fixture
def inquiry_doc() -> dict[str, Any]:
    """An inquiry from BUYER to AGENT."""
    return {
        "propertyId": "prop_1",
        "userId": BUYER,
        "agentId": AGENT,
        "userName": "Bea Buyer",
        "userEmail": "bea@example.com",
        "message": "Is the borehole working?",
        "status": "new",
        "agentNotes": "",
    }
