"""
Tests for the document store rules.

Tests cover:
- users: self-service profiles
- agents: public profiles written by agents
- properties: owner writes plus the view-counter and saved-by exceptions
- inquiries: buyer/agent visibility, admin moderation
- propertyViews: unrestricted analytics
- unknown collections and malformed paths
"""

from __future__ import annotations

from typing import Any

import pytest

from listingguard.engines.rules import RuleTableEngine
from listingguard.principals import PrincipalResolver
from listingguard.types import AccessRequest

from tests.conftest import ADMIN, AGENT, BUYER, NO_PROFILE, OTHER_AGENT


def check(
    engine: RuleTableEngine,
    operation: str,
    path: str,
    subject_id: str | None = None,
    existing: dict[str, Any] | None = None,
    proposed: dict[str, Any] | None = None,
) -> bool:
    request = AccessRequest.for_document(
        operation, path, subject_id=subject_id, existing=existing, proposed=proposed,
    )
    return engine.evaluate(request).allowed


def with_changes(doc: dict[str, Any], **changes: Any) -> dict[str, Any]:
    updated = dict(doc)
    updated.update(changes)
    return updated


class TestUserRules:
    """Tests for users/{uid}."""

    def test_read_requires_authentication(self, engine):
        assert check(engine, "read", f"users/{BUYER}", subject_id=AGENT) is True
        assert check(engine, "read", f"users/{BUYER}", subject_id=NO_PROFILE) is True
        assert check(engine, "read", f"users/{BUYER}") is False

    def test_create_own_profile(self, engine):
        profile = {"uid": NO_PROFILE, "displayName": "New", "role": "user"}
        assert check(engine, "create", f"users/{NO_PROFILE}", NO_PROFILE, proposed=profile) is True
        assert check(engine, "create", f"users/{NO_PROFILE}", BUYER, proposed=profile) is False

    def test_only_owner_updates(self, engine):
        existing = {"uid": BUYER, "displayName": "Bea", "role": "user"}
        proposed = with_changes(existing, displayName="Beatrice")

        assert check(engine, "update", f"users/{BUYER}", BUYER, existing, proposed) is True
        assert check(engine, "update", f"users/{BUYER}", ADMIN, existing, proposed) is False
        assert check(engine, "update", f"users/{BUYER}", None, existing, proposed) is False

    def test_owner_may_rewrite_own_role(self, engine):
        existing = {"uid": BUYER, "displayName": "Bea", "role": "user"}
        proposed = with_changes(existing, role="admin")
        assert check(engine, "update", f"users/{BUYER}", BUYER, existing, proposed) is True

    def test_only_owner_deletes(self, engine):
        assert check(engine, "delete", f"users/{BUYER}", BUYER) is True
        assert check(engine, "delete", f"users/{BUYER}", ADMIN) is False


class TestAgentRules:
    """Tests for agents/{uid}."""

    def test_public_read(self, engine):
        assert check(engine, "read", f"agents/{AGENT}") is True

    def test_agent_writes_own_profile(self, engine):
        bio = {"bio": "Farms and plots around Nakuru"}
        assert check(engine, "create", f"agents/{AGENT}", AGENT, proposed=bio) is True
        assert check(engine, "update", f"agents/{AGENT}", AGENT, bio, {"bio": "Updated"}) is True
        assert check(engine, "delete", f"agents/{AGENT}", AGENT) is True

    def test_admin_writes_own_profile(self, engine):
        assert check(engine, "create", f"agents/{ADMIN}", ADMIN, proposed={"bio": "Admin"}) is True

    def test_buyer_cannot_create_agent_profile(self, engine):
        assert check(engine, "create", f"agents/{BUYER}", BUYER, proposed={"bio": "Me"}) is False

    def test_agent_cannot_write_other_agent(self, engine):
        assert check(engine, "update", f"agents/{AGENT}", OTHER_AGENT, {}, {"bio": "x"}) is False
        assert check(engine, "delete", f"agents/{AGENT}", ADMIN) is False

    def test_subject_without_profile_denied(self, engine):
        assert check(engine, "create", f"agents/{NO_PROFILE}", NO_PROFILE, proposed={}) is False

    def test_demoted_agent_loses_write(self, engine, profile_store):
        assert check(engine, "update", f"agents/{AGENT}", AGENT, {}, {"bio": "x"}) is True
        profile_store.set_role(AGENT, "user")
        assert check(engine, "update", f"agents/{AGENT}", AGENT, {}, {"bio": "y"}) is False

    def test_store_failure_denies_role_gated_write(self, failing_store):
        engine = RuleTableEngine(PrincipalResolver(failing_store))
        assert check(engine, "create", f"agents/{AGENT}", AGENT, proposed={}) is False
        assert failing_store.calls == 1


class TestPropertyRules:
    """Tests for properties/{id}."""

    PATH = "properties/p_1"

    def test_public_read(self, engine):
        assert check(engine, "read", self.PATH) is True

    def test_create_requires_authentication(self, engine, property_doc):
        assert check(engine, "create", self.PATH, BUYER, proposed=property_doc) is True
        assert check(engine, "create", self.PATH, None, proposed=property_doc) is False

    def test_owner_has_full_write(self, engine, property_doc):
        proposed = with_changes(property_doc, price=1, status="sold", views=0, savedBy=[])
        assert check(engine, "update", self.PATH, AGENT, property_doc, proposed) is True

    def test_non_owner_cannot_edit_listing(self, engine, property_doc):
        proposed = with_changes(property_doc, price=1)
        assert check(engine, "update", self.PATH, OTHER_AGENT, property_doc, proposed) is False
        assert check(engine, "update", self.PATH, ADMIN, property_doc, proposed) is False
        assert check(engine, "update", self.PATH, None, property_doc, proposed) is False

    def test_non_owner_cannot_claim_ownership(self, engine, property_doc):
        proposed = with_changes(property_doc, agentId=OTHER_AGENT)
        assert check(engine, "update", self.PATH, OTHER_AGENT, property_doc, proposed) is False

    def test_owner_decided_by_stored_document(self, engine, property_doc):
        proposed = with_changes(property_doc, agentId=AGENT, title="Mine now")
        existing = with_changes(property_doc, agentId=OTHER_AGENT)
        assert check(engine, "update", self.PATH, AGENT, existing, proposed) is False

    def test_anyone_increments_views(self, engine, property_doc):
        proposed = with_changes(property_doc, views=8)
        assert check(engine, "update", self.PATH, None, property_doc, proposed) is True
        assert check(engine, "update", self.PATH, BUYER, property_doc, proposed) is True

    @pytest.mark.parametrize("views", [7, 6, 9, 100, "8", 8.0, None])
    def test_other_view_changes_denied(self, engine, property_doc, views):
        proposed = with_changes(property_doc, views=views)
        assert check(engine, "update", self.PATH, BUYER, property_doc, proposed) is False

    def test_view_increment_with_other_field_denied(self, engine, property_doc):
        proposed = with_changes(property_doc, views=8, price=1)
        assert check(engine, "update", self.PATH, BUYER, property_doc, proposed) is False

    def test_view_increment_from_missing_counter_denied(self, engine, property_doc):
        existing = dict(property_doc)
        del existing["views"]
        proposed = with_changes(existing, views=1)
        assert check(engine, "update", self.PATH, BUYER, existing, proposed) is False

    @pytest.mark.parametrize("before,after,allowed", [
        ([], ["u1"], True),
        (["u1"], ["u1", "u2"], True),
        (["u1", "u2"], ["u1"], True),
        (["u1"], ["u2"], False),
        (["u1", "u2"], ["u1", "u2", "u3", "u4"], False),
        (["u1", "u2"], ["u1", "u1", "u3"], False),
        (["u1", "u1", "u2"], ["u1", "u3"], False),
    ])
    def test_saved_by_changes(self, engine, property_doc, before, after, allowed):
        existing = with_changes(property_doc, savedBy=before)
        proposed = with_changes(property_doc, savedBy=after)
        assert check(engine, "update", self.PATH, BUYER, existing, proposed) is allowed

    def test_saved_by_must_stay_a_list(self, engine, property_doc):
        proposed = with_changes(property_doc, savedBy="everyone")
        assert check(engine, "update", self.PATH, BUYER, property_doc, proposed) is False

    def test_saved_by_created_on_first_save(self, engine, property_doc):
        existing = dict(property_doc)
        del existing["savedBy"]
        proposed = with_changes(existing, savedBy=[BUYER])
        assert check(engine, "update", self.PATH, BUYER, existing, proposed) is True

    def test_saved_by_missing_field_allows_single_add_only(self, engine, property_doc):
        existing = dict(property_doc)
        del existing["savedBy"]
        proposed = with_changes(existing, savedBy=[BUYER, "x1", "x2", "x3"])
        assert check(engine, "update", self.PATH, BUYER, existing, proposed) is False

    def test_saved_by_swap_with_duplicate_denied(self, engine, property_doc):
        existing = with_changes(property_doc, savedBy=["bob", "carol"])
        proposed = with_changes(property_doc, savedBy=["bob", "bob", BUYER])
        assert check(engine, "update", self.PATH, BUYER, existing, proposed) is False

    def test_type_change_alongside_view_bump_denied(self, engine, property_doc):
        existing = with_changes(property_doc, price=1)
        proposed = with_changes(existing, views=8, price=True)
        assert check(engine, "update", self.PATH, BUYER, existing, proposed) is False

    def test_saved_by_with_other_field_denied(self, engine, property_doc):
        proposed = with_changes(property_doc, savedBy=[BUYER, OTHER_AGENT], views=8)
        assert check(engine, "update", self.PATH, BUYER, property_doc, proposed) is False

    def test_unchanged_write_by_non_owner_denied(self, engine, property_doc):
        assert check(engine, "update", self.PATH, BUYER, property_doc, dict(property_doc)) is False

    def test_only_owner_deletes(self, engine, property_doc):
        assert check(engine, "delete", self.PATH, AGENT, property_doc) is True
        assert check(engine, "delete", self.PATH, OTHER_AGENT, property_doc) is False
        assert check(engine, "delete", self.PATH, ADMIN, property_doc) is False
        assert check(engine, "delete", self.PATH, None, property_doc) is False

    def test_delete_missing_document_denied(self, engine):
        assert check(engine, "delete", self.PATH, AGENT) is False


class TestInquiryRules:
    """Tests for inquiries/{id}."""

    PATH = "inquiries/i_1"

    def test_buyer_and_agent_read(self, engine, inquiry_doc):
        assert check(engine, "read", self.PATH, BUYER, inquiry_doc) is True
        assert check(engine, "read", self.PATH, AGENT, inquiry_doc) is True

    @pytest.mark.parametrize("subject_id", [OTHER_AGENT, ADMIN, NO_PROFILE, None])
    def test_others_cannot_read(self, engine, inquiry_doc, subject_id):
        assert check(engine, "read", self.PATH, subject_id, inquiry_doc) is False

    def test_create_requires_authentication(self, engine, inquiry_doc):
        assert check(engine, "create", self.PATH, BUYER, proposed=inquiry_doc) is True
        assert check(engine, "create", self.PATH, None, proposed=inquiry_doc) is False

    def test_agent_or_admin_updates_status(self, engine, inquiry_doc):
        proposed = with_changes(inquiry_doc, status="contacted", agentNotes="Called back")
        assert check(engine, "update", self.PATH, AGENT, inquiry_doc, proposed) is True
        assert check(engine, "update", self.PATH, ADMIN, inquiry_doc, proposed) is True

    def test_buyer_and_other_agent_cannot_update(self, engine, inquiry_doc):
        proposed = with_changes(inquiry_doc, status="closed")
        assert check(engine, "update", self.PATH, BUYER, inquiry_doc, proposed) is False
        assert check(engine, "update", self.PATH, OTHER_AGENT, inquiry_doc, proposed) is False

    def test_only_admin_deletes(self, engine, inquiry_doc):
        assert check(engine, "delete", self.PATH, ADMIN, inquiry_doc) is True
        assert check(engine, "delete", self.PATH, AGENT, inquiry_doc) is False
        assert check(engine, "delete", self.PATH, BUYER, inquiry_doc) is False


class TestPropertyViewRules:
    """Tests for propertyViews/{id}."""

    @pytest.mark.parametrize("operation", ["read", "create", "update", "delete"])
    def test_unrestricted(self, engine, operation):
        view = {"propertyId": "p_1", "source": "search"}
        assert check(engine, operation, "propertyViews/v_1", None, view, view) is True


class TestUnmatchedPaths:
    """Tests for requests no rule covers."""

    @pytest.mark.parametrize("operation", ["read", "create", "update", "delete"])
    def test_unknown_collection_denied(self, engine, operation):
        assert check(engine, operation, "payments/pay_1", ADMIN, {}, {}) is False

    @pytest.mark.parametrize("path", [
        "properties",
        "properties/p_1/images/i_1",
        "",
        "/",
        "properties//p_1",
        "properties/p_1/",
        "//properties/p_1",
    ])
    def test_malformed_document_path_denied(self, engine, path):
        assert check(engine, "read", path, ADMIN) is False
