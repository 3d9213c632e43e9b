"""
Tests for the file store rules and upload validation.
"""

from __future__ import annotations

import pytest

from listingguard.types import AccessRequest, FileMetadata
from listingguard.validation.uploads import MAX_UPLOAD_BYTES, is_valid_image_upload

from tests.conftest import AGENT, BUYER, OTHER_AGENT

PNG = FileMetadata("image/png", 200_000)


def check(engine, operation, path, subject_id=None, file=None) -> bool:
    request = AccessRequest.for_file(operation, path, subject_id=subject_id, file=file)
    return engine.evaluate(request).allowed


class TestUploadValidation:
    """Tests for is_valid_image_upload."""

    def test_size_ceiling_is_exclusive(self):
        assert MAX_UPLOAD_BYTES == 5 * 1024 * 1024
        assert is_valid_image_upload(FileMetadata("image/png", 5 * 1024 * 1024 - 1)) is True
        assert is_valid_image_upload(FileMetadata("image/png", 5 * 1024 * 1024)) is False

    @pytest.mark.parametrize("content_type", ["image/png", "image/jpeg", "image/webp", "image/"])
    def test_image_types_accepted(self, content_type):
        assert is_valid_image_upload(FileMetadata(content_type, 10)) is True

    @pytest.mark.parametrize("content_type", [
        "application/pdf",
        "text/html",
        "IMAGE/PNG",
        "x-image/png",
        "",
    ])
    def test_other_types_rejected(self, content_type):
        assert is_valid_image_upload(FileMetadata(content_type, 10)) is False

    @pytest.mark.parametrize("size", [-1, 1.5, "10", None, True])
    def test_bad_sizes_rejected(self, size):
        assert is_valid_image_upload(FileMetadata("image/png", size)) is False

    def test_missing_metadata_rejected(self):
        assert is_valid_image_upload(None) is False


class TestPropertyImages:
    """Tests for properties/{ownerId}/{fileId}."""

    PATH = f"properties/{AGENT}/front.jpg"

    def test_public_read(self, engine):
        assert check(engine, "read", self.PATH) is True

    def test_authenticated_image_upload(self, engine):
        assert check(engine, "create", self.PATH, AGENT, PNG) is True

    def test_create_does_not_check_owner(self, engine):
        assert check(engine, "create", self.PATH, BUYER, PNG) is True

    def test_anonymous_upload_denied(self, engine):
        assert check(engine, "create", self.PATH, None, PNG) is False

    def test_upload_at_ceiling_denied(self, engine):
        too_big = FileMetadata("image/png", 5 * 1024 * 1024)
        just_under = FileMetadata("image/png", 5 * 1024 * 1024 - 1)
        assert check(engine, "create", self.PATH, AGENT, too_big) is False
        assert check(engine, "create", self.PATH, AGENT, just_under) is True

    def test_non_image_denied(self, engine):
        assert check(engine, "create", self.PATH, AGENT, FileMetadata("application/pdf", 10)) is False

    def test_create_without_metadata_denied(self, engine):
        assert check(engine, "create", self.PATH, AGENT) is False

    def test_owner_updates_and_deletes(self, engine):
        assert check(engine, "update", self.PATH, AGENT, PNG) is True
        assert check(engine, "delete", self.PATH, AGENT) is True

    def test_non_owner_cannot_update_or_delete(self, engine):
        assert check(engine, "update", self.PATH, OTHER_AGENT, PNG) is False
        assert check(engine, "delete", self.PATH, OTHER_AGENT) is False
        assert check(engine, "delete", self.PATH, None) is False


class TestAgentPhotos:
    """Tests for agent-photos/{ownerId}."""

    def test_owner_writes(self, engine):
        assert check(engine, "update", f"agent-photos/{AGENT}", AGENT, PNG) is True
        assert check(engine, "delete", f"agent-photos/{AGENT}", AGENT) is True

    def test_other_subject_cannot_delete(self, engine):
        assert check(engine, "delete", f"agent-photos/{AGENT}", BUYER) is False

    def test_extra_segment_matches_nothing(self, engine):
        path = f"agent-photos/{AGENT}/portrait.png"
        assert check(engine, "read", path) is False
        assert check(engine, "create", path, AGENT, PNG) is False
        assert check(engine, "delete", path, AGENT) is False


class TestUserFiles:
    """Tests for users/{ownerId}/{fileId}."""

    def test_owner_writes(self, engine):
        assert check(engine, "create", f"users/{BUYER}/id.png", BUYER, PNG) is True
        assert check(engine, "delete", f"users/{BUYER}/id.png", BUYER) is True

    def test_missing_file_segment_matches_nothing(self, engine):
        assert check(engine, "read", f"users/{BUYER}") is False
        assert check(engine, "delete", f"users/{BUYER}", BUYER) is False


class TestUnmatchedStoragePaths:
    """Tests for storage paths no rule covers."""

    @pytest.mark.parametrize("path", ["backups/db.tar", "", "/", f"{AGENT}"])
    @pytest.mark.parametrize("operation", ["read", "create", "delete"])
    def test_denied(self, engine, path, operation):
        assert check(engine, operation, path, AGENT, PNG) is False

    @pytest.mark.parametrize("path", [
        f"properties//{AGENT}",
        f"properties/{AGENT}/",
        f"agent-photos/{AGENT}/",
        f"users//{AGENT}/x",
        f"//agent-photos/{AGENT}",
    ])
    @pytest.mark.parametrize("operation", ["read", "create", "update", "delete"])
    def test_empty_segments_denied(self, engine, path, operation):
        assert check(engine, operation, path, AGENT, PNG) is False

    def test_leading_slash_tolerated(self, engine):
        assert check(engine, "delete", f"/agent-photos/{AGENT}", AGENT) is True
