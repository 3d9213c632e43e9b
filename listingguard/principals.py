"""
Principal resolution for listingguard.

Roles are never taken from the caller. For every evaluation the resolver
reads the subject's profile document from the ``users`` collection and
extracts its ``role`` field. Anything that prevents a definite answer
(missing profile, unknown role, a failing store) yields a principal with
no role, so every role-gated rule denies.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from listingguard.types import Principal, Role

logger = logging.getLogger(__name__)

PROFILE_COLLECTION = "users"
ROLE_FIELD = "role"


@runtime_checkable
class ProfileStore(Protocol):
    """
    Read-only view of the profile documents.

    Implementations wrap whatever document store backs the application.
    They may raise on backend failure; the resolver converts that into
    an unresolved role.

    Example:
        >>> class FirestoreProfiles:
        ...     def get_profile(self, subject_id: str) -> dict | None:
        ...         snap = client.collection("users").document(subject_id).get()
        ...         return snap.to_dict() if snap.exists else None
    """

    def get_profile(self, subject_id: str) -> Mapping[str, Any] | None:
        """Return the profile document for a subject, or None if absent."""
        ...


class InMemoryProfileStore:
    """
    Profile store backed by a dictionary.

    Useful for tests and for embedding the engine without a real
    document store.

    Example:
        >>> store = InMemoryProfileStore({"u_1": {"role": "agent"}})
        >>> store.get_profile("u_1")
        {'role': 'agent'}
    """

    def __init__(self, profiles: Mapping[str, Mapping[str, Any]] | None = None) -> None:
        self._profiles: dict[str, dict[str, Any]] = {
            subject_id: dict(profile) for subject_id, profile in (profiles or {}).items()
        }
        self._lock = threading.RLock()

    def get_profile(self, subject_id: str) -> Mapping[str, Any] | None:
        with self._lock:
            profile = self._profiles.get(subject_id)
            return dict(profile) if profile is not None else None

    def put_profile(self, subject_id: str, profile: Mapping[str, Any]) -> None:
        """Create or replace a profile document."""
        with self._lock:
            self._profiles[subject_id] = dict(profile)

    def set_role(self, subject_id: str, role: Role | str) -> None:
        """Merge a role into a profile, creating it if needed."""
        value = role.value if isinstance(role, Role) else role
        with self._lock:
            self._profiles.setdefault(subject_id, {})[ROLE_FIELD] = value

    def remove_profile(self, subject_id: str) -> bool:
        """Delete a profile document. Returns True if one existed."""
        with self._lock:
            return self._profiles.pop(subject_id, None) is not None


class PrincipalResolver:
    """
    Maps an authenticated subject id to a Principal.

    Performs at most one profile lookup per call and caches nothing, so a
    role change is visible to the next evaluation.

    Example:
        >>> resolver = PrincipalResolver(InMemoryProfileStore({"u_1": {"role": "admin"}}))
        >>> resolver.resolve("u_1").is_admin
        True
        >>> resolver.resolve(None).is_authenticated
        False
    """

    def __init__(self, store: ProfileStore) -> None:
        self.store = store

    def resolve(self, subject_id: str | None) -> Principal:
        """
        Resolve the principal for a subject id.

        Args:
            subject_id: Authenticated subject id, or None.

        Returns:
            A Principal. Its role is None when the subject is anonymous,
            has no profile, has an unrecognised role, or the lookup failed.
        """
        if not subject_id:
            return Principal.anonymous()

        try:
            profile = self.store.get_profile(subject_id)
            raw_role = profile.get(ROLE_FIELD) if profile is not None else None
        except Exception as e:
            logger.warning(f"Role lookup failed for '{subject_id}', treating as no role: {e}")
            return Principal(subject_id=subject_id)

        if profile is None:
            logger.debug(f"No profile for '{subject_id}'")
            return Principal(subject_id=subject_id)

        role = Role.parse(raw_role)
        if role is None:
            logger.debug(f"Profile for '{subject_id}' has no recognised role")
        return Principal(subject_id=subject_id, role=role)
