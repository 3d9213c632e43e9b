"""
Hash chain for tamper-evident decision logs.

Each event stores the hash of the event before it, starting from a fixed
genesis hash. Editing, dropping or reordering any historical event
breaks the chain.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass

from listingguard.audit.events import DecisionEvent

GENESIS_HASH = "sha256:0000000000000000000000000000000000000000000000000000000000000000"


@dataclass
class ChainVerificationResult:
    """Result of verifying a hash chain."""
    valid: bool
    error_message: str | None = None
    error_index: int | None = None
    verified_count: int = 0


class HashChain:
    """
    A hash chain of decision events.

    Thread Safety:
        All operations are thread-safe using internal locking.

    Example:
        >>> chain = HashChain()
        >>> event = chain.append(DecisionEvent(
        ...     subject_id="u_1", role="agent", operation="delete",
        ...     kind="document", path="properties/p_1", allowed=True,
        ... ))
        >>> chain.verify().valid
        True
    """

    def __init__(self) -> None:
        self._events: list[DecisionEvent] = []
        self._lock = threading.RLock()
        self._last_hash = GENESIS_HASH

    @property
    def last_hash(self) -> str:
        with self._lock:
            return self._last_hash

    @property
    def length(self) -> int:
        with self._lock:
            return len(self._events)

    @property
    def events(self) -> list[DecisionEvent]:
        with self._lock:
            return list(self._events)

    def append(self, event: DecisionEvent) -> DecisionEvent:
        """
        Link an event to the chain head and compute its hash.

        Sets ``sequence_number`` and ``previous_hash`` on the event.
        """
        with self._lock:
            event.sequence_number = len(self._events) + 1
            event.previous_hash = self._last_hash
            event.compute_hash()
            self._events.append(event)
            self._last_hash = event.event_hash
            return event

    def verify(self) -> ChainVerificationResult:
        """Verify the whole chain."""
        with self._lock:
            return verify_events(self._events)


def verify_events(events: Iterable[DecisionEvent]) -> ChainVerificationResult:
    """
    Verify a sequence of events read from anywhere.

    Checks that each event links to the previous one (the first to the
    genesis hash) and that each stored hash matches its contents.
    """
    expected_previous = GENESIS_HASH
    count = 0

    for i, event in enumerate(events):
        if event.previous_hash != expected_previous:
            return ChainVerificationResult(
                valid=False,
                error_message=(
                    f"Chain broken at index {i}: expected previous_hash "
                    f"{expected_previous}, got {event.previous_hash}"
                ),
                error_index=i,
                verified_count=i,
            )

        if not event.verify_hash():
            return ChainVerificationResult(
                valid=False,
                error_message=f"Invalid hash at index {i}: event tampered",
                error_index=i,
                verified_count=i,
            )

        expected_previous = event.event_hash
        count = i + 1

    return ChainVerificationResult(valid=True, verified_count=count)
