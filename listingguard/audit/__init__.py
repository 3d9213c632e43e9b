"""
Audit logging for listingguard.

Every decision the engine makes can be appended to a hash-chained log,
in memory or as JSON Lines on disk. Document contents are never logged.
"""

from listingguard.audit.events import DecisionEvent, EventType
from listingguard.audit.hash_chain import (
    GENESIS_HASH,
    ChainVerificationResult,
    HashChain,
    verify_events,
)
from listingguard.audit.logger import (
    AuditLogger,
    InMemoryAuditLogger,
    LoggerConfig,
    build_decision_event,
    read_audit_log,
)

__all__ = [
    "DecisionEvent",
    "EventType",
    "GENESIS_HASH",
    "ChainVerificationResult",
    "HashChain",
    "verify_events",
    "AuditLogger",
    "InMemoryAuditLogger",
    "LoggerConfig",
    "build_decision_event",
    "read_audit_log",
]
