"""
Audit logger implementation for listingguard.

Writes one hash-chained JSON line per access decision:

- JSON Lines format for easy parsing
- Hash chain for tamper evidence
- Thread-safe operation
"""

from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

from listingguard.audit.events import DecisionEvent
from listingguard.audit.hash_chain import ChainVerificationResult, HashChain, verify_events
from listingguard.diff import changed_fields
from listingguard.types import Operation, ResourceKind

if TYPE_CHECKING:
    from listingguard.types import AccessRequest, Decision, Principal

logger = logging.getLogger(__name__)


@dataclass
class LoggerConfig:
    """
    Configuration for the audit logger.

    Attributes:
        log_path: Path to the JSON Lines file.
        sync_writes: If True, flush and fsync after each write.
    """
    log_path: Path
    sync_writes: bool = True

    @classmethod
    def default(cls, log_path: str | Path) -> LoggerConfig:
        """Create default configuration."""
        return cls(log_path=Path(log_path))


def build_decision_event(
    request: AccessRequest,
    principal: Principal | None,
    decision: Decision,
) -> DecisionEvent:
    """Build an audit event for a decision without copying document bodies."""
    fields: list[str] = []
    if request.kind is ResourceKind.DOCUMENT and request.operation is Operation.UPDATE:
        fields = sorted(changed_fields(request.existing, request.proposed))

    role = principal.role.value if principal is not None and principal.role else None
    return DecisionEvent(
        subject_id=request.subject_id,
        role=role,
        operation=getattr(request.operation, "value", str(request.operation)),
        kind=getattr(request.kind, "value", str(request.kind)),
        path=request.path,
        allowed=decision.allowed,
        rule=decision.rule,
        policy=decision.policy,
        changed_fields=fields,
    )


class InMemoryAuditLogger:
    """
    In-memory audit logger for testing and development.

    Example:
        >>> audit = InMemoryAuditLogger()
        >>> engine = RuleTableEngine(resolver, audit_logger=audit)
        >>> engine.evaluate(request)
        >>> assert len(audit.events) == 1
    """

    def __init__(self) -> None:
        self._chain = HashChain()

    @property
    def events(self) -> list[DecisionEvent]:
        """Get all logged events."""
        return self._chain.events

    @property
    def chain(self) -> HashChain:
        return self._chain

    def log(self, event: DecisionEvent) -> DecisionEvent:
        """Log an audit event."""
        return self._chain.append(event)

    def log_decision(
        self,
        request: AccessRequest,
        principal: Principal | None,
        decision: Decision,
    ) -> DecisionEvent:
        """Log an access decision."""
        return self.log(build_decision_event(request, principal, decision))

    def verify(self) -> ChainVerificationResult:
        return self._chain.verify()


class AuditLogger(InMemoryAuditLogger):
    """
    Audit logger writing hash-chained events to a JSON Lines file.

    Example:
        >>> audit = AuditLogger(LoggerConfig.default("./audit/decisions.jsonl"))
        >>> engine = RuleTableEngine(resolver, audit_logger=audit)
        >>> ...
        >>> audit.close()
        >>> read_audit_log("./audit/decisions.jsonl").valid
        True
    """

    def __init__(self, config: LoggerConfig) -> None:
        super().__init__()
        self.config = config
        self._lock = threading.RLock()
        self._file: TextIO | None = None

        config.log_path.parent.mkdir(parents=True, exist_ok=True)

    def log(self, event: DecisionEvent) -> DecisionEvent:
        """Append the event to the chain and write it to the log file."""
        with self._lock:
            event = super().log(event)
            f = self._ensure_file_open()
            f.write(event.to_json() + "\n")
            if self.config.sync_writes:
                f.flush()
                os.fsync(f.fileno())
            return event

    def _ensure_file_open(self) -> TextIO:
        if self._file is None:
            self._file = open(self.config.log_path, "a", encoding="utf-8")
        return self._file

    def flush(self) -> None:
        with self._lock:
            if self._file:
                self._file.flush()

    def close(self) -> None:
        """Close the log file."""
        with self._lock:
            if self._file:
                self._file.close()
                self._file = None

    def __enter__(self) -> AuditLogger:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def read_audit_log(log_path: str | Path) -> ChainVerificationResult:
    """
    Read a JSON Lines audit log back and verify its hash chain.

    Raises:
        FileNotFoundError: If the log does not exist.
    """
    events: list[DecisionEvent] = []
    with open(log_path, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line:
                events.append(DecisionEvent.from_dict(json.loads(line)))
    result = verify_events(events)
    if not result.valid:
        logger.warning(f"Audit log {log_path} failed verification: {result.error_message}")
    return result
