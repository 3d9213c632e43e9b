"""
Rule table engine for listingguard.

Dispatches each request to the policy registered for its collection (or
storage folder), runs the ``can_<operation>`` method and returns a
Decision. Evaluation fails closed: a missing policy, a malformed path,
an unresolved principal on a role-gated rule, or any exception raised
along the way produces a denial, never an error.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from listingguard.diff import changed_fields
from listingguard.engines.base import BasePolicyEngine
from listingguard.exceptions import InvalidPathError, SchemaValidationError
from listingguard.policies.documents import build_document_registry
from listingguard.policies.storage import build_storage_registry
from listingguard.types import Decision, Operation, ResourceKind
from listingguard.validation.documents import validate_document

if TYPE_CHECKING:
    from listingguard.audit.logger import InMemoryAuditLogger
    from listingguard.policies.base import Policy
    from listingguard.policies.registry import PolicyRegistry
    from listingguard.principals import PrincipalResolver
    from listingguard.types import AccessRequest, Principal

logger = logging.getLogger(__name__)

_WRITES = (Operation.CREATE, Operation.UPDATE)


def _describe(request: AccessRequest) -> str:
    operation = getattr(request.operation, "value", request.operation)
    return f"{operation} '{request.path}' by {request.subject_id or 'anonymous'}"


class RuleTableEngine(BasePolicyEngine):
    """
    Policy engine backed by the collection and storage rule tables.

    Each evaluation resolves the principal afresh, so role changes take
    effect on the next request.

    Example:
        >>> store = InMemoryProfileStore({"u_1": {"role": "agent"}})
        >>> engine = RuleTableEngine(PrincipalResolver(store))
        >>> request = AccessRequest.for_document(
        ...     "create", "agents/u_1", subject_id="u_1", proposed={"bio": "Hi"},
        ... )
        >>> engine.evaluate(request).allowed
        True

    Configuration:
        - validate_schemas: If True, allowed creates and updates must also
            match the collection's document schema. Defaults to False.
    """

    name = "rules"

    def __init__(
        self,
        resolver: PrincipalResolver,
        config: dict[str, Any] | None = None,
        document_registry: PolicyRegistry | None = None,
        storage_registry: PolicyRegistry | None = None,
        audit_logger: InMemoryAuditLogger | None = None,
    ) -> None:
        super().__init__(config)
        self.resolver = resolver
        self.validate_schemas = bool(self.get_config("validate_schemas", False))
        self.documents = document_registry or build_document_registry()
        self.storage = storage_registry or build_storage_registry()
        self.audit_logger = audit_logger
        self._initialized = True

    def evaluate(self, request: AccessRequest) -> Decision:
        """
        Evaluate an access request.

        The evaluation process:
        1. Resolve the principal (one profile lookup if authenticated)
        2. Look up the policy for the collection or storage folder
        3. Run ``can_<operation>`` on a fresh policy instance
        4. Optionally check the proposed document against its schema

        Returns:
            Decision; denials carry no reason.
        """
        principal: Principal | None = None
        try:
            decision, _policy, principal = self._evaluate(request)
        except Exception:
            logger.exception(f"Evaluation failed for {_describe(request)}, denying")
            decision = Decision.deny()

        logger.debug(
            f"{'ALLOW' if decision.allowed else 'DENY'} {_describe(request)}"
            + (f" via {decision.policy}.{decision.rule}" if decision.allowed else "")
        )

        if self.audit_logger is not None:
            try:
                self.audit_logger.log_decision(request, principal, decision)
            except Exception:
                logger.exception(f"Failed to audit decision for {_describe(request)}")

        return decision

    def _evaluate(
        self, request: AccessRequest
    ) -> tuple[Decision, Policy | None, Principal]:
        principal = self.resolver.resolve(request.subject_id)

        try:
            policy_class = self._policy_class_for(request)
        except InvalidPathError as e:
            logger.debug(str(e))
            return Decision.deny(), None, principal

        policy = policy_class(principal, request)
        if not policy.authorize(request.operation):
            return Decision.deny(), policy, principal

        if self.validate_schemas and not self._matches_schema(request):
            return Decision.deny(), policy, principal

        decision = Decision.allow(rule=policy.granted_by, policy=policy_class.__name__)
        return decision, policy, principal

    def _policy_class_for(self, request: AccessRequest) -> type[Policy]:
        if request.kind is ResourceKind.DOCUMENT:
            if request.document_id is None:
                raise InvalidPathError(request.path, "collection/documentId")
            return self.documents.get_policy(request.collection)

        if request.kind is ResourceKind.FILE:
            if not request.is_well_formed:
                raise InvalidPathError(request.path, "folder/ownerId[/fileId]")
            return self.storage.get_policy(request.collection)

        raise InvalidPathError(request.path)

    def _matches_schema(self, request: AccessRequest) -> bool:
        if request.kind is not ResourceKind.DOCUMENT or request.operation not in _WRITES:
            return True
        try:
            validate_document(request.collection, request.proposed or {})
        except SchemaValidationError as e:
            logger.debug(f"Schema rejected {_describe(request)}: {e.validation_errors}")
            return False
        return True

    def explain(self, request: AccessRequest) -> dict[str, Any]:
        """
        Explain how a decision was reached.

        Intended for operators debugging the rules. The output names the
        predicates that were tried, so it must not be returned to the
        caller whose request was denied.
        """
        try:
            decision, policy, principal = self._evaluate(request)
        except Exception as e:
            return {
                "decision": "DENY",
                "request": request.to_dict(),
                "error": repr(e),
            }

        explanation: dict[str, Any] = {
            "decision": "ALLOW" if decision.allowed else "DENY",
            "request": request.to_dict(),
            "principal": principal.to_dict(),
            "policy": type(policy).__name__ if policy else None,
            "predicates": [
                {"name": name, "satisfied": satisfied}
                for name, satisfied in (policy.trace if policy else [])
            ],
        }

        if request.kind is ResourceKind.DOCUMENT and request.operation is Operation.UPDATE:
            explanation["changed_fields"] = sorted(
                changed_fields(request.existing, request.proposed)
            )

        return explanation
