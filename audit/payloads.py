"""
Typed ``details`` payloads for audit entries, keyed by action.

Each known action registers a frozen dataclass; ``build_details`` turns a
payload instance (or a plain mapping for a registered action) into the JSON
stored on the entry. Actions nobody registered keep an open key/value map.
"""
import logging
from dataclasses import dataclass, asdict, field, fields
from typing import Any, Mapping, Optional

from .utils import json_ready

logger = logging.getLogger(__name__)

_REGISTRY: dict[str, type] = {}


def register(*actions: str):
    def deco(cls):
        for action in actions:
            _REGISTRY[action] = cls
        return cls
    return deco


def payload_for(action: str) -> Optional[type]:
    return _REGISTRY.get(action)


@dataclass(frozen=True)
class AuditPayload:
    def as_dict(self) -> dict:
        return json_ready(asdict(self))


def build_details(action: str, details: Any) -> dict:
    if details is None:
        return {}
    if isinstance(details, AuditPayload):
        return details.as_dict()
    if not isinstance(details, Mapping):
        return {"value": json_ready(details)}

    cls = payload_for(action)
    if cls is not None:
        known = {f.name for f in fields(cls)}
        if set(details) <= known:
            try:
                return cls(**details).as_dict()
            except TypeError:
                logger.warning("Incomplete %s payload for action %s", cls.__name__, action)
        else:
            logger.warning("Unexpected keys %s for action %s", sorted(set(details) - known), action)
    return json_ready(dict(details))


# ---------------------------------------------------------------------
# Approval workflow
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class ApprovalTransition(AuditPayload):
    approval_id: int
    provider_id: int
    provider_email: str
    from_status: Optional[str]
    to_status: str


@register("approval_workflow_initiated")
@dataclass(frozen=True)
class WorkflowInitiated(ApprovalTransition):
    specialization: str = ""
    years_experience: int = 0
    priority: str = ""
    document_count: int = 0


@register("reviewer_assigned")
@dataclass(frozen=True)
class ReviewerAssigned(ApprovalTransition):
    reviewer_id: Optional[int] = None
    reviewer_email: str = ""


@register("additional_docs_requested")
@dataclass(frozen=True)
class AdditionalDocsRequested(ApprovalTransition):
    required_documents: list = field(default_factory=list)


@register("document_submitted")
@dataclass(frozen=True)
class DocumentSubmitted(ApprovalTransition):
    document_type: str = ""
    file_name: str = ""
    replaced: bool = False
    verification_score: float = 0.0


@register("document_verified")
@dataclass(frozen=True)
class DocumentVerified(ApprovalTransition):
    document_type: str = ""
    verified: bool = False
    document_found: bool = True
    verification_score: float = 0.0
    notes: str = ""


@register("doctor_approved", "doctor_rejected", "lab_approved", "lab_rejected")
@dataclass(frozen=True)
class ProviderDecision(ApprovalTransition):
    specialization: str = ""
    license_number: str = ""
    comments: str = ""
    verification_score: float = 0.0


@register("internal_note_added")
@dataclass(frozen=True)
class InternalNoteAdded(ApprovalTransition):
    note: str = ""


@register("communication_logged")
@dataclass(frozen=True)
class CommunicationLogged(ApprovalTransition):
    channel: str = ""
    subject: str = ""
    message: str = ""


# ---------------------------------------------------------------------
# Gateway / security
# ---------------------------------------------------------------------
@register("unauthorized_access_attempt")
@dataclass(frozen=True)
class AccessDenied(AuditPayload):
    required_permission: str
    user_permissions: list
    endpoint: str = ""
    operation: str = ""


@register("rate_limit_exceeded")
@dataclass(frozen=True)
class RateLimitViolation(AuditPayload):
    endpoint: str
    attempt_count: int
    window_seconds: int
    max_attempts: int
    retry_after: int
    operation: str = ""


@dataclass(frozen=True)
class GatewayAction(AuditPayload):
    """Snapshot written by the gateway when the operation logged nothing itself."""
    operation: str
    permission: str
    request: Any = None
    response: Any = None


# ---------------------------------------------------------------------
# Account / provider status
# ---------------------------------------------------------------------
@register("user_suspended", "user_activated")
@dataclass(frozen=True)
class AccountStatusChange(AuditPayload):
    user_email: str
    previous_status: str
    new_status: str
    reason: str = ""


@register("doctor_suspended", "doctor_activated", "lab_suspended", "lab_activated")
@dataclass(frozen=True)
class ProviderStatusChange(AuditPayload):
    provider_id: int
    provider_email: str
    provider_type: str
    previous_status: str
    new_status: str
    reason: str = ""


@register("system_alert")
@dataclass(frozen=True)
class SystemAlert(AuditPayload):
    title: str
    message: str
    priority: str = "medium"

