"""
Provider approval workflow.

    pending -> under_review -> approved | rejected | additional_docs_required
    additional_docs_required -> under_review

Every transition locks the approval row, commits, and then writes one audit
entry. Audit writes happen outside the business transaction so neither side
can undo the other.
"""
import logging
from dataclasses import dataclass

from django.db import transaction
from django.db.models import Case, Count, IntegerField, Value, When
from django.utils import timezone

from audit.enums import Category, Level, TargetEntity
from audit.payloads import (
    AdditionalDocsRequested,
    CommunicationLogged,
    DocumentSubmitted,
    DocumentVerified,
    InternalNoteAdded,
    ProviderDecision,
    ReviewerAssigned,
    WorkflowInitiated,
)
from audit.services import record_entry
from core.exceptions import InvalidTransition, NotFound, ValidationFailed, translate_store_errors
from notifications.services.dispatch import notify_provider_decision
from providers.models import ProviderProfile

from ..enums import PRIORITY_RANK, ApprovalStatus, CommunicationChannel, DocumentType, Priority
from ..models import ApprovalDocument, ProviderApproval

logger = logging.getLogger(__name__)

URGENT_SPECIALIZATIONS = {"Pediatrics"}
HIGH_DEMAND_SPECIALIZATIONS = {"Emergency Medicine", "Cardiology", "Neurology"}

ASSIGNABLE_FROM = {ApprovalStatus.PENDING, ApprovalStatus.ADDITIONAL_DOCS_REQUIRED}
DECIDABLE_FROM = {ApprovalStatus.PENDING, ApprovalStatus.UNDER_REVIEW}


def calculate_priority(specialization, years_experience) -> str:
    specialization = (specialization or "").strip()
    years = years_experience or 0
    if specialization in URGENT_SPECIALIZATIONS and years >= 10:
        return Priority.URGENT
    if specialization in HIGH_DEMAND_SPECIALIZATIONS or years >= 15:
        return Priority.HIGH
    return Priority.MEDIUM


# ---------------------------------------------------------------------
# helpers
# ---------------------------------------------------------------------
def provider_entity(provider):
    if provider.is_lab:
        return TargetEntity.LAB, Category.LAB_MANAGEMENT
    return TargetEntity.DOCTOR, Category.DOCTOR_MANAGEMENT


def _locked(approval_id) -> ProviderApproval:
    approval = (
        ProviderApproval.objects.select_for_update()
        .select_related("provider__user")
        .filter(pk=approval_id)
        .first()
    )
    if approval is None:
        raise NotFound("Approval record not found.")
    return approval


def _document_type(label) -> str:
    if label not in DocumentType.values:
        raise ValidationFailed({"document_type": f"Unknown document type '{label}'."})
    return label


def _transition(approval, from_status, **extra):
    provider = approval.provider
    return dict(
        approval_id=approval.pk,
        provider_id=provider.pk,
        provider_email=provider.email,
        from_status=from_status,
        to_status=approval.status,
        **extra,
    )


def _audit(approval, action, payload, actor=None, level=Level.INFO):
    target_entity, category = provider_entity(approval.provider)
    record_entry(
        level=level,
        category=category,
        action=action,
        target_entity=target_entity,
        target_id=approval.provider_id,
        details=payload,
        actor=actor,
    )


def _timestamp():
    return timezone.now().isoformat()


# ---------------------------------------------------------------------
# transitions
# ---------------------------------------------------------------------
@translate_store_errors
def initiate_approval(provider_id) -> ProviderApproval:
    """
    Create the provider's approval record, or return the existing one.
    Documents uploaded at registration are copied onto the approval.
    """
    with transaction.atomic():
        provider = (
            ProviderProfile.objects.select_for_update()
            .select_related("user")
            .filter(pk=provider_id)
            .first()
        )
        if provider is None:
            raise NotFound("Provider not found.")

        approval, created = ProviderApproval.objects.get_or_create(
            provider=provider,
            defaults={"priority": calculate_priority(provider.specialization, provider.years_experience)},
        )
        if not created:
            return approval

        for doc in provider.documents.all():
            ApprovalDocument.objects.update_or_create(
                approval=approval,
                document_type=doc.kind,
                defaults={"file_name": doc.file_name, "file_url": doc.url, "uploaded_at": doc.uploaded_at},
            )
        approval.recompute_verification_score()

    _audit(approval, "approval_workflow_initiated", WorkflowInitiated(**_transition(
        approval, None,
        specialization=provider.specialization,
        years_experience=provider.years_experience,
        priority=approval.priority,
        document_count=approval.documents.count(),
    )))
    logger.info("Approval workflow initiated for %s (priority %s)", provider.email, approval.priority)
    return approval


@translate_store_errors
def assign_reviewer(approval_id, reviewer, actor=None) -> ProviderApproval:
    """
    Put the approval under review by ``reviewer``. ``actor`` is the admin making
    the assignment and defaults to the reviewer assigning themselves.
    """
    with transaction.atomic():
        approval = _locked(approval_id)
        previous = approval.status
        if previous == ApprovalStatus.UNDER_REVIEW and approval.assigned_to_id == reviewer.pk:
            return approval
        if previous not in ASSIGNABLE_FROM:
            raise InvalidTransition(f"Cannot assign a reviewer to an approval that is {previous}.")

        approval.status = ApprovalStatus.UNDER_REVIEW
        approval.assigned_to = reviewer
        approval.review_start_date = timezone.now()
        approval.save(update_fields=["status", "assigned_to", "review_start_date", "updated_at"])

    _audit(approval, "reviewer_assigned", ReviewerAssigned(**_transition(
        approval, previous, reviewer_id=reviewer.pk, reviewer_email=reviewer.email,
    )), actor=actor or reviewer)
    return approval


@translate_store_errors
def request_additional_documents(approval_id, required_docs, reviewer) -> ProviderApproval:
    required = []
    for label in required_docs or []:
        label = _document_type(label)
        if label not in required:
            required.append(label)
    if not required:
        raise ValidationFailed({"required_documents": "At least one document type is required."})

    with transaction.atomic():
        approval = _locked(approval_id)
        previous = approval.status
        if previous == ApprovalStatus.ADDITIONAL_DOCS_REQUIRED and approval.additional_docs_required == required:
            return approval
        if previous != ApprovalStatus.UNDER_REVIEW:
            raise InvalidTransition(f"Cannot request documents for an approval that is {previous}.")

        approval.status = ApprovalStatus.ADDITIONAL_DOCS_REQUIRED
        approval.additional_docs_required = required
        approval.save(update_fields=["status", "additional_docs_required", "updated_at"])

    _audit(approval, "additional_docs_requested", AdditionalDocsRequested(**_transition(
        approval, previous, required_documents=required,
    )), actor=reviewer)
    return approval


@translate_store_errors
def submit_document(approval_id, document_type, file_name="", file_url="", actor=None) -> ProviderApproval:
    """
    Add or replace a document. Replacing resets its verification.
    """
    document_type = _document_type(document_type)
    with transaction.atomic():
        approval = _locked(approval_id)
        if approval.is_terminal:
            raise InvalidTransition(f"Cannot submit documents to an approval that is {approval.status}.")

        _, created = ApprovalDocument.objects.update_or_create(
            approval=approval,
            document_type=document_type,
            defaults={
                "file_name": file_name or "",
                "file_url": file_url or "",
                "uploaded_at": timezone.now(),
                "verified": False,
                "verified_by": None,
                "verification_date": None,
                "notes": "",
            },
        )
        approval.recompute_verification_score()

    _audit(approval, "document_submitted", DocumentSubmitted(**_transition(
        approval, approval.status,
        document_type=document_type,
        file_name=file_name or "",
        replaced=not created,
        verification_score=approval.verification_score,
    )), actor=actor)
    return approval


@translate_store_errors
def verify_document(approval_id, document_type, verified: bool, reviewer, notes="") -> ProviderApproval:
    """
    Mark one document (un)verified and recompute the score from the stored
    document rows. A type the approval has no document for changes nothing.
    """
    document_type = _document_type(document_type)
    with transaction.atomic():
        approval = _locked(approval_id)
        updated = ApprovalDocument.objects.filter(approval=approval, document_type=document_type).update(
            verified=bool(verified),
            verified_by=reviewer,
            verification_date=timezone.now(),
            notes=notes or "",
        )
        approval.recompute_verification_score()

    _audit(approval, "document_verified", DocumentVerified(**_transition(
        approval, approval.status,
        document_type=document_type,
        verified=bool(verified),
        document_found=bool(updated),
        verification_score=approval.verification_score,
        notes=notes or "",
    )), actor=reviewer)
    return approval


@translate_store_errors
def decide(approval_id, approved: bool, reviewer, comments="") -> ProviderApproval:
    """
    Approve or reject. Re-sending the decision an approval already carries is
    a no-op; a different decision on a decided approval is refused.
    """
    target = ApprovalStatus.APPROVED if approved else ApprovalStatus.REJECTED
    with transaction.atomic():
        approval = _locked(approval_id)
        previous = approval.status
        if previous == target:
            return approval
        if previous not in DECIDABLE_FROM:
            raise InvalidTransition(f"Cannot decide an approval that is {previous}.")

        approval.status = target
        approval.review_completion_date = timezone.now()
        approval.review_comments = comments or ""
        approval.rejection_reason = "" if approved else (comments or "")
        approval.decided_by = reviewer
        approval.save(update_fields=[
            "status", "review_completion_date", "review_comments",
            "rejection_reason", "decided_by", "updated_at",
        ])
        provider = approval.provider
        provider.apply_decision(approved, reviewer, comments)

    kind = "lab" if provider.is_lab else "doctor"
    _audit(approval, f"{kind}_{'approved' if approved else 'rejected'}", ProviderDecision(**_transition(
        approval, previous,
        specialization=provider.specialization,
        license_number=provider.license_number or provider.registration_number,
        comments=comments or "",
        verification_score=approval.verification_score,
    )), actor=reviewer)
    logger.info("Approval #%s %s by %s", approval.pk, target, getattr(reviewer, "email", None))

    notify_provider_decision(approval)
    return approval


@translate_store_errors
def add_internal_note(approval_id, note, author) -> ProviderApproval:
    note = (note or "").strip()
    if not note:
        raise ValidationFailed({"note": "This field may not be blank."})
    with transaction.atomic():
        approval = _locked(approval_id)
        approval.internal_notes = list(approval.internal_notes or []) + [
            {"note": note, "author_id": author.pk, "author_email": author.email, "created_at": _timestamp()}
        ]
        approval.save(update_fields=["internal_notes", "updated_at"])

    _audit(approval, "internal_note_added", InternalNoteAdded(**_transition(
        approval, approval.status, note=note,
    )), actor=author)
    return approval


@translate_store_errors
def log_communication(approval_id, channel, message, sender, subject="", response="") -> ProviderApproval:
    if channel not in CommunicationChannel.values:
        raise ValidationFailed({"channel": f"Unknown channel '{channel}'."})
    message = (message or "").strip()
    if not message:
        raise ValidationFailed({"message": "This field may not be blank."})
    with transaction.atomic():
        approval = _locked(approval_id)
        approval.communication_log = list(approval.communication_log or []) + [{
            "channel": channel,
            "subject": subject or "",
            "message": message,
            "sent_by": getattr(sender, "pk", None),
            "sent_at": _timestamp(),
            "response": response or "",
        }]
        approval.save(update_fields=["communication_log", "updated_at"])

    _audit(approval, "communication_logged", CommunicationLogged(**_transition(
        approval, approval.status, channel=channel, subject=subject or "", message=message,
    )), actor=sender)
    return approval


# ---------------------------------------------------------------------
# reads
# ---------------------------------------------------------------------
def priority_rank():
    return Case(
        *[When(priority=p, then=Value(rank)) for p, rank in PRIORITY_RANK.items()],
        default=Value(len(PRIORITY_RANK)),
        output_field=IntegerField(),
    )


@translate_store_errors
def get_pending_approvals():
    return (
        ProviderApproval.objects.filter(status__in=ApprovalStatus.open())
        .select_related("provider__user", "assigned_to")
        .annotate(priority_rank=priority_rank())
        .order_by("priority_rank", "submission_date")
    )


@dataclass(frozen=True)
class ApprovalMetrics:
    pending: int
    under_review: int
    approved: int
    rejected: int
    average_review_time_hours: int
    approval_rate: float


def _round_half_up(value: float) -> int:
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


@translate_store_errors
def approval_metrics() -> ApprovalMetrics:
    counts = {row["status"]: row["n"] for row in _status_counts()}
    approved = counts.get(ApprovalStatus.APPROVED, 0)
    rejected = counts.get(ApprovalStatus.REJECTED, 0)

    durations = [
        (done - started).total_seconds() / 3600
        for started, done in ProviderApproval.objects.filter(
            status__in=ApprovalStatus.terminal(),
            review_start_date__isnull=False,
            review_completion_date__isnull=False,
        ).values_list("review_start_date", "review_completion_date")
    ]
    average = _round_half_up(sum(durations) / len(durations)) if durations else 0

    decided = approved + rejected
    rate = round(approved * 100.0 / decided, 1) if decided else 0.0

    return ApprovalMetrics(
        pending=counts.get(ApprovalStatus.PENDING, 0),
        under_review=counts.get(ApprovalStatus.UNDER_REVIEW, 0),
        approved=approved,
        rejected=rejected,
        average_review_time_hours=average,
        approval_rate=rate,
    )


def _status_counts():
    return ProviderApproval.objects.order_by().values("status").annotate(n=Count("id"))
