from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from django.utils import timezone

from .enums import ApprovalStatus, Priority, DocumentType


class ProviderApproval(models.Model):
    """
    Verification lifecycle of one provider. Created once, never deleted.
    """
    provider = models.OneToOneField("providers.ProviderProfile", on_delete=models.PROTECT, related_name="approval")

    submission_date = models.DateTimeField(default=timezone.now)
    status = models.CharField(max_length=32, choices=ApprovalStatus.choices, default=ApprovalStatus.PENDING, db_index=True)
    priority = models.CharField(max_length=8, choices=Priority.choices, default=Priority.MEDIUM)

    # Review
    assigned_to = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="assigned_approvals")
    review_start_date = models.DateTimeField(null=True, blank=True)
    review_completion_date = models.DateTimeField(null=True, blank=True)
    review_comments = models.TextField(blank=True)
    rejection_reason = models.TextField(blank=True)
    decided_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="decided_approvals")

    # derived; only recompute_verification_score() writes it
    verification_score = models.FloatField(default=0, validators=[MinValueValidator(0), MaxValueValidator(100)])

    additional_docs_required = models.JSONField(default=list, blank=True)
    internal_notes = models.JSONField(default=list, blank=True)      # append-only
    communication_log = models.JSONField(default=list, blank=True)   # append-only

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("-submission_date",)
        indexes = [
            models.Index(fields=["status", "priority"], name="approvals_p_status_0b5e1d_idx"),
            models.Index(fields=["assigned_to", "status"], name="approvals_p_assigne_7c2a9f_idx"),
        ]

    @property
    def is_terminal(self):
        return self.status in ApprovalStatus.terminal()

    def recompute_verification_score(self, save=True) -> float:
        counts = self.documents.aggregate(
            total=models.Count("id"),
            verified=models.Count("id", filter=models.Q(verified=True)),
        )
        total = counts["total"] or 0
        self.verification_score = counts["verified"] * 100.0 / total if total else 0.0
        if save:
            self.save(update_fields=["verification_score", "updated_at"])
        return self.verification_score

    def __str__(self):
        return f"Approval #{self.pk} {self.provider} [{self.status}/{self.priority}]"


class ApprovalDocument(models.Model):
    approval = models.ForeignKey(ProviderApproval, on_delete=models.CASCADE, related_name="documents")
    document_type = models.CharField(max_length=32, choices=DocumentType.choices)
    file_name = models.CharField(max_length=255, blank=True)
    file_url = models.CharField(max_length=500, blank=True)
    uploaded_at = models.DateTimeField(default=timezone.now)

    verified = models.BooleanField(default=False)
    verified_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="verified_documents")
    verification_date = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)

    class Meta:
        ordering = ("uploaded_at", "id")
        constraints = [
            models.UniqueConstraint(fields=["approval", "document_type"], name="uniq_approval_document_type"),
        ]

    def __str__(self):
        return f"{self.get_document_type_display()} ({'verified' if self.verified else 'unverified'})"
