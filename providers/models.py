from django.conf import settings
from django.core.validators import RegexValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from approvals.enums import DocumentType
from .enums import ProviderType, VerificationStatus

phone_validator = RegexValidator(
    regex=r"^\+\d{1,3}\d{6,14}$",
    message="Phone must be E.164 format (e.g. +2348012345678).",
)

class ProviderProfile(models.Model):
    """
    Doctor or diagnostic lab seeking onboarding. The approval workflow reads
    identity/specialization here and writes the verification flags back.
    """
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="provider_profile")

    provider_type = models.CharField(max_length=8, choices=ProviderType.choices, default=ProviderType.DOCTOR)
    display_name = models.CharField(max_length=255, blank=True, help_text="Practice or lab name")
    specialization = models.CharField(max_length=120, blank=True)
    years_experience = models.PositiveIntegerField(default=0, validators=[MinValueValidator(0)])

    # Licensing
    license_number = models.CharField(max_length=64, blank=True)
    registration_number = models.CharField(max_length=64, blank=True)  # labs

    # Contact
    phone = models.CharField(max_length=20, validators=[phone_validator], blank=True)
    address = models.TextField(blank=True)

    # Flags written by the approval workflow
    is_verified = models.BooleanField(default=False)
    is_active = models.BooleanField(default=False)
    is_approved = models.BooleanField(default=False)

    verification_status = models.CharField(max_length=16, choices=VerificationStatus.choices, default=VerificationStatus.PENDING)
    verified_at = models.DateTimeField(null=True, blank=True)
    verified_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="providers_verified")
    rejection_reason = models.CharField(max_length=255, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("-created_at",)

    @property
    def email(self):
        return self.user.email

    @property
    def is_lab(self):
        return self.provider_type == ProviderType.LAB

    def get_display_name(self):
        """
        Priority: display_name > full name > email
        """
        if self.display_name:
            return self.display_name.strip()
        full_name = (self.user.get_full_name() or "").strip()
        return full_name or self.user.email

    def apply_decision(self, approved: bool, by_user, reason=""):
        """Write an approval decision onto the provider's flags."""
        self.is_verified = approved
        self.is_active = approved
        self.is_approved = approved
        self.verification_status = VerificationStatus.APPROVED if approved else VerificationStatus.REJECTED
        self.verified_by = by_user
        self.verified_at = timezone.now()
        self.rejection_reason = "" if approved else (reason or "")[:255]
        self.save(update_fields=[
            "is_verified", "is_active", "is_approved", "verification_status",
            "verified_by", "verified_at", "rejection_reason", "updated_at",
        ])

    def __str__(self):
        return f"{self.user.email} ({self.get_provider_type_display()})"


class ProviderDocument(models.Model):
    """
    Document uploaded with a registration (license scan, ID...). Either a stored
    file or an external URL.
    """
    profile = models.ForeignKey(ProviderProfile, on_delete=models.CASCADE, related_name="documents")
    kind = models.CharField(max_length=32, choices=DocumentType.choices)
    file = models.FileField(upload_to="provider_docs/%Y/%m/", blank=True)
    file_url = models.URLField(max_length=500, blank=True)
    uploaded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("uploaded_at", "id")

    @property
    def file_name(self):
        if self.file:
            return self.file.name.rsplit("/", 1)[-1]
        return self.file_url.rsplit("/", 1)[-1]

    @property
    def url(self):
        return self.file.url if self.file else self.file_url
