import logging

from django.db import transaction

from accounts.enums import AdminPermission, UserRole
from accounts.models import User
from approvals.services.workflow import initiate_approval
from audit.enums import Category, Level, TargetEntity
from audit.payloads import ProviderStatusChange
from audit.services import record_entry
from core.exceptions import NotFound, ValidationFailed, translate_store_errors
from system_admin.gateway import admin_action

from .enums import ProviderType
from .models import ProviderProfile, ProviderDocument

logger = logging.getLogger(__name__)

ROLE_FOR_TYPE = {
    ProviderType.DOCTOR: UserRole.DOCTOR,
    ProviderType.LAB: UserRole.LAB,
}


@translate_store_errors
def register_provider(*, email, password, provider_type, documents=(), **profile_fields):
    """
    Create the provider's account and profile, then start the approval
    workflow for it. Returns ``(profile, approval)``.
    """
    email = email.strip().lower()
    with transaction.atomic():
        if User.objects.filter(email__iexact=email).exists():
            raise ValidationFailed({"email": "Email is already registered."})

        user = User.objects.create_user(
            email=email,
            password=password,
            first_name=profile_fields.pop("first_name", ""),
            last_name=profile_fields.pop("last_name", ""),
            role=ROLE_FOR_TYPE[provider_type],
        )
        profile = ProviderProfile.objects.create(user=user, provider_type=provider_type, **profile_fields)
        for doc in documents:
            ProviderDocument.objects.create(profile=profile, **doc)

    approval = initiate_approval(profile.pk)
    logger.info("Provider %s registered as %s", email, provider_type)
    return profile, approval


def _status(active: bool) -> str:
    return "active" if active else "suspended"


@admin_action(
    AdminPermission.MANAGE_DOCTORS,
    action="provider_status_changed",
    target_entity=TargetEntity.DOCTOR,
    category=Category.DOCTOR_MANAGEMENT,
    target_kwarg="provider_id",
)
@translate_store_errors
def set_provider_active(actor, provider_id, active: bool, reason: str = ""):
    """Suspend or re-activate an approved provider's listing."""
    with transaction.atomic():
        provider = ProviderProfile.objects.select_for_update().select_related("user").filter(pk=provider_id).first()
        if provider is None:
            raise NotFound("Provider not found.")
        if active and not provider.is_approved:
            raise ValidationFailed({"is_active": "Only approved providers can be activated."})

        previous = provider.is_active
        if previous == active:
            return provider
        provider.is_active = active
        provider.save(update_fields=["is_active", "updated_at"])

    kind = "lab" if provider.is_lab else "doctor"
    record_entry(
        level=Level.INFO if active else Level.WARNING,
        category=Category.LAB_MANAGEMENT if provider.is_lab else Category.DOCTOR_MANAGEMENT,
        action=f"{kind}_{'activated' if active else 'suspended'}",
        target_entity=TargetEntity.LAB if provider.is_lab else TargetEntity.DOCTOR,
        target_id=provider.pk,
        details=ProviderStatusChange(
            provider_id=provider.pk,
            provider_email=provider.email,
            provider_type=provider.provider_type,
            previous_status=_status(previous),
            new_status=_status(active),
            reason=reason or "",
        ),
        actor=actor,
    )
    return provider
