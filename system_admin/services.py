import logging

from django.contrib.auth import get_user_model
from django.db import transaction

from accounts.enums import AdminPermission
from audit.enums import Category, Level, TargetEntity
from audit.payloads import AccountStatusChange
from audit.services import record_entry
from core.exceptions import NotFound, ValidationFailed, translate_store_errors

from .gateway import admin_action

logger = logging.getLogger(__name__)

User = get_user_model()


def _status(active: bool) -> str:
    return "active" if active else "suspended"


@admin_action(
    AdminPermission.MANAGE_USERS,
    action="user_status_changed",
    target_entity=TargetEntity.USER,
    category=Category.USER_MANAGEMENT,
    target_kwarg="user_id",
)
@translate_store_errors
def set_user_active(actor, user_id, active: bool, reason: str = ""):
    """Suspend or re-activate an account. Setting the current state again is a no-op."""
    with transaction.atomic():
        user = User.objects.select_for_update().filter(pk=user_id).first()
        if user is None:
            raise NotFound("User not found.")
        if user.pk == actor.pk and not active:
            raise ValidationFailed({"is_active": "You cannot suspend your own account."})
        if user.is_super_admin and not actor.is_super_admin:
            raise ValidationFailed({"is_active": "Only a super admin can change another super admin."})

        previous = user.is_active
        if previous == active:
            return user
        user.is_active = active
        user.save(update_fields=["is_active"])

    record_entry(
        level=Level.INFO if active else Level.WARNING,
        category=Category.USER_MANAGEMENT,
        action="user_activated" if active else "user_suspended",
        target_entity=TargetEntity.ADMIN if user.is_admin else TargetEntity.USER,
        target_id=user.pk,
        details=AccountStatusChange(
            user_email=user.email,
            previous_status=_status(previous),
            new_status=_status(active),
            reason=reason or "",
        ),
        actor=actor,
    )
    logger.info("User %s set %s by %s", user.email, _status(active), actor.email)
    return user
