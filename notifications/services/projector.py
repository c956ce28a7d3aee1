"""
Admin notifications projected from the audit log.

Nothing is stored here: a notification is a read view over an audit entry
whose level is warning or above, and "read" is the entry's resolved flag.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, time
from typing import Iterator

from django.conf import settings
from django.db.models import Count, Q
from django.utils import timezone

from accounts.enums import AdminPermission
from audit.enums import Category, Level, TargetEntity
from audit.models import AuditLog
from audit.payloads import SystemAlert
from audit.services import record_entry, resolve_entry
from core.exceptions import StoreUnavailable, ValidationFailed
from system_admin.gateway import admin_action

logger = logging.getLogger(__name__)

NOTIFY_LEVELS = (Level.WARNING, Level.ERROR, Level.CRITICAL)
NOTIFY_CATEGORIES = (Category.SECURITY, Category.DOCTOR_MANAGEMENT, Category.USER_MANAGEMENT, Category.SYSTEM)

LEVEL_PRIORITY = {
    Level.CRITICAL: "urgent",
    Level.ERROR: "high",
    Level.WARNING: "medium",
    Level.INFO: "low",
}
ALERT_PRIORITIES = ("low", "medium", "high", "urgent")

TITLES = {
    "doctor_approved": "Doctor Approved",
    "doctor_rejected": "Doctor Registration Rejected",
    "lab_approved": "Lab Approved",
    "lab_rejected": "Lab Registration Rejected",
    "user_suspended": "User Account Suspended",
    "user_activated": "User Account Activated",
    "system_error": "System Error",
    "security_alert": "Security Alert",
    "backup_completed": "Backup Completed",
    "payment_failed": "Payment Processing Failed",
    "unauthorized_access_attempt": "Unauthorized Access Attempt",
    "rate_limit_exceeded": "Rate Limit Exceeded",
}


@dataclass(frozen=True)
class Notification:
    id: str
    type: str
    title: str
    message: str
    timestamp: datetime
    read: bool
    priority: str
    category: str
    details: dict = field(default_factory=dict)


def _humanize(key) -> str:
    return (key or "").replace("_", " ")


def generate_title(action, category, details=None) -> str:
    if action == "system_alert" and details and details.get("title"):
        return details["title"]
    return TITLES.get(action) or f"{_humanize(category)} Action"


def generate_message(entry) -> str:
    details = entry.details or {}
    action = entry.action

    if action == "doctor_approved":
        return f"Dr. {details.get('provider_email') or entry.target_id} has been approved for {details.get('specialization') or 'practice'}"
    if action == "user_suspended":
        return f"User account {details.get('user_email') or entry.target_id} has been suspended"
    if action == "unauthorized_access_attempt":
        endpoint = details.get("endpoint") or entry.endpoint
        return f"Unauthorized access attempt to {endpoint} by {entry.actor_email or 'unknown user'}"
    if action == "rate_limit_exceeded":
        endpoint = details.get("endpoint") or entry.endpoint
        return f"Rate limit exceeded for {endpoint} - {details.get('attempt_count', 0)} attempts"
    if action == "system_alert" and details.get("message"):
        return details["message"]
    return f"{_humanize(action)} performed on {entry.target_entity}"


def to_notification(entry) -> Notification:
    return Notification(
        id=str(entry.pk),
        type=entry.level,
        title=generate_title(entry.action, entry.category, entry.details),
        message=generate_message(entry),
        timestamp=entry.created_at,
        read=entry.resolved,
        priority=LEVEL_PRIORITY.get(entry.level, "medium"),
        category=entry.category,
        details=entry.details or {},
    )


def list_notifications(*, unread_only=False, level=None, category=None, limit=None) -> Iterator[Notification]:
    if level and level not in NOTIFY_LEVELS:
        raise ValidationFailed({"level": f"Notifications are only raised for {', '.join(NOTIFY_LEVELS)}."})
    if category and category not in NOTIFY_CATEGORIES:
        raise ValidationFailed({"category": f"Notifications are only raised for {', '.join(NOTIFY_CATEGORIES)}."})
    if limit is None:
        limit = getattr(settings, "NOTIFICATIONS_DEFAULT_LIMIT", 50)

    q = AuditLog.objects.filter(level__in=NOTIFY_LEVELS, category__in=NOTIFY_CATEGORIES)
    if unread_only:
        q = q.unresolved()
    if level:
        q = q.filter(level=level)
    if category:
        q = q.filter(category=category)

    for entry in q.order_by("-created_at")[:limit].iterator():
        yield to_notification(entry)


def mark_read(notification_id, actor) -> Notification:
    entry = resolve_entry(notification_id, actor)
    return to_notification(entry)


def notification_stats(actor=None) -> dict:
    midnight = timezone.make_aware(datetime.combine(timezone.localdate(), time.min))
    unresolved = Q(resolved=False)
    counts = AuditLog.objects.aggregate(
        total_unread=Count("id", filter=unresolved & Q(level__in=NOTIFY_LEVELS)),
        critical_count=Count("id", filter=unresolved & Q(level=Level.CRITICAL)),
        warning_count=Count("id", filter=unresolved & Q(level=Level.WARNING)),
        today_count=Count("id", filter=Q(created_at__gte=midnight, level__in=NOTIFY_LEVELS)),
    )
    return {k: v or 0 for k, v in counts.items()}


@admin_action(
    AdminPermission.SYSTEM_SETTINGS,
    action="system_alert",
    target_entity=TargetEntity.SYSTEM,
    category=Category.SYSTEM,
)
def create_system_alert(actor, level, title, message, priority="medium") -> Notification:
    if level not in Level.values:
        raise ValidationFailed({"level": f"Unknown level '{level}'."})
    if priority not in ALERT_PRIORITIES:
        raise ValidationFailed({"priority": f"Unknown priority '{priority}'."})

    entry_id = record_entry(
        level=level,
        category=Category.SYSTEM,
        action="system_alert",
        target_entity=TargetEntity.SYSTEM,
        details=SystemAlert(title=title, message=message, priority=priority),
        actor=actor,
        tags=["alert"],
    )
    if entry_id is None:
        raise StoreUnavailable("The alert could not be stored.")
    logger.info("System alert '%s' raised by %s", title, actor.email)
    return to_notification(AuditLog.objects.get(pk=entry_id))
