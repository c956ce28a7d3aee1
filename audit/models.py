import uuid
from datetime import timedelta

from django.conf import settings
from django.db import models
from django.utils import timezone

from .enums import Level, Category, ActorType, TargetEntity

RESOLUTION_FIELDS = frozenset({"resolved", "resolved_by", "resolved_at", "resolution_notes"})


class AuditLogQuerySet(models.QuerySet):
    def unresolved(self):
        return self.filter(resolved=False)

    def older_than(self, days: int):
        return self.filter(created_at__lt=timezone.now() - timedelta(days=days))


class AuditLog(models.Model):
    """
    Immutable audit event. Only the resolution fields may change after insert.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    level = models.CharField(max_length=10, choices=Level.choices, default=Level.INFO)
    category = models.CharField(max_length=24, choices=Category.choices)
    action = models.CharField(max_length=64)

    # who
    actor = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="audit_events")
    actor_type = models.CharField(max_length=10, choices=ActorType.choices, default=ActorType.SYSTEM)
    actor_email = models.CharField(max_length=255, blank=True)       # snapshot convenience

    # what / where
    target_entity = models.CharField(max_length=16, choices=TargetEntity.choices)
    target_id = models.CharField(max_length=64, blank=True)          # store as str to handle UUID/str keys
    details = models.JSONField(default=dict, blank=True)
    tags = models.JSONField(default=list, blank=True)

    # request context
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True)
    endpoint = models.CharField(max_length=255, blank=True)
    method = models.CharField(max_length=10, blank=True)

    # resolution (the only mutable part)
    resolved = models.BooleanField(default=False)
    resolved_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="resolved_audit_events")
    resolved_at = models.DateTimeField(null=True, blank=True)
    resolution_notes = models.TextField(blank=True)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    objects = AuditLogQuerySet.as_manager()

    class Meta:
        indexes = [
            models.Index(fields=["level", "created_at"], name="audit_audit_level_3f1c2a_idx"),
            models.Index(fields=["category", "created_at"], name="audit_audit_categor_8d4e7b_idx"),
            models.Index(fields=["actor", "created_at"], name="audit_audit_actor_i_2b9c6e_idx"),
            models.Index(fields=["target_entity", "target_id"], name="audit_audit_target__5a0d3f_idx"),
            models.Index(fields=["resolved", "level"], name="audit_audit_resolve_9e6b1c_idx"),
        ]
        ordering = ["-created_at"]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            update_fields = kwargs.get("update_fields")
            if update_fields is None or not set(update_fields) <= RESOLUTION_FIELDS:
                raise ValueError("Audit log entries are immutable; only resolution fields may change.")
        super().save(*args, **kwargs)

    def __str__(self):
        return f"[{self.level}] {self.action} {self.target_entity}#{self.target_id} by {self.actor_email or self.actor_type} @ {self.created_at:%Y-%m-%d %H:%M}"
