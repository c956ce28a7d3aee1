from rest_framework import serializers
from .models import AuditLog


class AuditLogSerializer(serializers.ModelSerializer):
    actor_display = serializers.SerializerMethodField()

    class Meta:
        model = AuditLog
        fields = [
            "id",
            "level",
            "category",
            "action",
            "actor",
            "actor_type",
            "actor_email",
            "actor_display",
            "target_entity",
            "target_id",
            "details",
            "tags",
            "ip_address",
            "user_agent",
            "endpoint",
            "method",
            "resolved",
            "resolved_by",
            "resolved_at",
            "resolution_notes",
            "created_at",
        ]
        read_only_fields = fields

    def get_actor_display(self, obj):
        """Return a friendly display name for the actor."""
        if obj.actor:
            full_name = obj.actor.get_full_name().strip()
            if full_name:
                return full_name
            return obj.actor_email or obj.actor.email
        return obj.actor_email or "System"


class ResolveSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, max_length=2000)
