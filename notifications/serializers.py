from rest_framework import serializers

from audit.enums import Level
from .services.projector import ALERT_PRIORITIES


class NotificationSerializer(serializers.Serializer):
    id = serializers.CharField()
    type = serializers.CharField()
    title = serializers.CharField()
    message = serializers.CharField()
    timestamp = serializers.DateTimeField()
    read = serializers.BooleanField()
    priority = serializers.CharField()
    category = serializers.CharField()
    details = serializers.JSONField()


class NotificationStatsSerializer(serializers.Serializer):
    total_unread = serializers.IntegerField()
    critical_count = serializers.IntegerField()
    warning_count = serializers.IntegerField()
    today_count = serializers.IntegerField()


class SystemAlertSerializer(serializers.Serializer):
    level = serializers.ChoiceField(choices=Level.choices, default=Level.WARNING)
    title = serializers.CharField(max_length=200)
    message = serializers.CharField(max_length=2000)
    priority = serializers.ChoiceField(choices=[(p, p) for p in ALERT_PRIORITIES], default="medium")
