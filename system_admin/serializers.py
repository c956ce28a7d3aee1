from rest_framework import serializers
from django.contrib.auth import get_user_model

User = get_user_model()


class UserAdminSerializer(serializers.ModelSerializer):
    has_provider_profile = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "first_name",
            "last_name",
            "role",
            "is_active",
            "email_verified",
            "admin_permissions",
            "date_joined",
            "last_login",
            "has_provider_profile",
        ]
        read_only_fields = fields

    def get_has_provider_profile(self, obj):
        return hasattr(obj, "provider_profile")


class UserStatusSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=500)
