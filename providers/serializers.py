from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from approvals.enums import DocumentType
from .enums import ProviderType
from .models import ProviderProfile, ProviderDocument


class ProviderDocumentSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProviderDocument
        fields = ["id", "kind", "file", "file_url", "uploaded_at"]
        read_only_fields = ["id", "uploaded_at"]

    def validate(self, attrs):
        if not attrs.get("file") and not attrs.get("file_url"):
            raise serializers.ValidationError("Provide a file or a file_url.")
        return attrs


class ProviderProfileSerializer(serializers.ModelSerializer):
    first_name = serializers.CharField(source="user.first_name", read_only=True)
    last_name = serializers.CharField(source="user.last_name", read_only=True)
    email = serializers.EmailField(source="user.email", read_only=True)
    name = serializers.CharField(source="get_display_name", read_only=True)
    documents = ProviderDocumentSerializer(many=True, read_only=True)
    approval_id = serializers.IntegerField(source="approval.id", read_only=True, default=None)

    class Meta:
        model = ProviderProfile
        fields = [
            "id", "user", "email", "first_name", "last_name", "name",
            "provider_type", "display_name", "specialization", "years_experience",
            "license_number", "registration_number", "phone", "address",
            "is_verified", "is_active", "is_approved",
            "verification_status", "verified_at", "rejection_reason",
            "documents", "approval_id", "created_at", "updated_at",
        ]
        read_only_fields = fields


class RegisterDocumentSerializer(serializers.Serializer):
    kind = serializers.ChoiceField(choices=DocumentType.choices)
    file_url = serializers.URLField(max_length=500)


class RegisterProviderSerializer(serializers.Serializer):
    """
    Public registration for a doctor or lab. Tokens are not issued here.
    """
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=8, trim_whitespace=False)
    first_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    last_name = serializers.CharField(max_length=150, required=False, allow_blank=True)

    provider_type = serializers.ChoiceField(choices=ProviderType.choices)
    display_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    specialization = serializers.CharField(max_length=120, required=False, allow_blank=True)
    years_experience = serializers.IntegerField(required=False, min_value=0, default=0)
    license_number = serializers.CharField(max_length=64, required=False, allow_blank=True)
    registration_number = serializers.CharField(max_length=64, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True)
    address = serializers.CharField(required=False, allow_blank=True)

    documents = RegisterDocumentSerializer(many=True, required=False)

    def validate_password(self, value):
        validate_password(value)
        return value

    def validate(self, attrs):
        if attrs["provider_type"] == ProviderType.DOCTOR and not attrs.get("license_number"):
            raise serializers.ValidationError({"license_number": "Doctors must provide a license number."})
        if attrs["provider_type"] == ProviderType.LAB and not attrs.get("registration_number"):
            raise serializers.ValidationError({"registration_number": "Labs must provide a registration number."})
        kinds = [d["kind"] for d in attrs.get("documents", [])]
        if len(kinds) != len(set(kinds)):
            raise serializers.ValidationError({"documents": "Each document type may only be sent once."})
        return attrs


class ProviderStatusSerializer(serializers.Serializer):
    is_active = serializers.BooleanField()
    reason = serializers.CharField(required=False, allow_blank=True, max_length=500)
