from rest_framework import serializers

from .enums import CommunicationChannel, DocumentType
from .models import ProviderApproval, ApprovalDocument


class ApprovalDocumentSerializer(serializers.ModelSerializer):
    class Meta:
        model = ApprovalDocument
        fields = [
            "id", "document_type", "file_name", "file_url", "uploaded_at",
            "verified", "verified_by", "verification_date", "notes",
        ]
        read_only_fields = fields


class ProviderApprovalSerializer(serializers.ModelSerializer):
    provider_email = serializers.EmailField(source="provider.user.email", read_only=True)
    provider_name = serializers.CharField(source="provider.get_display_name", read_only=True)
    provider_type = serializers.CharField(source="provider.provider_type", read_only=True)
    specialization = serializers.CharField(source="provider.specialization", read_only=True)
    assigned_to_email = serializers.EmailField(source="assigned_to.email", read_only=True, default=None)
    documents = ApprovalDocumentSerializer(many=True, read_only=True)

    class Meta:
        model = ProviderApproval
        fields = [
            "id", "provider", "provider_email", "provider_name", "provider_type", "specialization",
            "submission_date", "status", "priority",
            "assigned_to", "assigned_to_email", "review_start_date", "review_completion_date",
            "review_comments", "rejection_reason", "decided_by",
            "verification_score", "documents", "additional_docs_required",
            "internal_notes", "communication_log", "created_at", "updated_at",
        ]
        read_only_fields = fields


class ProviderApprovalListSerializer(ProviderApprovalSerializer):
    class Meta(ProviderApprovalSerializer.Meta):
        fields = [
            "id", "provider", "provider_email", "provider_name", "provider_type", "specialization",
            "submission_date", "status", "priority", "assigned_to", "assigned_to_email", "verification_score",
        ]
        read_only_fields = fields


class AssignSerializer(serializers.Serializer):
    reviewer_id = serializers.IntegerField(required=False)


class RequestDocumentsSerializer(serializers.Serializer):
    required_documents = serializers.ListField(
        child=serializers.ChoiceField(choices=DocumentType.choices), allow_empty=False,
    )


class VerifyDocumentSerializer(serializers.Serializer):
    document_type = serializers.ChoiceField(choices=DocumentType.choices)
    verified = serializers.BooleanField()
    notes = serializers.CharField(required=False, allow_blank=True, max_length=2000)


class DecideSerializer(serializers.Serializer):
    approved = serializers.BooleanField()
    comments = serializers.CharField(required=False, allow_blank=True, max_length=2000)

    def validate(self, attrs):
        if not attrs["approved"] and not (attrs.get("comments") or "").strip():
            raise serializers.ValidationError({"comments": "A reason is required when rejecting."})
        return attrs


class NoteSerializer(serializers.Serializer):
    note = serializers.CharField(max_length=4000)


class CommunicationSerializer(serializers.Serializer):
    channel = serializers.ChoiceField(choices=CommunicationChannel.choices)
    message = serializers.CharField(max_length=4000)
    subject = serializers.CharField(required=False, allow_blank=True, max_length=255)
    response = serializers.CharField(required=False, allow_blank=True, max_length=4000)


class SubmitDocumentSerializer(serializers.Serializer):
    document_type = serializers.ChoiceField(choices=DocumentType.choices)
    file_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    file_url = serializers.CharField(max_length=500)


class ApprovalMetricsSerializer(serializers.Serializer):
    pending = serializers.IntegerField()
    under_review = serializers.IntegerField()
    approved = serializers.IntegerField()
    rejected = serializers.IntegerField()
    average_review_time_hours = serializers.IntegerField()
    approval_rate = serializers.FloatField()
