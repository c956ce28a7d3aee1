from django.contrib.auth import get_user_model
from rest_framework import viewsets, mixins, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.enums import AdminPermission
from core.exceptions import NotFound, ValidationFailed
from system_admin.permissions import CanApproveRegistrations, CanViewAnalytics

from .enums import ApprovalStatus
from .models import ProviderApproval, ApprovalDocument
from .serializers import (
    ApprovalDocumentSerializer, ApprovalMetricsSerializer, AssignSerializer, CommunicationSerializer,
    DecideSerializer, NoteSerializer, ProviderApprovalListSerializer, ProviderApprovalSerializer,
    RequestDocumentsSerializer, SubmitDocumentSerializer, VerifyDocumentSerializer,
)
from .services import admin as ops
from .services.workflow import approval_metrics, get_pending_approvals

User = get_user_model()


class ProviderApprovalViewSet(viewsets.GenericViewSet,
                              mixins.ListModelMixin,
                              mixins.RetrieveModelMixin):
    """
    Review queue for doctor/lab registrations. Reads need
    ``approve_registrations``; every mutation goes through the admin gateway.
    """
    queryset = ProviderApproval.objects.select_related("provider__user", "assigned_to").prefetch_related("documents")
    permission_classes = [IsAuthenticated, CanApproveRegistrations]

    # the gateway checks permissions on these and audits refusals
    gated_actions = {"assign", "request_documents", "verify_document", "decide", "notes", "communications"}

    def get_permissions(self):
        if self.action == "metrics":
            return [IsAuthenticated(), (CanApproveRegistrations | CanViewAnalytics)()]
        if self.action in self.gated_actions:
            return [IsAuthenticated()]
        return super().get_permissions()

    def get_serializer_class(self):
        if self.action in ("list", "pending"):
            return ProviderApprovalListSerializer
        return ProviderApprovalSerializer

    def get_queryset(self):
        q = self.queryset
        qp = self.request.query_params
        status_ = qp.get("status")
        priority = qp.get("priority")
        assigned = qp.get("assigned_to")
        if status_:
            if status_ not in ApprovalStatus.values:
                raise ValidationFailed({"status": f"Unknown status '{status_}'."})
            q = q.filter(status=status_)
        if priority:
            q = q.filter(priority=priority)
        if assigned == "me":
            q = q.filter(assigned_to=self.request.user)
        elif assigned:
            q = q.filter(assigned_to_id=assigned)
        return q.order_by("-submission_date", "-id")

    def _detail(self, approval, code=status.HTTP_200_OK):
        approval = self.queryset.get(pk=approval.pk)
        return Response(ProviderApprovalSerializer(approval).data, status=code)

    @action(detail=False, methods=["get"])
    def pending(self, request):
        qs = get_pending_approvals()
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(ProviderApprovalListSerializer(page, many=True).data)
        return Response(ProviderApprovalListSerializer(qs, many=True).data)

    @action(detail=False, methods=["get"])
    def metrics(self, request):
        return Response(ApprovalMetricsSerializer(approval_metrics()).data)

    @action(detail=True, methods=["post"])
    def assign(self, request, pk=None):
        s = AssignSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        reviewer = None
        if s.validated_data.get("reviewer_id"):
            reviewer = User.objects.filter(pk=s.validated_data["reviewer_id"], is_active=True).first()
            if reviewer is None or not reviewer.has_admin_permission(AdminPermission.APPROVE_REGISTRATIONS):
                raise ValidationFailed({"reviewer_id": "Reviewer must be an active admin who can approve registrations."})
        return self._detail(ops.assign_reviewer(request.user, approval_id=pk, reviewer=reviewer))

    @action(detail=True, methods=["post"], url_path="request-documents")
    def request_documents(self, request, pk=None):
        s = RequestDocumentsSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        return self._detail(ops.request_additional_documents(
            request.user, approval_id=pk, required_docs=s.validated_data["required_documents"],
        ))

    @action(detail=True, methods=["post"], url_path="verify-document")
    def verify_document(self, request, pk=None):
        s = VerifyDocumentSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        return self._detail(ops.verify_document(request.user, approval_id=pk, **s.validated_data))

    @action(detail=True, methods=["post"])
    def decide(self, request, pk=None):
        s = DecideSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        return self._detail(ops.decide(request.user, approval_id=pk, **s.validated_data))

    @action(detail=True, methods=["post"])
    def notes(self, request, pk=None):
        s = NoteSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        return self._detail(ops.add_internal_note(request.user, approval_id=pk, note=s.validated_data["note"]))

    @action(detail=True, methods=["post"])
    def communications(self, request, pk=None):
        s = CommunicationSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        return self._detail(ops.log_communication(request.user, approval_id=pk, **s.validated_data))


class ApprovalDocumentViewSet(viewsets.GenericViewSet,
                              mixins.ListModelMixin,
                              mixins.CreateModelMixin):
    """Documents of one approval: /approvals/{approval_pk}/documents/"""
    serializer_class = ApprovalDocumentSerializer
    permission_classes = [IsAuthenticated, CanApproveRegistrations]
    pagination_class = None

    def get_permissions(self):
        if self.action == "create":
            return [IsAuthenticated()]
        return super().get_permissions()

    def get_queryset(self):
        approval_pk = self.kwargs["approval_pk"]
        if not ProviderApproval.objects.filter(pk=approval_pk).exists():
            raise NotFound("Approval record not found.")
        return ApprovalDocument.objects.filter(approval_id=approval_pk).order_by("uploaded_at", "id")

    def create(self, request, *args, **kwargs):
        s = SubmitDocumentSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        approval = ops.submit_document(request.user, approval_id=self.kwargs["approval_pk"], **s.validated_data)
        doc = approval.documents.get(document_type=s.validated_data["document_type"])
        return Response(ApprovalDocumentSerializer(doc).data, status=status.HTTP_201_CREATED)
