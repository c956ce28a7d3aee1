from django.db.models import Q
from rest_framework import viewsets, mixins, status
from rest_framework.decorators import action, api_view, permission_classes, authentication_classes
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.parsers import MultiPartParser, FormParser, JSONParser
from rest_framework.response import Response

from accounts.permissions import IsAdmin, IsProvider
from approvals.services.workflow import submit_document

from .models import ProviderProfile
from .permissions import IsSelfProvider
from .serializers import (
    ProviderProfileSerializer, ProviderDocumentSerializer,
    RegisterProviderSerializer, ProviderStatusSerializer,
)
from .services import register_provider, set_provider_active


class ProviderViewSet(viewsets.GenericViewSet,
                      mixins.RetrieveModelMixin,
                      mixins.ListModelMixin):
    queryset = ProviderProfile.objects.select_related("user", "approval").prefetch_related("documents").all()
    serializer_class = ProviderProfileSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        q = self.queryset
        u = self.request.user

        # Admins see everything; others see approved, active providers plus themselves
        if not IsAdmin().has_permission(self.request, self):
            q = q.filter(Q(is_approved=True, is_active=True) | Q(user_id=u.id))

        ptype = self.request.query_params.get("type")
        status_ = self.request.query_params.get("status")
        specialization = self.request.query_params.get("specialization")
        s = self.request.query_params.get("s")

        if ptype:
            q = q.filter(provider_type=ptype)
        if status_:
            q = q.filter(verification_status=status_)
        if specialization:
            q = q.filter(specialization__iexact=specialization)
        if s:
            q = q.filter(
                Q(user__first_name__icontains=s) |
                Q(user__last_name__icontains=s) |
                Q(display_name__icontains=s)
            )
        return q.order_by("-created_at", "-id")

    # Admin: suspend / re-activate
    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, pk=None):
        s = ProviderStatusSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        prof = set_provider_active(
            request.user,
            provider_id=pk,
            active=s.validated_data["is_active"],
            reason=s.validated_data.get("reason", ""),
        )
        return Response(ProviderProfileSerializer(prof).data)

    # Owner uploads docs; the approval picks them up
    @action(
        detail=True, methods=["post"],
        parser_classes=[MultiPartParser, FormParser, JSONParser],
        permission_classes=[IsAuthenticated, IsProvider, IsSelfProvider],
    )
    def upload(self, request, pk=None):
        prof = self.get_object()
        s = ProviderDocumentSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        doc = s.save(profile=prof)

        approval = getattr(prof, "approval", None)
        if approval is not None:
            submit_document(approval.pk, doc.kind, file_name=doc.file_name, file_url=doc.url, actor=request.user)
        return Response(ProviderDocumentSerializer(doc).data, status=status.HTTP_201_CREATED)


@api_view(["POST"])
@authentication_classes([])
@permission_classes([AllowAny])
def register(request):
    """
    Public: create User + ProviderProfile, then start the approval workflow.
    """
    s = RegisterProviderSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    data = dict(s.validated_data)
    documents = [{"kind": d["kind"], "file_url": d["file_url"]} for d in data.pop("documents", [])]
    profile, approval = register_provider(documents=documents, **data)
    return Response(
        {
            "provider": ProviderProfileSerializer(profile).data,
            "approval": {"id": approval.id, "status": approval.status, "priority": approval.priority},
        },
        status=status.HTTP_201_CREATED,
    )
