from django.db.models import Q
from django.contrib.auth import get_user_model
from rest_framework import viewsets, mixins
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework.pagination import PageNumberPagination

from .permissions import CanManageUsers
from .serializers import UserAdminSerializer, UserStatusSerializer
from .services import set_user_active

User = get_user_model()


class StandardPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = "limit"
    max_page_size = 100


def _truthy(value):
    return str(value).lower() in ("true", "1", "yes")


class UserAdminViewSet(
    viewsets.GenericViewSet,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
):
    """Application-level user management."""
    permission_classes = [IsAuthenticated, CanManageUsers]
    pagination_class = StandardPagination
    queryset = User.objects.select_related("provider_profile").all().order_by("-date_joined", "-id")
    serializer_class = UserAdminSerializer

    def get_queryset(self):
        qs = super().get_queryset()
        qp = self.request.query_params

        q = (qp.get("q") or "").strip()
        if q:
            qs = qs.filter(
                Q(email__icontains=q)
                | Q(first_name__icontains=q)
                | Q(last_name__icontains=q)
            )

        role = (qp.get("role") or "").strip()
        if role:
            qs = qs.filter(role=role)

        is_active = qp.get("is_active")
        if is_active not in (None, ""):
            qs = qs.filter(is_active=_truthy(is_active))

        return qs

    def _set_active(self, request, pk, active):
        s = UserStatusSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        user = set_user_active(request.user, user_id=pk, active=active, reason=s.validated_data.get("reason", ""))
        return Response({"id": user.id, "is_active": user.is_active})

    @action(detail=True, methods=["post"], permission_classes=[IsAuthenticated])
    def deactivate(self, request, pk=None):
        return self._set_active(request, pk, False)

    @action(detail=True, methods=["post"], permission_classes=[IsAuthenticated])
    def reactivate(self, request, pk=None):
        return self._set_active(request, pk, True)
