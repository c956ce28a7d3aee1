from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.enums import AdminPermission
from system_admin.gateway import admin_action
from system_admin.permissions import CanViewAuditLogs

from .enums import Category, TargetEntity
from .serializers import AuditLogSerializer, ResolveSerializer
from .services import DEFAULT_QUERY_LIMIT, get_entry, query_entries, resolve_entry

FILTER_PARAMS = ("level", "category", "action", "actor_id", "target_entity", "target_id", "start", "end", "resolved")


@admin_action(
    AdminPermission.AUDIT_LOGS,
    action="audit_entry_resolved",
    target_entity=TargetEntity.SYSTEM,
    category=Category.ADMIN_ACTION,
    target_kwarg="entry_id",
)
def resolve_as_admin(actor, entry_id, notes=""):
    return resolve_entry(entry_id, actor, notes)


class AuditLogViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated, CanViewAuditLogs]

    def list(self, request):
        qp = request.query_params
        filters = {k: qp.get(k) for k in FILTER_PARAMS if qp.get(k) not in (None, "")}
        entries = query_entries(filters, limit=qp.get("limit") or DEFAULT_QUERY_LIMIT)
        return Response(AuditLogSerializer(entries, many=True).data)

    def retrieve(self, request, pk=None):
        return Response(AuditLogSerializer(get_entry(pk)).data)

    @action(detail=True, methods=["post"], permission_classes=[IsAuthenticated])
    def resolve(self, request, pk=None):
        s = ResolveSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        entry = resolve_as_admin(request.user, entry_id=pk, notes=s.validated_data.get("notes", ""))
        return Response(AuditLogSerializer(entry).data)
