from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.permissions import IsAdmin
from core.exceptions import ValidationFailed

from .serializers import NotificationSerializer, NotificationStatsSerializer, SystemAlertSerializer
from .services.projector import create_system_alert, list_notifications, mark_read, notification_stats

MAX_LIMIT = 200


class NotificationViewSet(viewsets.ViewSet):
    """Admin notifications derived from warning-and-above audit entries."""
    permission_classes = [IsAuthenticated, IsAdmin]

    def list(self, request):
        qp = request.query_params
        limit = qp.get("limit")
        if limit is not None:
            try:
                limit = max(1, min(int(limit), MAX_LIMIT))
            except ValueError:
                raise ValidationFailed({"limit": "Must be an integer."})
        items = list_notifications(
            unread_only=str(qp.get("unread", "")).lower() in ("true", "1", "yes"),
            level=qp.get("level") or None,
            category=qp.get("category") or None,
            limit=limit,
        )
        return Response(NotificationSerializer(list(items), many=True).data)

    @action(detail=True, methods=["post", "put"])
    def read(self, request, pk=None):
        return Response(NotificationSerializer(mark_read(pk, request.user)).data)

    @action(detail=False, methods=["get"])
    def stats(self, request):
        return Response(NotificationStatsSerializer(notification_stats(request.user)).data)

    @action(detail=False, methods=["post"], permission_classes=[IsAuthenticated])
    def alerts(self, request):
        s = SystemAlertSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        notification = create_system_alert(request.user, **s.validated_data)
        return Response(NotificationSerializer(notification).data, status=status.HTTP_201_CREATED)
