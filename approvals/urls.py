from django.urls import path, include
from rest_framework.routers import SimpleRouter
from rest_framework_nested.routers import NestedSimpleRouter

from .views import ProviderApprovalViewSet, ApprovalDocumentViewSet

router = SimpleRouter()
router.register(r"approvals", ProviderApprovalViewSet, basename="approval")

documents_router = NestedSimpleRouter(router, r"approvals", lookup="approval")
documents_router.register(r"documents", ApprovalDocumentViewSet, basename="approval-documents")

urlpatterns = [
    path("", include(router.urls)),
    path("", include(documents_router.urls)),
]
