from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import ProviderViewSet, register

router = DefaultRouter()
router.register(r"", ProviderViewSet, basename="provider")

urlpatterns = [
    path("register/", register, name="provider-register"),
    path("", include(router.urls)),
]
