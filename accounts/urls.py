from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView
from . import views

urlpatterns = [
    path("me/", views.me),
    path("token/refresh/", TokenRefreshView.as_view()),
]
