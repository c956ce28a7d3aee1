"""
Shared fixtures: users by role, authenticated API clients, providers.
"""
import itertools

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from accounts.enums import AdminPermission, UserRole
from accounts.models import User
from approvals.enums import DocumentType
from providers.enums import ProviderType
from providers.models import ProviderProfile, ProviderDocument

_seq = itertools.count(1)


@pytest.fixture(autouse=True)
def _test_settings(settings):
    """Write audit entries inline and keep provider emails in-process."""
    settings.AUDIT_DELIVERY_MODE = "INLINE"
    settings.NOTIFICATIONS_DELIVERY_MODE = "INLINE"
    settings.EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"
    settings.CACHES = {"default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache"}}


@pytest.fixture(autouse=True)
def _clear_cache(_test_settings):
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def make_user(db):
    def _make(role=UserRole.PATIENT, permissions=(), **extra):
        n = next(_seq)
        return User.objects.create_user(
            email=extra.pop("email", f"{role.lower()}{n}@test.com"),
            password="testpass123",
            role=role,
            admin_permissions=list(permissions),
            **extra,
        )
    return _make


@pytest.fixture
def super_admin(make_user):
    return make_user(UserRole.SUPER_ADMIN)


@pytest.fixture
def reviewer(make_user):
    """Admin who can review registrations and read the audit log."""
    return make_user(UserRole.ADMIN, permissions=[
        AdminPermission.APPROVE_REGISTRATIONS,
        AdminPermission.AUDIT_LOGS,
        AdminPermission.MANAGE_USERS,
    ])


@pytest.fixture
def limited_admin(make_user):
    """Admin with analytics only."""
    return make_user(UserRole.ADMIN, permissions=[AdminPermission.VIEW_ANALYTICS])


@pytest.fixture
def make_provider(make_user):
    def _make(specialization="General Medicine", years_experience=3, provider_type=ProviderType.DOCTOR, documents=()):
        role = UserRole.LAB if provider_type == ProviderType.LAB else UserRole.DOCTOR
        user = make_user(role)
        profile = ProviderProfile.objects.create(
            user=user,
            provider_type=provider_type,
            specialization=specialization,
            years_experience=years_experience,
            license_number="MDCN-0001" if provider_type == ProviderType.DOCTOR else "",
            registration_number="LAB-0001" if provider_type == ProviderType.LAB else "",
        )
        for kind in documents:
            ProviderDocument.objects.create(profile=profile, kind=kind, file_url=f"https://files.test/{kind}.pdf")
        return profile
    return _make


@pytest.fixture
def doctor_with_docs(make_provider):
    return make_provider(
        specialization="Cardiology",
        years_experience=16,
        documents=[DocumentType.MEDICAL_LICENSE, DocumentType.DEGREE_CERTIFICATE],
    )


@pytest.fixture
def api_client():
    """Unauthenticated DRF API client."""
    return APIClient()


@pytest.fixture
def client_for():
    def _client(user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client
    return _client
