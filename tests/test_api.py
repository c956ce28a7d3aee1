"""
End-to-end flows through the HTTP API.
"""
import pytest

from accounts.enums import UserRole
from audit.models import AuditLog
from providers.enums import ProviderType
from providers.models import ProviderProfile


REGISTRATION = {
    "email": "Ada.Okafor@clinic.test",
    "password": "S3cure-pass-123",
    "first_name": "Ada",
    "last_name": "Okafor",
    "provider_type": ProviderType.DOCTOR,
    "specialization": "Cardiology",
    "years_experience": 16,
    "license_number": "MDCN-55821",
    "documents": [
        {"kind": "medical_license", "file_url": "https://files.test/license.pdf"},
        {"kind": "degree_certificate", "file_url": "https://files.test/degree.pdf"},
    ],
}


@pytest.mark.django_db
def test_doctor_onboarding_end_to_end(api_client, client_for, reviewer, mailoutbox):
    res = api_client.post("/api/providers/register/", REGISTRATION, format="json")
    assert res.status_code == 201, res.data
    approval_id = res.data["approval"]["id"]
    provider_id = res.data["provider"]["id"]
    assert res.data["approval"]["status"] == "pending"
    assert res.data["approval"]["priority"] == "high"

    admin = client_for(reviewer)

    res = admin.post(f"/api/approvals/{approval_id}/assign/", {}, format="json")
    assert res.status_code == 200, res.data
    assert res.data["status"] == "under_review"

    for doc in ("medical_license", "degree_certificate"):
        res = admin.post(
            f"/api/approvals/{approval_id}/verify-document/",
            {"document_type": doc, "verified": True},
            format="json",
        )
        assert res.status_code == 200, res.data
    assert res.data["verification_score"] == 100

    res = admin.post(f"/api/approvals/{approval_id}/decide/", {"approved": True, "comments": "OK"}, format="json")
    assert res.status_code == 200, res.data
    assert res.data["status"] == "approved"

    profile = ProviderProfile.objects.get(user__email="ada.okafor@clinic.test")
    assert profile.is_verified and profile.is_active and profile.is_approved

    actions = list(
        AuditLog.objects.filter(target_id=str(provider_id)).order_by("created_at").values_list("action", flat=True)
    )
    assert actions == [
        "approval_workflow_initiated",
        "reviewer_assigned",
        "document_verified",
        "document_verified",
        "doctor_approved",
    ]

    assert len(mailoutbox) == 1
    assert mailoutbox[0].to == ["ada.okafor@clinic.test"]


@pytest.mark.django_db
class TestApprovalApi:

    def test_registration_rejects_duplicate_email(self, api_client):
        assert api_client.post("/api/providers/register/", REGISTRATION, format="json").status_code == 201
        res = api_client.post("/api/providers/register/", REGISTRATION, format="json")
        assert res.status_code == 400

    def test_list_requires_permission(self, client_for, limited_admin):
        assert client_for(limited_admin).get("/api/approvals/").status_code == 403

    def test_metrics_open_to_analytics(self, client_for, limited_admin):
        res = client_for(limited_admin).get("/api/approvals/metrics/")
        assert res.status_code == 200
        assert res.data["pending"] == 0

    def test_unpermitted_decision_is_audited(self, api_client, client_for, limited_admin):
        approval_id = api_client.post("/api/providers/register/", REGISTRATION, format="json").data["approval"]["id"]

        res = client_for(limited_admin).post(f"/api/approvals/{approval_id}/decide/", {"approved": True}, format="json")

        assert res.status_code == 403
        entry = AuditLog.objects.get(action="unauthorized_access_attempt")
        assert entry.endpoint == f"/api/approvals/{approval_id}/decide/"
        assert entry.method == "POST"
        assert entry.details["required_permission"] == "approve_registrations"

    def test_rejection_needs_reason(self, api_client, client_for, reviewer):
        approval_id = api_client.post("/api/providers/register/", REGISTRATION, format="json").data["approval"]["id"]
        res = client_for(reviewer).post(f"/api/approvals/{approval_id}/decide/", {"approved": False}, format="json")
        assert res.status_code == 400

    def test_conflicting_decision_is_409(self, api_client, client_for, reviewer):
        approval_id = api_client.post("/api/providers/register/", REGISTRATION, format="json").data["approval"]["id"]
        admin = client_for(reviewer)
        admin.post(f"/api/approvals/{approval_id}/decide/", {"approved": True}, format="json")
        res = admin.post(f"/api/approvals/{approval_id}/decide/", {"approved": False, "comments": "no"}, format="json")
        assert res.status_code == 409

    def test_unknown_approval_is_404(self, client_for, reviewer):
        res = client_for(reviewer).post("/api/approvals/424242/assign/", {}, format="json")
        assert res.status_code == 404

    def test_nested_documents(self, api_client, client_for, reviewer):
        approval_id = api_client.post("/api/providers/register/", REGISTRATION, format="json").data["approval"]["id"]
        admin = client_for(reviewer)

        res = admin.post(
            f"/api/approvals/{approval_id}/documents/",
            {"document_type": "identity_proof", "file_name": "id.png", "file_url": "https://files.test/id.png"},
            format="json",
        )
        assert res.status_code == 201, res.data

        res = admin.get(f"/api/approvals/{approval_id}/documents/")
        assert res.status_code == 200
        assert [d["document_type"] for d in res.data] == ["medical_license", "degree_certificate", "identity_proof"]


@pytest.mark.django_db
class TestAuditApi:

    def test_list_and_filter(self, client_for, reviewer, api_client):
        api_client.post("/api/providers/register/", REGISTRATION, format="json")
        res = client_for(reviewer).get("/api/audit/", {"action": "approval_workflow_initiated"})
        assert res.status_code == 200
        assert len(res.data) == 1
        assert res.data[0]["actor_display"] == "System"

    def test_bad_filter_is_400(self, client_for, reviewer):
        assert client_for(reviewer).get("/api/audit/", {"level": "loud"}).status_code == 400

    def test_needs_audit_permission(self, client_for, limited_admin):
        assert client_for(limited_admin).get("/api/audit/").status_code == 403

    def test_resolve(self, client_for, reviewer, limited_admin):
        denied = client_for(limited_admin).post("/api/audit/00000000-0000-0000-0000-000000000000/resolve/", {}, format="json")
        assert denied.status_code == 403
        entry = AuditLog.objects.get(action="unauthorized_access_attempt")

        res = client_for(reviewer).post(f"/api/audit/{entry.pk}/resolve/", {"notes": "known tester"}, format="json")

        assert res.status_code == 200
        assert res.data["resolved"] is True
        assert res.data["resolution_notes"] == "known tester"


@pytest.mark.django_db
class TestNotificationApi:

    def test_list_stats_and_read(self, client_for, reviewer, limited_admin):
        client_for(limited_admin).post("/api/system-admin/users/1/deactivate/", {}, format="json")
        admin = client_for(reviewer)

        items = admin.get("/api/notifications/").data
        assert [n["title"] for n in items] == ["Unauthorized Access Attempt"]
        assert admin.get("/api/notifications/stats/").data["total_unread"] == 1

        res = admin.post(f"/api/notifications/{items[0]['id']}/read/")
        assert res.status_code == 200
        assert res.data["read"] is True
        assert admin.get("/api/notifications/stats/").data["total_unread"] == 0

    def test_non_admin_refused(self, client_for, make_user):
        assert client_for(make_user(UserRole.PATIENT)).get("/api/notifications/").status_code == 403

    def test_create_alert(self, client_for, super_admin):
        res = client_for(super_admin).post(
            "/api/notifications/alerts/",
            {"level": "critical", "title": "DB failover", "message": "Primary lost", "priority": "urgent"},
            format="json",
        )
        assert res.status_code == 201, res.data
        assert res.data["title"] == "DB failover"


@pytest.mark.django_db
class TestAdminApi:

    def test_suspend_user(self, client_for, reviewer, make_user):
        target = make_user(UserRole.PATIENT)
        res = client_for(reviewer).post(f"/api/system-admin/users/{target.pk}/deactivate/", {"reason": "spam"}, format="json")
        assert res.status_code == 200
        assert res.data == {"id": target.pk, "is_active": False}
        assert AuditLog.objects.filter(action="user_suspended", target_id=str(target.pk)).count() == 1

    def test_suspend_provider(self, client_for, make_user, doctor_with_docs):
        from accounts.enums import AdminPermission
        from approvals.services import workflow

        approval = workflow.initiate_approval(doctor_with_docs.pk)
        manager = make_user(UserRole.ADMIN, permissions=[AdminPermission.MANAGE_DOCTORS, AdminPermission.APPROVE_REGISTRATIONS])
        workflow.decide(approval.pk, True, manager)

        res = client_for(manager).post(f"/api/providers/{doctor_with_docs.pk}/status/", {"is_active": False, "reason": "review"}, format="json")

        assert res.status_code == 200, res.data
        assert res.data["is_active"] is False
        assert AuditLog.objects.filter(action="doctor_suspended").count() == 1

    def test_rate_limit_over_http(self, client_for, reviewer, make_user, settings):
        settings.ADMIN_GATEWAY = {"RATE_LIMIT_WINDOW_SECONDS": 60, "RATE_LIMIT_MAX_ACTIONS": 1, "CACHE_ALIAS": "default"}
        target = make_user(UserRole.PATIENT)
        admin = client_for(reviewer)
        admin.post(f"/api/system-admin/users/{target.pk}/deactivate/", {}, format="json")

        res = admin.post(f"/api/system-admin/users/{target.pk}/reactivate/", {}, format="json")

        assert res.status_code == 429
        assert int(res["Retry-After"]) > 0


@pytest.mark.django_db
class TestProviderUpload:

    def test_owner_upload_reaches_approval(self, client_for, doctor_with_docs):
        from approvals.services import workflow
        approval = workflow.initiate_approval(doctor_with_docs.pk)

        res = client_for(doctor_with_docs.user).post(
            f"/api/providers/{doctor_with_docs.pk}/upload/",
            {"kind": "identity_proof", "file_url": "https://files.test/passport.png"},
            format="json",
        )

        assert res.status_code == 201, res.data
        assert approval.documents.filter(document_type="identity_proof").exists()
        assert AuditLog.objects.filter(action="document_submitted").count() == 1

    def test_other_provider_refused(self, client_for, doctor_with_docs, make_provider):
        other = make_provider()
        res = client_for(other.user).post(
            f"/api/providers/{doctor_with_docs.pk}/upload/",
            {"kind": "identity_proof", "file_url": "https://files.test/passport.png"},
            format="json",
        )
        assert res.status_code in (403, 404)
