"""
Tests for the admin action gateway.
"""
import pytest
from django.contrib.auth.models import AnonymousUser

from accounts.enums import AdminPermission, UserRole
from approvals.services import admin as approval_ops
from approvals.services import workflow
from audit.enums import Category, TargetEntity
from audit.models import AuditLog
from core.exceptions import Forbidden, NotFound, RateLimited, Unauthenticated
from providers.enums import ProviderType
from system_admin.gateway import admin_action
from system_admin.services import set_user_active


@admin_action(AdminPermission.MANAGE_MEDICINES, action="medicine_price_updated", target_entity=TargetEntity.MEDICINE, target_kwarg="medicine_id")
def update_medicine_price(actor, medicine_id, price):
    return {"id": medicine_id, "price": price}


@pytest.fixture
def pharmacist_admin(make_user):
    return make_user(UserRole.ADMIN, permissions=[AdminPermission.MANAGE_MEDICINES])


@pytest.mark.django_db
class TestChecks:

    @pytest.mark.parametrize("actor", [None, AnonymousUser()])
    def test_unauthenticated(self, actor):
        with pytest.raises(Unauthenticated):
            update_medicine_price(actor, medicine_id=1, price=10)
        assert AuditLog.objects.count() == 0

    def test_suspended_actor(self, make_user):
        actor = make_user(UserRole.ADMIN, permissions=[AdminPermission.MANAGE_MEDICINES], is_active=False)
        with pytest.raises(Forbidden):
            update_medicine_price(actor, medicine_id=1, price=10)

    def test_unapproved_lab(self, make_provider):
        lab = make_provider(provider_type=ProviderType.LAB)
        with pytest.raises(Forbidden):
            update_medicine_price(lab.user, medicine_id=1, price=10)
        assert not AuditLog.objects.filter(action="unauthorized_access_attempt").exists()

    def test_missing_permission_is_audited_once(self, limited_admin):
        with pytest.raises(Forbidden):
            update_medicine_price(limited_admin, medicine_id=1, price=10)

        entries = AuditLog.objects.filter(action="unauthorized_access_attempt")
        assert entries.count() == 1
        entry = entries.get()
        assert entry.level == "warning"
        assert entry.category == "security"
        assert entry.actor == limited_admin
        assert entry.details["required_permission"] == "manage_medicines"
        assert entry.details["user_permissions"] == ["view_analytics"]
        assert not AuditLog.objects.filter(action="medicine_price_updated").exists()

    def test_super_admin_bypasses_permission(self, super_admin):
        assert update_medicine_price(super_admin, medicine_id=3, price=12) == {"id": 3, "price": 12}

    def test_super_admin_still_rate_limited(self, super_admin, settings):
        settings.ADMIN_GATEWAY = {"RATE_LIMIT_WINDOW_SECONDS": 900, "RATE_LIMIT_MAX_ACTIONS": 1, "CACHE_ALIAS": "default"}
        update_medicine_price(super_admin, medicine_id=3, price=12)
        with pytest.raises(RateLimited):
            update_medicine_price(super_admin, medicine_id=3, price=13)


@pytest.mark.django_db
class TestRateLimit:

    def test_101st_action_is_limited(self, pharmacist_admin):
        for i in range(100):
            update_medicine_price(pharmacist_admin, medicine_id=i, price=1)

        with pytest.raises(RateLimited) as exc:
            update_medicine_price(pharmacist_admin, medicine_id=101, price=1)

        assert exc.value.retry_after > 0
        violations = AuditLog.objects.filter(action="rate_limit_exceeded")
        assert violations.count() == 1
        entry = violations.get()
        assert entry.details["attempt_count"] == 100
        assert entry.details["max_attempts"] == 100
        assert entry.details["window_seconds"] == 900
        assert AuditLog.objects.filter(action="medicine_price_updated").count() == 100

    def test_each_rejection_is_audited(self, pharmacist_admin):
        limited = admin_action(
            AdminPermission.MANAGE_MEDICINES, action="medicine_restocked",
            target_entity=TargetEntity.MEDICINE, max_actions=1,
        )(lambda actor: "ok")
        limited(pharmacist_admin)
        for _ in range(2):
            with pytest.raises(RateLimited):
                limited(pharmacist_admin)
        assert AuditLog.objects.filter(action="rate_limit_exceeded").count() == 2


@pytest.mark.django_db
class TestAuditGuarantee:

    def test_one_entry_with_snapshot(self, pharmacist_admin):
        update_medicine_price(pharmacist_admin, medicine_id=42, price=9.5)

        entry = AuditLog.objects.get()
        assert entry.action == "medicine_price_updated"
        assert entry.category == Category.ADMIN_ACTION
        assert entry.target_entity == "medicine"
        assert entry.target_id == "42"
        assert entry.details["request"] == {"medicine_id": 42, "price": 9.5}
        assert entry.details["response"] == {"id": 42, "price": 9.5}
        assert entry.details["permission"] == "manage_medicines"

    def test_operation_entry_is_not_duplicated(self, doctor_with_docs, reviewer):
        approval = workflow.initiate_approval(doctor_with_docs.pk)
        before = AuditLog.objects.count()

        approval_ops.assign_reviewer(reviewer, approval_id=approval.pk)

        assert AuditLog.objects.count() == before + 1
        assert AuditLog.objects.latest("created_at").action == "reviewer_assigned"

    def test_assigning_someone_else_credits_the_acting_admin(self, doctor_with_docs, reviewer, make_user):
        assignee = make_user(UserRole.ADMIN, permissions=[AdminPermission.APPROVE_REGISTRATIONS])
        approval = workflow.initiate_approval(doctor_with_docs.pk)

        approval_ops.assign_reviewer(reviewer, approval_id=approval.pk, reviewer=assignee)

        entry = AuditLog.objects.get(action="reviewer_assigned")
        assert entry.actor == reviewer
        assert entry.actor_email == reviewer.email
        assert entry.details["reviewer_email"] == assignee.email
        approval.refresh_from_db()
        assert approval.assigned_to == assignee

    def test_noop_approval_op_is_filed_under_the_provider(self, make_provider, reviewer):
        lab = make_provider(provider_type=ProviderType.LAB)
        approval = workflow.initiate_approval(lab.pk)
        workflow.decide(approval.pk, True, reviewer)

        approval_ops.decide(reviewer, approval_id=approval.pk, approved=True)

        entry = AuditLog.objects.get(action="approval_decision")
        assert entry.target_entity == TargetEntity.LAB
        assert entry.category == Category.LAB_MANAGEMENT
        assert entry.target_id == str(lab.pk)
        assert entry.details["request"]["approval_id"] == approval.pk

    def test_failed_operation_writes_nothing(self, reviewer):
        with pytest.raises(NotFound):
            approval_ops.decide(reviewer, approval_id=987654, approved=True)
        assert AuditLog.objects.count() == 0

    def test_audit_failure_does_not_fail_operation(self, pharmacist_admin, monkeypatch):
        from django.db import DatabaseError

        def boom(*args, **kwargs):
            raise DatabaseError("audit store down")
        monkeypatch.setattr(AuditLog.objects, "create", boom)

        assert update_medicine_price(pharmacist_admin, medicine_id=1, price=2) == {"id": 1, "price": 2}

    def test_required_permission_is_exposed(self):
        assert update_medicine_price.required_permission == "manage_medicines"
        assert approval_ops.decide.required_permission == "approve_registrations"


@pytest.mark.django_db
class TestUserStatus:

    def test_suspend_and_reactivate(self, reviewer, make_user):
        target = make_user(UserRole.PATIENT)

        set_user_active(reviewer, user_id=target.pk, active=False, reason="abuse")
        target.refresh_from_db()
        assert not target.is_active
        entry = AuditLog.objects.get(action="user_suspended")
        assert entry.details["previous_status"] == "active"
        assert entry.details["new_status"] == "suspended"
        assert entry.details["user_email"] == target.email

        set_user_active(reviewer, user_id=target.pk, active=True)
        target.refresh_from_db()
        assert target.is_active
        assert AuditLog.objects.filter(action="user_activated").count() == 1

    def test_cannot_suspend_self(self, reviewer):
        from core.exceptions import ValidationFailed
        with pytest.raises(ValidationFailed):
            set_user_active(reviewer, user_id=reviewer.pk, active=False)
