"""
Tests for the audit log store.
"""
import logging
from datetime import timedelta

import pytest
from django.core.management import call_command
from django.db import DatabaseError
from django.test import RequestFactory
from django.utils import timezone

from audit.models import AuditLog
from audit.payloads import AccessDenied, build_details
from audit.services import audit_scope, query_entries, record_entry, resolve_entry
from core.exceptions import NotFound, ValidationFailed


def _record(**overrides):
    fields = dict(category="system", action="backup_completed", target_entity="system")
    fields.update(overrides)
    return record_entry(**fields)


@pytest.mark.django_db
class TestRecordEntry:

    def test_returns_id(self):
        entry_id = _record()
        assert AuditLog.objects.filter(pk=entry_id).exists()

    def test_store_failure_is_swallowed_and_logged(self, monkeypatch, caplog):
        def boom(*args, **kwargs):
            raise DatabaseError("disk full")
        monkeypatch.setattr(AuditLog.objects, "create", boom)

        with caplog.at_level(logging.ERROR, logger="audit.services"):
            assert _record() is None
        assert "Failed to record audit entry" in caplog.text

    def test_invalid_classification_is_not_raised(self, caplog):
        assert _record(category="billing") is None
        assert AuditLog.objects.count() == 0

    def test_request_context_is_captured(self, reviewer):
        request = RequestFactory().post(
            "/api/approvals/1/decide/", HTTP_USER_AGENT="pytest", REMOTE_ADDR="10.0.0.7",
        )
        request.user = reviewer
        entry = AuditLog.objects.get(pk=_record(request=request))

        assert entry.ip_address == "10.0.0.7"
        assert entry.user_agent == "pytest"
        assert entry.endpoint == "/api/approvals/1/decide/"
        assert entry.method == "POST"
        assert entry.actor == reviewer
        assert entry.actor_type == "admin"
        assert entry.actor_email == reviewer.email

    def test_missing_context_is_tolerated(self):
        entry = AuditLog.objects.get(pk=_record())
        assert entry.ip_address is None
        assert entry.endpoint == ""
        assert entry.actor_type == "system"

    def test_typed_payload(self, reviewer):
        entry_id = _record(
            category="security", action="unauthorized_access_attempt",
            details=AccessDenied(required_permission="manage_users", user_permissions=[], endpoint="/x"),
        )
        details = AuditLog.objects.get(pk=entry_id).details
        assert details == {"required_permission": "manage_users", "user_permissions": [], "endpoint": "/x", "operation": ""}

    def test_open_payload_for_unregistered_action(self):
        assert build_details("backup_completed", {"size_mb": 12}) == {"size_mb": 12}

    def test_scope_sees_entries(self):
        with audit_scope() as scope:
            entry_id = _record()
        assert scope.entry_ids == [AuditLog.objects.get(pk=entry_id).pk]


@pytest.mark.django_db
class TestImmutability:

    def test_update_refused(self):
        entry = AuditLog.objects.get(pk=_record())
        entry.action = "something_else"
        with pytest.raises(ValueError):
            entry.save()

    def test_resolution_fields_may_change(self):
        entry = AuditLog.objects.get(pk=_record())
        entry.resolved = True
        entry.save(update_fields=["resolved"])
        entry.refresh_from_db()
        assert entry.resolved


@pytest.mark.django_db
class TestResolve:

    def test_resolve_is_idempotent(self, reviewer, super_admin):
        entry_id = _record(level="warning")
        first = resolve_entry(entry_id, reviewer, "handled")
        second = resolve_entry(entry_id, super_admin, "again")

        assert first.resolved and second.resolved
        assert second.resolved_by == reviewer
        assert second.resolved_at == first.resolved_at
        assert second.resolution_notes == "handled"

    def test_unknown_entry(self, reviewer):
        with pytest.raises(NotFound):
            resolve_entry("00000000-0000-0000-0000-000000000000", reviewer)
        with pytest.raises(NotFound):
            resolve_entry("not-a-uuid", reviewer)


@pytest.mark.django_db
class TestQuery:

    def test_filters_and_order(self, reviewer):
        _record(level="info")
        warn_id = _record(level="warning", category="security", action="rate_limit_exceeded", actor=reviewer)
        _record(level="critical", target_id=7)

        assert [str(e.pk) for e in query_entries({"level": "warning"})] == [warn_id]
        assert [str(e.pk) for e in query_entries({"actor_id": reviewer.pk})] == [warn_id]
        assert len(query_entries({"target_id": 7})) == 1
        assert len(query_entries({"resolved": "false"})) == 3

        entries = list(query_entries())
        assert entries == sorted(entries, key=lambda e: e.created_at, reverse=True)

    def test_limit(self):
        for _ in range(5):
            _record()
        assert len(query_entries(limit=2)) == 2

    def test_date_range(self):
        old = AuditLog.objects.create(category="system", action="old", target_entity="system",
                                      created_at=timezone.now() - timedelta(days=10))
        _record()
        start = (timezone.now() - timedelta(days=1)).isoformat()
        assert old not in list(query_entries({"start": start}))
        assert len(query_entries({"end": (timezone.now() - timedelta(days=5)).date().isoformat()})) == 1

    @pytest.mark.parametrize("filters", [{"level": "loud"}, {"category": "billing"}, {"start": "yesterday"}, {"resolved": "maybe"}])
    def test_invalid_filters(self, filters):
        with pytest.raises(ValidationFailed):
            query_entries(filters)


@pytest.mark.django_db
class TestPurge:

    def test_purges_expired_entries(self):
        AuditLog.objects.create(category="system", action="old", target_entity="system",
                                created_at=timezone.now() - timedelta(days=400))
        recent_id = _record()

        call_command("purge_audit_logs")

        assert list(AuditLog.objects.values_list("pk", flat=True)) == [AuditLog.objects.get(pk=recent_id).pk]

    def test_dry_run_keeps_entries(self):
        AuditLog.objects.create(category="system", action="old", target_entity="system",
                                created_at=timezone.now() - timedelta(days=400))
        call_command("purge_audit_logs", "--dry-run")
        assert AuditLog.objects.count() == 1

    def test_custom_days_and_batches(self):
        for _ in range(3):
            AuditLog.objects.create(category="system", action="old", target_entity="system",
                                    created_at=timezone.now() - timedelta(days=40))
        call_command("purge_audit_logs", "--days", "30", "--batch-size", "2")
        assert AuditLog.objects.count() == 0
