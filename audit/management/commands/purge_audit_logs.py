"""
Delete audit log entries past their retention period.

Usage:
    python manage.py purge_audit_logs                 # Default: AUDIT_LOG_RETENTION_DAYS (365)
    python manage.py purge_audit_logs --dry-run       # Show what would be deleted
    python manage.py purge_audit_logs --days 30       # Custom retention
"""
import logging

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from audit.models import AuditLog

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Delete audit log entries older than the retention period"

    def add_arguments(self, parser):
        parser.add_argument(
            "--days",
            type=int,
            default=None,
            help="Delete entries older than this many days (default: AUDIT_LOG_RETENTION_DAYS)",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would be deleted without deleting",
        )
        parser.add_argument(
            "--batch-size",
            type=int,
            default=1000,
            help="Delete in batches of this size (default: 1000)",
        )

    def handle(self, *args, **options):
        days = options["days"]
        if days is None:
            days = getattr(settings, "AUDIT_LOG_RETENTION_DAYS", 365)
        if days < 1:
            raise CommandError("--days must be at least 1")
        batch_size = options["batch_size"]
        if batch_size < 1:
            raise CommandError("--batch-size must be at least 1")

        expired_qs = AuditLog.objects.older_than(days)
        expired_count = expired_qs.count()

        if options["dry_run"]:
            self.stdout.write(self.style.WARNING(f"DRY RUN - would delete {expired_count} entries older than {days} days"))
            return

        total_deleted = 0
        while True:
            batch_ids = list(expired_qs.values_list("id", flat=True)[:batch_size])
            if not batch_ids:
                break
            deleted, _ = AuditLog.objects.filter(id__in=batch_ids).delete()
            total_deleted += deleted

        logger.info("Purged %s audit entries older than %s days", total_deleted, days)
        self.stdout.write(self.style.SUCCESS(f"Deleted {total_deleted} audit entries older than {days} days"))
