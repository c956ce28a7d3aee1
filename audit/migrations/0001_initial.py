import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="AuditLog",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("level", models.CharField(choices=[("info", "Info"), ("warning", "Warning"), ("error", "Error"), ("critical", "Critical")], default="info", max_length=10)),
                ("category", models.CharField(choices=[("auth", "Auth"), ("user_management", "User management"), ("doctor_management", "Doctor management"), ("lab_management", "Lab management"), ("system", "System"), ("security", "Security"), ("api", "API"), ("database", "Database"), ("admin_action", "Admin action")], max_length=24)),
                ("action", models.CharField(max_length=64)),
                ("actor_type", models.CharField(choices=[("admin", "Admin"), ("doctor", "Doctor"), ("lab", "Lab"), ("user", "User"), ("system", "System"), ("unknown", "Unknown")], default="system", max_length=10)),
                ("actor_email", models.CharField(blank=True, max_length=255)),
                ("target_entity", models.CharField(choices=[("user", "User"), ("doctor", "Doctor"), ("admin", "Admin"), ("lab", "Lab"), ("appointment", "Appointment"), ("prescription", "Prescription"), ("medicine", "Medicine"), ("system", "System")], max_length=16)),
                ("target_id", models.CharField(blank=True, max_length=64)),
                ("details", models.JSONField(blank=True, default=dict)),
                ("tags", models.JSONField(blank=True, default=list)),
                ("ip_address", models.GenericIPAddressField(blank=True, null=True)),
                ("user_agent", models.TextField(blank=True)),
                ("endpoint", models.CharField(blank=True, max_length=255)),
                ("method", models.CharField(blank=True, max_length=10)),
                ("resolved", models.BooleanField(default=False)),
                ("resolved_at", models.DateTimeField(blank=True, null=True)),
                ("resolution_notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("actor", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="audit_events", to=settings.AUTH_USER_MODEL)),
                ("resolved_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="resolved_audit_events", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["level", "created_at"], name="audit_audit_level_3f1c2a_idx"),
                    models.Index(fields=["category", "created_at"], name="audit_audit_categor_8d4e7b_idx"),
                    models.Index(fields=["actor", "created_at"], name="audit_audit_actor_i_2b9c6e_idx"),
                    models.Index(fields=["target_entity", "target_id"], name="audit_audit_target__5a0d3f_idx"),
                    models.Index(fields=["resolved", "level"], name="audit_audit_resolve_9e6b1c_idx"),
                ],
            },
        ),
    ]
