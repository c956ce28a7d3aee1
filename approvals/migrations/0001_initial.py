import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


DOCUMENT_TYPES = [
    ("medical_license", "Medical license"),
    ("degree_certificate", "Degree certificate"),
    ("experience_certificate", "Experience certificate"),
    ("identity_proof", "Identity proof"),
    ("lab_license", "Lab license"),
    ("accreditation_certificate", "Accreditation certificate"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("providers", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="ProviderApproval",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("submission_date", models.DateTimeField(default=django.utils.timezone.now)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("under_review", "Under review"), ("approved", "Approved"), ("rejected", "Rejected"), ("additional_docs_required", "Additional documents required")], db_index=True, default="pending", max_length=32)),
                ("priority", models.CharField(choices=[("low", "Low"), ("medium", "Medium"), ("high", "High"), ("urgent", "Urgent")], default="medium", max_length=8)),
                ("review_start_date", models.DateTimeField(blank=True, null=True)),
                ("review_completion_date", models.DateTimeField(blank=True, null=True)),
                ("review_comments", models.TextField(blank=True)),
                ("rejection_reason", models.TextField(blank=True)),
                ("verification_score", models.FloatField(default=0, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(100)])),
                ("additional_docs_required", models.JSONField(blank=True, default=list)),
                ("internal_notes", models.JSONField(blank=True, default=list)),
                ("communication_log", models.JSONField(blank=True, default=list)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("assigned_to", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="assigned_approvals", to=settings.AUTH_USER_MODEL)),
                ("decided_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="decided_approvals", to=settings.AUTH_USER_MODEL)),
                ("provider", models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name="approval", to="providers.providerprofile")),
            ],
            options={
                "ordering": ("-submission_date",),
                "indexes": [
                    models.Index(fields=["status", "priority"], name="approvals_p_status_0b5e1d_idx"),
                    models.Index(fields=["assigned_to", "status"], name="approvals_p_assigne_7c2a9f_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ApprovalDocument",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("document_type", models.CharField(choices=DOCUMENT_TYPES, max_length=32)),
                ("file_name", models.CharField(blank=True, max_length=255)),
                ("file_url", models.CharField(blank=True, max_length=500)),
                ("uploaded_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("verified", models.BooleanField(default=False)),
                ("verification_date", models.DateTimeField(blank=True, null=True)),
                ("notes", models.TextField(blank=True)),
                ("approval", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="documents", to="approvals.providerapproval")),
                ("verified_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="verified_documents", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ("uploaded_at", "id"),
                "constraints": [
                    models.UniqueConstraint(fields=("approval", "document_type"), name="uniq_approval_document_type"),
                ],
            },
        ),
    ]
