import django.core.validators
import django.db.models.deletion
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
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="ProviderProfile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("provider_type", models.CharField(choices=[("DOCTOR", "Medical Doctor"), ("LAB", "Diagnostic Lab")], default="DOCTOR", max_length=8)),
                ("display_name", models.CharField(blank=True, help_text="Practice or lab name", max_length=255)),
                ("specialization", models.CharField(blank=True, max_length=120)),
                ("years_experience", models.PositiveIntegerField(default=0, validators=[django.core.validators.MinValueValidator(0)])),
                ("license_number", models.CharField(blank=True, max_length=64)),
                ("registration_number", models.CharField(blank=True, max_length=64)),
                ("phone", models.CharField(blank=True, max_length=20, validators=[django.core.validators.RegexValidator(message="Phone must be E.164 format (e.g. +2348012345678).", regex="^\\+\\d{1,3}\\d{6,14}$")])),
                ("address", models.TextField(blank=True)),
                ("is_verified", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=False)),
                ("is_approved", models.BooleanField(default=False)),
                ("verification_status", models.CharField(choices=[("PENDING", "Pending"), ("APPROVED", "Approved"), ("REJECTED", "Rejected")], default="PENDING", max_length=16)),
                ("verified_at", models.DateTimeField(blank=True, null=True)),
                ("rejection_reason", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="provider_profile", to=settings.AUTH_USER_MODEL)),
                ("verified_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="providers_verified", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ("-created_at",),
            },
        ),
        migrations.CreateModel(
            name="ProviderDocument",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("kind", models.CharField(choices=DOCUMENT_TYPES, max_length=32)),
                ("file", models.FileField(blank=True, upload_to="provider_docs/%Y/%m/")),
                ("file_url", models.URLField(blank=True, max_length=500)),
                ("uploaded_at", models.DateTimeField(auto_now_add=True)),
                ("profile", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="documents", to="providers.providerprofile")),
            ],
            options={
                "ordering": ("uploaded_at", "id"),
            },
        ),
    ]
