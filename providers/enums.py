from django.db import models

class ProviderType(models.TextChoices):
    DOCTOR = "DOCTOR","Medical Doctor"
    LAB    = "LAB","Diagnostic Lab"

class VerificationStatus(models.TextChoices):
    PENDING = "PENDING","Pending"
    APPROVED = "APPROVED","Approved"
    REJECTED = "REJECTED","Rejected"
