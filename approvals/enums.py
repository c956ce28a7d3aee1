from django.db import models

class ApprovalStatus(models.TextChoices):
    PENDING                  = "pending", "Pending"
    UNDER_REVIEW             = "under_review", "Under review"
    APPROVED                 = "approved", "Approved"
    REJECTED                 = "rejected", "Rejected"
    ADDITIONAL_DOCS_REQUIRED = "additional_docs_required", "Additional documents required"

    @classmethod
    def terminal(cls):
        return {cls.APPROVED, cls.REJECTED}

    @classmethod
    def open(cls):
        return {cls.PENDING, cls.UNDER_REVIEW}


class Priority(models.TextChoices):
    LOW    = "low", "Low"
    MEDIUM = "medium", "Medium"
    HIGH   = "high", "High"
    URGENT = "urgent", "Urgent"

# urgent first
PRIORITY_RANK = {Priority.URGENT: 0, Priority.HIGH: 1, Priority.MEDIUM: 2, Priority.LOW: 3}


class DocumentType(models.TextChoices):
    MEDICAL_LICENSE           = "medical_license", "Medical license"
    DEGREE_CERTIFICATE        = "degree_certificate", "Degree certificate"
    EXPERIENCE_CERTIFICATE    = "experience_certificate", "Experience certificate"
    IDENTITY_PROOF            = "identity_proof", "Identity proof"
    LAB_LICENSE               = "lab_license", "Lab license"
    ACCREDITATION_CERTIFICATE = "accreditation_certificate", "Accreditation certificate"


class CommunicationChannel(models.TextChoices):
    EMAIL  = "email", "Email"
    PHONE  = "phone", "Phone"
    SYSTEM = "system", "System"
