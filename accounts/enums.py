from django.db import models

class UserRole(models.TextChoices):
    SUPER_ADMIN = "SUPER_ADMIN", "Super Admin"
    ADMIN       = "ADMIN", "Admin"
    MODERATOR   = "MODERATOR", "Moderator"
    DOCTOR      = "DOCTOR", "Doctor"
    LAB         = "LAB", "Lab"
    PATIENT     = "PATIENT", "Patient"

    @classmethod
    def admin_roles(cls):
        return {cls.SUPER_ADMIN, cls.ADMIN, cls.MODERATOR}

    @classmethod
    def provider_roles(cls):
        return {cls.DOCTOR, cls.LAB}


class AdminPermission(models.TextChoices):
    MANAGE_USERS          = "manage_users", "Manage users"
    MANAGE_DOCTORS        = "manage_doctors", "Manage doctors"
    MANAGE_MEDICINES      = "manage_medicines", "Manage medicines"
    APPROVE_REGISTRATIONS = "approve_registrations", "Approve registrations"
    VIEW_ANALYTICS        = "view_analytics", "View analytics"
    SYSTEM_SETTINGS       = "system_settings", "System settings"
    FINANCIAL_REPORTS     = "financial_reports", "Financial reports"
    AUDIT_LOGS            = "audit_logs", "Audit logs"
    MANAGE_ADMINS         = "manage_admins", "Manage admins"
