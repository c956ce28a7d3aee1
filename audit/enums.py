from django.db import models

class Level(models.TextChoices):
    INFO     = "info", "Info"
    WARNING  = "warning", "Warning"
    ERROR    = "error", "Error"
    CRITICAL = "critical", "Critical"


class Category(models.TextChoices):
    AUTH              = "auth", "Auth"
    USER_MANAGEMENT   = "user_management", "User management"
    DOCTOR_MANAGEMENT = "doctor_management", "Doctor management"
    LAB_MANAGEMENT    = "lab_management", "Lab management"
    SYSTEM            = "system", "System"
    SECURITY          = "security", "Security"
    API               = "api", "API"
    DATABASE          = "database", "Database"
    ADMIN_ACTION      = "admin_action", "Admin action"


class ActorType(models.TextChoices):
    ADMIN   = "admin", "Admin"
    DOCTOR  = "doctor", "Doctor"
    LAB     = "lab", "Lab"
    USER    = "user", "User"
    SYSTEM  = "system", "System"
    UNKNOWN = "unknown", "Unknown"


class TargetEntity(models.TextChoices):
    USER         = "user", "User"
    DOCTOR       = "doctor", "Doctor"
    ADMIN        = "admin", "Admin"
    LAB          = "lab", "Lab"
    APPOINTMENT  = "appointment", "Appointment"
    PRESCRIPTION = "prescription", "Prescription"
    MEDICINE     = "medicine", "Medicine"
    SYSTEM       = "system", "System"
