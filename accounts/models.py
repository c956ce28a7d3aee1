from django.contrib.auth.base_user import BaseUserManager
from django.contrib.auth.models import AbstractUser
from django.core.exceptions import ValidationError
from django.db import models
from django.utils.translation import gettext_lazy as _
from .enums import UserRole, AdminPermission

class UserManager(BaseUserManager):
    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError("The Email must be set")
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", UserRole.SUPER_ADMIN)
        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")
        return self._create_user(email, password, **extra_fields)


def validate_admin_permissions(value):
    unknown = sorted(set(value or []) - set(AdminPermission.values))
    if unknown:
        raise ValidationError(f"Unknown admin permissions: {', '.join(unknown)}")


class User(AbstractUser):
    # remove username field and use email as the unique login identifier
    username = None
    email = models.EmailField(_("email address"), unique=True)

    role = models.CharField(max_length=20, choices=UserRole.choices, default=UserRole.PATIENT)
    email_verified = models.BooleanField(default=False)

    # Only meaningful for admin roles; SUPER_ADMIN implicitly holds all of them.
    admin_permissions = models.JSONField(default=list, blank=True, validators=[validate_admin_permissions])

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()  # use the custom manager so create_user expects email first

    @property
    def is_super_admin(self) -> bool:
        return self.role == UserRole.SUPER_ADMIN

    @property
    def is_admin(self) -> bool:
        return self.role in UserRole.admin_roles()

    def has_admin_permission(self, permission: str) -> bool:
        if self.is_super_admin:
            return True
        return self.is_admin and permission in (self.admin_permissions or [])

    def __str__(self):
        return f"{self.email} ({self.role})"
