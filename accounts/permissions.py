from rest_framework.permissions import BasePermission
from .enums import UserRole

class IsRole(BasePermission):
    required_roles: tuple[str,...] = ()
    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.role in self.required_roles)

class IsAdmin(IsRole):    required_roles = (UserRole.SUPER_ADMIN, UserRole.ADMIN, UserRole.MODERATOR)
class IsProvider(IsRole): required_roles = (UserRole.DOCTOR, UserRole.LAB)
