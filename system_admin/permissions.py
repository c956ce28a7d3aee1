from rest_framework.permissions import BasePermission

from accounts.enums import AdminPermission


class HasAdminPermission(BasePermission):
    """
    Read-side counterpart of the admin gateway: the caller must be an active
    admin holding ``required_permission`` (SUPER_ADMIN holds them all).
    """
    required_permission: str = ""

    def has_permission(self, request, view):
        u = getattr(request, "user", None)
        if not u or not getattr(u, "is_authenticated", False):
            return False
        return bool(u.is_active and u.has_admin_permission(self.required_permission))


class CanManageUsers(HasAdminPermission):          required_permission = AdminPermission.MANAGE_USERS
class CanApproveRegistrations(HasAdminPermission): required_permission = AdminPermission.APPROVE_REGISTRATIONS
class CanViewAnalytics(HasAdminPermission):        required_permission = AdminPermission.VIEW_ANALYTICS
class CanViewAuditLogs(HasAdminPermission):        required_permission = AdminPermission.AUDIT_LOGS
