from rest_framework import permissions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def me(request):
    """
    Return the identity the admin gateway evaluates for the current token:
    role, admin permissions and account state.
    """
    user = request.user
    profile = getattr(user, "provider_profile", None)

    data = {
        "id": user.id,
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "role": user.role,
        "is_active": user.is_active,
        "admin_permissions": list(user.admin_permissions or []),
        "provider": None,
    }

    if profile is not None:
        data["provider"] = {
            "id": profile.id,
            "provider_type": profile.provider_type,
            "is_approved": profile.is_approved,
            "is_verified": profile.is_verified,
        }

    return Response(data)
