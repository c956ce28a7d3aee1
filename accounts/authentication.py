from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import AuthenticationFailed

from core.exceptions import Forbidden


class HeaderJWTAuthentication(JWTAuthentication):
    """
    JWT auth that reads the Authorization header via request.headers and
    reports suspended accounts as 403 (account state) instead of 401.
    """

    def get_header(self, request):
        # DRF Request implements .headers which is case-insensitive
        auth = request.headers.get("Authorization")

        if isinstance(auth, str):
            auth = auth.encode("iso-8859-1")

        return auth

    def get_user(self, validated_token):
        try:
            return super().get_user(validated_token)
        except AuthenticationFailed as exc:
            if exc.get_codes() == "user_inactive":
                raise Forbidden("Account is suspended.") from exc
            raise
