"""Identity from the upstream gateway.

Credentials are verified before requests reach this service; the gateway
forwards the caller as ``X-User-Id`` and ``X-User-Role`` headers.
"""

from rest_framework import exceptions
from rest_framework.authentication import BaseAuthentication
from rest_framework.request import Request

from scheduling.domain import Identity, Role, UserId


class GatewayUser:
    """Request user wrapping a verified Identity."""

    is_authenticated = True
    is_anonymous = False

    def __init__(self, identity: Identity) -> None:
        self.identity = identity

    @property
    def pk(self) -> str:
        return str(self.identity.user_id.value)

    def __str__(self) -> str:
        return f"{self.identity.role.value}:{self.pk}"


class GatewayIdentityAuthentication(BaseAuthentication):
    user_id_header = "HTTP_X_USER_ID"
    role_header = "HTTP_X_USER_ROLE"

    def authenticate(self, request: Request) -> tuple[GatewayUser, None] | None:
        user_id = request.META.get(self.user_id_header)
        role = request.META.get(self.role_header)
        if not user_id and not role:
            return None
        if not user_id or not role:
            raise exceptions.AuthenticationFailed("Incomplete identity headers")

        try:
            identity = Identity(
                user_id=UserId.from_string(user_id), role=Role(role.lower())
            )
        except ValueError:
            raise exceptions.AuthenticationFailed("Invalid identity headers")
        return GatewayUser(identity), None

    def authenticate_header(self, request: Request) -> str:
        return "Gateway"


def identity_of(request: Request) -> Identity | None:
    return getattr(request.user, "identity", None)
