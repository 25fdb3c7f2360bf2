"""DRF permission backed by the role-based authorization gate."""

from rest_framework.permissions import BasePermission
from rest_framework.request import Request
from rest_framework.views import APIView

from scheduling.domain.authorization import is_allowed
from scheduling.handlers.authentication import identity_of


class AuthorizationGatePermission(BasePermission):
    """Consult the authorization gate before the view parses any input.

    Views declare ``gate_actions``, mapping HTTP methods to gate actions;
    methods without an entry are public.
    """

    message = "You are not allowed to perform this action"

    def has_permission(self, request: Request, view: APIView) -> bool:
        action = getattr(view, "gate_actions", {}).get(request.method)
        if action is None:
            return True
        return is_allowed(identity_of(request), action)
