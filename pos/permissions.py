from rest_framework.permissions import BasePermission

from .authentication import TerminalIdentity


class APIKeyPermission(BasePermission):
    """
    Allow only requests that presented a valid API key
    """

    def has_permission(self, request, view):
        # APIKeyAuthentication returns (None, TerminalIdentity) on success
        return isinstance(getattr(request, 'auth', None), TerminalIdentity)
