from dataclasses import dataclass
from typing import Optional

from django.conf import settings
from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed

from staff.models import Employee


@dataclass(frozen=True)
class TerminalIdentity:
    """Identity of the calling terminal, resolved once per request."""
    api_key: str
    employee: Optional[Employee] = None


class APIKeyAuthentication(BaseAuthentication):
    """
    API key authentication using the X-API-Key header.

    An optional X-Employee-Id header names the employee operating the
    terminal; it is used as the default waiter, cashier or stock handler.
    """

    def authenticate(self, request):
        api_key = request.META.get('HTTP_X_API_KEY')

        if not api_key:
            return None

        expected_api_key = getattr(settings, 'API_KEY', 'demo')

        if api_key != expected_api_key:
            raise AuthenticationFailed('Invalid API key')

        employee = None
        employee_id = request.META.get('HTTP_X_EMPLOYEE_ID')
        if employee_id:
            try:
                employee = Employee.objects.get(pk=int(employee_id), is_active=True)
            except (ValueError, Employee.DoesNotExist):
                raise AuthenticationFailed('Unknown or inactive employee')

        # No Django user; the identity travels on request.auth
        return (None, TerminalIdentity(api_key=api_key, employee=employee))

    def authenticate_header(self, request):
        return 'X-API-Key'


def acting_employee(request):
    """Employee named by the X-Employee-Id header, if any."""
    return getattr(request.auth, 'employee', None)
