from pos.exceptions import NotFoundError

from .models import Employee


def resolve_employee(employee_id, default=None):
    """Look up an employee referenced by ID, falling back to ``default`` when none is given."""
    if employee_id is None:
        return default
    try:
        return Employee.objects.get(pk=employee_id)
    except Employee.DoesNotExist:
        raise NotFoundError(f"Employee with ID {employee_id} not found")
