from datetime import datetime

from .exceptions import ValidationError


def parse_date(value, name):
    """Parse a YYYY-MM-DD query parameter."""
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError:
        raise ValidationError(f"{name} must be a date in YYYY-MM-DD format")


def parse_int(value, name, default=None):
    if value in (None, ''):
        return default
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"{name} must be an integer")
