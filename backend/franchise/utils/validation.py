from __future__ import annotations
"""Input validation helpers shared by services and routes.

Numeric inputs arrive from JSON, so booleans, fractional floats and numeric
strings all have to be considered; anything that is not a whole number between
one and the field's maximum is rejected before any persistence happens.
"""
from typing import Any, Iterable, Optional, Type
from flask import abort

from franchise.config.limits import MAX_AMOUNT
from franchise.errors import DomainError, InvalidAmount


def positive_int(value: Any, error_cls: Type[DomainError] = InvalidAmount, field_name: str = 'amount',
                 maximum: int = MAX_AMOUNT) -> int:
    if isinstance(value, bool) or value is None:
        raise error_cls(f'{field_name} must be a positive integer')
    if isinstance(value, float):
        if not value.is_integer():
            raise error_cls(f'{field_name} must be a positive integer')
        value = int(value)
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise error_cls(f'{field_name} must be a positive integer')
    if number <= 0:
        raise error_cls(f'{field_name} must be a positive integer')
    if number > maximum:
        raise error_cls(f'{field_name} must not exceed {maximum}')
    return number


def clip(value: Any, length: int) -> Optional[str]:
    """Stripped text cut to the column length; blank becomes None."""
    if value is None:
        return None
    text = str(value).strip()
    return text[:length] or None


def validate_status(new_status: str, allowed: Iterable[str], field_name: str = 'status') -> str:
    """Validate that new_status is inside allowed.

    Returns the status (to enable inline usage) or aborts with 400.
    """
    if new_status not in allowed:
        abort(400, description=f"{field_name} invalid")
    return new_status

__all__ = ['positive_int', 'clip', 'validate_status']
