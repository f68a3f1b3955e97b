"""Reusable validation helpers for domain records.

Raise ``ValidationError`` (400) with a short description naming the field.
"""
from __future__ import annotations
from typing import Any, Iterable, Optional
from fieldops.errors import ValidationError


def validate_status(new_status: str, allowed: Iterable[str], field_name: str = 'status') -> str:
    """Validate that new_status is inside allowed.

    Returns the status (to enable inline usage) or raises.
    """
    if new_status not in allowed:
        raise ValidationError(description=f"{field_name} invalid")
    return new_status


def require_text(data: dict, field_name: str) -> str:
    value = data.get(field_name)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(description=f'{field_name} required')
    return value.strip()


def coerce_int(value: Any, field_name: str, minimum: Optional[int] = None) -> int:
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValidationError(description=f'{field_name} must be int')
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(description=f'{field_name} must be int')
    if minimum is not None and number < minimum:
        raise ValidationError(description=f'{field_name} must be >= {minimum}')
    return number


def coerce_float(value: Any, field_name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(description=f'{field_name} must be a number')


def id_list(value: Any, field_name: str) -> list:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise ValidationError(description=f'{field_name} must be a list of ids')
    # keep first occurrence order
    return list(dict.fromkeys(value))

__all__ = ['validate_status', 'require_text', 'coerce_int', 'coerce_float', 'id_list']
