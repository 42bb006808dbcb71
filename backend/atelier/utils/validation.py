from __future__ import annotations
"""Reusable validation helpers for request payloads and engine inputs.

Raise ValidationError (400) so the service and the client report the same error.
"""
from typing import Any, Iterable, Optional
from atelier.errors import ValidationError


def validate_choice(value: Any, allowed: Iterable[Any], field_name: str = 'status') -> Any:
    """Validate that value is inside allowed.

    Returns the value (to enable inline usage) or raises ValidationError.
    """
    if value not in tuple(allowed):
        raise ValidationError(f"{field_name} invalid")
    return value


def require_text(value: Optional[str], field_name: str) -> str:
    """Return the stripped value or raise if it is missing or blank."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} required")
    return value.strip()


def coerce_quantity(value: Any, field_name: str = 'quantity') -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer")
    try:
        qty = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
    if qty != value and not (isinstance(value, str) and value.strip().lstrip('-').isdigit()):
        raise ValidationError(f"{field_name} must be an integer")
    return qty

__all__ = ['validate_choice', 'require_text', 'coerce_quantity']
