from __future__ import annotations

import math
from typing import Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_number(value, field_name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if math.isnan(number) or math.isinf(number):
        raise ValidationError(f"{field_name} must be a finite number")
    return number


def require_non_negative(value, field_name: str) -> float:
    number = require_number(value, field_name)
    if number < 0:
        raise ValidationError(f"{field_name} cannot be negative")
    return number


def clamp_non_negative(value) -> float:
    """Money adjustments entered by users: blanks and negatives become 0."""
    if value is None or value == "":
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number) or number < 0:
        return 0.0
    return number


def optional_rate(value, field_name: str) -> Optional[float]:
    if value is None or value == "":
        return None
    return require_non_negative(value, field_name)


_TRUE_FLAGS = {"true", "1"}
_FALSE_FLAGS = {"false", "0", ""}


def parse_flag(value, field_name: str) -> bool:
    """Strict boolean from JSON: real booleans, 0/1, or "true"/"false"/"1"/"0"."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_FLAGS:
            return True
        if text in _FALSE_FLAGS:
            return False
    raise ValidationError(f"{field_name} must be true or false")


def require_at_most(value: float, limit: float, field_name: str) -> float:
    if value > limit:
        raise ValidationError(f"{field_name} cannot exceed {limit:g}")
    return value
