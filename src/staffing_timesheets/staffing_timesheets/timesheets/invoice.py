from __future__ import annotations

from typing import Callable, Optional

from ..core.constants import INVOICE_NUMBER_WIDTH
from ..core.exceptions import ValidationError


def format_invoice_number(value: int) -> str:
    if value <= 0 or value >= 10**INVOICE_NUMBER_WIDTH:
        raise ValidationError(f"Invoice sequence exhausted or invalid: {value}")
    return str(value).zfill(INVOICE_NUMBER_WIDTH)


def next_invoice_number(current_max: Optional[str], *, exists: Callable[[str], bool]) -> str:
    """Next zero-padded number after ``current_max`` (``000001`` when none).

    ``exists`` guards against a number taken since the max was read; one more
    increment is tried, matching how numbers are issued by the back office.
    """

    try:
        current = int(current_max) if current_max else 0
    except ValueError:
        raise ValidationError(f"Stored invoice number is not numeric: {current_max!r}")

    candidate = format_invoice_number(current + 1)
    if exists(candidate):
        candidate = format_invoice_number(current + 2)
    return candidate
