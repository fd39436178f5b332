"""Validation rules shared by the entity model and the services.

All rejections raise ValidationError, a ValueError subclass, so callers that
show ``str(e)`` to the user keep working unchanged.
"""
from datetime import date
from decimal import Decimal, InvalidOperation

from utils.date_helpers import parse_date, parse_month


class ValidationError(ValueError):
    """User input was rejected. ``field`` names the offending input."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field


class DuplicateBudgetError(ValidationError):
    def __init__(self, category_name: str, month: str):
        super().__init__(
            f"A budget for '{category_name}' already exists for {month}.",
            field="category",
        )
        self.category_name = category_name
        self.month = month


def to_amount(value, field: str = "amount") -> Decimal:
    """Coerce user input to a positive Decimal."""
    if isinstance(value, Decimal):
        amount = value
    else:
        if isinstance(value, str):
            value = value.strip().replace(",", "")
        try:
            amount = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError):
            raise ValidationError("Invalid amount.", field=field)
    if not amount.is_finite():
        raise ValidationError("Invalid amount.", field=field)
    if amount <= 0:
        raise ValidationError("Amount must be positive.", field=field)
    return amount


def require_text(value: str | None, label: str, field: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{label} cannot be empty.", field=field)
    return text


def to_date(value) -> date:
    if isinstance(value, date):
        return value
    d = parse_date(value) if isinstance(value, str) else None
    if d is None:
        raise ValidationError("Invalid date format. Use YYYY-MM-DD.", field="date")
    return d


def require_month(month: str | None) -> str:
    if not month or parse_month(month) is None:
        raise ValidationError(f"Invalid month: {month!r}. Use YYYY-MM.", field="month")
    return month
