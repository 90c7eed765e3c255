# File: accounts_api/services/validation.py

from typing import Optional

from fastapi import status

from accounts_api.core.exceptions import ValidationError

ALL_FIELDS_REQUIRED = "All fields are required"


def is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def require_fields(
    *values: Optional[str],
    message: str = ALL_FIELDS_REQUIRED,
    status_code: int = status.HTTP_401_UNAUTHORIZED,
) -> None:
    """Raise if any value is missing or whitespace-only."""
    if any(is_blank(v) for v in values):
        raise ValidationError(message, status_code=status_code)
