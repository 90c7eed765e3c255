# File: accounts_api/core/exceptions.py

"""
Domain errors for the accounts API.

Every error carries the HTTP status it should surface as, so services can
raise at the point of detection and the exception handler in ``main.py``
only has to serialize.

    AccountsError (base)
    ├── ValidationError      400 (401 for missing credentials fields)
    ├── AuthorizationError   401
    ├── NotFoundError        404
    ├── ConflictError        409
    └── DependencyError      502 (500 for token persistence)
"""

from typing import Optional

from fastapi import status


class AccountsError(Exception):
    """
    Base exception for all accounts errors.

    Attributes:
        message: Human-readable error description, safe to show callers
        details: Additional context for the response body
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        details: Optional[dict] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            "statusCode": self.status_code,
            "message": self.message,
            "errors": self.details,
            "success": False,
        }


class ValidationError(AccountsError):
    """Missing, blank or mismatched input fields."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthorizationError(AccountsError):
    """Failed credential check, unverified email or missing session."""

    status_code = status.HTTP_401_UNAUTHORIZED


class NotFoundError(AccountsError):
    """No account matches the lookup."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AccountsError):
    """Email or user name already taken."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, field: str):
        super().__init__(
            message=f"An account with this {field} already exists",
            details={"field": field},
        )


class DependencyError(AccountsError):
    """
    A collaborator (store, storage, token persistence) failed.

    The message stays opaque; the cause is logged server-side and
    never put into ``details``.
    """

    status_code = status.HTTP_502_BAD_GATEWAY
