# File: accounts_api/services/password_reset.py

"""
Forgot-password flow.

The caller proves nothing beyond knowing the account email: there is no
current-password check and no emailed reset token. See DESIGN.md.
"""

import logging
from typing import Optional

from fastapi import status

from accounts_api.core.exceptions import NotFoundError, ValidationError
from accounts_api.services.credential_store import CredentialStore
from accounts_api.services.validation import require_fields

logger = logging.getLogger(__name__)


class PasswordResetFlow:
    def __init__(self, store: CredentialStore):
        self.store = store

    def reset(
        self,
        email: Optional[str],
        new_password: Optional[str],
        confirm_password: Optional[str],
    ) -> None:
        require_fields(email, new_password, confirm_password, message="All Fields Required")

        if new_password != confirm_password:
            raise ValidationError(
                "New Password and Confirm Password must be same",
                status_code=status.HTTP_401_UNAUTHORIZED,
            )

        user = self.store.find_by_email(email.strip())
        if user is None:
            raise NotFoundError("User not found. Please Sign up first")

        self.store.replace_password(user, new_password)
