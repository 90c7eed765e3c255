# File: accounts_api/services/auth_service.py

"""
Authentication flows.

  - registration, gated on a verified-email marker
  - login by email + password, minting a token pair
  - access-token refresh from the persisted refresh token
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import status
from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from accounts_api.core.exceptions import (
    AuthorizationError,
    DependencyError,
    NotFoundError,
    ValidationError,
)
from accounts_api.schemas.user import UserCreate, UserRead
from accounts_api.services.credential_store import CredentialStore
from accounts_api.services.notifications import Notifier
from accounts_api.services.registration_gate import RegistrationGate
from accounts_api.services.token_service import TokenPair, TokenService
from accounts_api.services.validation import require_fields

logger = logging.getLogger(__name__)

_email_adapter = TypeAdapter(EmailStr)


@dataclass
class RegistrationResult:
    user: UserRead
    mail_response: dict


@dataclass
class LoginResult:
    user: UserRead
    tokens: TokenPair


class AuthFlowController:
    def __init__(
        self,
        store: CredentialStore,
        tokens: TokenService,
        gate: RegistrationGate,
        notifier: Notifier,
    ):
        self.store = store
        self.tokens = tokens
        self.gate = gate
        self.notifier = notifier

    def register(self, payload: UserCreate, verified_marker: Optional[str]) -> RegistrationResult:
        require_fields(payload.user_name, payload.email, payload.mobile_number, payload.password)

        if not self.gate.can_register(verified_marker, payload.email):
            raise AuthorizationError("Please verify your email with OTP before registering")

        try:
            _email_adapter.validate_python(payload.email.strip())
        except PydanticValidationError:
            raise ValidationError("Invalid email address", status_code=status.HTTP_400_BAD_REQUEST)

        user = self.store.create_user(
            user_name=payload.user_name,
            email=payload.email,
            mobile_number=payload.mobile_number,
            password=payload.password,
        )

        created = self.store.find_by_id(user.id)
        if created is None:
            logger.error("User id=%s missing right after creation", user.id)
            raise DependencyError("Internal Server Error while creating the user")
        sanitized = UserRead.model_validate(created)

        mail_response = self.notifier.send_welcome(created.email, created.user_name)
        return RegistrationResult(user=sanitized, mail_response=mail_response)

    def login(self, email: Optional[str], password: Optional[str]) -> LoginResult:
        require_fields(email, password)

        user = self.store.find_by_email(email.strip())
        if user is None:
            raise NotFoundError(
                "User not found, Please Signup first",
                status_code=status.HTTP_400_BAD_REQUEST,
            )

        if not self.store.verify_password(user, password):
            logger.info("Failed login for user id=%s: bad password", user.id)
            raise AuthorizationError("Password is not Correct")

        tokens = self.tokens.issue_token_pair(user.id)
        return LoginResult(user=UserRead.model_validate(user), tokens=tokens)

    def refresh(self, refresh_token: Optional[str]) -> str:
        if not refresh_token:
            raise AuthorizationError("Unauthorized request")
        return self.tokens.refresh_access_token(refresh_token)
