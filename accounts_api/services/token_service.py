# File: accounts_api/services/token_service.py

"""
Access/refresh token pairs.

Access tokens are self-contained JWTs checked by signature and expiry only.
Refresh tokens are JWTs too, but one is only honoured while it is the value
persisted on the user row; the next login overwrites it.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from fastapi import status
from jose import JWTError
from sqlalchemy.exc import SQLAlchemyError

from accounts_api.core.config import Settings
from accounts_api.core.exceptions import AuthorizationError, DependencyError
from accounts_api.core.security import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    create_token,
    decode_token,
)
from accounts_api.models.user import User
from accounts_api.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class TokenService:
    def __init__(self, store: CredentialStore, settings: Settings):
        self.store = store
        self.settings = settings

    def _encode(self, claims: dict[str, Any], expires_delta: timedelta) -> str:
        return create_token(
            claims,
            expires_delta,
            secret_key=self.settings.secret_key,
            algorithm=self.settings.algorithm,
        )

    def _decode(self, token: str, expected_type: str) -> dict[str, Any]:
        if not token:
            raise AuthorizationError("Unauthorized request")
        try:
            claims = decode_token(
                token,
                secret_key=self.settings.secret_key,
                algorithm=self.settings.algorithm,
            )
        except JWTError:
            raise AuthorizationError(f"Invalid or expired {expected_type} token")
        if claims.get("type") != expected_type or not claims.get("sub"):
            raise AuthorizationError(f"Invalid or expired {expected_type} token")
        return claims

    # ---------- ISSUANCE ----------

    def create_access_token(self, user: User) -> str:
        return self._encode(
            {
                "sub": str(user.id),
                "email": user.email,
                "user_name": user.user_name,
                "type": ACCESS_TOKEN_TYPE,
            },
            timedelta(minutes=self.settings.access_token_expire_minutes),
        )

    def create_refresh_token(self, user: User) -> str:
        return self._encode(
            {
                "sub": str(user.id),
                "type": REFRESH_TOKEN_TYPE,
                # two logins within the same second must still differ
                "jti": secrets.token_urlsafe(16),
            },
            timedelta(days=self.settings.refresh_token_expire_days),
        )

    def issue_token_pair(self, user_id: int) -> TokenPair:
        """
        Mint a fresh pair and persist the refresh token on the user row.

        Nothing is returned unless the refresh token was stored.

        Raises:
            DependencyError: user vanished or the store write failed (500)
        """
        try:
            user = self.store.find_by_id(user_id)
            if user is None:
                raise LookupError(f"user id={user_id} not found")
            access_token = self.create_access_token(user)
            refresh_token = self.create_refresh_token(user)
            self.store.set_refresh_token(user, refresh_token)
        except (LookupError, SQLAlchemyError):
            logger.exception("Token issuance failed for user id=%s", user_id)
            raise DependencyError(
                "Something went wrong while generating tokens",
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    # ---------- VALIDATION ----------

    def validate_access_token(self, token: str) -> dict[str, Any]:
        """Stateless: signature, expiry and token type. No store lookup."""
        return self._decode(token, ACCESS_TOKEN_TYPE)

    def validate_refresh_token(self, token: str) -> User:
        claims = self._decode(token, REFRESH_TOKEN_TYPE)
        user = self.store.find_by_id(int(claims["sub"]))
        if user is None or user.refresh_token != token:
            raise AuthorizationError("Refresh token is expired or used")
        return user

    def refresh_access_token(self, refresh_token: str) -> str:
        """New access token for a still-current refresh token; the refresh token is kept."""
        user = self.validate_refresh_token(refresh_token)
        return self.create_access_token(user)
