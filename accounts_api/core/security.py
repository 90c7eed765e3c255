# File: accounts_api/core/security.py

"""
Security helpers for the accounts API.

  - bcrypt password hashing
  - JWT encode/decode (python-jose)
  - itsdangerous signed, timed markers for the email-verification cookies
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import bcrypt
from itsdangerous import BadSignature, URLSafeTimedSerializer
from jose import jwt

from accounts_api.core.config import settings


ALGORITHM = settings.algorithm
SECRET_KEY = settings.secret_key

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

# bcrypt only looks at the first 72 bytes of a password
_BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    if not password:
        raise ValueError("Cannot hash an empty password")
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not plain_password or not hashed_password:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        # stored value is not a bcrypt hash
        return False


def create_token(
    data: dict,
    expires_delta: timedelta,
    *,
    secret_key: str = SECRET_KEY,
    algorithm: str = ALGORITHM,
) -> str:
    """
    Encode ``data`` as a signed JWT that expires after ``expires_delta``.
    """
    now = datetime.now(timezone.utc)
    to_encode: dict[str, Any] = data.copy()
    to_encode.update({"iat": now, "exp": now + expires_delta})
    return jwt.encode(to_encode, secret_key, algorithm=algorithm)


def decode_token(
    token: str,
    *,
    secret_key: str = SECRET_KEY,
    algorithm: str = ALGORITHM,
) -> dict[str, Any]:
    """
    Decode and verify a JWT.

    Raises:
        JWTError: bad signature, malformed token or expired
    """
    return jwt.decode(token, secret_key, algorithms=[algorithm])


class MarkerSigner:
    """
    Signs small JSON payloads for cookies that must survive a round trip
    through the browser without being forgeable.
    """

    def __init__(self, secret_key: str, salt: str):
        self._serializer = URLSafeTimedSerializer(secret_key=secret_key, salt=salt)

    def sign(self, payload: dict) -> str:
        return self._serializer.dumps(payload)

    def load(self, token: Optional[str], max_age: int) -> Optional[dict]:
        """Return the payload, or None if missing, tampered with or expired."""
        if not token:
            return None
        try:
            data = self._serializer.loads(token, max_age=max_age)
        except BadSignature:
            return None
        return data if isinstance(data, dict) else None
