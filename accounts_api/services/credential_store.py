# File: accounts_api/services/credential_store.py

"""
Credential store.

Wraps the ``users`` table: lookups, creation with hashed password, and the
single-column updates the auth flows need. Every write is one UPDATE in one
transaction so a concurrent reader never sees a half-written record.
"""

import logging
from typing import Optional

from fastapi import status
from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from accounts_api.core.exceptions import ConflictError, ValidationError
from accounts_api.core.security import hash_password, verify_password
from accounts_api.models.user import User
from accounts_api.services.validation import require_fields

logger = logging.getLogger(__name__)


class CredentialStore:
    def __init__(self, db: Session, bcrypt_rounds: Optional[int] = None):
        self.db = db
        self.bcrypt_rounds = bcrypt_rounds

    # ---------- LOOKUPS ----------

    def find_by_id(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def find_by_email(self, email: str) -> Optional[User]:
        return self.db.scalar(select(User).where(User.email == email))

    def find_by_user_name(self, user_name: str) -> Optional[User]:
        """Case-insensitive exact match; ``user_name`` is never treated as a pattern."""
        return self.db.scalar(
            select(User).where(func.lower(User.user_name) == user_name.strip().lower())
        )

    # ---------- CREATION ----------

    def create_user(
        self,
        *,
        user_name: str,
        email: str,
        mobile_number: str,
        password: str,
    ) -> User:
        require_fields(
            user_name,
            email,
            mobile_number,
            password,
            status_code=status.HTTP_400_BAD_REQUEST,
        )
        user_name = user_name.strip()
        email = email.strip()

        existing = self.db.scalar(
            select(User).where(
                or_(
                    User.email == email,
                    func.lower(User.user_name) == user_name.lower(),
                )
            )
        )
        if existing is not None:
            raise ConflictError("email" if existing.email == email else "user name")

        user = User(
            user_name=user_name,
            email=email,
            mobile_number=mobile_number.strip(),
            password_hash=hash_password(password, rounds=self.bcrypt_rounds),
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # lost a race against another registration with the same identity
            self.db.rollback()
            raise ConflictError("email or user name")
        self.db.refresh(user)

        logger.info("Created user id=%s user_name=%s", user.id, user.user_name)
        return user

    # ---------- CREDENTIALS ----------

    def verify_password(self, user: User, candidate: str) -> bool:
        return verify_password(candidate, user.password_hash)

    def replace_password(self, user: User, new_password: str) -> None:
        """
        Hash ``new_password`` and swap it in with a single UPDATE.

        The hash is computed before the transaction starts, so the stored
        credential goes straight from the old hash to the new one.
        """
        if not new_password or not new_password.strip():
            raise ValidationError("New password must not be blank")

        new_hash = hash_password(new_password, rounds=self.bcrypt_rounds)
        self._update(user, password_hash=new_hash)
        logger.info("Password replaced for user id=%s", user.id)

    def set_refresh_token(self, user: User, refresh_token: str) -> None:
        self._update(user, refresh_token=refresh_token)

    def set_profile_photo(self, user: User, url: str) -> User:
        self._update(user, profile_photo_url=url)
        return user

    def _update(self, user: User, **values) -> None:
        try:
            self.db.execute(update(User).where(User.id == user.id).values(**values))
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(user)
