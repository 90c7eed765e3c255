# File: accounts_api/api/deps.py

"""
FastAPI dependencies wiring services to a per-request SQLAlchemy session.

Tests swap collaborators with ``app.dependency_overrides``; the mailer
and photo storage are the usual candidates.
"""

from typing import Optional

from fastapi import Cookie, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from accounts_api.core.config import Settings, get_settings
from accounts_api.core.exceptions import AuthorizationError
from accounts_api.db.session import get_db
from accounts_api.models.user import User
from accounts_api.services.auth_service import AuthFlowController
from accounts_api.services.credential_store import CredentialStore
from accounts_api.services.notifications import Mailer, Notifier, SMTPMailer
from accounts_api.services.password_reset import PasswordResetFlow
from accounts_api.services.photo_storage import CloudinaryStorage, PhotoStorage
from accounts_api.services.profile_photo import ProfilePhotoService
from accounts_api.services.registration_gate import RegistrationGate
from accounts_api.services.token_service import TokenService

bearer_scheme = HTTPBearer(auto_error=False)


def get_credential_store(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> CredentialStore:
    return CredentialStore(db, bcrypt_rounds=settings.bcrypt_rounds)


def get_token_service(
    store: CredentialStore = Depends(get_credential_store),
    settings: Settings = Depends(get_settings),
) -> TokenService:
    return TokenService(store, settings)


def get_registration_gate(settings: Settings = Depends(get_settings)) -> RegistrationGate:
    return RegistrationGate(settings)


def get_mailer(settings: Settings = Depends(get_settings)) -> Mailer:
    return SMTPMailer(settings)


def get_notifier(
    mailer: Mailer = Depends(get_mailer),
    settings: Settings = Depends(get_settings),
) -> Notifier:
    return Notifier(mailer, settings)


def get_photo_storage(settings: Settings = Depends(get_settings)) -> PhotoStorage:
    return CloudinaryStorage(settings)


def get_auth_controller(
    store: CredentialStore = Depends(get_credential_store),
    tokens: TokenService = Depends(get_token_service),
    gate: RegistrationGate = Depends(get_registration_gate),
    notifier: Notifier = Depends(get_notifier),
) -> AuthFlowController:
    return AuthFlowController(store, tokens, gate, notifier)


def get_password_reset_flow(
    store: CredentialStore = Depends(get_credential_store),
) -> PasswordResetFlow:
    return PasswordResetFlow(store)


def get_profile_photo_service(
    store: CredentialStore = Depends(get_credential_store),
    storage: PhotoStorage = Depends(get_photo_storage),
    settings: Settings = Depends(get_settings),
) -> ProfilePhotoService:
    return ProfilePhotoService(store, storage, settings.upload_dir)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    access_token: Optional[str] = Cookie(default=None, alias="accessToken"),
    tokens: TokenService = Depends(get_token_service),
) -> User:
    """
    Resolve the caller from a validated access token.

    An ``Authorization: Bearer`` header is tried first, then the
    ``accessToken`` cookie. The plain ``email`` cookie is never used as
    identity.
    """
    candidates = [credentials.credentials if credentials else None, access_token]
    candidates = [token for token in candidates if token]
    if not candidates:
        raise AuthorizationError("Unauthorized")

    error = None
    for token in candidates:
        try:
            claims = tokens.validate_access_token(token)
        except AuthorizationError as exc:
            error = exc
            continue
        user = tokens.store.find_by_id(int(claims["sub"]))
        if user is not None:
            return user
    raise error or AuthorizationError("Unauthorized")
