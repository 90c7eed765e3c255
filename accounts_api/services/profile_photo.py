# File: accounts_api/services/profile_photo.py

import logging
import secrets
import shutil
import time
from pathlib import Path
from typing import BinaryIO, Optional

from fastapi import status

from accounts_api.core.exceptions import DependencyError, ValidationError
from accounts_api.models.user import User
from accounts_api.services.credential_store import CredentialStore
from accounts_api.services.photo_storage import PhotoStorage, PhotoStorageError

logger = logging.getLogger(__name__)

PHOTO_FIELD = "profilePhoto"


def scratch_filename(field_name: str, original_name: Optional[str]) -> str:
    """``<field>-<epoch ms>-<random>`` plus the original extension, if any."""
    suffix = Path(original_name or "").suffix.lower()
    unique = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}"
    return f"{field_name}-{unique}{suffix}"


class ProfilePhotoService:
    def __init__(self, store: CredentialStore, storage: PhotoStorage, upload_dir: str | Path):
        self.store = store
        self.storage = storage
        self.upload_dir = Path(upload_dir)

    def scratch_path(self, original_name: Optional[str]) -> Path:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        return self.upload_dir / scratch_filename(PHOTO_FIELD, original_name)

    def save_to_scratch(self, fileobj: BinaryIO, path: Path) -> Path:
        with open(path, "wb") as out:
            shutil.copyfileobj(fileobj, out)
        return path

    def update_photo(self, user: User, fileobj: Optional[BinaryIO], original_name: Optional[str]) -> str:
        """
        Upload a new profile photo for ``user`` and return its URL.

        The scratch copy is removed whether or not the copy or the upload worked.

        Raises:
            ValidationError: no file in the request (400)
            DependencyError: storage rejected the upload (502)
        """
        if fileobj is None or not original_name:
            raise ValidationError("Upload the Profile Photo", status_code=status.HTTP_400_BAD_REQUEST)

        path = self.scratch_path(original_name)
        try:
            self.save_to_scratch(fileobj, path)
            url = self.storage.upload(path)
        except PhotoStorageError as exc:
            logger.error("Profile photo upload failed for user id=%s: %s", user.id, exc)
            raise DependencyError("Profile photo not uploaded")
        finally:
            path.unlink(missing_ok=True)
            logger.debug("Removed scratch file %s", path)

        self.store.set_profile_photo(user, url)
        return url
