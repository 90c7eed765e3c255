# File: accounts_api/services/photo_storage.py

"""
Profile photo storage on Cloudinary, through its REST upload endpoint.

Only the signed-upload subset is implemented: the parameters are signed
with the API secret as described in Cloudinary's "signed uploads" docs.
"""

import hashlib
import logging
import time
from pathlib import Path
from typing import Protocol

import requests

from accounts_api.core.config import Settings

logger = logging.getLogger(__name__)

CLOUDINARY_UPLOAD_URL = "https://api.cloudinary.com/v1_1/{cloud_name}/image/upload"


class PhotoStorageError(Exception):
    """The storage backend did not accept the upload."""


class PhotoStorage(Protocol):
    def upload(self, file_path: Path) -> str:
        """Upload ``file_path`` and return its public https URL."""
        ...


def sign_params(params: dict, api_secret: str) -> str:
    to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params) if params[k] not in (None, ""))
    return hashlib.sha1(f"{to_sign}{api_secret}".encode("utf-8")).hexdigest()


class CloudinaryStorage:
    def __init__(self, settings: Settings, session: requests.Session | None = None):
        self.settings = settings
        self.session = session or requests.Session()

    @property
    def configured(self) -> bool:
        s = self.settings
        return bool(s.cloudinary_cloud_name and s.cloudinary_api_key and s.cloudinary_api_secret)

    def upload(self, file_path: Path) -> str:
        if not self.configured:
            raise PhotoStorageError("Cloudinary credentials are not configured")

        params = {
            "folder": self.settings.cloudinary_folder,
            "timestamp": int(time.time()),
        }
        params["signature"] = sign_params(params, self.settings.cloudinary_api_secret)
        params["api_key"] = self.settings.cloudinary_api_key

        url = CLOUDINARY_UPLOAD_URL.format(cloud_name=self.settings.cloudinary_cloud_name)
        try:
            with open(file_path, "rb") as fh:
                resp = self.session.post(
                    url,
                    data=params,
                    files={"file": (file_path.name, fh)},
                    timeout=self.settings.upload_timeout,
                )
            resp.raise_for_status()
            secure_url = resp.json().get("secure_url")
        except (requests.RequestException, ValueError) as exc:
            raise PhotoStorageError(str(exc)) from exc

        if not secure_url:
            raise PhotoStorageError("Cloudinary response did not include a secure_url")

        logger.info("Uploaded %s to Cloudinary", file_path.name)
        return secure_url
