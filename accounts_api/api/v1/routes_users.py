# File: accounts_api/api/v1/routes_users.py

from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile

from accounts_api.api.deps import (
    get_credential_store,
    get_current_user,
    get_profile_photo_service,
)
from accounts_api.core.exceptions import NotFoundError
from accounts_api.models.user import User
from accounts_api.schemas.common import ApiResponse
from accounts_api.schemas.user import UserRead
from accounts_api.services.credential_store import CredentialStore
from accounts_api.services.profile_photo import PHOTO_FIELD, ProfilePhotoService

router = APIRouter()


@router.post("/profile-photo", summary="Upload a new profile photo")
def upload_profile_photo(
    profile_photo: Optional[UploadFile] = File(default=None, alias=PHOTO_FIELD),
    user: User = Depends(get_current_user),
    service: ProfilePhotoService = Depends(get_profile_photo_service),
):
    """
    Store the photo on Cloudinary and remember its URL on the account.

    The caller is identified by the access token, not by any plain cookie.
    """
    fileobj = profile_photo.file if profile_photo is not None else None
    filename = profile_photo.filename if profile_photo is not None else None

    url = service.update_photo(user, fileobj, filename)
    return ApiResponse.ok({"photo": url}, "Profile photo updated successfully")


@router.get("/{user_name}", summary="Public profile by user name")
def get_profile(
    user_name: str,
    store: CredentialStore = Depends(get_credential_store),
):
    user = store.find_by_user_name(user_name)
    if user is None:
        raise NotFoundError("User Not Found!")

    return ApiResponse.ok(
        UserRead.model_validate(user).model_dump(by_alias=True, mode="json"),
        "Successfully Fetched the User profile",
    )
