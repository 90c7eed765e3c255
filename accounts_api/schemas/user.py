# File: accounts_api/schemas/user.py

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts and emits the camelCase field names the web client uses."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------- REQUESTS ----------
# Fields default to None so blank/missing input reaches the service layer,
# which answers with the 401 "All fields are required" the client expects.

class UserCreate(CamelModel):
    user_name: Optional[str] = None
    email: Optional[str] = None
    mobile_number: Optional[str] = None
    password: Optional[str] = None


class UserLogin(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class ForgotPasswordRequest(CamelModel):
    email: Optional[str] = None
    new_password: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("newPassword", "newPassWord", "new_password"),
    )
    confirm_password: Optional[str] = None


class RefreshTokenRequest(CamelModel):
    refresh_token: Optional[str] = None


# ---------- RESPONSES ----------

class UserRead(CamelModel):
    """Sanitized view of a user: no password hash, no refresh token."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: int
    user_name: str
    email: str
    mobile_number: str
    profile_photo_url: Optional[str] = None
    created_at: Optional[datetime] = None

