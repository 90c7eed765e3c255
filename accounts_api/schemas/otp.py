# File: accounts_api/schemas/otp.py

from typing import Optional

from accounts_api.schemas.user import CamelModel


class OtpSendRequest(CamelModel):
    email: Optional[str] = None


class OtpVerifyRequest(CamelModel):
    email: Optional[str] = None
    otp: Optional[str] = None
