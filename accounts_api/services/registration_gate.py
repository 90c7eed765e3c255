# File: accounts_api/services/registration_gate.py

"""
Registration gate.

An account may only be created for an email that just passed an OTP
challenge. Nothing is kept server-side: the pending code and the
"verified" result both travel as signed, timed cookies.

    OTP cookie            {"email", "code_digest"}  (salt: otp)
    isEmailVerified       {"email", "verified"}     (salt: email-verified)

The code itself is never put in a cookie, only a keyed digest of it.
"""

import hashlib
import hmac
import logging
import secrets
from dataclasses import dataclass
from typing import Optional

from accounts_api.core.config import Settings
from accounts_api.core.exceptions import AuthorizationError
from accounts_api.core.security import MarkerSigner
from accounts_api.services.validation import require_fields

logger = logging.getLogger(__name__)

OTP_COOKIE = "OTP"
VERIFIED_COOKIE = "isEmailVerified"
OTP_LENGTH = 6


@dataclass(frozen=True)
class OtpChallenge:
    code: str
    marker: str


class RegistrationGate:
    def __init__(self, settings: Settings):
        self.settings = settings
        self._otp_signer = MarkerSigner(settings.secret_key, salt="urban-eats.otp")
        self._verified_signer = MarkerSigner(settings.secret_key, salt="urban-eats.email-verified")

    def _digest(self, email: str, code: str) -> str:
        msg = f"{email}:{code}".encode("utf-8")
        return hmac.new(self.settings.secret_key.encode("utf-8"), msg, hashlib.sha256).hexdigest()

    def issue_otp(self, email: str) -> OtpChallenge:
        require_fields(email, message="Email is required")
        email = email.strip()
        code = "".join(secrets.choice("0123456789") for _ in range(OTP_LENGTH))
        marker = self._otp_signer.sign({"email": email, "code_digest": self._digest(email, code)})
        return OtpChallenge(code=code, marker=marker)

    def verify_otp(self, otp_marker: Optional[str], email: str, code: str) -> str:
        """
        Check ``code`` against the pending challenge and return a verified marker.

        Raises:
            ValidationError: email or code blank (401)
            AuthorizationError: no pending challenge, expired, other email, wrong code
        """
        require_fields(email, code)
        email = email.strip()

        pending = self._otp_signer.load(otp_marker, max_age=self.settings.otp_max_age_seconds)
        if pending is None:
            raise AuthorizationError("OTP expired or not requested, please request a new one")
        if pending.get("email") != email:
            raise AuthorizationError("OTP was issued for a different email")

        expected = pending.get("code_digest") or ""
        if not hmac.compare_digest(expected, self._digest(email, code.strip())):
            logger.info("OTP mismatch for a pending verification")
            raise AuthorizationError("Invalid OTP")

        return self._verified_signer.sign({"email": email, "verified": True})

    def can_register(self, verified_marker: Optional[str], email: Optional[str]) -> bool:
        if not email:
            return False
        data = self._verified_signer.load(
            verified_marker, max_age=self.settings.verified_max_age_seconds
        )
        if data is None or data.get("verified") is not True:
            return False
        return data.get("email") == email.strip()
