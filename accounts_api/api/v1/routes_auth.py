# File: accounts_api/api/v1/routes_auth.py

"""
Auth API routes: email OTP, registration, login, token refresh and
forgot-password.
"""

from typing import Optional

from fastapi import APIRouter, Cookie, Depends, Response

from accounts_api.api.deps import (
    get_auth_controller,
    get_notifier,
    get_password_reset_flow,
    get_registration_gate,
)
from accounts_api.core.config import Settings, get_settings
from accounts_api.schemas.common import ApiResponse
from accounts_api.schemas.otp import OtpSendRequest, OtpVerifyRequest
from accounts_api.schemas.user import (
    ForgotPasswordRequest,
    RefreshTokenRequest,
    UserCreate,
    UserLogin,
)
from accounts_api.services.auth_service import AuthFlowController
from accounts_api.services.notifications import Notifier
from accounts_api.services.password_reset import PasswordResetFlow
from accounts_api.services.registration_gate import (
    OTP_COOKIE,
    VERIFIED_COOKIE,
    RegistrationGate,
)

router = APIRouter()

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"
EMAIL_COOKIE = "email"


def set_session_cookie(
    response: Response,
    key: str,
    value: str,
    settings: Settings,
    max_age: Optional[int] = None,
) -> None:
    response.set_cookie(
        key,
        value,
        max_age=max_age,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
    )


def clear_session_cookie(response: Response, key: str, settings: Settings) -> None:
    response.delete_cookie(
        key,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
    )


# ---------- EMAIL VERIFICATION ----------

@router.post("/otp/send", summary="Email a one-time verification code")
def send_otp(
    payload: OtpSendRequest,
    response: Response,
    gate: RegistrationGate = Depends(get_registration_gate),
    notifier: Notifier = Depends(get_notifier),
    settings: Settings = Depends(get_settings),
):
    challenge = gate.issue_otp(payload.email)
    mail_response = notifier.send_otp(payload.email.strip(), challenge.code)

    set_session_cookie(response, OTP_COOKIE, challenge.marker, settings, max_age=settings.otp_max_age_seconds)
    clear_session_cookie(response, VERIFIED_COOKIE, settings)
    return ApiResponse.ok({"mailResponse": mail_response}, "OTP sent to your email")


@router.post("/otp/verify", summary="Check the emailed code")
def verify_otp(
    payload: OtpVerifyRequest,
    response: Response,
    otp_marker: Optional[str] = Cookie(default=None, alias=OTP_COOKIE),
    gate: RegistrationGate = Depends(get_registration_gate),
    settings: Settings = Depends(get_settings),
):
    verified_marker = gate.verify_otp(otp_marker, payload.email, payload.otp)

    set_session_cookie(
        response,
        VERIFIED_COOKIE,
        verified_marker,
        settings,
        max_age=settings.verified_max_age_seconds,
    )
    clear_session_cookie(response, OTP_COOKIE, settings)
    return ApiResponse.ok({"email": payload.email.strip()}, "Email verified successfully")


# ---------- ACCOUNTS ----------

@router.post("/register", summary="Create an account for a verified email")
def register(
    payload: UserCreate,
    response: Response,
    verified_marker: Optional[str] = Cookie(default=None, alias=VERIFIED_COOKIE),
    controller: AuthFlowController = Depends(get_auth_controller),
    settings: Settings = Depends(get_settings),
):
    result = controller.register(payload, verified_marker)

    # the verification marker is single-use
    clear_session_cookie(response, VERIFIED_COOKIE, settings)
    clear_session_cookie(response, OTP_COOKIE, settings)
    set_session_cookie(response, EMAIL_COOKIE, result.user.email, settings)

    return {
        "status": "success",
        "user": result.user.model_dump(by_alias=True, mode="json"),
        "message": "Successfully created the User",
        "mailResponse": result.mail_response,
    }


@router.post("/login", summary="Log in with email and password")
def login(
    payload: UserLogin,
    response: Response,
    controller: AuthFlowController = Depends(get_auth_controller),
    settings: Settings = Depends(get_settings),
):
    result = controller.login(payload.email, payload.password)
    tokens = result.tokens

    set_session_cookie(response, EMAIL_COOKIE, result.user.email, settings)
    set_session_cookie(response, ACCESS_COOKIE, tokens.access_token, settings)
    set_session_cookie(response, REFRESH_COOKIE, tokens.refresh_token, settings)

    return ApiResponse.ok(
        {
            "user": result.user.model_dump(by_alias=True, mode="json"),
            "accessToken": tokens.access_token,
            "refreshToken": tokens.refresh_token,
        },
        "Successfully logged in",
    )


@router.post("/refresh-token", summary="Mint a new access token")
def refresh_token(
    response: Response,
    payload: Optional[RefreshTokenRequest] = None,
    cookie_token: Optional[str] = Cookie(default=None, alias=REFRESH_COOKIE),
    controller: AuthFlowController = Depends(get_auth_controller),
    settings: Settings = Depends(get_settings),
):
    token = (payload.refresh_token if payload else None) or cookie_token
    access_token = controller.refresh(token)

    set_session_cookie(response, ACCESS_COOKIE, access_token, settings)
    return ApiResponse.ok({"accessToken": access_token}, "Access token refreshed")


@router.post("/forgot-password", summary="Set a new password")
def forgot_password(
    payload: ForgotPasswordRequest,
    flow: PasswordResetFlow = Depends(get_password_reset_flow),
):
    flow.reset(payload.email, payload.new_password, payload.confirm_password)
    return ApiResponse.ok(None, "Successfully Set the new Password")
