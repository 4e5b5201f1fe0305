"""
Auth API endpoints.

Registration, email verification, login, token refresh, password reset
and logout. All of these are exempt from the session middleware; logout
handles its own session.
"""

import logging

import jwt
from fastapi import APIRouter, Depends, Request, Response

from api.dependencies import (
    get_app_settings,
    get_otp_service,
    get_session_store,
    get_user_service,
)
from api.middleware.auth import AuthError
from shared.config import Settings
from shared.exceptions import GateKeeperError
from shared.security import decode_refresh_token
from modules.otp.interfaces import IOTPService
from modules.otp.models import (
    ResendVerificationRequest,
    SendOTPData,
    SendOTPRequest,
    SendOTPResponse,
    VerifyEmailRequest,
)
from modules.sessions.interfaces import ISessionStore
from modules.sessions.middleware import clear_session_cookie, session_id_from_request
from modules.users.exceptions import UserNotFoundError
from modules.users.interfaces import IUserService
from modules.users.models import (
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
)
from modules.users.validation import validate_email

from .models import (
    AuthResponse,
    MessageResponse,
    RefreshTokenRequest,
    RefreshTokenResponse,
    TokenData,
    VerifyEmailData,
    VerifyEmailResponse,
)
from .tokens import access_token_for, auth_data

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/send-registration-otp",
    response_model=SendOTPResponse,
    response_model_exclude_none=True,
)
async def send_registration_otp(
    body: SendOTPRequest,
    otp: IOTPService = Depends(get_otp_service),
    settings: Settings = Depends(get_app_settings),
) -> SendOTPResponse:
    """
    Send (or resend) a verification code.

    The code itself is only echoed back in development.
    """
    result = await otp.issue(body.email, is_resend=body.is_resend)
    message = (
        "Verification code resent successfully"
        if body.is_resend
        else "Verification code sent successfully"
    )
    return SendOTPResponse(
        message=message,
        data=SendOTPData(
            otp=result.otp if settings.is_development else "sent",
            is_new_user=result.is_new_user,
        ),
    )


@router.post("/verify-email", response_model=VerifyEmailResponse, response_model_exclude_none=True)
async def verify_email(
    body: VerifyEmailRequest,
    otp: IOTPService = Depends(get_otp_service),
    settings: Settings = Depends(get_app_settings),
) -> VerifyEmailResponse:
    result = await otp.verify(body.email, body.otp)
    data = auth_data(result.user, settings)
    return VerifyEmailResponse(
        message="Email verified successfully",
        data=VerifyEmailData(user=data.user, token=data.token, refresh_token=data.refresh_token),
    )


@router.post("/resend-verification", response_model=MessageResponse, response_model_exclude_none=True)
async def resend_verification(
    body: ResendVerificationRequest,
    otp: IOTPService = Depends(get_otp_service),
) -> MessageResponse:
    await otp.resend(body.email)
    return MessageResponse(message="Verification code sent successfully", code="OTP_SENT")


@router.post("/register", response_model=AuthResponse, response_model_exclude_none=True)
async def register(
    body: RegisterRequest,
    users: IUserService = Depends(get_user_service),
    settings: Settings = Depends(get_app_settings),
) -> AuthResponse:
    user = await users.register(body.first_name, body.last_name, body.email, body.password)
    return AuthResponse(message="User registered successfully", data=auth_data(user, settings))


@router.post("/login", response_model=AuthResponse, response_model_exclude_none=True)
async def login(
    body: LoginRequest,
    users: IUserService = Depends(get_user_service),
    settings: Settings = Depends(get_app_settings),
) -> AuthResponse:
    """
    Log in with email and password.

    Unverified accounts get 403 with ``needsVerification`` in the body.
    """
    user = await users.login(body.email, body.password)
    return AuthResponse(message="User logged in successfully", data=auth_data(user, settings))


@router.post("/refresh-token", response_model=RefreshTokenResponse, response_model_exclude_none=True)
async def refresh_token(
    body: RefreshTokenRequest,
    users: IUserService = Depends(get_user_service),
    settings: Settings = Depends(get_app_settings),
) -> RefreshTokenResponse:
    try:
        payload = decode_refresh_token(body.refresh_token, settings)
    except jwt.InvalidTokenError:
        raise AuthError("Invalid or expired refresh token", code="INVALID_REFRESH_TOKEN")

    user = await users.get_by_id(payload["sub"])
    if user is None:
        raise UserNotFoundError("User not found")

    return RefreshTokenResponse(
        message="Token refreshed successfully",
        data=TokenData(token=access_token_for(user, settings)),
    )


@router.post("/forgot-password", response_model=MessageResponse, response_model_exclude_none=True)
async def forgot_password(
    body: ForgotPasswordRequest,
    users: IUserService = Depends(get_user_service),
) -> MessageResponse:
    email = validate_email(body.email)
    message = await users.request_password_reset(email)
    return MessageResponse(message=message)


@router.post("/reset-password", response_model=MessageResponse, response_model_exclude_none=True)
async def reset_password(
    body: ResetPasswordRequest,
    users: IUserService = Depends(get_user_service),
    sessions: ISessionStore = Depends(get_session_store),
) -> MessageResponse:
    """
    Set a new password from an emailed token.

    Every existing session of the account is ended.
    """
    user = await users.reset_password(body.email, body.token, body.new_password)
    await sessions.delete_all_for_user(user.id)
    return MessageResponse(
        message="Password reset successful. You can now log in with your new password."
    )


@router.post("/logout", response_model=MessageResponse, response_model_exclude_none=True)
async def logout(
    request: Request,
    response: Response,
    sessions: ISessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_app_settings),
) -> MessageResponse:
    """End the current session. Succeeds whether or not one exists."""
    session_id = session_id_from_request(request)
    if session_id:
        try:
            await sessions.delete(session_id)
        except GateKeeperError as e:
            logger.error("Failed to delete session on logout: %s", e.message)

    clear_session_cookie(response, settings)
    return MessageResponse(message="Logged out successfully")
