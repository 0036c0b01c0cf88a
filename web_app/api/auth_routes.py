"""Account routes: signup, activation, sessions and password reset."""

from typing import Optional

from fastapi import APIRouter, Cookie, Depends, Request, Response, status

from shortlink.auth_service import AuthService
from shortlink.tokens import TokenKind
from .dependencies import REFRESH_COOKIE, get_auth_service, get_current_user_id
from .schemas import (
    AccessTokenResponse,
    ErrorResponse,
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    ProfileResponse,
    ResetPasswordRequest,
    SignupRequest,
    SignupResponse,
    StatusResponse,
)

router = APIRouter()


def _cookie_options(request: Request) -> dict:
    config = request.app.state.config
    return {
        "httponly": True,
        "secure": config.cookie_secure,
        "samesite": "none",
    }


@router.post(
    "/signup",
    response_model=SignupResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        409: {"model": ErrorResponse, "description": "Email already in use"},
        500: {"model": ErrorResponse, "description": "Activation email could not be sent"},
    },
    summary="Register an account",
)
async def signup(body: SignupRequest, auth: AuthService = Depends(get_auth_service)):
    """Create an inactive account and email its activation link."""
    result = await auth.signup(
        first_name=body.first_name,
        last_name=body.last_name,
        username=body.username,
        password=body.password,
    )
    return SignupResponse(**result)


@router.patch(
    "/activation/{token}",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse, "description": "Invalid token or already active"}},
    summary="Activate an account",
)
async def activate(token: str, auth: AuthService = Depends(get_auth_service)):
    await auth.activate(token)
    return MessageResponse(message="Account activated successfully")


@router.get(
    "/resend-activation/{email}",
    response_model=StatusResponse,
    responses={404: {"model": ErrorResponse, "description": "User not found"}},
    summary="Re-send the activation link",
)
async def resend_activation(email: str, auth: AuthService = Depends(get_auth_service)):
    sent = await auth.resend_activation(email)
    if not sent:
        return StatusResponse(status="Account is already activated.")
    return StatusResponse(status=f"A new activation link has been sent to your email {email}")


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={400: {"model": ErrorResponse, "description": "Invalid credentials"}},
    summary="Log in",
    description="Returns an access token and sets the refresh token cookie.",
)
async def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    auth: AuthService = Depends(get_auth_service),
):
    result = await auth.login(body.username, body.password)

    response.set_cookie(
        REFRESH_COOKIE,
        result.refresh_token,
        max_age=int(auth.tokens.lifetime(TokenKind.REFRESH).total_seconds()),
        **_cookie_options(request),
    )
    return LoginResponse(status="User logged in successfully!", access_token=result.access_token)


@router.post(
    "/forgot-password",
    response_model=StatusResponse,
    responses={404: {"model": ErrorResponse, "description": "Email ID does not exist"}},
    summary="Request a password reset email",
)
async def forgot_password(body: ForgotPasswordRequest, auth: AuthService = Depends(get_auth_service)):
    await auth.forgot_password(body.email)
    return StatusResponse(status="Password reset email sent")


@router.patch(
    "/reset-password/{token}",
    response_model=StatusResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid password"},
        401: {"model": ErrorResponse, "description": "Invalid or expired token"},
    },
    summary="Set a new password",
)
async def reset_password(
    token: str,
    body: ResetPasswordRequest,
    auth: AuthService = Depends(get_auth_service),
):
    await auth.reset_password(token, body.new_password, body.confirm_password)
    return StatusResponse(status="Password reset successfully")


@router.get(
    "/refresh",
    response_model=AccessTokenResponse,
    responses={
        401: {"model": ErrorResponse, "description": "No refresh cookie"},
        403: {"model": ErrorResponse, "description": "Refresh token rejected"},
    },
    summary="Mint a new access token",
)
async def refresh(
    refresh_token: Optional[str] = Cookie(None, alias=REFRESH_COOKIE),
    auth: AuthService = Depends(get_auth_service),
):
    access_token = await auth.refresh(refresh_token)
    return AccessTokenResponse(access_token=access_token)


@router.get(
    "/user",
    response_model=ProfileResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Missing bearer token"},
        403: {"model": ErrorResponse, "description": "Invalid token"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
    summary="Profile of the logged-in user",
)
async def get_user(
    user_id: str = Depends(get_current_user_id),
    auth: AuthService = Depends(get_auth_service),
):
    user = await auth.get_profile(user_id)
    return ProfileResponse(**user.to_dict())


@router.get(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Log out",
)
async def logout(
    request: Request,
    refresh_token: Optional[str] = Cookie(None, alias=REFRESH_COOKIE),
    auth: AuthService = Depends(get_auth_service),
):
    """End the session. Succeeds whether or not a session existed."""
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    if not refresh_token:
        return response

    await auth.logout(refresh_token)
    response.delete_cookie(REFRESH_COOKIE, **_cookie_options(request))
    return response
