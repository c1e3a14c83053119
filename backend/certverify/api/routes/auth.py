"""Authentication API routes."""
from fastapi import APIRouter, Depends, Request

from certverify.dependencies import get_auth_service, get_current_admin
from certverify.exceptions import AccountLockedError, AuthenticationError, PasswordPolicyError
from certverify.middleware.rate_limit import auth_rate_limit
from certverify.models.admin import Admin
from certverify.services.auth_service import AuthService
from certverify.schemas.auth import (
    AdminResponse,
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    PasswordChangeRequest,
    PasswordChangeResponse,
    RefreshRequest,
    RefreshResponse,
)
from certverify.config import get_settings
from certverify.api.utils.request import extract_client_metadata
from certverify.api.exceptions import bad_request, unauthorized, account_locked


router = APIRouter(prefix="/api/auth", tags=["Authentication"])
settings = get_settings()


@router.post("/login", response_model=LoginResponse)
@auth_rate_limit()
async def login(
    request: Request,
    login_data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Authenticate an admin and issue access and refresh tokens.

    Rate limited per IP address to slow down brute force attacks. Accounts
    are locked for 30 minutes after 5 consecutive failures.

    Raises:
        HTTPException: 401 for bad credentials, 429 for a locked account
    """
    ip_address, user_agent = extract_client_metadata(request)

    try:
        result = await auth_service.login(
            login_data.username,
            login_data.password,
            ip_address=ip_address,
            user_agent=user_agent
        )
    except AccountLockedError as e:
        raise account_locked(str(e))
    except AuthenticationError as e:
        raise unauthorized(str(e))

    return LoginResponse(
        message="Login successful",
        access_token=result.access_token,
        refresh_token=result.refresh_token,
        expires_in=result.expires_in,
        admin=AdminResponse.model_validate(result.admin)
    )


@router.post("/refresh", response_model=RefreshResponse)
@auth_rate_limit()
async def refresh_token(
    request: Request,
    refresh_data: RefreshRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    """Exchange a refresh token for a new access token."""
    try:
        access_token = await auth_service.refresh(refresh_data.refresh_token)
    except AuthenticationError as e:
        raise unauthorized(str(e))

    return RefreshResponse(
        message="Token refreshed successfully",
        access_token=access_token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
    )


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    request: Request,
    current_admin: Admin = Depends(get_current_admin),
    auth_service: AuthService = Depends(get_auth_service)
):
    """Record the logout. Clients discard their tokens."""
    ip_address, user_agent = extract_client_metadata(request)
    await auth_service.logout(current_admin, ip_address=ip_address, user_agent=user_agent)
    return LogoutResponse(message="Logout successful")


@router.post("/change-password", response_model=PasswordChangeResponse)
async def change_password(
    request: Request,
    password_data: PasswordChangeRequest,
    current_admin: Admin = Depends(get_current_admin),
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Change the current admin's password.

    The new password needs upper and lower case letters, a digit and one of
    @$!%*?& and must differ from the current one.
    """
    ip_address, user_agent = extract_client_metadata(request)

    try:
        await auth_service.change_password(
            current_admin,
            password_data.current_password,
            password_data.new_password,
            ip_address=ip_address,
            user_agent=user_agent
        )
    except AuthenticationError as e:
        raise unauthorized(str(e))
    except PasswordPolicyError as e:
        raise bad_request(str(e))

    return PasswordChangeResponse(message="Password changed successfully")


@router.get("/me", response_model=AdminResponse)
async def get_me(current_admin: Admin = Depends(get_current_admin)):
    """Get the current admin's profile."""
    return AdminResponse.model_validate(current_admin)
