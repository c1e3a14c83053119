"""FastAPI dependencies for authentication and authorization."""
from typing import Optional, Callable
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from certverify.api.exceptions import forbidden, unauthorized
from certverify.database import get_db
from certverify.models.admin import Admin, AdminRole
from certverify.services.auth_service import AuthService
from certverify.services.certificate_service import CertificateService
from certverify.services.verification_service import VerificationService
from certverify.utils.security import TokenExpiredError, TokenError, decode_token

bearer_scheme = HTTPBearer(auto_error=False)


async def get_auth_service(
    db: AsyncSession = Depends(get_db)
) -> AuthService:
    """
    Dependency to get auth service.

    Args:
        db: Database session

    Returns:
        AuthService instance
    """
    return AuthService(session=db)


async def get_certificate_service(db: AsyncSession = Depends(get_db)) -> CertificateService:
    return CertificateService(session=db)


async def get_verification_service(db: AsyncSession = Depends(get_db)) -> VerificationService:
    return VerificationService(session=db)


async def _admin_from_token(token: str, auth_service: AuthService) -> Admin:
    try:
        payload = decode_token(token)
        admin_id = int(payload["sub"])
    except TokenExpiredError:
        raise unauthorized("Access token has expired")
    except (TokenError, KeyError, ValueError):
        raise unauthorized("Invalid access token")

    admin = await auth_service.get_admin(admin_id)
    if not admin:
        raise unauthorized("Invalid access token")
    return admin


async def get_current_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service)
) -> Admin:
    """
    Get the current authenticated admin from the Bearer token.

    The token only identifies the admin; role, permissions and the active
    flag are read from the database so changes take effect immediately.

    Raises:
        HTTPException: 401 if the token is missing, expired or invalid,
            403 if the account is inactive
    """
    if not credentials or not credentials.credentials:
        raise unauthorized("No access token provided")

    admin = await _admin_from_token(credentials.credentials, auth_service)

    if not admin.is_active:
        raise forbidden("Inactive account")
    return admin


async def get_optional_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[Admin]:
    """
    Get the current admin if a valid token was sent, otherwise None.

    Useful for public endpoints that expose more to signed-in admins.
    """
    if not credentials or not credentials.credentials:
        return None
    try:
        admin = await _admin_from_token(credentials.credentials, auth_service)
    except HTTPException:
        return None
    return admin if admin.is_active else None


def require_role(*roles: AdminRole) -> Callable:
    """
    Build a dependency that only admits admins holding one of the given roles.

    Example:
        current_admin: Admin = Depends(require_role(AdminRole.SUPER_ADMIN, AdminRole.ADMIN))
    """
    allowed = {role.value for role in roles}

    async def dependency(current_admin: Admin = Depends(get_current_admin)) -> Admin:
        if current_admin.role not in allowed:
            raise forbidden("Insufficient permissions for this action")
        return current_admin

    return dependency


def require_permission(flag: str) -> Callable:
    """
    Build a dependency that only admits admins with the given permission flag set.

    Roles are not consulted; a super admin without the flag is refused.
    """

    async def dependency(current_admin: Admin = Depends(get_current_admin)) -> Admin:
        if not current_admin.has_permission(flag):
            raise forbidden("You do not have permission to perform this action")
        return current_admin

    return dependency
