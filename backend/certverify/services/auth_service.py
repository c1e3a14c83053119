"""Authentication service for admin login and token management."""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Dict, Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from certverify.config import get_settings
from certverify.exceptions import AccountLockedError, AuthenticationError, PasswordPolicyError
from certverify.models.admin import Admin, AdminRole, PERMISSION_FLAGS
from certverify.services.audit_service import AuditService
from certverify.api.utils.validation import USERNAME_PATTERN, normalize_email, password_policy_violation
from certverify.utils.security import (
    REFRESH_TOKEN_TYPE,
    TokenError,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid username or password"
ACCOUNT_LOCKED = "Account is temporarily locked due to too many failed login attempts. Please try again later."


@dataclass
class LoginResult:
    admin: Admin
    access_token: str
    refresh_token: str
    expires_in: int


def token_claims(admin: Admin) -> Dict[str, Any]:
    """Identity, role and permission claims embedded in issued tokens."""
    return {
        "sub": str(admin.id),
        "username": admin.username,
        "role": admin.role,
        "permissions": admin.permissions,
    }


class AuthService:
    """Service for handling admin authentication."""

    def __init__(self, session: AsyncSession):
        """
        Initialize auth service.

        Args:
            session: Database session
        """
        self.session = session
        self.settings = get_settings()
        self.audit = AuditService(session)

    async def get_admin_by_username(self, username: str) -> Optional[Admin]:
        result = await self.session.execute(
            select(Admin).where(Admin.username == username.strip().lower())
        )
        return result.scalar_one_or_none()

    async def get_admin(self, admin_id: int) -> Optional[Admin]:
        return await self.session.get(Admin, admin_id)

    async def any_admin_exists(self) -> bool:
        result = await self.session.execute(select(Admin.id).limit(1))
        return result.scalar_one_or_none() is not None

    async def create_admin(
        self,
        username: str,
        email: str,
        password: str,
        full_name: str,
        role: AdminRole = AdminRole.ADMIN,
        created_by: Optional[str] = None
    ) -> Admin:
        """
        Create an admin account.

        Super admins get every permission flag; other roles keep the column
        defaults.

        Raises:
            ValueError: If the username or email is taken, or the password is weak
        """
        username = username.strip().lower()
        email = normalize_email(email)

        if not USERNAME_PATTERN.match(username) or not 3 <= len(username) <= 30:
            raise ValueError("Username must be 3-30 characters of letters, digits, _ or -")
        violation = password_policy_violation(password)
        if violation:
            raise ValueError(violation)

        existing = await self.session.execute(
            select(Admin).where((Admin.username == username) | (Admin.email == email))
        )
        if existing.scalar_one_or_none():
            raise ValueError("An admin with this username or email already exists")

        admin = Admin(
            username=username,
            email=email,
            password_hash=hash_password(password),
            full_name=full_name,
            role=role.value,
            is_active=True,
            created_by=created_by
        )
        if role == AdminRole.SUPER_ADMIN:
            for flag in PERMISSION_FLAGS:
                setattr(admin, flag, True)

        self.session.add(admin)
        await self.session.commit()
        await self.session.refresh(admin)
        logger.info("Created %s account %s", role.value, username)
        return admin

    async def login(
        self,
        username: str,
        password: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> LoginResult:
        """
        Authenticate an admin and issue tokens.

        Unknown usernames, wrong passwords and deactivated accounts all fail
        with the same message. Only a locked account is reported separately.

        Raises:
            AccountLockedError: If the account is within its lockout window
            AuthenticationError: For any other rejected attempt
        """
        username = username.strip().lower()
        admin = await self.get_admin_by_username(username)

        if not admin:
            await self._fail(username, None, "Admin not found", ip_address, user_agent)
            raise AuthenticationError(INVALID_CREDENTIALS)

        if admin.is_locked(self.settings.MAX_FAILED_LOGINS, self.settings.LOCKOUT_MINUTES):
            await self._fail(username, admin, "Account locked", ip_address, user_agent)
            raise AccountLockedError(ACCOUNT_LOCKED)

        if not admin.is_active:
            await self._fail(username, admin, "Account inactive", ip_address, user_agent)
            raise AuthenticationError(INVALID_CREDENTIALS)

        if not verify_password(password, admin.password_hash):
            admin.failed_login_count = (admin.failed_login_count or 0) + 1
            admin.last_failed_login_at = datetime.now(timezone.utc)
            admin.last_login_ip = ip_address
            await self.session.commit()
            await self.session.refresh(admin)
            await self._fail(username, admin, "Invalid password", ip_address, user_agent)
            raise AuthenticationError(INVALID_CREDENTIALS)

        admin.failed_login_count = 0
        admin.last_login = datetime.now(timezone.utc)
        admin.last_login_ip = ip_address
        await self.session.commit()
        await self.session.refresh(admin)

        await self.audit.log_login(username, admin, ip_address=ip_address, user_agent=user_agent)
        logger.info("Admin %s logged in", admin.username)

        claims = token_claims(admin)
        return LoginResult(
            admin=admin,
            access_token=create_access_token(claims),
            refresh_token=create_refresh_token(claims),
            expires_in=self.settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
        )

    async def _fail(
        self,
        username: str,
        admin: Optional[Admin],
        reason: str,
        ip_address: Optional[str],
        user_agent: Optional[str]
    ) -> None:
        logger.warning("Failed login for %s: %s", username, reason)
        await self.audit.log_login(
            username,
            admin,
            success=False,
            error_message=reason,
            ip_address=ip_address,
            user_agent=user_agent
        )

    async def refresh(self, refresh_token: str) -> str:
        """
        Exchange a refresh token for a new access token.

        Raises:
            AuthenticationError: If the token is invalid or the admin is gone or inactive
        """
        try:
            payload = decode_token(refresh_token, REFRESH_TOKEN_TYPE)
            admin_id = int(payload["sub"])
        except (TokenError, KeyError, ValueError):
            raise AuthenticationError("Invalid or expired refresh token")

        admin = await self.get_admin(admin_id)
        if not admin or not admin.is_active:
            raise AuthenticationError("Invalid or expired refresh token")

        return create_access_token(token_claims(admin))

    async def logout(
        self,
        admin: Admin,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> None:
        """Record a logout. Tokens are stateless and stay valid until expiry."""
        await self.audit.log_logout(admin, ip_address=ip_address, user_agent=user_agent)

    async def change_password(
        self,
        admin: Admin,
        current_password: str,
        new_password: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> None:
        """
        Change an admin's password.

        Raises:
            AuthenticationError: If the current password is wrong
            PasswordPolicyError: If the new password is weak or unchanged
        """
        if not verify_password(current_password, admin.password_hash):
            await self.audit.log_password_change(
                admin,
                success=False,
                error_message="Current password is incorrect",
                ip_address=ip_address,
                user_agent=user_agent
            )
            raise AuthenticationError("Current password is incorrect")

        violation = password_policy_violation(new_password)
        if violation:
            raise PasswordPolicyError(violation)
        if verify_password(new_password, admin.password_hash):
            raise PasswordPolicyError("New password must be different from current password")

        admin.password_hash = hash_password(new_password)
        admin.updated_by = admin.username
        await self.session.commit()
        await self.session.refresh(admin)

        await self.audit.log_password_change(admin, ip_address=ip_address, user_agent=user_agent)
        logger.info("Admin %s changed password", admin.username)
