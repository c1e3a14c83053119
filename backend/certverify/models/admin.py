"""Admin account model."""
import enum
from datetime import datetime, timedelta, timezone
from typing import Optional
from sqlalchemy import Column, Integer, String, Boolean, TIMESTAMP
from sqlalchemy.sql import func
from certverify.database import Base


class AdminRole(str, enum.Enum):
    """Admin role enumeration."""
    SUPER_ADMIN = "super_admin"  # Everything, including hard deletes
    ADMIN = "admin"  # Certificate management and audit logs
    MODERATOR = "moderator"  # Certificate management
    VIEWER = "viewer"  # Read-only


# Permission flags carried on every admin and in access tokens
PERMISSION_FLAGS = (
    "can_create_certificates",
    "can_edit_certificates",
    "can_delete_certificates",
    "can_revoke_certificates",
    "can_view_analytics",
    "can_manage_admins",
)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive timestamps (SQLite drops tzinfo)."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Admin(Base):
    """Administrator credential and permission holder."""

    __tablename__ = "admins"

    # Primary Key
    id = Column(Integer, primary_key=True, index=True)

    # Identity
    username = Column(String(30), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)  # bcrypt
    full_name = Column(String(255), nullable=False)

    # Role and Permissions
    role = Column(String(20), default=AdminRole.ADMIN.value, nullable=False)
    can_create_certificates = Column(Boolean, default=True, nullable=False)
    can_edit_certificates = Column(Boolean, default=True, nullable=False)
    can_delete_certificates = Column(Boolean, default=False, nullable=False)
    can_revoke_certificates = Column(Boolean, default=True, nullable=False)
    can_view_analytics = Column(Boolean, default=True, nullable=False)
    can_manage_admins = Column(Boolean, default=False, nullable=False)

    # Account Status
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    last_login = Column(TIMESTAMP(timezone=True), nullable=True)
    last_login_ip = Column(String(45), nullable=True)

    # Lockout tracking
    failed_login_count = Column(Integer, default=0, nullable=False)
    last_failed_login_at = Column(TIMESTAMP(timezone=True), nullable=True)

    # Audit fields
    created_by = Column(String(30), nullable=True)
    updated_by = Column(String(30), nullable=True)

    # Timestamps
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def permissions(self) -> dict:
        return {flag: bool(getattr(self, flag)) for flag in PERMISSION_FLAGS}

    def has_permission(self, flag: str) -> bool:
        return flag in PERMISSION_FLAGS and bool(getattr(self, flag))

    def is_locked(
        self,
        max_attempts: int = 5,
        lockout_minutes: int = 30,
        now: Optional[datetime] = None
    ) -> bool:
        """Locked while failures reach max_attempts and the last one is recent."""
        if (self.failed_login_count or 0) < max_attempts or not self.last_failed_login_at:
            return False
        now = now or datetime.now(timezone.utc)
        return now - as_utc(self.last_failed_login_at) < timedelta(minutes=lockout_minutes)

    def __repr__(self):
        return f"<Admin(id={self.id}, username={self.username}, role={self.role})>"
