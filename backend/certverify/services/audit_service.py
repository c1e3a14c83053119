"""Audit logging service for tracking verification and admin actions."""
import logging
from typing import Optional, Dict, Any, List, Tuple
from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from certverify.models.admin import Admin
from certverify.models.audit_log import AuditLog, AuditAction, AuditEntity, AuditStatus

logger = logging.getLogger(__name__)


class AuditService:
    """Service for logging audit events."""

    def __init__(self, session: AsyncSession):
        """Initialize audit service."""
        self.session = session

    async def log(
        self,
        action: AuditAction,
        entity_type: AuditEntity,
        entity_id: Optional[str] = None,
        status: AuditStatus = AuditStatus.SUCCESS,
        admin: Optional[Admin] = None,
        username: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        error_message: Optional[str] = None,
        changes: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> Optional[AuditLog]:
        """
        Log an audit event.

        Audit writes are best effort: a failed write is logged and rolled back
        and never propagates to the caller, so callers must commit their own
        work before logging.

        Args:
            action: Action performed (VERIFY, CREATE, LOGIN, ...)
            entity_type: Type of entity affected
            entity_id: Certificate ID or admin ID of the affected entity
            status: SUCCESS or FAILED
            admin: Admin who performed the action, None for public actions
            username: Username to record when there is no admin (failed logins)
            details: Additional details as JSON
            error_message: Reason for a FAILED entry
            changes: {"before": ..., "after": ...} for updates
            ip_address: IP address of the request
            user_agent: User agent string

        Returns:
            Created AuditLog entry, or None if it could not be written
        """
        audit_log = AuditLog(
            action=action.value,
            entity_type=entity_type.value,
            entity_id=str(entity_id) if entity_id is not None else None,
            status=status.value,
            performed_by=admin.id if admin else None,
            performed_by_username=admin.username if admin else username,
            details=details,
            error_message=error_message,
            changes=changes,
            ip_address=ip_address,
            user_agent=user_agent
        )

        try:
            self.session.add(audit_log)
            await self.session.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to write audit log %s/%s: %s", action.value, status.value, e)
            await self.session.rollback()
            return None

        return audit_log

    async def log_verify(
        self,
        certificate_id: str,
        success: bool,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        error_message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> Optional[AuditLog]:
        """Log a public verification attempt."""
        return await self.log(
            action=AuditAction.VERIFY,
            entity_type=AuditEntity.CERTIFICATE,
            entity_id=certificate_id,
            status=AuditStatus.SUCCESS if success else AuditStatus.FAILED,
            details=details,
            error_message=error_message,
            ip_address=ip_address,
            user_agent=user_agent
        )

    async def log_certificate_create(
        self,
        admin: Admin,
        certificate_id: str,
        success: bool = True,
        details: Optional[Dict[str, Any]] = None,
        error_message: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> Optional[AuditLog]:
        """Log certificate creation (or a rejected attempt)."""
        return await self.log(
            action=AuditAction.CREATE,
            entity_type=AuditEntity.CERTIFICATE,
            entity_id=certificate_id,
            status=AuditStatus.SUCCESS if success else AuditStatus.FAILED,
            admin=admin,
            details=details,
            error_message=error_message,
            ip_address=ip_address,
            user_agent=user_agent
        )

    async def log_certificate_update(
        self,
        admin: Admin,
        certificate_id: str,
        before: Dict[str, Any],
        after: Dict[str, Any],
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> Optional[AuditLog]:
        """Log certificate update with field changes."""
        return await self.log(
            action=AuditAction.UPDATE,
            entity_type=AuditEntity.CERTIFICATE,
            entity_id=certificate_id,
            admin=admin,
            changes={"before": before, "after": after},
            ip_address=ip_address,
            user_agent=user_agent
        )

    async def log_certificate_delete(
        self,
        admin: Admin,
        certificate_id: str,
        recipient_name: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> Optional[AuditLog]:
        """Log certificate deletion."""
        return await self.log(
            action=AuditAction.DELETE,
            entity_type=AuditEntity.CERTIFICATE,
            entity_id=certificate_id,
            admin=admin,
            details={"certificate_id": certificate_id, "recipient_name": recipient_name},
            ip_address=ip_address,
            user_agent=user_agent
        )

    async def log_certificate_revoke(
        self,
        admin: Admin,
        certificate_id: str,
        reason: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> Optional[AuditLog]:
        """Log certificate revocation."""
        return await self.log(
            action=AuditAction.REVOKE,
            entity_type=AuditEntity.CERTIFICATE,
            entity_id=certificate_id,
            admin=admin,
            details={"reason": reason},
            ip_address=ip_address,
            user_agent=user_agent
        )

    async def log_login(
        self,
        username: str,
        admin: Optional[Admin] = None,
        success: bool = True,
        error_message: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> Optional[AuditLog]:
        """Log a login attempt."""
        return await self.log(
            action=AuditAction.LOGIN,
            entity_type=AuditEntity.ADMIN,
            entity_id=str(admin.id) if admin else None,
            status=AuditStatus.SUCCESS if success else AuditStatus.FAILED,
            admin=admin,
            username=username,
            error_message=error_message,
            ip_address=ip_address,
            user_agent=user_agent
        )

    async def log_logout(
        self,
        admin: Admin,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> Optional[AuditLog]:
        """Log a logout event."""
        return await self.log(
            action=AuditAction.LOGOUT,
            entity_type=AuditEntity.ADMIN,
            entity_id=str(admin.id),
            admin=admin,
            ip_address=ip_address,
            user_agent=user_agent
        )

    async def log_password_change(
        self,
        admin: Admin,
        success: bool = True,
        error_message: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> Optional[AuditLog]:
        """Log a password change attempt."""
        return await self.log(
            action=AuditAction.UPDATE,
            entity_type=AuditEntity.ADMIN,
            entity_id=str(admin.id),
            status=AuditStatus.SUCCESS if success else AuditStatus.FAILED,
            admin=admin,
            details={"field": "password"},
            error_message=error_message,
            ip_address=ip_address,
            user_agent=user_agent
        )

    async def recent_verifications(self, limit: int = 10) -> List[AuditLog]:
        """Latest successful verifications, newest first."""
        result = await self.session.execute(
            select(AuditLog)
            .where(
                AuditLog.action == AuditAction.VERIFY.value,
                AuditLog.status == AuditStatus.SUCCESS.value
            )
            .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def list_logs(
        self,
        offset: int = 0,
        limit: int = 50,
        action: Optional[str] = None
    ) -> Tuple[int, List[AuditLog]]:
        """Page of audit entries, newest first, optionally filtered by action."""
        query = select(AuditLog)
        count_query = select(func.count(AuditLog.id))
        if action:
            query = query.where(AuditLog.action == action.upper())
            count_query = count_query.where(AuditLog.action == action.upper())

        total = (await self.session.execute(count_query)).scalar() or 0
        result = await self.session.execute(
            query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return total, list(result.scalars().all())
