"""
Unit tests for AuditService.

Tests audit logging for verifications, certificate changes and logins.
"""

import pytest
from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from certverify.services.audit_service import AuditService
from certverify.models.audit_log import AuditLog, AuditAction, AuditEntity


@pytest.mark.unit
@pytest.mark.asyncio
class TestAuditServiceBasic:
    """Test basic audit logging operations."""

    async def test_log_basic(self, db_session: AsyncSession, admin_user):
        """Test basic audit log creation."""
        service = AuditService(db_session)

        log = await service.log(
            action=AuditAction.READ,
            entity_type=AuditEntity.CERTIFICATE,
            entity_id="2501001",
            admin=admin_user,
            details={"key": "value"},
            ip_address="192.168.1.1",
            user_agent="TestAgent/1.0"
        )

        assert log.id is not None
        assert log.action == "READ"
        assert log.entity_type == "CERTIFICATE"
        assert log.entity_id == "2501001"
        assert log.status == "SUCCESS"
        assert log.performed_by == admin_user.id
        assert log.performed_by_username == admin_user.username
        assert log.details == {"key": "value"}
        assert log.ip_address == "192.168.1.1"
        assert log.user_agent == "TestAgent/1.0"

    async def test_write_failure_is_swallowed(self, db_session: AsyncSession, mocker):
        """A failing audit write returns None instead of raising."""
        service = AuditService(db_session)
        mocker.patch.object(db_session, "commit", side_effect=SQLAlchemyError("disk full"))
        rollback = mocker.spy(db_session, "rollback")

        log = await service.log_verify("2501001", success=True)

        assert log is None
        rollback.assert_called_once()


@pytest.mark.unit
@pytest.mark.asyncio
class TestAuditServiceCertificates:
    """Test certificate-related audit logs."""

    async def test_log_verify_failed(self, db_session: AsyncSession):
        """Public verification failures carry no actor."""
        service = AuditService(db_session)

        log = await service.log_verify(
            "2501999",
            success=False,
            ip_address="10.0.0.1",
            error_message="Certificate not found in the system"
        )

        assert log.action == "VERIFY"
        assert log.status == "FAILED"
        assert log.performed_by is None
        assert log.error_message == "Certificate not found in the system"

    async def test_log_certificate_update(self, db_session: AsyncSession, admin_user):
        """Updates record before and after values."""
        service = AuditService(db_session)

        log = await service.log_certificate_update(
            admin_user,
            "2501001",
            before={"notes": None},
            after={"notes": "Resubmitted"}
        )

        assert log.action == "UPDATE"
        assert log.changes == {"before": {"notes": None}, "after": {"notes": "Resubmitted"}}

    async def test_log_certificate_delete(self, db_session: AsyncSession, admin_user):
        """Deletes keep the ID and recipient name since the record is gone."""
        service = AuditService(db_session)

        log = await service.log_certificate_delete(admin_user, "2501001", "Ahmed Hassan")

        assert log.details == {"certificate_id": "2501001", "recipient_name": "Ahmed Hassan"}


@pytest.mark.unit
@pytest.mark.asyncio
class TestAuditServiceAuthentication:
    """Test authentication-related audit logs."""

    async def test_log_login_success(self, db_session: AsyncSession, admin_user):
        """Test logging successful login."""
        service = AuditService(db_session)

        log = await service.log_login(admin_user.username, admin_user, ip_address="192.168.1.1")

        assert log.action == "LOGIN"
        assert log.status == "SUCCESS"
        assert log.entity_type == "ADMIN"
        assert log.entity_id == str(admin_user.id)

    async def test_log_login_unknown_user(self, db_session: AsyncSession):
        """Failed logins for unknown usernames keep the attempted name."""
        service = AuditService(db_session)

        log = await service.log_login("ghost", None, success=False, error_message="Admin not found")

        assert log.status == "FAILED"
        assert log.performed_by is None
        assert log.performed_by_username == "ghost"

    async def test_log_logout(self, db_session: AsyncSession, admin_user):
        """Test logging logout."""
        service = AuditService(db_session)

        log = await service.log_logout(admin_user, ip_address="192.168.1.1")

        assert log.action == "LOGOUT"
        assert log.performed_by == admin_user.id


@pytest.mark.unit
@pytest.mark.asyncio
class TestAuditServiceQueries:
    """Test reading audit logs back."""

    async def test_recent_verifications_only_successes(self, db_session: AsyncSession):
        """Only successful VERIFY entries are returned, newest first."""
        service = AuditService(db_session)
        await service.log_verify("2501001", success=True)
        await service.log_verify("2501002", success=False)
        await service.log_verify("2501003", success=True)

        recent = await service.recent_verifications()

        assert [log.entity_id for log in recent] == ["2501003", "2501001"]

    async def test_recent_verifications_limit(self, db_session: AsyncSession):
        service = AuditService(db_session)
        for i in range(12):
            await service.log_verify(f"25010{i:02d}", success=True)

        assert len(await service.recent_verifications(limit=10)) == 10

    async def test_list_logs_filter_and_paging(self, db_session: AsyncSession, admin_user):
        """Filtering by action narrows both the page and the total."""
        service = AuditService(db_session)
        await service.log_logout(admin_user)
        for _ in range(3):
            await service.log_verify("2501001", success=True)

        total, logs = await service.list_logs(offset=0, limit=2, action="verify")

        assert total == 3
        assert len(logs) == 2
        assert all(log.action == "VERIFY" for log in logs)

        count = (await db_session.execute(select(func.count(AuditLog.id)))).scalar()
        assert count == 4
