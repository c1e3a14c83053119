"""Certificate management service for the admin API."""
import hashlib
import logging
from datetime import date, datetime, timezone
from typing import Optional, List, Tuple, Dict, Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from certverify.config import get_settings
from certverify.exceptions import (
    AlreadyRevokedError,
    CertificateNotFoundError,
    DuplicateCertificateError,
)
from certverify.models.admin import Admin
from certverify.models.certificate import Certificate
from certverify.repositories.certificate_repository import CertificateRepository
from certverify.schemas.certificate import CertificateCreate, CertificateUpdate
from certverify.services.audit_service import AuditService

logger = logging.getLogger(__name__)

DEFAULT_REVOCATION_REASON = "No reason provided"
DUPLICATE_MESSAGE = "Certificate ID already exists"

# Fields that may be changed after issue
EDITABLE_FIELDS = ("recipient_name", "recipient_email", "award_date", "notes")
# Editable fields that cannot be cleared
REQUIRED_FIELDS = ("recipient_name", "recipient_email", "award_date")


def make_verification_hash(certificate_id: str, email: str, now: Optional[datetime] = None) -> str:
    """sha256 over the ID, the recipient email and the issue time in milliseconds."""
    now = now or datetime.now(timezone.utc)
    seed = f"{certificate_id}{email}{int(now.timestamp() * 1000)}"
    return hashlib.sha256(seed.encode("utf-8")).hexdigest()


def _jsonable(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


class CertificateService:
    """Service for creating, editing, revoking and reporting on certificates."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repository = CertificateRepository(session)
        self.audit = AuditService(session)

    async def create(
        self,
        data: CertificateCreate,
        admin: Admin,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> Certificate:
        """
        Issue a new certificate.

        Raises:
            DuplicateCertificateError: If the certificate ID is already taken
        """
        if await self.repository.find_by_certificate_id(data.certificate_id):
            await self.audit.log_certificate_create(
                admin,
                data.certificate_id,
                success=False,
                error_message=DUPLICATE_MESSAGE,
                ip_address=ip_address,
                user_agent=user_agent
            )
            raise DuplicateCertificateError(DUPLICATE_MESSAGE)

        certificate = Certificate(
            certificate_id=data.certificate_id,
            recipient_name=data.recipient_name,
            recipient_email=data.recipient_email,
            program=data.program.value,
            program_category=data.program_category.value,
            award_date=data.award_date,
            notes=data.notes,
            certificate_url=data.certificate_url,
            verification_hash=make_verification_hash(data.certificate_id, data.recipient_email),
            issued_by=get_settings().ISSUER_NAME,
            is_verified=True,
            verification_count=0,
            ip_addresses=[],
            is_revoked=False,
            created_by=admin.username
        )

        try:
            await self.repository.add(certificate)
            await self.session.commit()
        except IntegrityError:
            # Lost a race with a concurrent create of the same ID
            await self.session.rollback()
            await self.audit.log_certificate_create(
                admin,
                data.certificate_id,
                success=False,
                error_message=DUPLICATE_MESSAGE,
                ip_address=ip_address,
                user_agent=user_agent
            )
            raise DuplicateCertificateError(DUPLICATE_MESSAGE)

        await self.session.refresh(certificate)

        await self.audit.log_certificate_create(
            admin,
            certificate.certificate_id,
            details={
                "certificate_id": certificate.certificate_id,
                "recipient_name": certificate.recipient_name,
                "program": certificate.program,
            },
            ip_address=ip_address,
            user_agent=user_agent
        )
        logger.info("Certificate %s created by %s", certificate.certificate_id, admin.username)
        return certificate

    async def list_certificates(self, offset: int, limit: int) -> Tuple[int, List[Certificate]]:
        return await self.repository.list_page(offset, limit)

    async def get(self, certificate_pk: int) -> Certificate:
        certificate = await self.repository.get(certificate_pk)
        if not certificate:
            raise CertificateNotFoundError("Certificate not found")
        return certificate

    async def update(
        self,
        certificate_pk: int,
        data: CertificateUpdate,
        admin: Admin,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> Certificate:
        """
        Apply a partial update to the editable fields.

        Only fields present in the request are touched. Null is accepted for
        notes (clears them) and ignored for required fields.
        """
        certificate = await self.get(certificate_pk)

        submitted = data.model_dump(exclude_unset=True)
        before: Dict[str, Any] = {}
        after: Dict[str, Any] = {}
        for field in EDITABLE_FIELDS:
            if field not in submitted:
                continue
            value = submitted[field]
            if value is None and field in REQUIRED_FIELDS:
                continue
            before[field] = _jsonable(getattr(certificate, field))
            after[field] = _jsonable(value)
            setattr(certificate, field, value)

        certificate.updated_by = admin.username
        await self.session.commit()
        await self.session.refresh(certificate)

        await self.audit.log_certificate_update(
            admin,
            certificate.certificate_id,
            before=before,
            after=after,
            ip_address=ip_address,
            user_agent=user_agent
        )
        return certificate

    async def delete(
        self,
        certificate_pk: int,
        admin: Admin,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> None:
        """Permanently delete a certificate."""
        certificate = await self.get(certificate_pk)
        certificate_id = certificate.certificate_id
        recipient_name = certificate.recipient_name

        await self.repository.delete(certificate)
        await self.session.commit()

        await self.audit.log_certificate_delete(
            admin,
            certificate_id,
            recipient_name,
            ip_address=ip_address,
            user_agent=user_agent
        )
        logger.info("Certificate %s deleted by %s", certificate_id, admin.username)

    async def revoke(
        self,
        certificate_pk: int,
        admin: Admin,
        reason: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> Certificate:
        """
        Revoke a certificate so public verification reports it as revoked.

        Raises:
            CertificateNotFoundError: If the certificate does not exist
            AlreadyRevokedError: If the certificate is already revoked
        """
        certificate = await self.get(certificate_pk)
        reason = reason or DEFAULT_REVOCATION_REASON

        # Matches only a record that is still active
        if not await self.repository.mark_revoked(certificate_pk, reason, admin.username):
            raise AlreadyRevokedError("Certificate is already revoked")

        await self.session.commit()
        await self.session.refresh(certificate)

        await self.audit.log_certificate_revoke(
            admin,
            certificate.certificate_id,
            reason,
            ip_address=ip_address,
            user_agent=user_agent
        )
        logger.info("Certificate %s revoked by %s", certificate.certificate_id, admin.username)
        return certificate

    async def analytics(self) -> Dict[str, Any]:
        """Dashboard summary: totals, active certificates per program and recent verifications."""
        summary = await self.repository.count_summary()
        by_program = await self.repository.count_by_program()
        recent = await self.audit.recent_verifications(limit=10)
        return {
            "summary": summary,
            "by_program": [{"program": program, "count": count} for program, count in by_program],
            "recent_verifications": recent,
        }
