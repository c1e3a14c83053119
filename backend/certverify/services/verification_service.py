"""Public certificate verification, existence check and search."""
import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, List, Dict, Any

from sqlalchemy.ext.asyncio import AsyncSession

from certverify.models.certificate import Certificate
from certverify.repositories.certificate_repository import CertificateRepository
from certverify.services.audit_service import AuditService
from certverify.utils.certificate_id import (
    decode,
    is_valid_format,
    normalize_certificate_id,
    validate_certificate_id,
)

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Certificate not found in the system"
REVOKED_MESSAGE = "This certificate has been revoked"
NOT_VALID_MESSAGE = "Certificate is not valid"


class VerificationStatus(str, enum.Enum):
    VERIFIED = "verified"
    INVALID = "invalid"
    NOT_FOUND = "not_found"
    REVOKED = "revoked"


@dataclass
class VerificationOutcome:
    """Result of a public verification. Only VERIFIED carries certificate data."""

    status: VerificationStatus
    certificate_id: str
    message: Optional[str] = None
    error: Optional[str] = None
    certificate: Optional[Dict[str, Any]] = None
    revoked_at: Optional[datetime] = None
    revocation_reason: Optional[str] = None

    @property
    def verified(self) -> bool:
        return self.status == VerificationStatus.VERIFIED


def public_view(certificate: Certificate, verification_count: Optional[int] = None) -> Dict[str, Any]:
    """
    Fields safe to show to anyone holding the certificate ID.

    verification_count overrides the stored counter with the value returned
    by the increment for this request.
    """
    decoded = decode(certificate.certificate_id)
    return {
        "certificate_id": certificate.certificate_id,
        "recipient_name": certificate.recipient_name,
        "program": certificate.program,
        "program_category": certificate.program_category,
        "program_label": decoded.program_label,
        "award_date": certificate.award_date,
        "issued_by": certificate.issued_by,
        "year": decoded.year,
        "serial_number": decoded.serial,
        "verification_count": (
            certificate.verification_count if verification_count is None else verification_count
        ),
    }


class VerificationService:
    """Service for the public verification endpoints."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repository = CertificateRepository(session)
        self.audit = AuditService(session)

    async def verify(
        self,
        raw_id: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> VerificationOutcome:
        """
        Verify a certificate ID and record the lookup.

        Every call writes exactly one VERIFY audit entry. Malformed IDs are
        rejected before touching the certificates table.
        """
        certificate_id = normalize_certificate_id(raw_id)
        validation = validate_certificate_id(certificate_id)

        if not validation.valid:
            await self.audit.log_verify(
                certificate_id,
                success=False,
                ip_address=ip_address,
                user_agent=user_agent,
                error_message=validation.message,
                details={"error": validation.error}
            )
            return VerificationOutcome(
                status=VerificationStatus.INVALID,
                certificate_id=certificate_id,
                message=validation.message,
                error=validation.error
            )

        count = await self.repository.apply_verification(certificate_id, ip_address)

        if count is None:
            return await self._reject(certificate_id, ip_address, user_agent)

        await self.session.commit()
        certificate = await self.repository.find_by_certificate_id(certificate_id, refresh=True)

        await self.audit.log_verify(
            certificate_id,
            success=True,
            ip_address=ip_address,
            user_agent=user_agent,
            details={"verification_count": count}
        )
        logger.info("Certificate %s verified (count=%d)", certificate_id, count)

        return VerificationOutcome(
            status=VerificationStatus.VERIFIED,
            certificate_id=certificate_id,
            certificate=public_view(certificate, verification_count=count)
        )

    async def _reject(
        self,
        certificate_id: str,
        ip_address: Optional[str],
        user_agent: Optional[str]
    ) -> VerificationOutcome:
        """Work out why no verifiable record matched and log the failure."""
        certificate = await self.repository.find_by_certificate_id(certificate_id, refresh=True)

        if certificate is None:
            outcome = VerificationOutcome(
                status=VerificationStatus.NOT_FOUND,
                certificate_id=certificate_id,
                message=NOT_FOUND_MESSAGE
            )
        elif certificate.is_revoked:
            outcome = VerificationOutcome(
                status=VerificationStatus.REVOKED,
                certificate_id=certificate_id,
                message=REVOKED_MESSAGE,
                revoked_at=certificate.revoked_at,
                revocation_reason=certificate.revocation_reason
            )
        else:
            outcome = VerificationOutcome(
                status=VerificationStatus.INVALID,
                certificate_id=certificate_id,
                message=NOT_VALID_MESSAGE
            )

        await self.audit.log_verify(
            certificate_id,
            success=False,
            ip_address=ip_address,
            user_agent=user_agent,
            error_message=outcome.message
        )
        return outcome

    async def check(self, raw_id: str) -> bool:
        """True if a non-revoked certificate exists. No audit, no counters."""
        certificate_id = normalize_certificate_id(raw_id)
        if not is_valid_format(certificate_id):
            return False
        return await self.repository.exists_active(certificate_id)

    async def search(
        self,
        recipient: Optional[str] = None,
        program: Optional[str] = None,
        authenticated: bool = False
    ) -> List[Certificate]:
        """
        Search non-revoked certificates.

        Filtering by recipient name is reserved for authenticated admins;
        anonymous callers can only filter by program.
        """
        if not authenticated:
            recipient = None
        return await self.repository.search(recipient=recipient, program=program)
