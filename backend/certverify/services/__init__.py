"""Service layer."""
from certverify.services.audit_service import AuditService
from certverify.services.auth_service import AuthService
from certverify.services.certificate_service import CertificateService
from certverify.services.verification_service import VerificationService

__all__ = [
    "AuditService",
    "AuthService",
    "CertificateService",
    "VerificationService",
]
