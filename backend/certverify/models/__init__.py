"""SQLAlchemy models."""
from certverify.models.admin import Admin, AdminRole, PERMISSION_FLAGS
from certverify.models.certificate import Certificate, Program, ProgramCategory
from certverify.models.audit_log import AuditLog, AuditAction, AuditEntity, AuditStatus

__all__ = [
    "Admin",
    "AdminRole",
    "PERMISSION_FLAGS",
    "Certificate",
    "Program",
    "ProgramCategory",
    "AuditLog",
    "AuditAction",
    "AuditEntity",
    "AuditStatus",
]
