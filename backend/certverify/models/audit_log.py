"""Audit logging model."""
import enum
from sqlalchemy import Column, Integer, String, TIMESTAMP, ForeignKey, Text, JSON, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from certverify.database import Base


class AuditAction(str, enum.Enum):
    CREATE = "CREATE"
    READ = "READ"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    VERIFY = "VERIFY"
    REVOKE = "REVOKE"
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"


class AuditEntity(str, enum.Enum):
    CERTIFICATE = "CERTIFICATE"
    ADMIN = "ADMIN"
    USER = "USER"


class AuditStatus(str, enum.Enum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class AuditLog(Base):
    """Append-only audit trail entry. Rows are never updated."""

    __tablename__ = "audit_logs"

    # Primary Key
    id = Column(Integer, primary_key=True, index=True)

    # Action Details
    action = Column(String(20), nullable=False)
    entity_type = Column(String(20), nullable=False)
    entity_id = Column(String(50), nullable=True)  # Certificate ID or admin ID
    status = Column(String(10), default=AuditStatus.SUCCESS.value, nullable=False)

    # Actor (empty for public actions)
    performed_by = Column(Integer, ForeignKey('admins.id', ondelete='SET NULL'), nullable=True)
    performed_by_username = Column(String(30), nullable=True)

    # Payload
    details = Column(JSON, nullable=True)  # Shape depends on action, see AuditService
    error_message = Column(Text, nullable=True)
    changes = Column(JSON, nullable=True)  # {"before": {...}, "after": {...}}

    # Request Info
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(Text, nullable=True)

    # Timestamp
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    # Relationships
    admin = relationship("Admin", backref="audit_logs")

    # Indexes
    __table_args__ = (
        Index('idx_audit_logs_entity', 'entity_type', 'entity_id'),
        Index('idx_audit_logs_performed_by', 'performed_by'),
        Index('idx_audit_logs_action', 'action'),
        Index('idx_audit_logs_created_at', 'created_at'),
    )

    def __repr__(self):
        return f"<AuditLog(id={self.id}, action={self.action}, status={self.status})>"
