"""Certificate record model."""
import enum
from sqlalchemy import Column, Integer, String, Boolean, TIMESTAMP, Text, Date, JSON, Index
from sqlalchemy.sql import func
from certverify.database import Base


class Program(str, enum.Enum):
    """Programs a certificate can be awarded for."""
    WEB_DEVELOPMENT = "Web Development"
    MOBILE_DEVELOPMENT = "Mobile Development"
    MACHINE_LEARNING = "Machine Learning"
    ALGORITHMS = "Algorithms & Data Structures"
    PROGRAMMING_FUNDAMENTALS = "Programming Fundamentals"
    FULL_STACK = "Full Stack Development"
    CLOUD_COMPUTING = "Cloud Computing"
    CYBERSECURITY = "Cybersecurity"
    OTHER = "Other"


class ProgramCategory(str, enum.Enum):
    """Issuing program track, encoded in positions 3-4 of the certificate ID."""
    MAIN_CLUB = "00"
    ONLINE_CHAPTER = "01"
    BOOTCAMP = "02"
    ADVANCED_TRACK = "03"


class Certificate(Base):
    """
    Issued certificate keyed by its 7-digit YYSSCCC identifier.

    ip_addresses holds at most 10 distinct {"ip", "verified_at"} entries,
    oldest first.
    """

    __tablename__ = "certificates"

    # Primary Key
    id = Column(Integer, primary_key=True, index=True)

    # Public identifier
    certificate_id = Column(String(7), unique=True, nullable=False, index=True)

    # Recipient
    recipient_name = Column(String(100), nullable=False)
    recipient_email = Column(String(255), nullable=False, index=True)

    # Program
    program = Column(String(50), nullable=False)
    program_category = Column(String(2), nullable=False)
    award_date = Column(Date, nullable=False)

    # Verification
    verification_hash = Column(String(64), unique=True, nullable=False)
    is_verified = Column(Boolean, default=True, nullable=False, index=True)
    verification_count = Column(Integer, default=0, nullable=False)
    last_verified_at = Column(TIMESTAMP(timezone=True), nullable=True)
    ip_addresses = Column(JSON, default=list, nullable=False)

    # Metadata
    issued_by = Column(String(100), nullable=False)
    certificate_url = Column(String(500), nullable=True)
    notes = Column(Text, nullable=True)

    # Revocation
    is_revoked = Column(Boolean, default=False, nullable=False, index=True)
    revoked_at = Column(TIMESTAMP(timezone=True), nullable=True)
    revocation_reason = Column(Text, nullable=True)

    # Audit fields
    created_by = Column(String(30), nullable=True)
    updated_by = Column(String(30), nullable=True)

    # Timestamps
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index('idx_certificates_award_date', 'award_date'),
        Index('idx_certificates_created_at', 'created_at'),
    )

    @property
    def year(self) -> str:
        return "20" + self.certificate_id[0:2]

    @property
    def serial_number(self) -> str:
        return self.certificate_id[4:7]

    def __repr__(self):
        return f"<Certificate(id={self.id}, certificate_id={self.certificate_id}, revoked={self.is_revoked})>"
