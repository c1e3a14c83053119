"""Pydantic schemas for certificates."""
from datetime import date, datetime
from typing import Optional, List
from pydantic import BaseModel, EmailStr, Field, field_validator

from certverify.models.certificate import Program, ProgramCategory
from certverify.api.utils.validation import NAME_PATTERN, sanitize_input, normalize_email
from certverify.utils.certificate_id import normalize_certificate_id, validate_certificate_id


def _check_recipient_name(value: str) -> str:
    value = sanitize_input(value)
    if len(value) < 2 or len(value) > 100:
        raise ValueError("Recipient name must be 2-100 characters")
    if not NAME_PATTERN.match(value):
        raise ValueError("Invalid characters in name")
    return value


class CertificateCreate(BaseModel):
    """Create certificate request schema."""

    certificate_id: str = Field(..., description="7-digit YYSSCCC identifier")
    recipient_name: str
    recipient_email: EmailStr
    program: Program
    program_category: ProgramCategory
    award_date: date
    notes: Optional[str] = Field(None, max_length=500)
    certificate_url: Optional[str] = Field(None, max_length=500)

    @field_validator("certificate_id")
    @classmethod
    def check_certificate_id(cls, value: str) -> str:
        result = validate_certificate_id(value)
        if not result.valid:
            raise ValueError(result.message)
        return normalize_certificate_id(value)

    @field_validator("recipient_name")
    @classmethod
    def check_recipient_name(cls, value: str) -> str:
        return _check_recipient_name(value)

    @field_validator("recipient_email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator("notes")
    @classmethod
    def clean_notes(cls, value: Optional[str]) -> Optional[str]:
        return sanitize_input(value) or None


class CertificateUpdate(BaseModel):
    """
    Partial update schema.

    Only recipient details, award date and notes are editable; the ID and
    program are fixed once issued.
    """

    recipient_name: Optional[str] = None
    recipient_email: Optional[EmailStr] = None
    award_date: Optional[date] = None
    notes: Optional[str] = Field(None, max_length=500)

    model_config = {
        "extra": "forbid"
    }

    @field_validator("recipient_name")
    @classmethod
    def check_recipient_name(cls, value: Optional[str]) -> Optional[str]:
        return _check_recipient_name(value) if value is not None else value

    @field_validator("recipient_email")
    @classmethod
    def lower_email(cls, value: Optional[str]) -> Optional[str]:
        return normalize_email(value) if value is not None else value

    @field_validator("notes")
    @classmethod
    def clean_notes(cls, value: Optional[str]) -> Optional[str]:
        return sanitize_input(value) or None


class RevokeRequest(BaseModel):
    """Revoke certificate request schema."""

    reason: Optional[str] = Field(None, max_length=200)

    @field_validator("reason")
    @classmethod
    def clean_reason(cls, value: Optional[str]) -> Optional[str]:
        return sanitize_input(value) or None


class CertificateResponse(BaseModel):
    """Admin view of a certificate (IP history excluded)."""

    id: int
    certificate_id: str
    recipient_name: str
    recipient_email: str
    program: str
    program_category: str
    award_date: date
    issued_by: str
    certificate_url: Optional[str] = None
    notes: Optional[str] = None
    is_verified: bool
    verification_count: int
    last_verified_at: Optional[datetime] = None
    is_revoked: bool
    revoked_at: Optional[datetime] = None
    revocation_reason: Optional[str] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }


class CertificateListResponse(BaseModel):
    """Paginated certificate list."""

    page: int
    limit: int
    total: int
    pages: int
    certificates: List[CertificateResponse]


class CertificateMutationResponse(BaseModel):
    message: str
    certificate: CertificateResponse


class MessageResponse(BaseModel):
    message: str


class PublicCertificate(BaseModel):
    """Public projection returned by a successful verification."""

    certificate_id: str
    recipient_name: str
    program: str
    program_category: str
    program_label: Optional[str] = None
    award_date: date
    issued_by: str
    year: str
    serial_number: str
    verification_count: int


class VerificationResponse(BaseModel):
    verified: bool
    certificate: PublicCertificate


class CheckResponse(BaseModel):
    exists: bool
    certificate_id: str


class SearchResult(BaseModel):
    certificate_id: str
    program: str
    award_date: date

    model_config = {
        "from_attributes": True
    }


class SearchResponse(BaseModel):
    count: int
    results: List[SearchResult]
