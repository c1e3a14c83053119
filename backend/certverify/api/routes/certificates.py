"""Public certificate verification API routes."""
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from certverify.dependencies import get_verification_service, get_optional_admin
from certverify.models.admin import Admin
from certverify.models.certificate import Program
from certverify.services.verification_service import VerificationService, VerificationStatus
from certverify.schemas.certificate import (
    CheckResponse,
    PublicCertificate,
    SearchResponse,
    SearchResult,
    VerificationResponse,
)
from certverify.api.utils.request import extract_client_metadata
from certverify.api.utils.validation import NAME_PATTERN, sanitize_input
from certverify.utils.certificate_id import normalize_certificate_id


router = APIRouter(prefix="/api/certificates", tags=["Certificates"])


@router.get(
    "/verify/{certificate_id}",
    response_model=VerificationResponse,
    responses={400: {}, 404: {}, 410: {}}
)
async def verify_certificate(
    certificate_id: str,
    request: Request,
    service: VerificationService = Depends(get_verification_service)
):
    """
    Verify a certificate by its 7-digit ID.

    Returns 200 with the public certificate details, 400 for a malformed ID,
    404 when no certificate matches and 410 when it has been revoked.
    Each successful call increments the certificate's verification count.
    """
    ip_address, user_agent = extract_client_metadata(request)
    outcome = await service.verify(certificate_id, ip_address=ip_address, user_agent=user_agent)

    if outcome.status == VerificationStatus.VERIFIED:
        return VerificationResponse(
            verified=True,
            certificate=PublicCertificate(**outcome.certificate)
        )

    if outcome.status == VerificationStatus.NOT_FOUND:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": "Not Found", "message": outcome.message, "verified": False}
        )

    if outcome.status == VerificationStatus.REVOKED:
        return JSONResponse(
            status_code=status.HTTP_410_GONE,
            content=jsonable_encoder({
                "error": "Revoked",
                "message": outcome.message,
                "verified": False,
                "revoked_at": outcome.revoked_at,
                "revocation_reason": outcome.revocation_reason,
            })
        )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": outcome.error or "Invalid",
            "message": outcome.message,
            "verified": False,
        }
    )


@router.get("/check/{certificate_id}", response_model=CheckResponse)
async def check_certificate(
    certificate_id: str,
    service: VerificationService = Depends(get_verification_service)
):
    """Check whether a non-revoked certificate exists, without counting a verification."""
    exists = await service.check(certificate_id)
    return CheckResponse(exists=exists, certificate_id=normalize_certificate_id(certificate_id))


@router.get("/search", response_model=SearchResponse)
async def search_certificates(
    recipient: Optional[str] = Query(None, min_length=2, max_length=100, pattern=NAME_PATTERN.pattern),
    program: Optional[Program] = Query(None),
    current_admin: Optional[Admin] = Depends(get_optional_admin),
    service: VerificationService = Depends(get_verification_service)
):
    """
    Search active certificates.

    Anonymous callers may filter by program only; the recipient filter is
    applied for authenticated admins. At most 20 results are returned.
    """
    certificates = await service.search(
        recipient=sanitize_input(recipient, max_length=100),
        program=program.value if program else None,
        authenticated=current_admin is not None
    )
    results = [SearchResult.model_validate(certificate) for certificate in certificates]
    return SearchResponse(count=len(results), results=results)
