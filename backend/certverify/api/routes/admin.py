"""Admin certificate management API routes."""
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request, status

from certverify.dependencies import (
    get_db,
    get_certificate_service,
    require_permission,
    require_role,
)
from certverify.exceptions import (
    AlreadyRevokedError,
    CertificateNotFoundError,
    DuplicateCertificateError,
)
from certverify.models.admin import Admin, AdminRole
from certverify.models.audit_log import AuditAction
from certverify.services.audit_service import AuditService
from certverify.services.certificate_service import CertificateService
from certverify.schemas.certificate import (
    CertificateCreate,
    CertificateListResponse,
    CertificateMutationResponse,
    CertificateResponse,
    CertificateUpdate,
    MessageResponse,
    RevokeRequest,
)
from certverify.schemas.audit import AnalyticsResponse, AuditLogListResponse, AuditLogResponse
from certverify.api.exceptions import not_found, conflict
from certverify.api.utils.pagination import page_count, page_offset, DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from certverify.api.utils.request import extract_client_metadata
from sqlalchemy.ext.asyncio import AsyncSession


router = APIRouter(prefix="/api/admin", tags=["Admin"])

# Roles allowed to browse certificates and audit logs
CERTIFICATE_READ_ROLES = (AdminRole.SUPER_ADMIN, AdminRole.ADMIN, AdminRole.MODERATOR)
AUDIT_READ_ROLES = (AdminRole.SUPER_ADMIN, AdminRole.ADMIN)


@router.post(
    "/certificates",
    response_model=CertificateMutationResponse,
    status_code=status.HTTP_201_CREATED
)
async def create_certificate(
    data: CertificateCreate,
    request: Request,
    current_admin: Admin = Depends(require_permission("can_create_certificates")),
    service: CertificateService = Depends(get_certificate_service)
):
    """Issue a new certificate. Requires can_create_certificates."""
    ip_address, user_agent = extract_client_metadata(request)
    try:
        certificate = await service.create(data, current_admin, ip_address=ip_address, user_agent=user_agent)
    except DuplicateCertificateError as e:
        raise conflict(str(e))

    return CertificateMutationResponse(
        message="Certificate created successfully",
        certificate=CertificateResponse.model_validate(certificate)
    )


@router.get("/certificates", response_model=CertificateListResponse)
async def list_certificates(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    current_admin: Admin = Depends(require_role(*CERTIFICATE_READ_ROLES)),
    service: CertificateService = Depends(get_certificate_service)
):
    """List certificates, newest first. IP history is never included."""
    offset = page_offset(page, limit)
    total, certificates = await service.list_certificates(offset, limit)
    pages = page_count(total, limit)

    return CertificateListResponse(
        page=page,
        limit=limit,
        total=total,
        pages=pages,
        certificates=[CertificateResponse.model_validate(c) for c in certificates]
    )


@router.get("/certificates/{certificate_pk}", response_model=CertificateResponse)
async def get_certificate(
    certificate_pk: int,
    current_admin: Admin = Depends(require_role(*CERTIFICATE_READ_ROLES)),
    service: CertificateService = Depends(get_certificate_service)
):
    """Get a single certificate by its internal ID."""
    try:
        certificate = await service.get(certificate_pk)
    except CertificateNotFoundError:
        raise not_found("Certificate", certificate_pk)
    return CertificateResponse.model_validate(certificate)


@router.put("/certificates/{certificate_pk}", response_model=CertificateMutationResponse)
async def update_certificate(
    certificate_pk: int,
    data: CertificateUpdate,
    request: Request,
    current_admin: Admin = Depends(require_permission("can_edit_certificates")),
    service: CertificateService = Depends(get_certificate_service)
):
    """Update recipient name, email, award date or notes. Requires can_edit_certificates."""
    ip_address, user_agent = extract_client_metadata(request)
    try:
        certificate = await service.update(
            certificate_pk, data, current_admin, ip_address=ip_address, user_agent=user_agent
        )
    except CertificateNotFoundError:
        raise not_found("Certificate", certificate_pk)

    return CertificateMutationResponse(
        message="Certificate updated successfully",
        certificate=CertificateResponse.model_validate(certificate)
    )


@router.delete("/certificates/{certificate_pk}", response_model=MessageResponse)
async def delete_certificate(
    certificate_pk: int,
    request: Request,
    current_admin: Admin = Depends(require_permission("can_delete_certificates")),
    service: CertificateService = Depends(get_certificate_service)
):
    """Permanently delete a certificate. Requires can_delete_certificates."""
    ip_address, user_agent = extract_client_metadata(request)
    try:
        await service.delete(certificate_pk, current_admin, ip_address=ip_address, user_agent=user_agent)
    except CertificateNotFoundError:
        raise not_found("Certificate", certificate_pk)

    return MessageResponse(message="Certificate deleted successfully")


@router.post("/certificates/{certificate_pk}/revoke", response_model=CertificateMutationResponse)
async def revoke_certificate(
    certificate_pk: int,
    request: Request,
    data: Optional[RevokeRequest] = None,
    current_admin: Admin = Depends(require_permission("can_revoke_certificates")),
    service: CertificateService = Depends(get_certificate_service)
):
    """Revoke a certificate. Requires can_revoke_certificates."""
    ip_address, user_agent = extract_client_metadata(request)
    try:
        certificate = await service.revoke(
            certificate_pk,
            current_admin,
            reason=data.reason if data else None,
            ip_address=ip_address,
            user_agent=user_agent
        )
    except CertificateNotFoundError:
        raise not_found("Certificate", certificate_pk)
    except AlreadyRevokedError as e:
        raise conflict(str(e))

    return CertificateMutationResponse(
        message="Certificate revoked successfully",
        certificate=CertificateResponse.model_validate(certificate)
    )


@router.get("/analytics", response_model=AnalyticsResponse)
async def get_analytics(
    current_admin: Admin = Depends(require_permission("can_view_analytics")),
    service: CertificateService = Depends(get_certificate_service)
):
    """Certificate totals, active certificates per program and the latest verifications."""
    data = await service.analytics()
    return AnalyticsResponse(
        summary=data["summary"],
        by_program=data["by_program"],
        recent_verifications=[AuditLogResponse.model_validate(log) for log in data["recent_verifications"]]
    )


@router.get("/audit-logs", response_model=AuditLogListResponse)
async def list_audit_logs(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=MAX_PAGE_LIMIT),
    action: Optional[AuditAction] = Query(None, description="Filter by action"),
    current_admin: Admin = Depends(require_role(*AUDIT_READ_ROLES)),
    db: AsyncSession = Depends(get_db)
):
    """List audit log entries, newest first."""
    audit_service = AuditService(db)
    offset = page_offset(page, limit)
    total, logs = await audit_service.list_logs(
        offset=offset,
        limit=limit,
        action=action.value if action else None
    )
    pages = page_count(total, limit)

    return AuditLogListResponse(
        page=page,
        limit=limit,
        total=total,
        pages=pages,
        logs=[AuditLogResponse.model_validate(log) for log in logs]
    )
