"""Pydantic schemas for audit logs and analytics."""
from datetime import datetime
from typing import Optional, List, Dict, Any
from pydantic import BaseModel


class AuditLogResponse(BaseModel):
    """Audit log entry response."""

    id: int
    action: str
    entity_type: str
    entity_id: Optional[str]
    status: str
    performed_by: Optional[int]
    performed_by_username: Optional[str]
    details: Optional[Dict[str, Any]]
    error_message: Optional[str]
    changes: Optional[Dict[str, Any]]
    ip_address: Optional[str]
    user_agent: Optional[str]
    created_at: Optional[datetime]

    model_config = {
        "from_attributes": True
    }


class AuditLogListResponse(BaseModel):
    """Response for audit log list with pagination."""

    page: int
    limit: int
    total: int
    pages: int
    logs: List[AuditLogResponse]


class AnalyticsSummary(BaseModel):
    total: int
    active: int
    verified: int
    revoked: int


class ProgramCount(BaseModel):
    program: str
    count: int


class AnalyticsResponse(BaseModel):
    summary: AnalyticsSummary
    by_program: List[ProgramCount]
    recent_verifications: List[AuditLogResponse]
