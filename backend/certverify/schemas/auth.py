"""Pydantic schemas for authentication."""
from datetime import datetime
from typing import Optional, Dict
from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Login request schema."""

    username: str = Field(..., min_length=3, max_length=30, description="Admin username")
    password: str = Field(..., min_length=8, description="Password")


class AdminResponse(BaseModel):
    """Admin profile returned on login and by /me."""

    id: int
    username: str
    email: str
    full_name: str
    role: str
    permissions: Dict[str, bool]
    is_active: bool
    last_login: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }


class LoginResponse(BaseModel):
    """Login response schema."""

    message: str
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # Seconds until the access token expires
    admin: AdminResponse


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1, description="Refresh token from login")


class RefreshResponse(BaseModel):
    message: str
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class LogoutResponse(BaseModel):
    message: str


class PasswordChangeRequest(BaseModel):
    """Password change request schema."""

    current_password: str = Field(..., min_length=1, description="Current password")
    new_password: str = Field(..., min_length=8, description="New password (minimum 8 characters)")


class PasswordChangeResponse(BaseModel):
    message: str
    success: bool = True
