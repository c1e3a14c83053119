"""Standard HTTP exceptions for common cases."""
from typing import Optional
from fastapi import HTTPException, status


def not_found(resource: str = "Resource", resource_id: Optional[int] = None) -> HTTPException:
    """
    Return 404 Not Found exception.

    Examples:
        raise not_found("Certificate", 123)  # "Certificate with ID 123 not found"
        raise not_found("Admin")              # "Admin not found"
    """
    detail = f"{resource} not found"
    if resource_id:
        detail = f"{resource} with ID {resource_id} not found"
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=detail
    )


def forbidden(message: str = "You do not have permission to perform this action") -> HTTPException:
    """Return 403 Forbidden exception."""
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail=message
    )


def bad_request(message: str) -> HTTPException:
    """
    Return 400 Bad Request exception.

    Examples:
        raise bad_request("Invalid certificate ID format")
    """
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=message
    )


def conflict(message: str) -> HTTPException:
    """
    Return 409 Conflict exception.

    Examples:
        raise conflict("Certificate ID already exists")
        raise conflict("Certificate is already revoked")
    """
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=message
    )


def unauthorized(message: str = "Invalid username or password") -> HTTPException:
    """Return 401 Unauthorized exception with a Bearer challenge."""
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=message,
        headers={"WWW-Authenticate": "Bearer"},
    )


def account_locked(message: str = "Account is locked due to too many failed login attempts") -> HTTPException:
    """Return 429 Too Many Requests exception for a locked account."""
    return HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail=message
    )
