"""Security utilities for password hashing and JSON Web Tokens."""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from certverify.config import get_settings

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


class TokenError(Exception):
    """Raised when a token cannot be used."""


class TokenExpiredError(TokenError):
    """Signature is valid but the token has expired."""


class InvalidTokenError(TokenError):
    """Malformed token, bad signature, or wrong token type."""


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash."""
    return pwd_context.verify(plain_password, hashed_password)


def _encode(claims: Dict[str, Any], key: str, expires_delta: timedelta, token_type: str) -> str:
    settings = get_settings()
    now = datetime.now(timezone.utc)
    to_encode = dict(claims)
    to_encode.update({"iat": now, "exp": now + expires_delta, "type": token_type})
    return jwt.encode(to_encode, key, algorithm=settings.JWT_ALGORITHM)


def create_access_token(claims: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Create a short-lived access token carrying identity, role and permissions."""
    settings = get_settings()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return _encode(claims, settings.jwt_access_key, expires_delta, ACCESS_TOKEN_TYPE)


def create_refresh_token(claims: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Create a refresh token, signed with its own key."""
    settings = get_settings()
    if expires_delta is None:
        expires_delta = timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    return _encode(claims, settings.jwt_refresh_key, expires_delta, REFRESH_TOKEN_TYPE)


def decode_token(token: str, token_type: str = ACCESS_TOKEN_TYPE) -> Dict[str, Any]:
    """
    Decode and verify a token.

    Raises:
        TokenExpiredError: If the token has expired
        InvalidTokenError: If the signature or token type is wrong
    """
    settings = get_settings()
    key = settings.jwt_refresh_key if token_type == REFRESH_TOKEN_TYPE else settings.jwt_access_key
    try:
        payload = jwt.decode(token, key, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError as e:
        raise TokenExpiredError("Token has expired") from e
    except JWTError as e:
        raise InvalidTokenError("Invalid token") from e

    if payload.get("type") != token_type:
        raise InvalidTokenError("Invalid token type")

    return payload
