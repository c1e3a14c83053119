"""Validation utilities shared by request schemas."""
import re
from typing import Optional

NAME_PATTERN = re.compile(r"^[a-zA-Z\s'-]+$")
USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")
PASSWORD_SPECIALS = "@$!%*?&"
MIN_PASSWORD_LENGTH = 8


def sanitize_input(value: Optional[str], max_length: int = 1000) -> Optional[str]:
    """
    Strip whitespace and angle brackets from free text.

    Examples:
        >>> sanitize_input("  <b>Jane</b> ")
        'bJane/b'
    """
    if value is None:
        return None
    return value.strip().replace("<", "").replace(">", "")[:max_length]


def normalize_email(email: str) -> str:
    """Lowercase and trim an email address."""
    return email.strip().lower() if email else email


def password_policy_violation(password: str) -> Optional[str]:
    """
    Check a new password against the complexity rules.

    Returns:
        A message describing the first failed rule, or None when the password
        is acceptable
    """
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    if not (
        re.search(r"[a-z]", password)
        and re.search(r"[A-Z]", password)
        and re.search(r"\d", password)
        and any(c in PASSWORD_SPECIALS for c in password)
    ):
        return "Password must contain uppercase, lowercase, number, and special character"
    return None
