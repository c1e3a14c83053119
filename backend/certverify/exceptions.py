"""Domain exceptions raised by the service layer."""


class CertificateServiceError(Exception):
    """Base class for service errors that map to a client-facing response."""


class CertificateNotFoundError(CertificateServiceError):
    """No certificate matches the given key."""


class DuplicateCertificateError(CertificateServiceError):
    """A certificate with the same ID already exists."""


class AlreadyRevokedError(CertificateServiceError):
    """The certificate has already been revoked."""


class AuthenticationError(CertificateServiceError):
    """Credentials were rejected."""


class AccountLockedError(AuthenticationError):
    """Too many failed logins within the lockout window."""


class PasswordPolicyError(CertificateServiceError):
    """New password does not meet the password rules."""
