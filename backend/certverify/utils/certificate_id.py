"""
Certificate ID parsing and validation.

Certificate IDs are seven digits in YYSSCCC form:

- YY  = award year (25 = 2025), accepted range 20-99
- SS  = sub-program code (01 = Online Chapter)
- CCC = serial number within the year and sub-program
"""
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional


CERTIFICATE_ID_PATTERN = re.compile(r"^[0-9]{7}$")

SUB_PROGRAM_LABELS = {
    "00": "Main Club",
    "01": "Online Chapter",
    "02": "Bootcamp",
    "03": "Advanced Track",
}

MIN_YEAR_DIGITS = 20
MAX_YEAR_DIGITS = 99
MIN_SERIAL = 1
# Three serial digits cap real IDs at 999; the published range stays 9999.
MAX_SERIAL = 9999

MAX_TRACKED_IPS = 10


class CertificateIdError:
    """Validator failure codes."""
    INVALID_FORMAT = "InvalidFormat"
    INVALID_YEAR = "InvalidYear"
    INVALID_SUB_PROGRAM = "InvalidSubProgram"
    INVALID_SERIAL = "InvalidSerial"


ERROR_MESSAGES = {
    CertificateIdError.INVALID_FORMAT: "Certificate ID must be 7 digits (Format: YYSSCCC)",
    CertificateIdError.INVALID_YEAR: "Invalid year in certificate ID",
    CertificateIdError.INVALID_SUB_PROGRAM: "Invalid sub-program code",
    CertificateIdError.INVALID_SERIAL: "Invalid serial number",
}


@dataclass(frozen=True)
class DecodedCertificateId:
    id: str
    year: str
    sub_program: str
    serial: str
    serial_display: str

    @property
    def program_label(self) -> Optional[str]:
        return SUB_PROGRAM_LABELS.get(self.sub_program)


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    decoded: Optional[DecodedCertificateId] = None
    error: Optional[str] = None
    message: Optional[str] = None


def normalize_certificate_id(raw: str) -> str:
    """Trim and upper-case a user supplied ID."""
    return (raw or "").strip().upper()


def is_valid_format(certificate_id: str) -> bool:
    return bool(CERTIFICATE_ID_PATTERN.fullmatch(str(certificate_id)))


def decode(certificate_id: str) -> DecodedCertificateId:
    """
    Split a 7-digit ID into its parts.

    The caller is responsible for checking the format first.

    Example:
        >>> decode("2501001")
        DecodedCertificateId(id='2501001', year='2025', sub_program='01', serial='001', serial_display='1')
    """
    serial = certificate_id[4:7]
    return DecodedCertificateId(
        id=certificate_id,
        year="20" + certificate_id[0:2],
        sub_program=certificate_id[2:4],
        serial=serial,
        serial_display=serial.lstrip("0") or "0",
    )


def encode(year: int, sub_program: int, serial: int) -> str:
    """Build an ID from its parts, e.g. encode(2025, 1, 1) -> "2501001"."""
    return f"{year % 100:02d}{sub_program:02d}{serial:03d}"


def _failure(code: str) -> ValidationResult:
    return ValidationResult(valid=False, error=code, message=ERROR_MESSAGES[code])


def validate_certificate_id(raw: str) -> ValidationResult:
    """
    Validate a raw certificate ID. The first failing rule wins.

    Args:
        raw: User supplied ID (trimmed and upper-cased before checking)

    Returns:
        ValidationResult with the decoded ID on success, or the error code and
        a human readable message on failure
    """
    certificate_id = normalize_certificate_id(raw)

    if not is_valid_format(certificate_id):
        return _failure(CertificateIdError.INVALID_FORMAT)

    decoded = decode(certificate_id)

    year_digits = int(certificate_id[0:2])
    if year_digits < MIN_YEAR_DIGITS or year_digits > MAX_YEAR_DIGITS:
        return _failure(CertificateIdError.INVALID_YEAR)

    # Always within 0-99 for two digits.
    sub_program = int(decoded.sub_program)
    if sub_program < 0 or sub_program > 99:
        return _failure(CertificateIdError.INVALID_SUB_PROGRAM)

    serial = int(decoded.serial)
    if serial < MIN_SERIAL or serial > MAX_SERIAL:
        return _failure(CertificateIdError.INVALID_SERIAL)

    return ValidationResult(valid=True, decoded=decoded)


def track_ip(
    history: Optional[List[dict]],
    ip: Optional[str],
    now: Optional[datetime] = None,
    limit: int = MAX_TRACKED_IPS
) -> List[dict]:
    """
    Return a new IP history with ip recorded.

    A known IP has its timestamp refreshed in place. A new IP is appended,
    evicting the oldest entries once the list holds `limit` addresses.
    """
    entries = [dict(entry) for entry in (history or [])]
    if not ip:
        return entries

    stamp = (now or datetime.now(timezone.utc)).isoformat()

    for entry in entries:
        if entry.get("ip") == ip:
            entry["verified_at"] = stamp
            return entries

    entries.append({"ip": ip, "verified_at": stamp})
    return entries[-limit:]
