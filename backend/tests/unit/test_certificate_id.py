"""
Unit tests for certificate ID parsing and validation.

Tests format checks, decoding, range boundaries and IP history tracking.
"""

from datetime import datetime, timedelta, timezone

import pytest

from certverify.utils.certificate_id import (
    CertificateIdError,
    MAX_TRACKED_IPS,
    decode,
    encode,
    is_valid_format,
    normalize_certificate_id,
    track_ip,
    validate_certificate_id,
)


@pytest.mark.unit
class TestFormat:
    """Test the 7-digit format rule."""

    @pytest.mark.parametrize("raw", ["", "250100", "25010011", "25O1001", "2501-01", "abcdefg", "２５０１００１"])
    def test_rejects_non_seven_digit_input(self, raw):
        """Anything that is not exactly seven ASCII digits is InvalidFormat."""
        result = validate_certificate_id(raw)

        assert result.valid is False
        assert result.error == CertificateIdError.INVALID_FORMAT
        assert result.message == "Certificate ID must be 7 digits (Format: YYSSCCC)"
        assert result.decoded is None

    def test_trims_whitespace(self):
        """Surrounding whitespace is ignored."""
        result = validate_certificate_id("  2501001\n")

        assert result.valid is True
        assert result.decoded.id == "2501001"

    def test_normalize_uppercases(self):
        """Normalization trims and upper-cases."""
        assert normalize_certificate_id(" ab12 ") == "AB12"
        assert normalize_certificate_id(None) == ""

    def test_is_valid_format(self):
        """Format check alone does not look at ranges."""
        assert is_valid_format("0000000") is True
        assert is_valid_format("000000") is False


@pytest.mark.unit
class TestDecode:
    """Test splitting an ID into its parts."""

    def test_decode_slices(self):
        """Year, sub-program and serial come from fixed positions."""
        decoded = decode("2501001")

        assert decoded.id == "2501001"
        assert decoded.year == "2025"
        assert decoded.sub_program == "01"
        assert decoded.serial == "001"
        assert decoded.serial_display == "1"
        assert decoded.program_label == "Online Chapter"

    def test_serial_display_keeps_zero(self):
        """An all-zero serial displays as 0."""
        assert decode("2500000").serial_display == "0"

    def test_unmapped_sub_program_has_no_label(self):
        """Codes outside the table decode without a label."""
        assert decode("2547001").program_label is None

    @pytest.mark.parametrize("year,sub_program,serial", [(2025, 1, 1), (2099, 3, 999), (2020, 0, 42)])
    def test_encode_round_trip(self, year, sub_program, serial):
        """Encoding then decoding returns the same parts."""
        certificate_id = encode(year, sub_program, serial)
        decoded = decode(certificate_id)

        assert decoded.year == str(year)
        assert int(decoded.sub_program) == sub_program
        assert int(decoded.serial) == serial


@pytest.mark.unit
class TestRanges:
    """Test year and serial boundaries."""

    def test_year_boundaries(self):
        """Year digits must be between 20 and 99."""
        assert validate_certificate_id("1999001").error == CertificateIdError.INVALID_YEAR
        assert validate_certificate_id("2000001").valid is True
        assert validate_certificate_id("9999001").valid is True

    def test_year_message(self):
        result = validate_certificate_id("1501001")

        assert result.message == "Invalid year in certificate ID"

    def test_serial_zero_rejected(self):
        """Serial 000 is below the minimum."""
        result = validate_certificate_id("2501000")

        assert result.valid is False
        assert result.error == CertificateIdError.INVALID_SERIAL
        assert result.message == "Invalid serial number"

    def test_serial_upper_bound(self):
        """The largest three-digit serial is accepted."""
        assert validate_certificate_id("2501999").valid is True

    def test_year_checked_before_serial(self):
        """The first failing rule wins."""
        assert validate_certificate_id("1001000").error == CertificateIdError.INVALID_YEAR

    @pytest.mark.parametrize("sub_program", ["00", "47", "99"])
    def test_any_two_digit_sub_program_accepted(self, sub_program):
        """Every two-digit sub-program passes the range check."""
        assert validate_certificate_id(f"25{sub_program}001").valid is True


@pytest.mark.unit
class TestTrackIp:
    """Test the bounded IP history."""

    def test_appends_new_ip(self):
        now = datetime(2025, 1, 1, tzinfo=timezone.utc)

        history = track_ip([], "10.0.0.1", now=now)

        assert history == [{"ip": "10.0.0.1", "verified_at": now.isoformat()}]

    def test_repeat_ip_refreshes_timestamp(self):
        """A known IP keeps its position and gets a new timestamp."""
        start = datetime(2025, 1, 1, tzinfo=timezone.utc)
        history = track_ip([], "10.0.0.1", now=start)
        history = track_ip(history, "10.0.0.2", now=start)

        later = start + timedelta(hours=1)
        history = track_ip(history, "10.0.0.1", now=later)

        assert [entry["ip"] for entry in history] == ["10.0.0.1", "10.0.0.2"]
        assert history[0]["verified_at"] == later.isoformat()

    def test_evicts_oldest_at_capacity(self):
        """The eleventh distinct IP pushes out the first."""
        history = []
        for i in range(MAX_TRACKED_IPS + 1):
            history = track_ip(history, f"10.0.0.{i}")

        ips = [entry["ip"] for entry in history]
        assert len(ips) == MAX_TRACKED_IPS
        assert "10.0.0.0" not in ips
        assert ips[-1] == f"10.0.0.{MAX_TRACKED_IPS}"

    def test_missing_ip_leaves_history_unchanged(self):
        history = [{"ip": "10.0.0.1", "verified_at": "x"}]

        assert track_ip(history, None) == history

    def test_does_not_mutate_input(self):
        history = [{"ip": "10.0.0.1", "verified_at": "x"}]

        track_ip(history, "10.0.0.1")

        assert history == [{"ip": "10.0.0.1", "verified_at": "x"}]
