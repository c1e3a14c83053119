"""
Unit tests for security utilities.

Tests password hashing, password rules and JSON Web Token handling.
"""

from datetime import timedelta

import pytest
from jose import jwt

from certverify.config import get_settings
from certverify.api.utils.validation import password_policy_violation, sanitize_input
from certverify.utils.security import (
    InvalidTokenError,
    REFRESH_TOKEN_TYPE,
    TokenExpiredError,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)


@pytest.mark.unit
@pytest.mark.security
class TestPasswordHashing:
    """Test password hashing functions."""

    def test_hash_password(self):
        """Test password hashing produces a bcrypt hash."""
        hashed = hash_password("Passw0rd!")

        assert hashed != "Passw0rd!"
        assert hashed.startswith("$2b$")

    def test_verify_password(self):
        """Test verification with the right and the wrong password."""
        hashed = hash_password("Passw0rd!")

        assert verify_password("Passw0rd!", hashed) is True
        assert verify_password("passw0rd!", hashed) is False

    def test_hash_is_salted(self):
        """Hashing the same password twice gives different hashes."""
        assert hash_password("Passw0rd!") != hash_password("Passw0rd!")


@pytest.mark.unit
@pytest.mark.security
class TestPasswordPolicy:
    """Test the complexity rules for new passwords."""

    def test_accepts_strong_password(self):
        assert password_policy_violation("Str0ng&Secure") is None

    def test_rejects_short_password(self):
        assert "at least 8" in password_policy_violation("Aa1!")

    @pytest.mark.parametrize("password", ["alllower1!", "ALLUPPER1!", "NoDigits!!", "NoSpecial11"])
    def test_rejects_missing_character_class(self, password):
        """Each of upper, lower, digit and special character is required."""
        assert password_policy_violation(password) is not None

    def test_sanitize_strips_angle_brackets(self):
        assert sanitize_input("  <script>Jane</script> ") == "scriptJane/script"


@pytest.mark.unit
@pytest.mark.security
class TestTokens:
    """Test access and refresh token handling."""

    def test_access_token_round_trip(self):
        """Claims survive encoding and the type claim is set."""
        token = create_access_token({"sub": "1", "role": "admin"})

        payload = decode_token(token)

        assert payload["sub"] == "1"
        assert payload["role"] == "admin"
        assert payload["type"] == "access"

    def test_expired_token(self):
        """An expired token raises TokenExpiredError."""
        token = create_access_token({"sub": "1"}, expires_delta=timedelta(seconds=-1))

        with pytest.raises(TokenExpiredError):
            decode_token(token)

    def test_tampered_token(self):
        """A token signed with another key is invalid."""
        settings = get_settings()
        token = jwt.encode({"sub": "1", "type": "access"}, "not-the-key", algorithm=settings.JWT_ALGORITHM)

        with pytest.raises(InvalidTokenError):
            decode_token(token)

    def test_garbage_token(self):
        with pytest.raises(InvalidTokenError):
            decode_token("not-a-jwt")

    def test_refresh_token_is_not_an_access_token(self):
        """Refresh tokens use their own key and type."""
        token = create_refresh_token({"sub": "1"})

        with pytest.raises(InvalidTokenError):
            decode_token(token)

        assert decode_token(token, REFRESH_TOKEN_TYPE)["sub"] == "1"

    def test_access_token_is_not_a_refresh_token(self):
        token = create_access_token({"sub": "1"})

        with pytest.raises(InvalidTokenError):
            decode_token(token, REFRESH_TOKEN_TYPE)
