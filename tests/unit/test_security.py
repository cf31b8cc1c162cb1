"""Tests for crypto helpers and password strength checks."""

from datetime import timedelta
from hashlib import sha256
from uuid import uuid4

import pytest
from jose import jwt

from src.identity.core.config import get_settings
from src.identity.core.security import (
    DUMMY_PASSWORD_HASH,
    TokenType,
    check_password_strength,
    create_oauth_state_token,
    create_session_token,
    decode_token,
    generate_numeric_code,
    hash_code,
    hash_password,
    hash_token,
    read_unverified_claims,
    verify_password,
)

pytestmark = pytest.mark.unit


class TestPasswordHashing:
    def test_hash_and_verify(self) -> None:
        hashed = hash_password("Correct-Horse-Battery-9")

        assert hashed.startswith("$argon2id$")
        assert verify_password("Correct-Horse-Battery-9", hashed) is True

    def test_wrong_password_fails(self) -> None:
        hashed = hash_password("Correct-Horse-Battery-9")

        assert verify_password("correct-horse-battery-9", hashed) is False

    def test_invalid_hash_returns_false(self) -> None:
        assert verify_password("anything", "not-an-argon2-hash") is False

    def test_dummy_hash_never_matches_common_passwords(self) -> None:
        for password in ("", "password", "Correct-Horse-Battery-9"):
            assert verify_password(password, DUMMY_PASSWORD_HASH) is False


class TestTokenAndCodeHashing:
    def test_hash_token_is_sha256_hex(self) -> None:
        assert hash_token("abc") == sha256(b"abc").hexdigest()

    def test_hash_code_is_keyed(self) -> None:
        """A leaked table cannot be reversed by hashing every six digit code."""
        assert hash_code("123456") != sha256(b"123456").hexdigest()
        assert hash_code("123456") == hash_code("123456")
        assert hash_code("123456") != hash_code("123457")

    @pytest.mark.parametrize("length", [4, 6, 10])
    def test_numeric_code_length(self, length: int) -> None:
        code = generate_numeric_code(length)

        assert len(code) == length
        assert code.isdigit()


class TestSessionTokens:
    def test_round_trip(self) -> None:
        user_id = uuid4()
        token, jti, expires_at = create_session_token(user_id, "STUDENT")

        claims = decode_token(token, expected_type=TokenType.SESSION)

        assert claims is not None
        assert claims["sub"] == str(user_id)
        assert claims["role"] == "STUDENT"
        assert claims["jti"] == jti
        assert expires_at.tzinfo is None

    def test_tokens_for_same_identity_differ(self) -> None:
        user_id = uuid4()
        first, _, _ = create_session_token(user_id, "ADMIN")
        second, _, _ = create_session_token(user_id, "ADMIN")

        assert first != second
        assert hash_token(first) != hash_token(second)

    def test_expired_token_does_not_decode(self) -> None:
        token, _, _ = create_session_token(uuid4(), "STUDENT", timedelta(seconds=-5))

        assert decode_token(token) is None
        # Claims are still readable without verification
        assert read_unverified_claims(token) is not None

    def test_wrong_key_does_not_decode(self) -> None:
        token = jwt.encode(
            {"sub": str(uuid4()), "type": TokenType.SESSION},
            "another-secret-key-that-is-at-least-32-chars",
            algorithm=get_settings().jwt_algorithm,
        )

        assert decode_token(token) is None

    def test_state_token_is_not_a_session_token(self) -> None:
        state = create_oauth_state_token("STUDENT")

        assert decode_token(state, expected_type=TokenType.SESSION) is None
        claims = decode_token(state, expected_type=TokenType.OAUTH_STATE)
        assert claims is not None
        assert claims["role"] == "STUDENT"
        assert claims["invitation_token"] is None

    def test_unverified_claims_of_garbage_is_none(self) -> None:
        assert read_unverified_claims("not.a.jwt") is None
        assert read_unverified_claims("") is None


class TestPasswordStrength:
    def test_strong_password_passes(self) -> None:
        assert check_password_strength("Correct-Horse-Battery-9") == "Correct-Horse-Battery-9"

    @pytest.mark.parametrize("password", ["NewPass1", "Secureabc1"])
    def test_short_mixed_password_passes(self, password: str) -> None:
        assert check_password_strength(password) == password

    @pytest.mark.parametrize("password", ["password", "12345678", "qwertyuiop"])
    def test_weak_password_rejected(self, password: str) -> None:
        with pytest.raises(ValueError, match="(?i)weak|too weak"):
            check_password_strength(password)
