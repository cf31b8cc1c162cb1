"""Cryptographic utilities - password hashing, JWT tokens, code and token hashing."""

import hmac
import secrets
from datetime import UTC, datetime, timedelta
from hashlib import sha256
from typing import Any
from uuid import UUID, uuid4

import argon2
from jose import JWTError, jwt

from src.identity.core.config import get_settings


class TokenType:
    """Values of the `type` claim."""

    SESSION = "session"
    OAUTH_STATE = "oauth_state"


def hash_token(token: str) -> str:
    """Hash a token using SHA256 for secure storage."""
    return sha256(token.encode()).hexdigest()


def hash_code(code: str) -> str:
    """Keyed hash for short verification codes.

    A six digit code has a tiny keyspace, so a plain digest could be reversed
    by enumeration if the table leaked. Keying with the signing secret
    prevents that.
    """
    secret = get_settings().jwt_secret_key.encode()
    return hmac.new(secret, code.encode(), sha256).hexdigest()


def generate_numeric_code(length: int) -> str:
    """Generate a zero-padded numeric code from a CSPRNG."""
    return str(secrets.randbelow(10**length)).zfill(length)


def _create_password_hasher() -> argon2.PasswordHasher:
    """Create password hasher with settings from config."""
    settings = get_settings()
    return argon2.PasswordHasher(
        time_cost=settings.argon2_time_cost,
        memory_cost=settings.argon2_memory_cost,
        parallelism=settings.argon2_parallelism,
    )


_password_hasher = _create_password_hasher()


def hash_password(password: str) -> str:
    """Hash password using Argon2id."""
    return _password_hasher.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    """Verify password against hash. Returns False on any error."""
    try:
        _password_hasher.verify(hashed, password)
        return True
    except argon2.exceptions.VerifyMismatchError:
        return False
    except argon2.exceptions.InvalidHashError:
        return False


# Verified against when the email is unknown or the account has no password,
# so that login timing does not reveal which emails exist.
DUMMY_PASSWORD_HASH = hash_password(secrets.token_urlsafe(16))


def create_session_token(
    subject: str | UUID,
    role: str,
    expires_delta: timedelta | None = None,
) -> tuple[str, str, datetime]:
    """Create a signed session token.

    Returns (token, jti, expiry as naive UTC datetime). The jti makes every
    token unique even when two are minted for the same identity in the same
    second, which keeps the stored hashes unique.
    """
    settings = get_settings()
    now = datetime.now(UTC)
    if expires_delta is None:
        expires_delta = timedelta(hours=settings.session_token_expire_hours)
    expire = now + expires_delta
    jti = str(uuid4())

    to_encode = {
        "sub": str(subject),
        "role": role,
        "jti": jti,
        "iat": now,
        "exp": expire,
        "type": TokenType.SESSION,
    }
    token: str = jwt.encode(  # type: ignore[assignment]
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )
    # Naive datetime for TIMESTAMP WITHOUT TIME ZONE columns
    return token, jti, expire.replace(tzinfo=None)


def create_oauth_state_token(
    role: str,
    invitation_token: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create the signed `state` parameter for an OAuth round trip."""
    settings = get_settings()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.oauth_state_expire_minutes)

    to_encode = {
        "nonce": secrets.token_urlsafe(16),
        "role": role,
        "invitation_token": invitation_token,
        "exp": datetime.now(UTC) + expires_delta,
        "type": TokenType.OAUTH_STATE,
    }
    return jwt.encode(  # type: ignore[no-any-return]
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


def read_unverified_claims(token: str) -> dict[str, Any] | None:
    """Parse token claims without checking the signature.

    Returns None when the string is not a well-formed JWT.
    """
    try:
        return jwt.get_unverified_claims(token)  # type: ignore[no-any-return]
    except JWTError:
        return None


def decode_token(token: str, expected_type: str | None = None) -> dict[str, Any] | None:
    """Decode and verify a JWT. Returns None on any error."""
    settings = get_settings()
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        return None
    if expected_type is not None and payload.get("type") != expected_type:
        return None
    return payload
