"""Security utilities - crypto and the authorization gate.

Re-exports all security-related functions for convenience.
"""

from src.identity.core.security.authorization import Principal, authorize
from src.identity.core.security.crypto import (
    DUMMY_PASSWORD_HASH,
    TokenType,
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
from src.identity.core.security.passwords import check_password_strength

__all__ = [
    # Authorization
    "Principal",
    "authorize",
    # Crypto
    "DUMMY_PASSWORD_HASH",
    "TokenType",
    "create_oauth_state_token",
    "create_session_token",
    "decode_token",
    "generate_numeric_code",
    "hash_code",
    "hash_password",
    "hash_token",
    "read_unverified_claims",
    "verify_password",
    # Passwords
    "check_password_strength",
]
