"""Tests for Google ID token verification and consent URLs."""

import time
from urllib.parse import parse_qs, urlparse

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose import jwk, jwt

from src.identity.core.config import get_settings
from src.identity.core.exceptions import OAuthError
from src.identity.core.oauth import GoogleOAuthClient

pytestmark = pytest.mark.unit

KID = "test-key"


@pytest.fixture(scope="module")
def signing_key() -> tuple[bytes, dict]:
    """RSA private key PEM and the matching JWKS document."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )
    public_pem = key.public_key().public_bytes(
        serialization.Encoding.PEM, serialization.PublicFormat.SubjectPublicKeyInfo
    )
    public_jwk = jwk.construct(public_pem, "RS256").to_dict()
    public_jwk["kid"] = KID
    public_jwk["use"] = "sig"
    return private_pem, {"keys": [public_jwk]}


def _id_token(private_pem: bytes, **overrides) -> str:
    now = int(time.time())
    claims = {
        "iss": "https://accounts.google.com",
        "aud": get_settings().google_client_id,
        "sub": "1234567890",
        "email": "Student@Example.com",
        "email_verified": True,
        "given_name": "Ada",
        "family_name": "Lovelace",
        "picture": "https://example.com/ada.png",
        "iat": now,
        "exp": now + 600,
    }
    claims.update(overrides)
    return jwt.encode(claims, private_pem, algorithm="RS256", headers={"kid": KID})


class TestVerifyIdToken:
    def test_valid_token(self, signing_key) -> None:
        private_pem, jwks = signing_key

        identity = GoogleOAuthClient.verify_id_token(
            _id_token(private_pem), jwks, get_settings().google_client_id
        )

        assert identity.external_id == "1234567890"
        assert identity.email == "student@example.com"
        assert identity.given_name == "Ada"
        assert identity.family_name == "Lovelace"

    def test_wrong_audience(self, signing_key) -> None:
        private_pem, jwks = signing_key

        with pytest.raises(OAuthError, match="Invalid Google ID token"):
            GoogleOAuthClient.verify_id_token(
                _id_token(private_pem, aud="someone-else"), jwks, get_settings().google_client_id
            )

    def test_wrong_issuer(self, signing_key) -> None:
        private_pem, jwks = signing_key

        with pytest.raises(OAuthError, match="issuer"):
            GoogleOAuthClient.verify_id_token(
                _id_token(private_pem, iss="https://evil.example.com"),
                jwks,
                get_settings().google_client_id,
            )

    def test_unverified_email(self, signing_key) -> None:
        private_pem, jwks = signing_key

        with pytest.raises(OAuthError, match="not verified"):
            GoogleOAuthClient.verify_id_token(
                _id_token(private_pem, email_verified=False),
                jwks,
                get_settings().google_client_id,
            )

    def test_expired(self, signing_key) -> None:
        private_pem, jwks = signing_key

        with pytest.raises(OAuthError):
            GoogleOAuthClient.verify_id_token(
                _id_token(private_pem, exp=int(time.time()) - 60),
                jwks,
                get_settings().google_client_id,
            )

    def test_signed_with_other_key(self, signing_key) -> None:
        _, jwks = signing_key
        other = rsa.generate_private_key(public_exponent=65537, key_size=2048).private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption(),
        )

        with pytest.raises(OAuthError):
            GoogleOAuthClient.verify_id_token(
                _id_token(other), jwks, get_settings().google_client_id
            )


class TestAuthorizationUrl:
    def test_carries_state_and_client(self) -> None:
        url = GoogleOAuthClient().build_authorization_url("state-123")

        query = parse_qs(urlparse(url).query)
        assert url.startswith("https://accounts.google.com/")
        assert query["state"] == ["state-123"]
        assert query["client_id"] == [get_settings().google_client_id]
        assert query["scope"] == ["openid email profile"]
