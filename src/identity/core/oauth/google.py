"""Google OAuth 2.0 / OpenID Connect client."""

from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode

import httpx
from jose import JWTError, jwt

from src.identity.core.config import get_settings
from src.identity.core.exceptions import OAuthError
from src.identity.core.logging import get_logger

logger = get_logger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_CERTS_URL = "https://www.googleapis.com/oauth2/v3/certs"
GOOGLE_ISSUERS = frozenset({"accounts.google.com", "https://accounts.google.com"})

_HTTP_TIMEOUT = httpx.Timeout(10.0)


@dataclass(frozen=True, slots=True)
class GoogleIdentity:
    """Claims asserted by Google about the signed-in account."""

    external_id: str
    email: str
    email_verified: bool
    name: str | None = None
    given_name: str | None = None
    family_name: str | None = None
    picture: str | None = None


class GoogleOAuthClient:
    """Builds consent URLs and turns authorization codes into verified identities."""

    def __init__(self, http_client: httpx.AsyncClient | None = None):
        self._http_client = http_client

    @staticmethod
    def _require_credentials() -> tuple[str, str]:
        settings = get_settings()
        if not settings.google_client_id or not settings.google_client_secret:
            raise OAuthError("Google OAuth is not configured")
        return settings.google_client_id, settings.google_client_secret

    def build_authorization_url(self, state: str) -> str:
        client_id, _ = self._require_credentials()
        params = {
            "client_id": client_id,
            "redirect_uri": get_settings().google_redirect_uri,
            "response_type": "code",
            "scope": "openid email profile",
            "access_type": "online",
            "prompt": "select_account",
            "state": state,
        }
        return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"

    async def _request(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        if self._http_client is not None:
            response = await self._http_client.request(method, url, **kwargs)
        else:
            async with httpx.AsyncClient(timeout=_HTTP_TIMEOUT) as client:
                response = await client.request(method, url, **kwargs)
        response.raise_for_status()
        data: dict[str, Any] = response.json()
        return data

    async def exchange_code(self, code: str) -> GoogleIdentity:
        """Exchange an authorization code and verify the returned ID token.

        Raises:
            OAuthError: The exchange failed, the ID token did not verify,
                or Google did not assert a verified email.
        """
        client_id, client_secret = self._require_credentials()
        try:
            tokens = await self._request(
                "POST",
                GOOGLE_TOKEN_URL,
                data={
                    "code": code,
                    "client_id": client_id,
                    "client_secret": client_secret,
                    "redirect_uri": get_settings().google_redirect_uri,
                    "grant_type": "authorization_code",
                },
            )
            jwks = await self._request("GET", GOOGLE_CERTS_URL)
        except httpx.HTTPError as e:
            logger.warning("Google token exchange failed", error=str(e))
            raise OAuthError("Failed to exchange authorization code") from e

        id_token = tokens.get("id_token")
        if not id_token:
            raise OAuthError("Google did not return an ID token")

        return self.verify_id_token(id_token, jwks, client_id, tokens.get("access_token"))

    @staticmethod
    def verify_id_token(
        id_token: str,
        jwks: dict[str, Any],
        client_id: str,
        access_token: str | None = None,
    ) -> GoogleIdentity:
        try:
            claims: dict[str, Any] = jwt.decode(
                id_token,
                jwks,
                algorithms=["RS256"],
                audience=client_id,
                access_token=access_token,
            )
        except JWTError as e:
            raise OAuthError("Invalid Google ID token") from e

        if claims.get("iss") not in GOOGLE_ISSUERS:
            raise OAuthError("Invalid Google ID token issuer")

        email = claims.get("email")
        if not email or not claims.get("email_verified"):
            raise OAuthError("Google account email is not verified")

        return GoogleIdentity(
            external_id=str(claims["sub"]),
            email=str(email).lower(),
            email_verified=True,
            name=claims.get("name"),
            given_name=claims.get("given_name"),
            family_name=claims.get("family_name"),
            picture=claims.get("picture"),
        )
