"""External identity providers."""

from src.identity.core.oauth.google import GoogleIdentity, GoogleOAuthClient

__all__ = [
    "GoogleIdentity",
    "GoogleOAuthClient",
]
