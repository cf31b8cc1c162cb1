"""Session token issuer and validator.

Tokens are signed JWTs; the database row keyed by the token's SHA256 is the
source of truth for whether a token is still live. Redis only caches
revocations so validation can reject a revoked token without a query.

This service flushes but never commits. The calling service owns the
transaction and calls cache_revocations() after its commit succeeds.
"""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.identity.core.cache import is_session_revoked, mark_sessions_revoked
from src.identity.core.exceptions import (
    InvalidSignatureOrExpiredError,
    MalformedTokenError,
    NotFoundError,
    RevokedTokenError,
)
from src.identity.core.logging import get_logger
from src.identity.core.security import (
    Principal,
    TokenType,
    create_session_token,
    decode_token,
    hash_token,
    read_unverified_claims,
)
from src.identity.models import AuthUser, Role, SessionToken
from src.identity.models.base import utc_now
from src.identity.repositories import SessionTokenRepository

logger = get_logger(__name__)

_REQUIRED_CLAIMS = ("sub", "role", "jti", "exp", "type")


@dataclass(frozen=True, slots=True)
class DeviceInfo:
    device_name: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None


@dataclass(frozen=True, slots=True)
class IssuedToken:
    token: str
    session: SessionToken


class TokenService:
    def __init__(self, session_repo: SessionTokenRepository, session: AsyncSession):
        self.session_repo = session_repo
        self.session = session

    async def issue(self, user: AuthUser, device: DeviceInfo | None = None) -> IssuedToken:
        """Mint a session token for user and append its row.

        When the identity is over its device limit, its oldest active
        sessions are deactivated.
        """
        token, jti, expires_at = create_session_token(user.id, user.role)
        device = device or DeviceInfo()
        row = SessionToken(
            auth_user_id=user.id,
            token_hash=hash_token(token),
            jti=jti,
            expires_at=expires_at,
            device_name=device.device_name,
            ip_address=device.ip_address,
            user_agent=device.user_agent,
        )
        self.session_repo.add(row)
        await self.session.flush()

        await self._enforce_device_limit(user, keep=row.id)
        return IssuedToken(token=token, session=row)

    async def _enforce_device_limit(self, user: AuthUser, keep: UUID) -> None:
        limit = max(user.max_login_devices, 1)
        active = await self.session_repo.list_active_for_user(user.id)
        if len(active) <= limit:
            return
        # list_active_for_user is newest first
        evicted = [s.id for s in active[limit:] if s.id != keep]
        count = await self.session_repo.deactivate_many(evicted)
        logger.info("Evicted oldest sessions", user_id=str(user.id), count=count)

    async def validate(self, token: str) -> Principal:
        """Resolve a bearer token to its principal. Never mutates state.

        Raises:
            MalformedTokenError: Not a JWT, or required claims are missing.
            InvalidSignatureOrExpiredError: Signature or exp check failed.
            RevokedTokenError: No active session row matches the token.
        """
        claims = read_unverified_claims(token)
        if claims is None or any(claims.get(c) is None for c in _REQUIRED_CLAIMS):
            raise MalformedTokenError()
        try:
            UUID(str(claims["sub"]))
            role = Role(claims["role"])
        except ValueError as e:
            raise MalformedTokenError() from e

        if decode_token(token, expected_type=TokenType.SESSION) is None:
            raise InvalidSignatureOrExpiredError()

        token_hash = hash_token(token)
        if await self._cached_revoked(token_hash):
            raise RevokedTokenError()

        row = await self.session_repo.get_active_by_hash(token_hash)
        if row is None:
            raise RevokedTokenError()

        return Principal(user_id=row.auth_user_id, role=role, session_id=row.id)

    @staticmethod
    async def _cached_revoked(token_hash: str) -> bool:
        try:
            return await is_session_revoked(token_hash) is True
        except Exception as e:
            logger.warning("Revocation cache lookup failed", error=str(e))
            return False

    async def revoke(self, user_id: UUID, session_id: UUID) -> SessionToken:
        """Deactivate one of user_id's sessions. Others are unaffected.

        Raises:
            NotFoundError: The session does not exist, belongs to someone
                else, or is already inactive.
        """
        row = await self.session_repo.deactivate(session_id, user_id)
        if row is None:
            raise NotFoundError("Session not found")
        return row

    async def revoke_by_token(self, token: str) -> SessionToken | None:
        row = await self.session_repo.get_active_by_hash(hash_token(token))
        if row is None:
            return None
        return await self.session_repo.deactivate(row.id, row.auth_user_id)

    async def revoke_all(
        self, user_id: UUID, except_session_id: UUID | None = None
    ) -> list[tuple[str, datetime]]:
        """Deactivate every active session of user_id.

        Returns (token_hash, expires_at) pairs to pass to cache_revocations().
        """
        return await self.session_repo.deactivate_all_for_user(user_id, except_session_id)

    async def list_active(self, user_id: UUID) -> list[SessionToken]:
        return await self.session_repo.list_active_for_user(user_id)

    @staticmethod
    async def cache_revocations(revoked: list[tuple[str, datetime]]) -> None:
        """Write committed revocations to Redis. Failures are logged only."""
        if not revoked:
            return
        now = utc_now()
        entries = [
            (token_hash, int((expires_at - now).total_seconds()))
            for token_hash, expires_at in revoked
        ]
        try:
            await mark_sessions_revoked(entries)
        except Exception as e:
            # DB is already committed and authoritative
            logger.warning("Failed to cache session revocations", error=str(e))
