"""Repository for AuthUser entity."""

from sqlmodel import select

from src.identity.models import AuthUser
from src.identity.repositories.base import BaseRepository


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthUserRepository(BaseRepository[AuthUser]):
    model = AuthUser

    async def get_by_email(self, email: str) -> AuthUser | None:
        return await self.get_one_where(AuthUser.email == normalize_email(email))

    async def exists_by_email(self, email: str) -> bool:
        result = await self.session.execute(
            select(AuthUser.id).where(AuthUser.email == normalize_email(email))
        )
        return result.scalar_one_or_none() is not None

    async def get_by_provider_id(self, provider: str, provider_id: str) -> AuthUser | None:
        return await self.get_one_where(
            AuthUser.provider == provider, AuthUser.provider_id == provider_id
        )
