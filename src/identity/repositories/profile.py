"""Repositories for role-specific profiles."""

from uuid import UUID

from src.identity.models import AdminProfile, StudentProfile
from src.identity.repositories.base import BaseRepository


class StudentProfileRepository(BaseRepository[StudentProfile]):
    model = StudentProfile

    async def get_by_user_id(self, user_id: UUID) -> StudentProfile | None:
        return await self.get_one_where(StudentProfile.auth_user_id == user_id)


class AdminProfileRepository(BaseRepository[AdminProfile]):
    model = AdminProfile

    async def get_by_user_id(self, user_id: UUID) -> AdminProfile | None:
        return await self.get_one_where(AdminProfile.auth_user_id == user_id)
