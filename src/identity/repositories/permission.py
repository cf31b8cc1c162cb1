"""Repository for permissions and their assignment to admins."""

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import delete
from sqlmodel import select

from src.identity.models import AdminPermission, Permission
from src.identity.repositories.base import BaseRepository


class PermissionRepository(BaseRepository[Permission]):
    model = Permission

    async def list_all(self) -> list[Permission]:
        result = await self.session.execute(select(Permission).order_by(Permission.name))
        return list(result.scalars().all())

    async def get_by_names(self, names: Iterable[str]) -> list[Permission]:
        result = await self.session.execute(
            select(Permission).where(Permission.name.in_(list(names)))  # type: ignore[attr-defined]
        )
        return list(result.scalars().all())

    async def list_names_for_admin(self, admin_profile_id: UUID) -> list[str]:
        result = await self.session.execute(
            select(Permission.name)
            .join(AdminPermission, AdminPermission.permission_id == Permission.id)
            .where(AdminPermission.admin_profile_id == admin_profile_id)
            .order_by(Permission.name)
        )
        return list(result.scalars().all())

    async def replace_for_admin(self, admin_profile_id: UUID, permission_ids: list[UUID]) -> None:
        """Delete every assignment of the admin, then insert the new set.

        Caller commits, so both steps land in one transaction.
        """
        await self.session.execute(
            delete(AdminPermission).where(
                AdminPermission.admin_profile_id == admin_profile_id  # type: ignore[arg-type]
            )
        )
        for permission_id in permission_ids:
            self.session.add(
                AdminPermission(admin_profile_id=admin_profile_id, permission_id=permission_id)
            )
