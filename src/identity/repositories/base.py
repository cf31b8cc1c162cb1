"""Base repository with lookups and conditional updates."""

from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select

ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseRepository(Generic[ModelType]):
    """Data access for one table.

    Repositories never commit. State changes that race (code use, invitation
    acceptance, session revocation) are written as conditional UPDATEs and
    report how many rows they touched, so the caller can tell who won.
    """

    model: type[ModelType]

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, id: UUID) -> ModelType | None:
        return await self.get_one_where(self.model.id == id)  # type: ignore[attr-defined]

    async def get_one_where(self, *conditions: Any) -> ModelType | None:
        """The single row matching every condition, or None."""
        result = await self.session.execute(select(self.model).where(*conditions))
        return result.scalar_one_or_none()

    async def update_where(self, *conditions: Any, **values: Any) -> int:
        """UPDATE rows matching every condition. Returns the affected row count."""
        stmt = update(self.model).where(*conditions).values(**values)
        result = await self.session.execute(stmt)
        return result.rowcount or 0  # type: ignore[attr-defined]

    def add(self, entity: ModelType) -> None:
        """Add entity to session (no flush/commit)."""
        self.session.add(entity)
