from uuid import UUID

from pydantic import Field

from src.identity.schemas.common import CamelModel


class PermissionRead(CamelModel):
    id: UUID
    name: str
    description: str | None


class PermissionAssignRequest(CamelModel):
    permissions: list[str] = Field(min_length=1)


class PermissionAssignmentRead(CamelModel):
    admin_id: UUID
    permissions: list[str]
