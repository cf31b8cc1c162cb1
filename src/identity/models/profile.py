"""Role-specific profiles and admin permissions."""

from datetime import date, datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import Column, UniqueConstraint
from sqlmodel import Field, SQLModel

from src.identity.models.base import JSONType, utc_now
from src.identity.models.enums import AdminStatus, SignUpVia


class StudentProfile(SQLModel, table=True):
    __tablename__ = "student_profiles"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    auth_user_id: UUID = Field(foreign_key="auth_users.id", unique=True, index=True)
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    dob: date | None = Field(default=None)
    gender: str | None = Field(default=None, max_length=10)
    profile_picture: str | None = Field(default=None, max_length=1024)
    push_id: str | None = Field(default=None, max_length=512)
    year: int | None = Field(default=None)
    nic: str | None = Field(default=None, max_length=20)
    nic_pic: str | None = Field(default=None, max_length=1024)
    register_code: str | None = Field(default=None, max_length=50)
    delivery_details: dict[str, Any] | None = Field(
        default=None, sa_column=Column(JSONType, nullable=True)
    )
    extra_details: dict[str, Any] | None = Field(
        default=None, sa_column=Column(JSONType, nullable=True)
    )
    is_profile_completed: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class AdminProfile(SQLModel, table=True):
    __tablename__ = "admin_profiles"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    auth_user_id: UUID = Field(foreign_key="auth_users.id", unique=True, index=True)
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    image: str | None = Field(default=None, max_length=1024)
    admin_type: str | None = Field(default=None, max_length=20)
    sign_up_via: str = Field(default=SignUpVia.WEB.value, max_length=10)
    status: str = Field(default=AdminStatus.PENDING.value, max_length=20)
    is_profile_completed: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class Permission(SQLModel, table=True):
    """A named capability that can be granted to admins."""

    __tablename__ = "permissions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=100, unique=True, index=True)
    description: str | None = Field(default=None, max_length=255)
    created_at: datetime = Field(default_factory=utc_now)


class AdminPermission(SQLModel, table=True):
    """Assignment of a permission to an admin profile."""

    __tablename__ = "admin_permissions"
    __table_args__ = (
        UniqueConstraint("admin_profile_id", "permission_id", name="uq_admin_permission"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    admin_profile_id: UUID = Field(foreign_key="admin_profiles.id", index=True)
    permission_id: UUID = Field(foreign_key="permissions.id", index=True)
    created_at: datetime = Field(default_factory=utc_now)
