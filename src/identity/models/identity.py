"""Credential store models - identities and their session/verification tokens."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Index
from sqlmodel import Field, SQLModel

from src.identity.models.base import utc_now
from src.identity.models.enums import AuthProvider, Role


class AuthUser(SQLModel, table=True):
    """The authenticated principal record."""

    __tablename__ = "auth_users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str | None = Field(default=None, max_length=255, unique=True, index=True)
    password_hash: str | None = Field(default=None, max_length=255)
    role: str = Field(default=Role.STUDENT.value, max_length=20)
    provider: str = Field(default=AuthProvider.LOCAL.value, max_length=20)
    provider_id: str | None = Field(default=None, max_length=255, index=True)
    email_verified: bool = Field(default=False)
    mobile_verified: bool = Field(default=False)
    account_verified: bool = Field(default=False)
    is_active: bool = Field(default=True)
    max_login_devices: int = Field(default=5)
    last_login: datetime | None = Field(default=None)
    password_changed_at: datetime | None = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def role_enum(self) -> Role:
        return Role(self.role)


class SessionToken(SQLModel, table=True):
    """One issued session credential. Many may be active per identity (multi-device)."""

    __tablename__ = "session_tokens"
    __table_args__ = (
        Index("ix_session_tokens_user_active", "auth_user_id", "is_active", "expires_at"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    auth_user_id: UUID = Field(foreign_key="auth_users.id", index=True)
    token_hash: str = Field(max_length=64, unique=True, index=True)
    jti: str = Field(max_length=64)
    issued_at: datetime = Field(default_factory=utc_now)
    expires_at: datetime
    is_active: bool = Field(default=True)
    revoked_at: datetime | None = Field(default=None)
    device_name: str | None = Field(default=None, max_length=255)
    ip_address: str | None = Field(default=None, max_length=45)
    user_agent: str | None = Field(default=None, max_length=512)


class VerificationToken(SQLModel, table=True):
    """One-time code bound to an identity and a purpose."""

    __tablename__ = "verification_tokens"
    __table_args__ = (
        Index("ix_verification_tokens_lookup", "auth_user_id", "type", "is_used"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    auth_user_id: UUID = Field(foreign_key="auth_users.id", index=True)
    token_hash: str = Field(max_length=64)
    type: str = Field(max_length=20)
    expires_at: datetime
    is_used: bool = Field(default=False)
    used_at: datetime | None = Field(default=None)
    failed_attempts: int = Field(default=0)
    created_at: datetime = Field(default_factory=utc_now)
