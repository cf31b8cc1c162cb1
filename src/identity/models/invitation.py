"""Admin invitation model."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from src.identity.models.base import utc_now
from src.identity.models.enums import InvitationStatus, Role


class Invitation(SQLModel, table=True):
    """Time-boxed, single-use grant for one email to register as ADMIN."""

    __tablename__ = "invitations"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(max_length=255, index=True)
    token_hash: str = Field(max_length=64, unique=True, index=True)
    role: str = Field(default=Role.ADMIN.value, max_length=20)
    status: str = Field(default=InvitationStatus.PENDING.value, max_length=20)
    expires_at: datetime
    invited_by: UUID = Field(foreign_key="auth_users.id", index=True)
    accepted_by: UUID | None = Field(default=None, foreign_key="auth_users.id")
    accepted_at: datetime | None = Field(default=None)
    revoked_at: datetime | None = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)

    def effective_status(self, now: datetime | None = None) -> InvitationStatus:
        """Stored status with EXPIRED applied for a PENDING row past its deadline."""
        status = InvitationStatus(self.status)
        if status is InvitationStatus.PENDING and self.expires_at <= (now or utc_now()):
            return InvitationStatus.EXPIRED
        return status
