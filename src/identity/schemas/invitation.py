from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import EmailStr, Field, field_validator

from src.identity.core.security import check_password_strength
from src.identity.models import Invitation
from src.identity.schemas.common import CamelModel


class InvitationCreate(CamelModel):
    email: EmailStr
    role: Literal["ADMIN"] = "ADMIN"


class InvitationRead(CamelModel):
    id: UUID
    email: str
    role: str
    status: str
    expires_at: datetime
    invited_by: UUID
    accepted_by: UUID | None
    accepted_at: datetime | None
    created_at: datetime

    @classmethod
    def from_model(cls, invitation: Invitation) -> "InvitationRead":
        """Report the effective status, so stale PENDING rows read as EXPIRED."""
        return cls(
            id=invitation.id,
            email=invitation.email,
            role=invitation.role,
            status=invitation.effective_status().value,
            expires_at=invitation.expires_at,
            invited_by=invitation.invited_by,
            accepted_by=invitation.accepted_by,
            accepted_at=invitation.accepted_at,
            created_at=invitation.created_at,
        )


class AdminRegisterRequest(CamelModel):
    email: EmailStr
    invitation_token: str = Field(min_length=1, max_length=128)
    password: str = Field(min_length=8, max_length=128)

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        return check_password_strength(v)
