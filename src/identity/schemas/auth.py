from datetime import datetime
from uuid import UUID

from pydantic import EmailStr, Field, field_validator, model_validator

from src.identity.core.security import check_password_strength
from src.identity.schemas.common import CamelModel
from src.identity.schemas.profile import AdminProfileRead, StudentProfileRead

CODE_PATTERN = r"^\d{4,10}$"


class SignupRequest(CamelModel):
    email: EmailStr = Field(max_length=255)
    password: str = Field(min_length=8, max_length=128)

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        return check_password_strength(v)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)
    device_name: str | None = Field(default=None, max_length=255)


class SessionTokenRead(CamelModel):
    """Returned by every flow that ends in a signed-in identity."""

    token: str
    token_type: str = "bearer"
    user_id: UUID
    role: str
    email_verified: bool
    account_verified: bool
    expires_at: datetime


class SessionRead(CamelModel):
    id: UUID
    device_name: str | None
    ip_address: str | None
    user_agent: str | None
    issued_at: datetime
    expires_at: datetime
    current: bool = False


class RevokedSessionsRead(CamelModel):
    revoked: int


class VerifyCodeRequest(CamelModel):
    code: str = Field(pattern=CODE_PATTERN)


class PasswordResetRequest(CamelModel):
    email: EmailStr


class PasswordResetConfirm(CamelModel):
    """Identifies the account by userId or by email, exactly one of the two."""

    user_id: UUID | None = None
    email: EmailStr | None = None
    code: str = Field(pattern=CODE_PATTERN)
    new_password: str = Field(min_length=8, max_length=128)

    @field_validator("new_password")
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        return check_password_strength(v)

    @model_validator(mode="after")
    def exactly_one_identity(self) -> "PasswordResetConfirm":
        if (self.user_id is None) == (self.email is None):
            raise ValueError("Provide either userId or email")
        return self


class AuthDataRead(CamelModel):
    id: UUID
    email: str | None
    role: str
    provider: str
    email_verified: bool
    mobile_verified: bool
    account_verified: bool
    is_active: bool
    last_login: datetime | None
    created_at: datetime
    profile: StudentProfileRead | AdminProfileRead | None = None
