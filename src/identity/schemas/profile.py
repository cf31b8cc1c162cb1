from datetime import date, datetime
from typing import Any
from uuid import UUID

from pydantic import AliasChoices, AnyHttpUrl, Field

from src.identity.models import AdminType, Gender
from src.identity.schemas.common import CamelModel


class DeliveryDetails(CamelModel):
    """Postal address for physical course material."""

    recipient_name: str | None = Field(default=None, max_length=200)
    phone: str | None = Field(default=None, max_length=20)
    address_line1: str | None = Field(default=None, max_length=255)
    address_line2: str | None = Field(default=None, max_length=255)
    city: str | None = Field(default=None, max_length=100)
    district: str | None = Field(default=None, max_length=100)
    postal_code: str | None = Field(default=None, max_length=20)


class StudentProfileUpdate(CamelModel):
    """All fields optional; only supplied fields are applied."""

    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    dob: date | None = None
    gender: Gender | None = None
    profile_picture: AnyHttpUrl | None = None
    push_id: str | None = Field(default=None, max_length=512)
    year: int | None = Field(default=None, ge=1)
    nic: str | None = Field(default=None, max_length=20)
    nic_pic: AnyHttpUrl | None = None
    register_code: str | None = Field(default=None, max_length=50)
    delivery_details: DeliveryDetails | None = None
    extra_details: dict[str, Any] | None = None


class StudentProfileRead(CamelModel):
    id: UUID
    first_name: str | None
    last_name: str | None
    dob: date | None
    gender: str | None
    profile_picture: str | None
    push_id: str | None
    year: int | None
    nic: str | None
    nic_pic: str | None
    register_code: str | None
    delivery_details: DeliveryDetails | None
    extra_details: dict[str, Any] | None
    is_profile_completed: bool
    updated_at: datetime


class AdminProfileUpdate(CamelModel):
    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    image: AnyHttpUrl | None = None
    admin_type: AdminType | None = Field(default=None, alias="type")


class AdminProfileRead(CamelModel):
    id: UUID
    first_name: str | None
    last_name: str | None
    image: str | None
    admin_type: str | None = Field(
        default=None,
        validation_alias=AliasChoices("admin_type", "adminType", "type"),
        serialization_alias="type",
    )
    sign_up_via: str
    status: str
    is_profile_completed: bool
    permissions: list[str] = []
    updated_at: datetime
