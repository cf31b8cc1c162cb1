"""Test helper functions for common data creation patterns."""

from dataclasses import dataclass

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from src.identity.core.notifications import DeliveryPurpose
from src.identity.models import AdminProfile, AuthUser, Role, StudentProfile
from tests.factories import (
    DEFAULT_TEST_PASSWORD,
    AdminProfileFactory,
    AuthUserFactory,
    StudentProfileFactory,
)


async def create_student(
    session: AsyncSession, **user_kwargs
) -> tuple[AuthUser, StudentProfile]:
    """Create and commit a STUDENT with an empty profile."""
    user = AuthUserFactory.build(role=Role.STUDENT.value, **user_kwargs)
    session.add(user)
    await session.flush()

    profile = StudentProfileFactory.build(auth_user_id=user.id)
    session.add(profile)
    await session.commit()
    return user, profile


async def create_admin(session: AsyncSession, **user_kwargs) -> tuple[AuthUser, AdminProfile]:
    """Create and commit an ADMIN with a PENDING profile."""
    user = AuthUserFactory.admin(**user_kwargs)
    session.add(user)
    await session.flush()

    profile = AdminProfileFactory.build(auth_user_id=user.id)
    session.add(profile)
    await session.commit()
    return user, profile


async def create_owner(session: AsyncSession, **user_kwargs) -> AuthUser:
    user = AuthUserFactory.owner(**user_kwargs)
    session.add(user)
    await session.commit()
    return user


async def login(
    client: AsyncClient,
    email: str,
    password: str = DEFAULT_TEST_PASSWORD,
    device_name: str | None = None,
) -> str:
    """Log in over HTTP and return the session token."""
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": email, "password": password, "deviceName": device_name},
    )
    assert response.status_code == 200, response.json()
    return response.json()["data"]["token"]


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def auth_data_status(client: AsyncClient, token: str) -> int:
    """Status of an authenticated read, for checking whether a token still works."""
    response = await client.get("/api/v1/auth/auth-data", headers=bearer(token))
    return response.status_code


@dataclass
class Delivery:
    """A code or link captured in place of an email."""

    destination: str
    payload: str
    purpose: DeliveryPurpose
