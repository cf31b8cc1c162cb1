"""Tests for profile completion and admin permission assignment."""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from src.identity.models import AuthUser
from tests.factories import PermissionFactory
from tests.helpers import bearer, create_admin, create_student, login

pytestmark = [pytest.mark.integration, pytest.mark.asyncio]


async def _seed_permissions(session: AsyncSession, *names: str) -> None:
    for name in names:
        session.add(PermissionFactory.build(name=name, description=f"Can {name}"))
    await session.commit()


class TestStudentProfile:
    async def test_names_complete_profile_and_verify_account(
        self, client: AsyncClient, db_session: AsyncSession
    ) -> None:
        await create_student(db_session, email="s@x.com")
        headers = bearer(await login(client, "s@x.com"))

        response = await client.put(
            "/api/v1/auth/student/profile",
            json={
                "firstName": "Nimal",
                "lastName": "Perera",
                "dob": "2004-03-09",
                "gender": "MALE",
                "deliveryDetails": {"city": "Kandy", "postalCode": "20000"},
            },
            headers=headers,
        )

        assert response.status_code == 200
        profile = response.json()["data"]
        assert profile["isProfileCompleted"] is True
        assert profile["dob"] == "2004-03-09"
        assert profile["deliveryDetails"]["postalCode"] == "20000"

        me = (await client.get("/api/v1/auth/auth-data", headers=headers)).json()["data"]
        assert me["accountVerified"] is True
        assert me["profile"]["firstName"] == "Nimal"

    async def test_partial_update_keeps_other_fields(
        self, client: AsyncClient, db_session: AsyncSession
    ) -> None:
        await create_student(db_session, email="s@x.com")
        headers = bearer(await login(client, "s@x.com"))
        await client.put(
            "/api/v1/auth/student/profile", json={"firstName": "Nimal"}, headers=headers
        )

        response = await client.put(
            "/api/v1/auth/student/profile", json={"year": 2026}, headers=headers
        )

        profile = response.json()["data"]
        assert profile["firstName"] == "Nimal"
        assert profile["year"] == 2026
        assert profile["isProfileCompleted"] is False

    async def test_admin_cannot_update_student_profile(
        self, client: AsyncClient, db_session: AsyncSession
    ) -> None:
        await create_admin(db_session, email="a@x.com")
        headers = bearer(await login(client, "a@x.com"))

        response = await client.put(
            "/api/v1/auth/student/profile", json={"firstName": "X"}, headers=headers
        )

        assert response.status_code == 403

    async def test_invalid_picture_url(self, client: AsyncClient, db_session: AsyncSession) -> None:
        await create_student(db_session, email="s@x.com")
        headers = bearer(await login(client, "s@x.com"))

        response = await client.put(
            "/api/v1/auth/student/profile", json={"profilePicture": "not a url"}, headers=headers
        )

        assert response.status_code == 422


class TestAdminProfile:
    async def test_update_with_type(self, client: AsyncClient, db_session: AsyncSession) -> None:
        await create_admin(db_session, email="a@x.com")
        headers = bearer(await login(client, "a@x.com"))

        response = await client.put(
            "/api/v1/auth/admin/profile",
            json={"firstName": "Kamala", "lastName": "Silva", "type": "CONTENT"},
            headers=headers,
        )

        assert response.status_code == 200
        profile = response.json()["data"]
        assert profile["type"] == "CONTENT"
        assert profile["isProfileCompleted"] is True
        assert profile["status"] == "PENDING"

        me = (await client.get("/api/v1/auth/auth-data", headers=headers)).json()["data"]
        assert me["accountVerified"] is True

    async def test_student_cannot_update_admin_profile(
        self, client: AsyncClient, db_session: AsyncSession
    ) -> None:
        await create_student(db_session, email="s@x.com")
        headers = bearer(await login(client, "s@x.com"))

        response = await client.put(
            "/api/v1/auth/admin/profile", json={"firstName": "X"}, headers=headers
        )

        assert response.status_code == 403


class TestPermissions:
    async def test_list_permissions(
        self, client: AsyncClient, db_session: AsyncSession, owner_headers: dict[str, str]
    ) -> None:
        await _seed_permissions(db_session, "courses.edit", "payments.view")

        response = await client.get("/api/v1/auth/admin/permissions", headers=owner_headers)

        assert response.status_code == 200
        assert {p["name"] for p in response.json()["data"]} == {"courses.edit", "payments.view"}

    async def test_assign_replaces_set(
        self, client: AsyncClient, db_session: AsyncSession, owner_headers: dict[str, str]
    ) -> None:
        await _seed_permissions(db_session, "courses.edit", "payments.view", "users.view")
        admin, _ = await create_admin(db_session, email="a@x.com")
        url = f"/api/v1/auth/admin/{admin.id}/permissions"

        first = await client.post(
            url,
            json={"permissions": ["users.view", "courses.edit", "users.view"]},
            headers=owner_headers,
        )
        assert first.status_code == 200
        assert first.json()["data"]["permissions"] == ["courses.edit", "users.view"]
        assert first.json()["data"]["adminId"] == str(admin.id)

        second = await client.post(
            url, json={"permissions": ["payments.view"]}, headers=owner_headers
        )
        assert second.json()["data"]["permissions"] == ["payments.view"]

        admin_headers = bearer(await login(client, "a@x.com"))
        me = (await client.get("/api/v1/auth/auth-data", headers=admin_headers)).json()["data"]
        assert me["profile"]["permissions"] == ["payments.view"]

    async def test_unknown_permission_changes_nothing(
        self, client: AsyncClient, db_session: AsyncSession, owner_headers: dict[str, str]
    ) -> None:
        await _seed_permissions(db_session, "courses.edit")
        admin, _ = await create_admin(db_session, email="a@x.com")
        url = f"/api/v1/auth/admin/{admin.id}/permissions"
        await client.post(url, json={"permissions": ["courses.edit"]}, headers=owner_headers)

        response = await client.post(
            url, json={"permissions": ["courses.edit", "nope"]}, headers=owner_headers
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Some permissions do not exist"
        admin_headers = bearer(await login(client, "a@x.com"))
        me = (await client.get("/api/v1/auth/auth-data", headers=admin_headers)).json()["data"]
        assert me["profile"]["permissions"] == ["courses.edit"]

    async def test_target_must_be_admin(
        self, client: AsyncClient, db_session: AsyncSession, owner_headers: dict[str, str]
    ) -> None:
        await _seed_permissions(db_session, "courses.edit")
        student, _ = await create_student(db_session, email="s@x.com")

        response = await client.post(
            f"/api/v1/auth/admin/{student.id}/permissions",
            json={"permissions": ["courses.edit"]},
            headers=owner_headers,
        )

        assert response.status_code == 404

    async def test_empty_list_rejected(
        self, client: AsyncClient, owner: AuthUser, owner_headers: dict[str, str]
    ) -> None:
        response = await client.post(
            f"/api/v1/auth/admin/{owner.id}/permissions",
            json={"permissions": []},
            headers=owner_headers,
        )

        assert response.status_code == 422

    async def test_admin_cannot_assign(self, client: AsyncClient, db_session: AsyncSession) -> None:
        await _seed_permissions(db_session, "courses.edit")
        admin, _ = await create_admin(db_session, email="a@x.com")
        headers = bearer(await login(client, "a@x.com"))

        response = await client.post(
            f"/api/v1/auth/admin/{admin.id}/permissions",
            json={"permissions": ["courses.edit"]},
            headers=headers,
        )

        assert response.status_code == 403

    async def test_owner_auth_data_has_no_profile(
        self, client: AsyncClient, owner_headers: dict[str, str]
    ) -> None:
        me = (await client.get("/api/v1/auth/auth-data", headers=owner_headers)).json()["data"]

        assert me["role"] == "OWNER"
        assert me["profile"] is None
