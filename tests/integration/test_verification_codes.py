"""Tests for email verification and password reset codes."""

from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from src.identity.core.config import get_settings
from src.identity.core.exceptions import InvalidOrExpiredCodeError
from src.identity.core.notifications import DeliveryPurpose
from src.identity.models import VerificationTokenType
from src.identity.models.base import utc_now
from src.identity.repositories import VerificationTokenRepository
from src.identity.services import VerificationService
from tests.factories import DEFAULT_TEST_PASSWORD
from tests.helpers import Delivery, auth_data_status, bearer, create_student, login

pytestmark = [pytest.mark.integration, pytest.mark.asyncio]

NEW_PASSWORD = "Purple-Monkey-Dishwasher-42"


def _last_code(outbox: list[Delivery], purpose: DeliveryPurpose) -> str:
    codes = [d.payload for d in outbox if d.purpose is purpose]
    assert codes, f"no {purpose.value} delivery captured"
    return codes[-1]


class TestEmailVerification:
    async def test_request_and_verify(
        self, client: AsyncClient, db_session: AsyncSession, outbox: list[Delivery]
    ) -> None:
        user, _ = await create_student(db_session, email="verify@example.com")
        token = await login(client, "verify@example.com")

        requested = await client.post(
            "/api/v1/auth/request-email-verification", headers=bearer(token)
        )
        assert requested.status_code == 200
        assert requested.json()["data"] is None
        code = _last_code(outbox, DeliveryPurpose.EMAIL_VERIFICATION)
        assert outbox[-1].destination == "verify@example.com"

        verified = await client.post(
            "/api/v1/auth/verify-email", json={"code": code}, headers=bearer(token)
        )
        assert verified.status_code == 200

        me = await client.get("/api/v1/auth/auth-data", headers=bearer(token))
        assert me.json()["data"]["emailVerified"] is True

    async def test_code_is_single_use(
        self, client: AsyncClient, db_session: AsyncSession, outbox: list[Delivery]
    ) -> None:
        await create_student(db_session, email="once@example.com")
        token = await login(client, "once@example.com")
        await client.post("/api/v1/auth/request-email-verification", headers=bearer(token))
        code = _last_code(outbox, DeliveryPurpose.EMAIL_VERIFICATION)

        first = await client.post(
            "/api/v1/auth/verify-email", json={"code": code}, headers=bearer(token)
        )
        second = await client.post(
            "/api/v1/auth/verify-email", json={"code": code}, headers=bearer(token)
        )

        assert first.status_code == 200
        assert second.status_code == 400
        assert second.json()["message"] == "Invalid or expired verification code"

    async def test_reissue_supersedes_previous_code(
        self, client: AsyncClient, db_session: AsyncSession, outbox: list[Delivery]
    ) -> None:
        await create_student(db_session, email="reissue@example.com")
        token = await login(client, "reissue@example.com")
        await client.post("/api/v1/auth/request-email-verification", headers=bearer(token))
        old_code = _last_code(outbox, DeliveryPurpose.EMAIL_VERIFICATION)
        await client.post("/api/v1/auth/request-email-verification", headers=bearer(token))
        new_code = _last_code(outbox, DeliveryPurpose.EMAIL_VERIFICATION)

        if old_code != new_code:
            stale = await client.post(
                "/api/v1/auth/verify-email", json={"code": old_code}, headers=bearer(token)
            )
            assert stale.status_code == 400
        fresh = await client.post(
            "/api/v1/auth/verify-email", json={"code": new_code}, headers=bearer(token)
        )
        assert fresh.status_code == 200

    async def test_already_verified(self, client: AsyncClient, db_session: AsyncSession) -> None:
        await create_student(db_session, email="done@example.com", email_verified=True)
        token = await login(client, "done@example.com")

        response = await client.post(
            "/api/v1/auth/request-email-verification", headers=bearer(token)
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Email is already verified"

    async def test_code_format_validated(
        self, client: AsyncClient, db_session: AsyncSession
    ) -> None:
        await create_student(db_session, email="format@example.com")
        token = await login(client, "format@example.com")

        response = await client.post(
            "/api/v1/auth/verify-email", json={"code": "12ab"}, headers=bearer(token)
        )

        assert response.status_code == 422


class TestVerificationEngine:
    async def test_expired_code_is_rejected(self, db_session: AsyncSession) -> None:
        user, _ = await create_student(db_session)
        service = VerificationService(VerificationTokenRepository(db_session), db_session)
        code = await service.issue(
            user, VerificationTokenType.VERIFY_EMAIL, ttl=timedelta(seconds=-1)
        )
        await db_session.commit()

        with pytest.raises(InvalidOrExpiredCodeError):
            await service.consume(user, code, VerificationTokenType.VERIFY_EMAIL)

    async def test_code_bound_to_purpose(self, db_session: AsyncSession) -> None:
        user, _ = await create_student(db_session)
        service = VerificationService(VerificationTokenRepository(db_session), db_session)
        code = await service.issue(user, VerificationTokenType.VERIFY_EMAIL)
        await db_session.commit()

        with pytest.raises(InvalidOrExpiredCodeError):
            await service.consume(user, code, VerificationTokenType.PASSWORD_RESET)

        token = await service.consume(user, code, VerificationTokenType.VERIFY_EMAIL)
        assert token.is_used is True
        assert token.used_at is not None
        assert token.used_at <= utc_now()


class TestPasswordReset:
    async def test_reset_flow(
        self, client: AsyncClient, db_session: AsyncSession, outbox: list[Delivery]
    ) -> None:
        """Reset signs out every session; old password and the code stop working."""
        await create_student(db_session, email="reset@example.com")
        session_token = await login(client, "reset@example.com")

        requested = await client.post(
            "/api/v1/auth/reset-password-request", json={"email": "reset@example.com"}
        )
        assert requested.status_code == 200
        code = _last_code(outbox, DeliveryPurpose.PASSWORD_RESET)

        reset = await client.post(
            "/api/v1/auth/reset-password",
            json={"email": "reset@example.com", "code": code, "newPassword": NEW_PASSWORD},
        )
        assert reset.status_code == 200

        assert await auth_data_status(client, session_token) == 401
        old = await client.post(
            "/api/v1/auth/login",
            json={"email": "reset@example.com", "password": DEFAULT_TEST_PASSWORD},
        )
        assert old.status_code == 401
        await login(client, "reset@example.com", NEW_PASSWORD)

        replay = await client.post(
            "/api/v1/auth/reset-password",
            json={
                "email": "reset@example.com",
                "code": code,
                "newPassword": "Another-Strong-Passphrase-7",
            },
        )
        assert replay.status_code == 400

    async def test_unknown_email_gets_same_response(
        self, client: AsyncClient, db_session: AsyncSession, outbox: list[Delivery]
    ) -> None:
        await create_student(db_session, email="exists@example.com")

        known = await client.post(
            "/api/v1/auth/reset-password-request", json={"email": "exists@example.com"}
        )
        unknown = await client.post(
            "/api/v1/auth/reset-password-request", json={"email": "ghost@example.com"}
        )

        assert known.status_code == unknown.status_code == 200
        assert known.json() == unknown.json()
        assert [d.destination for d in outbox] == ["exists@example.com"]

    async def test_wrong_code_changes_nothing(
        self, client: AsyncClient, db_session: AsyncSession, outbox: list[Delivery]
    ) -> None:
        await create_student(db_session, email="guess@example.com")
        token = await login(client, "guess@example.com")
        await client.post(
            "/api/v1/auth/reset-password-request", json={"email": "guess@example.com"}
        )
        code = _last_code(outbox, DeliveryPurpose.PASSWORD_RESET)
        wrong = "000000" if code != "000000" else "111111"

        response = await client.post(
            "/api/v1/auth/reset-password",
            json={"email": "guess@example.com", "code": wrong, "newPassword": NEW_PASSWORD},
        )

        assert response.status_code == 400
        assert await auth_data_status(client, token) == 200
        await login(client, "guess@example.com")

    async def test_reset_by_user_id(
        self, client: AsyncClient, db_session: AsyncSession, outbox: list[Delivery]
    ) -> None:
        user, _ = await create_student(db_session, email="u@x.com")
        await client.post("/api/v1/auth/reset-password-request", json={"email": "u@x.com"})
        code = _last_code(outbox, DeliveryPurpose.PASSWORD_RESET)

        reset = await client.post(
            "/api/v1/auth/reset-password",
            json={"userId": str(user.id), "code": code, "newPassword": "NewPass1"},
        )

        assert reset.status_code == 200, reset.json()
        old = await client.post(
            "/api/v1/auth/login", json={"email": "u@x.com", "password": DEFAULT_TEST_PASSWORD}
        )
        assert old.status_code == 401
        await login(client, "u@x.com", "NewPass1")

        replay = await client.post(
            "/api/v1/auth/reset-password",
            json={"userId": str(user.id), "code": code, "newPassword": "NewPass1"},
        )
        assert replay.status_code == 400

    @pytest.mark.parametrize(
        "identity",
        [{}, {"userId": "8c5e2a9e-0d7f-4f51-9d0e-3f1b2c4d5e6f", "email": "u@x.com"}],
    )
    async def test_reset_needs_exactly_one_identity(
        self, client: AsyncClient, identity: dict[str, str]
    ) -> None:
        response = await client.post(
            "/api/v1/auth/reset-password",
            json={**identity, "code": "123456", "newPassword": NEW_PASSWORD},
        )

        assert response.status_code == 422

    async def test_repeated_wrong_codes_lock_the_code(
        self, client: AsyncClient, db_session: AsyncSession, outbox: list[Delivery]
    ) -> None:
        await create_student(db_session, email="brute@example.com")
        await client.post(
            "/api/v1/auth/reset-password-request", json={"email": "brute@example.com"}
        )
        code = _last_code(outbox, DeliveryPurpose.PASSWORD_RESET)
        max_attempts = get_settings().verification_max_attempts
        wrong_codes = [c for c in (f"{n:06d}" for n in range(max_attempts + 1)) if c != code]

        for wrong in wrong_codes[:max_attempts]:
            response = await client.post(
                "/api/v1/auth/reset-password",
                json={"email": "brute@example.com", "code": wrong, "newPassword": NEW_PASSWORD},
            )
            assert response.status_code == 400

        correct = await client.post(
            "/api/v1/auth/reset-password",
            json={"email": "brute@example.com", "code": code, "newPassword": NEW_PASSWORD},
        )
        assert correct.status_code == 400
        await login(client, "brute@example.com")

        await client.post(
            "/api/v1/auth/reset-password-request", json={"email": "brute@example.com"}
        )
        fresh = await client.post(
            "/api/v1/auth/reset-password",
            json={
                "email": "brute@example.com",
                "code": _last_code(outbox, DeliveryPurpose.PASSWORD_RESET),
                "newPassword": NEW_PASSWORD,
            },
        )
        assert fresh.status_code == 200
