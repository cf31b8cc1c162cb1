"""Test factories for generating test data.

Re-exports all factories for convenient imports:
    from tests.factories import AuthUserFactory, InvitationFactory, ...
"""

from tests.factories.base import BaseFactory, generate_uuid, utc_now
from tests.factories.identity import (
    DEFAULT_TEST_PASSWORD,
    AuthUserFactory,
    SessionTokenFactory,
    VerificationTokenFactory,
)
from tests.factories.invitation import InvitationFactory
from tests.factories.profile import (
    AdminProfileFactory,
    PermissionFactory,
    StudentProfileFactory,
)

__all__ = [
    # Base
    "BaseFactory",
    "generate_uuid",
    "utc_now",
    # Credential store
    "AuthUserFactory",
    "DEFAULT_TEST_PASSWORD",
    "SessionTokenFactory",
    "VerificationTokenFactory",
    # Invitations
    "InvitationFactory",
    # Profiles
    "AdminProfileFactory",
    "PermissionFactory",
    "StudentProfileFactory",
]
