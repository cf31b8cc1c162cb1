"""Shared enums for models."""

from enum import Enum


class Role(str, Enum):
    """Identity role. Closed set; fixed at creation."""

    OWNER = "OWNER"
    ADMIN = "ADMIN"
    STUDENT = "STUDENT"


class AuthProvider(str, Enum):
    """Where the identity's credential lives."""

    LOCAL = "LOCAL"
    GOOGLE = "GOOGLE"
    FACEBOOK = "FACEBOOK"


class VerificationTokenType(str, Enum):
    """Purpose of a one-time verification code."""

    VERIFY_EMAIL = "VERIFY_EMAIL"
    VERIFY_PHONE = "VERIFY_PHONE"
    PASSWORD_RESET = "PASSWORD_RESET"
    INVITE_ADMIN = "INVITE_ADMIN"


class InvitationStatus(str, Enum):
    """Admin invitation status.

    EXPIRED is never stored; it is derived from expires_at.
    """

    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    EXPIRED = "EXPIRED"
    REVOKED = "REVOKED"


class SignUpVia(str, Enum):
    WEB = "WEB"
    GOOGLE = "GOOGLE"


class AdminStatus(str, Enum):
    """Back-office approval state of an admin profile."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    SUSPENDED = "SUSPENDED"


class AdminType(str, Enum):
    SUPER = "SUPER"
    CONTENT = "CONTENT"
    SUPPORT = "SUPPORT"
    FINANCE = "FINANCE"


class Gender(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    OTHER = "OTHER"
