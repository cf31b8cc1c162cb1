"""Initial schema: identities, sessions, codes, invitations, profiles, permissions

Revision ID: 001
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
import sqlmodel
from sqlalchemy.dialects import postgresql

from alembic import op

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _string(length: int) -> sqlmodel.sql.sqltypes.AutoString:
    return sqlmodel.sql.sqltypes.AutoString(length=length)


def upgrade() -> None:
    op.create_table(
        "auth_users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", _string(255), nullable=True),
        sa.Column("password_hash", _string(255), nullable=True),
        sa.Column("role", _string(20), nullable=False),
        sa.Column("provider", _string(20), nullable=False),
        sa.Column("provider_id", _string(255), nullable=True),
        sa.Column("email_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("mobile_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("account_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("max_login_devices", sa.Integer(), nullable=False, server_default="5"),
        sa.Column("last_login", sa.DateTime(), nullable=True),
        sa.Column("password_changed_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_auth_users_email", "auth_users", ["email"], unique=True)
    op.create_index("ix_auth_users_provider_id", "auth_users", ["provider_id"], unique=False)

    op.create_table(
        "session_tokens",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("auth_user_id", sa.Uuid(), nullable=False),
        sa.Column("token_hash", _string(64), nullable=False),
        sa.Column("jti", _string(64), nullable=False),
        sa.Column("issued_at", sa.DateTime(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("revoked_at", sa.DateTime(), nullable=True),
        sa.Column("device_name", _string(255), nullable=True),
        sa.Column("ip_address", _string(45), nullable=True),
        sa.Column("user_agent", _string(512), nullable=True),
        sa.ForeignKeyConstraint(["auth_user_id"], ["auth_users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_session_tokens_auth_user_id", "session_tokens", ["auth_user_id"], unique=False
    )
    op.create_index("ix_session_tokens_token_hash", "session_tokens", ["token_hash"], unique=True)
    op.create_index(
        "ix_session_tokens_user_active",
        "session_tokens",
        ["auth_user_id", "is_active", "expires_at"],
        unique=False,
    )

    op.create_table(
        "verification_tokens",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("auth_user_id", sa.Uuid(), nullable=False),
        sa.Column("token_hash", _string(64), nullable=False),
        sa.Column("type", _string(20), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("is_used", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("used_at", sa.DateTime(), nullable=True),
        sa.Column("failed_attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["auth_user_id"], ["auth_users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_verification_tokens_auth_user_id",
        "verification_tokens",
        ["auth_user_id"],
        unique=False,
    )
    op.create_index(
        "ix_verification_tokens_lookup",
        "verification_tokens",
        ["auth_user_id", "type", "is_used"],
        unique=False,
    )

    op.create_table(
        "invitations",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", _string(255), nullable=False),
        sa.Column("token_hash", _string(64), nullable=False),
        sa.Column("role", _string(20), nullable=False),
        sa.Column("status", _string(20), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("invited_by", sa.Uuid(), nullable=False),
        sa.Column("accepted_by", sa.Uuid(), nullable=True),
        sa.Column("accepted_at", sa.DateTime(), nullable=True),
        sa.Column("revoked_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["invited_by"], ["auth_users.id"]),
        sa.ForeignKeyConstraint(["accepted_by"], ["auth_users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_invitations_email", "invitations", ["email"], unique=False)
    op.create_index("ix_invitations_token_hash", "invitations", ["token_hash"], unique=True)
    op.create_index("ix_invitations_invited_by", "invitations", ["invited_by"], unique=False)

    op.create_table(
        "student_profiles",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("auth_user_id", sa.Uuid(), nullable=False),
        sa.Column("first_name", _string(100), nullable=True),
        sa.Column("last_name", _string(100), nullable=True),
        sa.Column("dob", sa.Date(), nullable=True),
        sa.Column("gender", _string(10), nullable=True),
        sa.Column("profile_picture", _string(1024), nullable=True),
        sa.Column("push_id", _string(512), nullable=True),
        sa.Column("year", sa.Integer(), nullable=True),
        sa.Column("nic", _string(20), nullable=True),
        sa.Column("nic_pic", _string(1024), nullable=True),
        sa.Column("register_code", _string(50), nullable=True),
        sa.Column("delivery_details", JSON_TYPE, nullable=True),
        sa.Column("extra_details", JSON_TYPE, nullable=True),
        sa.Column("is_profile_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["auth_user_id"], ["auth_users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_student_profiles_auth_user_id", "student_profiles", ["auth_user_id"], unique=True
    )

    op.create_table(
        "admin_profiles",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("auth_user_id", sa.Uuid(), nullable=False),
        sa.Column("first_name", _string(100), nullable=True),
        sa.Column("last_name", _string(100), nullable=True),
        sa.Column("image", _string(1024), nullable=True),
        sa.Column("admin_type", _string(20), nullable=True),
        sa.Column("sign_up_via", _string(10), nullable=False),
        sa.Column("status", _string(20), nullable=False),
        sa.Column("is_profile_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["auth_user_id"], ["auth_users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_admin_profiles_auth_user_id", "admin_profiles", ["auth_user_id"], unique=True
    )

    op.create_table(
        "permissions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", _string(100), nullable=False),
        sa.Column("description", _string(255), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_permissions_name", "permissions", ["name"], unique=True)

    op.create_table(
        "admin_permissions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("admin_profile_id", sa.Uuid(), nullable=False),
        sa.Column("permission_id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["admin_profile_id"], ["admin_profiles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["permission_id"], ["permissions.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("admin_profile_id", "permission_id", name="uq_admin_permission"),
    )
    op.create_index(
        "ix_admin_permissions_admin_profile_id",
        "admin_permissions",
        ["admin_profile_id"],
        unique=False,
    )
    op.create_index(
        "ix_admin_permissions_permission_id", "admin_permissions", ["permission_id"], unique=False
    )


def downgrade() -> None:
    op.drop_table("admin_permissions")
    op.drop_table("permissions")
    op.drop_table("admin_profiles")
    op.drop_table("student_profiles")
    op.drop_table("invitations")
    op.drop_table("verification_tokens")
    op.drop_table("session_tokens")
    op.drop_table("auth_users")
