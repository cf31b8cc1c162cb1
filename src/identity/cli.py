"""Operator commands.

    identity-admin create-owner --email owner@example.com --password '...'
    identity-admin seed-permissions manage_courses manage_students

OWNER accounts cannot be created over HTTP; create-owner is the only way in.
"""

import argparse
import asyncio
import sys
from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncEngine

from src.identity.core.config import get_settings
from src.identity.core.db import dispose_engine, get_session
from src.identity.core.logging import get_logger, setup_logging
from src.identity.core.security import check_password_strength, hash_password
from src.identity.models import AuthProvider, AuthUser, Permission, Role
from src.identity.repositories import AuthUserRepository, PermissionRepository, normalize_email

logger = get_logger(__name__)


class CommandError(Exception):
    """A command could not run. Printed to stderr with exit code 1."""


async def create_owner(email: str, password: str, engine: AsyncEngine | None = None) -> AuthUser:
    try:
        check_password_strength(password)
    except ValueError as e:
        raise CommandError(str(e)) from e

    async with get_session(engine) as session:
        repo = AuthUserRepository(session)
        if await repo.exists_by_email(email):
            raise CommandError(f"An account with email {email} already exists")

        owner = AuthUser(
            email=normalize_email(email),
            password_hash=hash_password(password),
            role=Role.OWNER.value,
            provider=AuthProvider.LOCAL.value,
            email_verified=True,
            account_verified=True,
            max_login_devices=get_settings().max_login_devices,
        )
        repo.add(owner)
        await session.commit()

    logger.info("Owner created", user_id=str(owner.id))
    return owner


async def seed_permissions(names: Sequence[str], engine: AsyncEngine | None = None) -> list[str]:
    """Create the permissions that do not exist yet. Returns the names created."""
    wanted = sorted({name.strip() for name in names if name.strip()})
    async with get_session(engine) as session:
        repo = PermissionRepository(session)
        existing = {p.name for p in await repo.get_by_names(wanted)}
        created = [name for name in wanted if name not in existing]
        for name in created:
            repo.add(Permission(name=name))
        await session.commit()

    logger.info("Permissions seeded", created=len(created), skipped=len(existing))
    return created


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="identity-admin", description="Identity service admin")
    commands = parser.add_subparsers(dest="command", required=True)

    owner = commands.add_parser("create-owner", help="Create an OWNER account")
    owner.add_argument("--email", required=True)
    owner.add_argument("--password", required=True)

    seed = commands.add_parser("seed-permissions", help="Create permission names")
    seed.add_argument("names", nargs="+", metavar="NAME")

    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> None:
    try:
        match args.command:
            case "create-owner":
                owner = await create_owner(args.email, args.password)
                print(f"Created OWNER {owner.email} ({owner.id})")
            case "seed-permissions":
                created = await seed_permissions(args.names)
                print(f"Created {len(created)} permission(s): {', '.join(created) or '-'}")
    finally:
        await dispose_engine()


def main(argv: Sequence[str] | None = None) -> int:
    setup_logging(get_settings().debug)
    args = parse_args(argv)
    try:
        asyncio.run(run(args))
    except CommandError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
