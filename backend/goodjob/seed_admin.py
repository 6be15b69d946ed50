"""Seed the initial administrator account.

Reads ADMIN_NAME / ADMIN_PASSWORD (defaults: admin / admin123) unless given
on the command line. An existing user with that name is reported, not changed.
"""

import argparse
import asyncio
import os
import sys

from goodjob.config import get_settings
from goodjob.core.errors import GoodJobError, UserAlreadyExistsError
from goodjob.db.session import create_session_factory
from goodjob.infrastructure.security import hash_password
from goodjob.services.user_directory import UserDirectory

DEFAULT_ADMIN_NAME = "admin"
DEFAULT_ADMIN_PASSWORD = "admin123"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create the initial GoodJob administrator")
    parser.add_argument(
        "--name",
        default=os.getenv("ADMIN_NAME", DEFAULT_ADMIN_NAME),
        help="Administrator name (defaults to ADMIN_NAME or 'admin')",
    )
    parser.add_argument(
        "--password",
        default=os.getenv("ADMIN_PASSWORD", DEFAULT_ADMIN_PASSWORD),
        help="Administrator password (defaults to ADMIN_PASSWORD)",
    )
    parser.add_argument(
        "--database-url",
        default=None,
        help="Database URL (defaults to the DATABASE_URL setting)",
    )
    return parser.parse_args(argv)


async def seed_admin(database_url: str, name: str, password: str) -> int:
    """Create the admin user. Returns a process exit code."""
    session_factory = create_session_factory(database_url)
    try:
        async with session_factory() as db:
            directory = UserDirectory(db)
            try:
                user = await directory.create(name, hash_password(password), is_admin=True)
            except UserAlreadyExistsError:
                print(f"User '{name}' already exists; nothing to do.")
                return 0
            except GoodJobError as exc:
                print(f"Error: {exc.message}", file=sys.stderr)
                return 1
    finally:
        await session_factory.kw["bind"].dispose()

    print(f"Created administrator #{user.id}: {user.name}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if args.password == DEFAULT_ADMIN_PASSWORD:
        print(
            "WARNING: using the default admin password. Set ADMIN_PASSWORD.",
            file=sys.stderr,
        )
    database_url = args.database_url or get_settings().database_url
    return asyncio.run(seed_admin(database_url, args.name.strip(), args.password))


if __name__ == "__main__":
    raise SystemExit(main())
