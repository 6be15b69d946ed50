"""Auth Service — registration, login and token issuance on top of the user directory.

Invariants:
    - The first user ever registered becomes an administrator; later
      registrations never do
    - Unknown name and wrong password fail with the same InvalidCredentialsError
    - Tokens carry userId, name and isAdmin as stored at issuance time
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from goodjob.core.errors import InvalidCredentialsError, ResourceNotFoundError
from goodjob.infrastructure import security
from goodjob.models.user import User
from goodjob.services.user_directory import UserDirectory

logger = logging.getLogger(__name__)


def issue_token(user: User) -> str:
    return security.build_access_token(
        user_id=user.id, name=user.name, is_admin=user.is_admin,
    )


class AuthService:
    """Credential checks and user creation with token issuance."""

    def __init__(self, db: AsyncSession):
        self.users = UserDirectory(db)

    async def register(self, name: str, password: str) -> tuple[User, str]:
        """Self-service sign-up. Returns the new user and its token."""
        is_first_user = await self.users.count() == 0
        user = await self.users.create(
            name, security.hash_password(password), is_admin=is_first_user,
        )
        if is_first_user:
            logger.info(
                f"First user '{user.name}' registered as administrator",
                extra={"user_id": user.id},
            )
        return user, issue_token(user)

    async def create_user(
        self, name: str, password: str, is_admin: bool = False,
    ) -> tuple[User, str]:
        """Admin-initiated user creation."""
        user = await self.users.create(
            name, security.hash_password(password), is_admin=is_admin,
        )
        return user, issue_token(user)

    async def login(self, name: str, password: str) -> tuple[User, str]:
        try:
            user = await self.users.get_by_name(name)
        except ResourceNotFoundError:
            logger.warning("Login failed: unknown user")
            raise InvalidCredentialsError() from None

        if not security.verify_password(password, user.hash):
            logger.warning("Login failed: wrong password", extra={"user_id": user.id})
            raise InvalidCredentialsError()

        return user, issue_token(user)
