"""User Directory — CRUD over users with name uniqueness.

Invariants:
    - Names are unique, compared case-sensitively
    - get_by_id / get_by_name / update / delete raise ResourceNotFoundError for unknown users
    - A user holding GoodJobs is never promoted to admin
    - A user referenced by GoodJobs or transfers is never deleted

Design Decisions:
    - Uniqueness checked before insert for a readable error; the UNIQUE
      constraint on users.name backs it up (surfaces as DatabaseError)
"""

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from goodjob.core.enforce_ownership import check_can_promote
from goodjob.core.errors import (
    BusinessRuleError, ErrorContext, ResourceNotFoundError,
    UserAlreadyExistsError,
)
from goodjob.infrastructure.database import atomic
from goodjob.models.good_job import GoodJob
from goodjob.models.transfer import Transfer
from goodjob.models.user import User

logger = logging.getLogger(__name__)


class UserDirectory:
    """User persistence."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _find_by_name(self, name: str) -> User | None:
        result = await self.db.execute(select(User).where(User.name == name))
        return result.scalar_one_or_none()

    async def create(
        self, name: str, password_hash: str, is_admin: bool = False,
    ) -> User:
        async with atomic(self.db):
            if await self._find_by_name(name) is not None:
                raise UserAlreadyExistsError(name)
            user = User(name=name, hash=password_hash, is_admin=is_admin)
            self.db.add(user)
            await self.db.flush()

        logger.info(
            f"User '{user.name}' created (admin={user.is_admin})",
            extra={"user_id": user.id},
        )
        return user

    async def get_by_id(self, user_id: int) -> User:
        user = await self.db.get(User, user_id)
        if user is None:
            raise ResourceNotFoundError("User", str(user_id))
        return user

    async def get_by_name(self, name: str) -> User:
        user = await self._find_by_name(name)
        if user is None:
            raise ResourceNotFoundError("User", name)
        return user

    async def get_all(self) -> list[User]:
        result = await self.db.execute(select(User).order_by(User.id))
        return list(result.scalars().all())

    async def count(self) -> int:
        result = await self.db.execute(select(func.count()).select_from(User))
        return result.scalar_one()

    async def update(
        self,
        user_id: int,
        *,
        name: str | None = None,
        password_hash: str | None = None,
        is_admin: bool | None = None,
    ) -> User:
        """Apply the given fields; omitted fields keep their value."""
        async with atomic(self.db):
            user = await self.get_by_id(user_id)
            if name is not None and name != user.name:
                if await self._find_by_name(name) is not None:
                    raise UserAlreadyExistsError(name)
                user.name = name
            if password_hash is not None:
                user.hash = password_hash
            if is_admin is not None:
                if is_admin and not user.is_admin:
                    error = check_can_promote(user, await self._owned_count(user.id))
                    if error:
                        raise error
                user.is_admin = is_admin
            await self.db.flush()

        logger.info(f"User {user.id} updated", extra={"user_id": user.id})
        return user

    async def delete(self, user_id: int) -> User:
        async with atomic(self.db):
            user = await self.get_by_id(user_id)
            if await self._owned_count(user_id) or await self._transfer_count(user_id):
                raise BusinessRuleError(
                    "User still owns GoodJobs or appears in transfers",
                    "USER_IN_USE",
                    ErrorContext(user_id=user_id),
                )
            await self.db.delete(user)

        logger.info(f"User {user_id} deleted", extra={"user_id": user_id})
        return user

    async def transfers_sent(self, user_id: int) -> list[Transfer]:
        result = await self.db.execute(
            select(Transfer)
            .where(Transfer.from_user_id == user_id)
            .order_by(Transfer.date.desc(), Transfer.id.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def transfers_received(self, user_id: int) -> list[Transfer]:
        result = await self.db.execute(
            select(Transfer)
            .where(Transfer.to_user_id == user_id)
            .order_by(Transfer.date.desc(), Transfer.id.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def _owned_count(self, user_id: int) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(GoodJob)
            .where(GoodJob.current_owner_id == user_id)
        )
        return result.scalar_one()

    async def _transfer_count(self, user_id: int) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(Transfer)
            .where(or_(
                Transfer.from_user_id == user_id,
                Transfer.to_user_id == user_id,
            ))
        )
        return result.scalar_one()
