"""GoodJob Ledger — ownership, transfers, balances and default release selection.

Invariants:
    - current_owner_id only ever points at a non-admin user
    - add_transfer is one transaction: checks, balance counts, Transfer insert
      and ownership update commit together or not at all
    - Balances come from counts read BEFORE the ownership update, in the same
      transaction (core.ledger_rules.balances_after_transfer)
    - The ownership update is conditional on the owner read at check time;
      losing that race raises ConcurrencyError and rolls back
    - Initial ownership is not a transfer: create() writes no Transfer row

Design Decisions:
    - SELECT ... FOR UPDATE on the GoodJob row serializes transfers of the same
      token on PostgreSQL; the conditional UPDATE covers stores without row locks
    - Selection policy lives in core.ledger_rules; this class only runs the
      two queries it needs
"""

import logging
from collections import defaultdict
from datetime import datetime, timezone

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from goodjob.core.enforce_ownership import (
    check_can_own, check_is_current_owner, validate_transfer,
)
from goodjob.core.errors import (
    ConcurrencyError, ErrorContext, ResourceNotFoundError,
)
from goodjob.core.ledger_rules import (
    balances_after_transfer, select_release_candidate,
)
from goodjob.infrastructure.database import atomic
from goodjob.models.good_job import GoodJob
from goodjob.models.transfer import Transfer
from goodjob.models.user import User

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class GoodJobLedger:
    """GoodJob and Transfer persistence with the ledger rules applied."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Reads ──────────────────────────────────────────────────

    async def get_by_id(self, good_job_id: int) -> GoodJob:
        """GoodJob with its current owner loaded."""
        result = await self.db.execute(
            select(GoodJob)
            .where(GoodJob.id == good_job_id)
            .execution_options(populate_existing=True)
        )
        good_job = result.scalar_one_or_none()
        if good_job is None:
            raise ResourceNotFoundError("GoodJob", str(good_job_id))
        return good_job

    async def get_all(self) -> list[GoodJob]:
        result = await self.db.execute(
            select(GoodJob)
            .order_by(GoodJob.id)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def get_by_owner(self, owner_id: int) -> list[GoodJob]:
        result = await self.db.execute(
            select(GoodJob)
            .where(GoodJob.current_owner_id == owner_id)
            .order_by(GoodJob.id)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def count_by_owner(self, owner_id: int) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(GoodJob)
            .where(GoodJob.current_owner_id == owner_id)
        )
        return result.scalar_one()

    async def get_current_owner(self, good_job_id: int) -> User | None:
        good_job = await self.get_by_id(good_job_id)
        return good_job.current_owner

    async def get_transfers(self, good_job_id: int) -> list[Transfer]:
        """Transfer history of one GoodJob, newest first."""
        await self.get_by_id(good_job_id)
        result = await self.db.execute(
            select(Transfer)
            .where(Transfer.good_job_id == good_job_id)
            .order_by(Transfer.date.desc(), Transfer.id.desc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def get_last_transfer(self, good_job_id: int) -> Transfer | None:
        result = await self.db.execute(
            select(Transfer)
            .where(Transfer.good_job_id == good_job_id)
            .order_by(Transfer.date.desc(), Transfer.id.desc())
            .execution_options(populate_existing=True)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_received_before_good_job(self, owner_id: int) -> GoodJob | None:
        """GoodJob the owner releases by default, or None if none qualifies."""
        owned = await self.get_by_owner(owner_id)
        if not owned:
            return None

        owned_by_id = {good_job.id: good_job for good_job in owned}
        result = await self.db.execute(
            select(Transfer.good_job_id, Transfer.date)
            .where(Transfer.to_user_id == owner_id)
            .where(Transfer.good_job_id.in_(owned_by_id))
        )
        receipt_dates: dict[int, list[datetime]] = defaultdict(list)
        for good_job_id, date in result.all():
            receipt_dates[good_job_id].append(date)

        chosen = select_release_candidate(list(owned_by_id), receipt_dates)
        return owned_by_id[chosen] if chosen is not None else None

    # ─── Mutations ──────────────────────────────────────────────

    async def create(
        self,
        generated_date: datetime | None = None,
        initial_owner_id: int | None = None,
    ) -> GoodJob:
        """Mint a GoodJob, optionally straight into a non-admin user's hands."""
        async with atomic(self.db):
            if initial_owner_id is not None:
                owner = await self.db.get(User, initial_owner_id)
                if owner is None:
                    raise ResourceNotFoundError("User", str(initial_owner_id))
                error = check_can_own(owner)
                if error:
                    raise error

            good_job = GoodJob(
                generated_date=generated_date or _utc_now(),
                current_owner_id=initial_owner_id,
                last_transfer_date=_utc_now() if initial_owner_id is not None else None,
            )
            self.db.add(good_job)
            await self.db.flush()
            await self.db.refresh(good_job)

        logger.info(
            f"GoodJob {good_job.id} created",
            extra={"good_job_id": good_job.id, "user_id": initial_owner_id},
        )
        return good_job

    async def add_transfer(
        self,
        good_job_id: int,
        from_user_id: int,
        to_user_id: int,
        date: datetime | None = None,
    ) -> Transfer:
        """Move a GoodJob from its current owner to another non-admin user."""
        transfer_date = date or _utc_now()

        async with atomic(self.db):
            result = await self.db.execute(
                select(GoodJob)
                .where(GoodJob.id == good_job_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            good_job = result.scalar_one_or_none()
            if good_job is None:
                raise ResourceNotFoundError("GoodJob", str(good_job_id))

            error = check_is_current_owner(good_job, from_user_id)
            if error:
                raise error
            recipient = await self.db.get(User, to_user_id)
            if recipient is None:
                raise ResourceNotFoundError(
                    "User", str(to_user_id),
                    ErrorContext(good_job_id=good_job_id),
                )
            error = validate_transfer(good_job, from_user_id, recipient)
            if error:
                raise error

            balances = balances_after_transfer(
                await self.count_by_owner(from_user_id),
                await self.count_by_owner(to_user_id),
            )

            transfer = Transfer(
                date=transfer_date,
                from_user_id=from_user_id,
                to_user_id=to_user_id,
                good_job_id=good_job_id,
                balance_after_from=balances.after_from,
                balance_after_to=balances.after_to,
            )
            self.db.add(transfer)

            moved = await self.db.execute(
                update(GoodJob)
                .where(GoodJob.id == good_job_id)
                .where(GoodJob.current_owner_id == from_user_id)
                .values(current_owner_id=to_user_id, last_transfer_date=transfer_date)
                .execution_options(synchronize_session=False)
            )
            if moved.rowcount != 1:
                raise ConcurrencyError(
                    "GoodJob changed owner during the transfer",
                    ErrorContext(user_id=from_user_id, good_job_id=good_job_id),
                )
            await self.db.flush()

        await self.db.refresh(good_job)
        logger.info(
            f"GoodJob {good_job_id} transferred {from_user_id} -> {to_user_id}",
            extra={
                "good_job_id": good_job_id,
                "user_id": from_user_id,
                "to_user_id": to_user_id,
                "transfer_id": transfer.id,
            },
        )
        return transfer

    async def delete(self, good_job_id: int) -> GoodJob:
        """Delete the GoodJob's transfers, then the GoodJob itself."""
        async with atomic(self.db):
            good_job = await self.get_by_id(good_job_id)
            await self.db.execute(
                delete(Transfer).where(Transfer.good_job_id == good_job_id),
            )
            await self.db.delete(good_job)

        logger.info(
            f"GoodJob {good_job_id} deleted with its transfers",
            extra={"good_job_id": good_job_id},
        )
        return good_job
