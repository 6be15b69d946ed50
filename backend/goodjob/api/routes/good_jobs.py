"""GoodJob Routes — minting, transfers, lookups and deletion.

Invariants:
    - Minting and deletion require an admin caller
    - Transfers require an authenticated caller and always send from the caller
    - A transfer without good_job_id releases the ledger's default pick;
      no qualifying GoodJob is a 400
"""

import logging

from fastapi import APIRouter, Depends, Query, status

from goodjob.api.dependencies import get_ledger, require_admin, require_user
from goodjob.core.domain_types import TokenPayload
from goodjob.core.errors import BusinessRuleError, ErrorContext, NotOwnerError
from goodjob.schemas.good_job import (
    GoodJobCreate, GoodJobListResponse, GoodJobResponse, TransferCreate,
    TransferHistoryEntry, TransferResponse, TransferResult,
)
from goodjob.schemas.user import UserSummary
from goodjob.services.good_job_ledger import GoodJobLedger

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/goodjobs", tags=["goodjobs"])


@router.get("", response_model=GoodJobListResponse)
async def list_good_jobs(ledger: GoodJobLedger = Depends(get_ledger)):
    good_jobs = await ledger.get_all()
    return GoodJobListResponse(
        count=len(good_jobs),
        good_jobs=[GoodJobResponse.model_validate(gj) for gj in good_jobs],
    )


@router.post(
    "", response_model=GoodJobResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_good_job(
    body: GoodJobCreate,
    admin: TokenPayload = Depends(require_admin),
    ledger: GoodJobLedger = Depends(get_ledger),
):
    """Mint a GoodJob, optionally assigning it to a non-admin user."""
    good_job = await ledger.create(
        generated_date=body.generated_date,
        initial_owner_id=body.initial_owner_id,
    )
    return GoodJobResponse.model_validate(await ledger.get_by_id(good_job.id))


@router.post("/transfer", response_model=TransferResult)
async def transfer_good_job(
    body: TransferCreate,
    caller: TokenPayload = Depends(require_user),
    ledger: GoodJobLedger = Depends(get_ledger),
):
    """Hand a GoodJob owned by the caller to another user."""
    if body.from_user_id is not None and body.from_user_id != caller.user_id:
        raise NotOwnerError(ErrorContext(user_id=caller.user_id))

    good_job_id = body.good_job_id
    if good_job_id is None:
        candidate = await ledger.get_received_before_good_job(caller.user_id)
        if candidate is None:
            raise BusinessRuleError(
                "No GoodJob available to transfer",
                "NO_TRANSFERABLE_GOOD_JOB",
                ErrorContext(user_id=caller.user_id),
            )
        good_job_id = candidate.id

    transfer = await ledger.add_transfer(
        good_job_id=good_job_id,
        from_user_id=caller.user_id,
        to_user_id=body.to_user_id,
    )
    current_owner = await ledger.get_current_owner(good_job_id)
    return TransferResult(
        transfer=TransferResponse.model_validate(transfer),
        current_owner=UserSummary.model_validate(current_owner),
    )


@router.get("/{good_job_id}", response_model=GoodJobResponse)
async def get_good_job(
    good_job_id: int,
    include_history: bool = Query(False),
    ledger: GoodJobLedger = Depends(get_ledger),
):
    """GoodJob with its owner; transfer history on request (newest first)."""
    response = GoodJobResponse.model_validate(await ledger.get_by_id(good_job_id))
    if include_history:
        response.transfers = [
            TransferHistoryEntry.model_validate(t)
            for t in await ledger.get_transfers(good_job_id)
        ]
    return response


@router.delete("/{good_job_id}", response_model=GoodJobResponse)
async def delete_good_job(
    good_job_id: int,
    admin: TokenPayload = Depends(require_admin),
    ledger: GoodJobLedger = Depends(get_ledger),
):
    """Delete a GoodJob together with its transfers (admin only)."""
    response = GoodJobResponse.model_validate(await ledger.get_by_id(good_job_id))
    await ledger.delete(good_job_id)
    return response
