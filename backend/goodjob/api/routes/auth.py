"""Auth Routes — register, login, caller profile and token verification.

Invariants:
    - register/login return the user plus a bearer token
    - /verify answers 401 with valid=false for a missing or invalid token
      instead of raising
    - /me requires an authenticated caller
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from goodjob.api.dependencies import (
    get_auth_service, get_caller, get_ledger, get_user_directory, require_user,
)
from goodjob.core.domain_types import TokenPayload
from goodjob.core.format_expiry import format_remaining_lifetime
from goodjob.infrastructure.security import now_epoch_s
from goodjob.schemas.auth import (
    AuthResponse, LedgerEntry, LoginRequest, MeResponse, RegisterRequest,
    TokenClaims, TokenVerifyResponse, Transactions,
)
from goodjob.schemas.good_job import GoodJobResponse
from goodjob.schemas.user import UserResponse, UserSummary
from goodjob.services.auth_service import AuthService
from goodjob.services.good_job_ledger import GoodJobLedger
from goodjob.services.user_directory import UserDirectory

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post(
    "/register", response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    body: RegisterRequest, auth: AuthService = Depends(get_auth_service),
):
    """Register a new user. The first user ever registered becomes admin."""
    user, token = await auth.register(body.name, body.password)
    return AuthResponse(user=UserResponse.model_validate(user), token=token)


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest, auth: AuthService = Depends(get_auth_service),
):
    user, token = await auth.login(body.name, body.password)
    return AuthResponse(user=UserResponse.model_validate(user), token=token)


@router.get("/me", response_model=MeResponse)
async def me(
    include_good_jobs: bool = Query(False),
    include_transactions: bool = Query(False),
    caller: TokenPayload = Depends(require_user),
    users: UserDirectory = Depends(get_user_directory),
    ledger: GoodJobLedger = Depends(get_ledger),
):
    """Current user, GoodJob count, and optionally holdings and transfers."""
    user = await users.get_by_id(caller.user_id)
    response = MeResponse(
        user=UserResponse.model_validate(user),
        good_jobs_count=await ledger.count_by_owner(user.id),
    )

    if include_good_jobs:
        response.good_jobs = [
            GoodJobResponse.model_validate(gj)
            for gj in await ledger.get_by_owner(user.id)
        ]

    if include_transactions:
        sent = await users.transfers_sent(user.id)
        received = await users.transfers_received(user.id)
        response.transactions = Transactions(
            sent=[
                LedgerEntry(
                    id=t.id, date=t.date, good_job_id=t.good_job_id,
                    counterpart=UserSummary.model_validate(t.to_user),
                    balance_after=t.balance_after_from,
                )
                for t in sent
            ],
            received=[
                LedgerEntry(
                    id=t.id, date=t.date, good_job_id=t.good_job_id,
                    counterpart=UserSummary.model_validate(t.from_user),
                    balance_after=t.balance_after_to,
                )
                for t in received
            ],
        )
    return response


@router.get("/verify", response_model=TokenVerifyResponse)
async def verify(caller: TokenPayload | None = Depends(get_caller)):
    """Report whether the bearer token is valid and how long it has left."""
    if caller is None:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=TokenVerifyResponse(valid=False).model_dump(),
        )

    exp = int(caller.expires_at.timestamp())
    return TokenVerifyResponse(
        valid=True,
        user=TokenClaims(
            user_id=caller.user_id,
            name=caller.name,
            is_admin=caller.is_admin,
            iat=int(caller.issued_at.timestamp()),
            exp=exp,
        ),
        expires_in=format_remaining_lifetime(exp - now_epoch_s()),
    )
