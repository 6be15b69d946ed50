"""User Routes — public directory reads, admin-only management, per-user holdings.

Invariants:
    - Listing and lookups are public
    - Create/update/delete require an admin caller
    - /{user_id}/goodjobs and /{user_id}/goodjobs/count agree on the count
"""

import logging

from fastapi import APIRouter, Depends, status

from goodjob.api.dependencies import (
    get_auth_service, get_ledger, get_user_directory, require_admin,
)
from goodjob.core.domain_types import TokenPayload
from goodjob.infrastructure.security import hash_password
from goodjob.schemas.auth import AuthResponse
from goodjob.schemas.good_job import (
    GoodJobCountResponse, GoodJobListResponse, GoodJobResponse,
)
from goodjob.schemas.user import (
    UserCreate, UserListResponse, UserResponse, UserUpdate,
)
from goodjob.services.auth_service import AuthService
from goodjob.services.good_job_ledger import GoodJobLedger
from goodjob.services.user_directory import UserDirectory

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.get("", response_model=UserListResponse)
async def list_users(users: UserDirectory = Depends(get_user_directory)):
    return UserListResponse(
        users=[UserResponse.model_validate(u) for u in await users.get_all()],
    )


@router.post(
    "", response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_user(
    body: UserCreate,
    admin: TokenPayload = Depends(require_admin),
    auth: AuthService = Depends(get_auth_service),
):
    """Create a user (admin only). Returns a token for the new user."""
    user, token = await auth.create_user(body.name, body.password, body.is_admin)
    logger.info(
        f"Admin {admin.user_id} created user {user.id}",
        extra={"user_id": admin.user_id},
    )
    return AuthResponse(user=UserResponse.model_validate(user), token=token)


@router.get("/by-name/{name}", response_model=UserResponse)
async def get_user_by_name(
    name: str, users: UserDirectory = Depends(get_user_directory),
):
    return UserResponse.model_validate(await users.get_by_name(name))


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int, users: UserDirectory = Depends(get_user_directory),
):
    return UserResponse.model_validate(await users.get_by_id(user_id))


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    body: UserUpdate,
    admin: TokenPayload = Depends(require_admin),
    users: UserDirectory = Depends(get_user_directory),
):
    user = await users.update(
        user_id,
        name=body.name,
        password_hash=hash_password(body.password) if body.password is not None else None,
        is_admin=body.is_admin,
    )
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", response_model=UserResponse)
async def delete_user(
    user_id: int,
    admin: TokenPayload = Depends(require_admin),
    users: UserDirectory = Depends(get_user_directory),
):
    return UserResponse.model_validate(await users.delete(user_id))


@router.get("/{user_id}/goodjobs", response_model=GoodJobListResponse)
async def list_user_good_jobs(
    user_id: int, ledger: GoodJobLedger = Depends(get_ledger),
):
    """GoodJobs currently owned by the user (unknown users simply own none)."""
    good_jobs = await ledger.get_by_owner(user_id)
    return GoodJobListResponse(
        count=len(good_jobs),
        good_jobs=[GoodJobResponse.model_validate(gj) for gj in good_jobs],
    )


@router.get("/{user_id}/goodjobs/count", response_model=GoodJobCountResponse)
async def count_user_good_jobs(
    user_id: int, ledger: GoodJobLedger = Depends(get_ledger),
):
    return GoodJobCountResponse(
        user_id=user_id, count=await ledger.count_by_owner(user_id),
    )
