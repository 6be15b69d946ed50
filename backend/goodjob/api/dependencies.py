"""Auth and service dependencies for FastAPI routes.

Invariants:
    - get_caller never raises: a missing, malformed or expired token is an anonymous caller
    - require_user raises AuthenticationError (401) for anonymous callers
    - require_admin raises PermissionDeniedError (403) for non-admin callers
"""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from goodjob.core.domain_types import TokenPayload
from goodjob.core.errors import AuthenticationError, PermissionDeniedError
from goodjob.infrastructure import security
from goodjob.infrastructure.database import get_db
from goodjob.services.auth_service import AuthService
from goodjob.services.good_job_ledger import GoodJobLedger
from goodjob.services.user_directory import UserDirectory

_bearer = HTTPBearer(auto_error=False)


async def get_caller(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> TokenPayload | None:
    if credentials is None or credentials.scheme.lower() != "bearer":
        return None
    return security.decode_access_token(credentials.credentials)


async def require_user(
    caller: TokenPayload | None = Depends(get_caller),
) -> TokenPayload:
    if caller is None:
        raise AuthenticationError()
    return caller


async def require_admin(
    caller: TokenPayload = Depends(require_user),
) -> TokenPayload:
    if not caller.is_admin:
        raise PermissionDeniedError()
    return caller


def get_ledger(db: AsyncSession = Depends(get_db)) -> GoodJobLedger:
    return GoodJobLedger(db)


def get_user_directory(db: AsyncSession = Depends(get_db)) -> UserDirectory:
    return UserDirectory(db)


def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)
