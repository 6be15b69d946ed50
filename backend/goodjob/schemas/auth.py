"""Auth Schemas — sign-up/login payloads, token views and the caller profile.

Invariants:
    - name: 1-100 chars after stripping; password: 1-128 chars
    - TokenVerifyResponse.user is present iff valid is True
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from goodjob.schemas.good_job import GoodJobResponse
from goodjob.schemas.user import UserResponse, UserSummary


class Credentials(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1, max_length=128)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v


class RegisterRequest(Credentials):
    pass


class LoginRequest(Credentials):
    pass


class AuthResponse(BaseModel):
    user: UserResponse
    token: str
    token_type: str = "bearer"


class TokenClaims(BaseModel):
    user_id: int
    name: str
    is_admin: bool
    iat: int
    exp: int


class TokenVerifyResponse(BaseModel):
    valid: bool
    user: TokenClaims | None = None
    expires_in: str | None = None


class LedgerEntry(BaseModel):
    """One transfer seen from the caller's side."""
    id: int
    date: datetime
    counterpart: UserSummary
    good_job_id: int
    balance_after: int


class Transactions(BaseModel):
    sent: list[LedgerEntry]
    received: list[LedgerEntry]


class MeResponse(BaseModel):
    user: UserResponse
    good_jobs_count: int
    good_jobs: list[GoodJobResponse] | None = None
    transactions: Transactions | None = None
