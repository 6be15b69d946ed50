"""GoodJob Schemas — minting, transfer requests and ledger views.

Invariants:
    - Ids in requests are positive integers
    - TransferCreate.good_job_id may be omitted: the ledger then picks the
      GoodJob to release
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from goodjob.schemas.user import UserSummary


class GoodJobCreate(BaseModel):
    generated_date: datetime | None = None
    initial_owner_id: int | None = Field(None, ge=1)


class TransferCreate(BaseModel):
    """Transfer request; from_user_id defaults to the caller."""
    good_job_id: int | None = Field(None, ge=1)
    from_user_id: int | None = Field(None, ge=1)
    to_user_id: int = Field(ge=1)


class TransferHistoryEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    date: datetime
    from_user: UserSummary
    to_user: UserSummary
    balance_after_from: int
    balance_after_to: int


class GoodJobResponse(BaseModel):
    """GoodJob with its current owner; transfers only when history was requested."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    generated_date: datetime
    current_owner: UserSummary | None = None
    last_transfer_date: datetime | None = None
    transfers: list[TransferHistoryEntry] | None = None


class GoodJobListResponse(BaseModel):
    count: int
    good_jobs: list[GoodJobResponse]


class GoodJobCountResponse(BaseModel):
    user_id: int
    count: int


class TransferResponse(BaseModel):
    """A committed ledger entry."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    good_job_id: int
    from_user_id: int
    to_user_id: int
    date: datetime
    balance_after_from: int
    balance_after_to: int


class TransferResult(BaseModel):
    transfer: TransferResponse
    current_owner: UserSummary
