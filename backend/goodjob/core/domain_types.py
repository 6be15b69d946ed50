"""Domain Types — identity wrappers and the bearer-token payload.

Invariants:
    - UserId, GoodJobId, TransferId wrap the integer primary keys of their tables
    - TokenPayload is immutable once decoded

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums serialize to JSON without custom encoders
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", int)
GoodJobId = NewType("GoodJobId", int)
TransferId = NewType("TransferId", int)


# ─── Enums ───────────────────────────────────────────────────────

class Role(str, Enum):
    """Caller role carried inside the access token."""
    ADMIN = "admin"
    MEMBER = "member"


# ─── Auth ────────────────────────────────────────────────────────

@dataclass(frozen=True)
class TokenPayload:
    """Identity resolved from a verified bearer token."""
    user_id: UserId
    name: str
    is_admin: bool
    issued_at: datetime
    expires_at: datetime

    @property
    def role(self) -> Role:
        return Role.ADMIN if self.is_admin else Role.MEMBER
