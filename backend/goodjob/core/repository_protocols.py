"""Boundary Protocols — the row shapes core rules accept from the shell.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - Core rules accept these structural types, not ORM models

Design Decisions:
    - Protocol over ABC: structural subtyping, ORM rows and test doubles both satisfy it
"""

from datetime import datetime
from typing import Protocol


class UserLike(Protocol):
    """Structural contract for User rows passed to core rules."""
    id: int
    name: str
    is_admin: bool


class GoodJobLike(Protocol):
    """Structural contract for GoodJob rows passed to core rules."""
    id: int
    current_owner_id: int | None
    last_transfer_date: datetime | None
