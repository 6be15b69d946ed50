"""GoodJob ORM — a single token with at most one current owner.

Invariants:
    - current_owner_id is NULL (unowned) or references a non-admin user
    - last_transfer_date changes together with current_owner_id
    - Transfers are deleted explicitly before their GoodJob (no DB cascade)

Design Decisions:
    - current_owner_id denormalized on the row: the owner is read without
      replaying transfers
    - current_owner loaded with selectin: every read path serializes the owner
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from goodjob.db.base import Base


class GoodJob(Base):
    """GoodJob token: ownership pointer plus last movement timestamp."""
    __tablename__ = "good_jobs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    generated_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    current_owner_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True, index=True,
    )
    last_transfer_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    current_owner: Mapped[Optional["User"]] = relationship(
        "User", foreign_keys=[current_owner_id], lazy="selectin",
    )
