"""Transfer ORM — append-only ledger entry for one ownership change.

Invariants:
    - Rows are inserted once and never updated
    - balance_after_from / balance_after_to are the parties' GoodJob counts
      right after this transfer completed
    - Deleted only together with their GoodJob
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from goodjob.db.base import Base


class Transfer(Base):
    """Ledger entry: good_job_id moved from from_user_id to to_user_id."""
    __tablename__ = "transfers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    from_user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True,
    )
    to_user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True,
    )
    good_job_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("good_jobs.id"), nullable=False, index=True,
    )
    balance_after_from: Mapped[int] = mapped_column(Integer, nullable=False)
    balance_after_to: Mapped[int] = mapped_column(Integer, nullable=False)

    from_user: Mapped["User"] = relationship(
        "User", foreign_keys=[from_user_id], lazy="selectin",
    )
    to_user: Mapped["User"] = relationship(
        "User", foreign_keys=[to_user_id], lazy="selectin",
    )
