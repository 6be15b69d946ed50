"""User ORM — ledger participants and administrators.

Invariants:
    - name is unique and non-empty
    - hash is the hex sha256 digest of the password (never serialized)
    - is_admin users never appear as good_jobs.current_owner_id
"""

from sqlalchemy import Boolean, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from goodjob.db.base import Base


class User(Base):
    """Registered user; admins manage the ledger but never hold GoodJobs."""
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    hash: Mapped[str] = mapped_column(Text, nullable=False)
    is_admin: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
