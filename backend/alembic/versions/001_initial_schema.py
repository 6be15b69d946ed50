"""Initial schema — users, good_jobs, transfers.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

Foreign keys carry no ON DELETE CASCADE: transfers are removed explicitly
before their GoodJob.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.Text, nullable=False, unique=True),
        sa.Column("hash", sa.Text, nullable=False),
        sa.Column("is_admin", sa.Boolean, nullable=False, server_default=sa.false()),
    )

    op.create_table(
        "good_jobs",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("generated_date", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("current_owner_id", sa.Integer, sa.ForeignKey("users.id"), nullable=True),
        sa.Column("last_transfer_date", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_good_jobs_current_owner_id", "good_jobs", ["current_owner_id"])

    op.create_table(
        "transfers",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("from_user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("to_user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("good_job_id", sa.Integer, sa.ForeignKey("good_jobs.id"), nullable=False),
        sa.Column("balance_after_from", sa.Integer, nullable=False),
        sa.Column("balance_after_to", sa.Integer, nullable=False),
    )
    op.create_index("ix_transfers_from_user_id", "transfers", ["from_user_id"])
    op.create_index("ix_transfers_to_user_id", "transfers", ["to_user_id"])
    op.create_index("ix_transfers_good_job_id", "transfers", ["good_job_id"])


def downgrade() -> None:
    op.drop_table("transfers")
    op.drop_table("good_jobs")
    op.drop_table("users")
