"""ORM Models — SQLAlchemy declarative models for users, GoodJobs and transfers.

Invariants:
    - All models inherit from Base (db/base.py)
    - Integer autoincrement primary keys on every table

Design Decisions:
    - One file per entity for locality
    - All models imported here so string-based relationship() references
      resolve before any query runs
"""

from goodjob.models.user import User  # noqa: F401
from goodjob.models.good_job import GoodJob  # noqa: F401
from goodjob.models.transfer import Transfer  # noqa: F401
