"""Ownership Enforcement — the admin and current-owner rules of the ledger.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Return the error on violation (unraised), None on success
    - validate_transfer chains the transfer checks, first error wins

Design Decisions:
    - Returning errors instead of raising keeps the rules testable without
      pytest.raises; the shell raises them inside its transaction so a
      violation always rolls back
"""

from goodjob.core.errors import (
    AdminOwnershipError, BusinessRuleError, ErrorContext, GoodJobError,
    NotOwnerError,
)
from goodjob.core.repository_protocols import GoodJobLike, UserLike


def check_can_own(user: UserLike) -> AdminOwnershipError | None:
    """Rule 1: an initial owner must not be an administrator."""
    if user.is_admin:
        return AdminOwnershipError(
            "Administrators cannot own GoodJobs",
            ErrorContext(user_id=user.id),
        )
    return None


def check_is_current_owner(
    good_job: GoodJobLike, from_user_id: int,
) -> NotOwnerError | None:
    """Rule 2: only the current owner may hand a GoodJob on."""
    if good_job.current_owner_id != from_user_id:
        return NotOwnerError(
            ErrorContext(user_id=from_user_id, good_job_id=good_job.id),
        )
    return None


def check_can_receive(
    recipient: UserLike, good_job_id: int | None = None,
) -> AdminOwnershipError | None:
    """Rule 3: administrators never receive GoodJobs."""
    if recipient.is_admin:
        return AdminOwnershipError(
            "Administrators cannot receive GoodJobs",
            ErrorContext(user_id=recipient.id, good_job_id=good_job_id),
        )
    return None


def check_not_self_transfer(
    good_job: GoodJobLike, from_user_id: int, to_user_id: int,
) -> BusinessRuleError | None:
    """Rule 4: sender and recipient differ (balances would not add up otherwise)."""
    if from_user_id == to_user_id:
        return BusinessRuleError(
            "Cannot transfer a GoodJob to its current owner",
            "SELF_TRANSFER",
            ErrorContext(user_id=from_user_id, good_job_id=good_job.id),
        )
    return None


def check_can_promote(user: UserLike, owned_count: int) -> AdminOwnershipError | None:
    """A user holding GoodJobs cannot become an administrator."""
    if owned_count > 0:
        return AdminOwnershipError(
            "Administrators cannot own GoodJobs",
            ErrorContext(
                user_id=user.id, debug_info={"owned_count": owned_count},
            ),
        )
    return None


def validate_transfer(
    good_job: GoodJobLike, from_user_id: int, recipient: UserLike,
) -> GoodJobError | None:
    """Chain all transfer checks. Returns first error or None."""
    return (
        check_is_current_owner(good_job, from_user_id)
        or check_can_receive(recipient, good_job.id)
        or check_not_self_transfer(good_job, from_user_id, recipient.id)
    )
