"""Ledger Rules — balance arithmetic and default release selection.

Invariants:
    - balances are computed from the counts observed BEFORE the ownership update
    - select_release_candidate is deterministic: category (a) in ascending id,
      category (b) by oldest first receipt, ties by ascending id
    - A GoodJob received exactly once never qualifies for default release

Design Decisions:
    - Works on ids and receipt dates rather than ORM rows: the shell does the
      two queries, this module only ranks
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Mapping, Sequence


@dataclass(frozen=True)
class TransferBalances:
    """Balance snapshot written into a Transfer row."""
    after_from: int
    after_to: int


def balances_after_transfer(
    from_count_before: int, to_count_before: int,
) -> TransferBalances:
    """Sender loses one GoodJob, recipient gains one."""
    if from_count_before < 1:
        raise ValueError("sender must own at least one GoodJob before a transfer")
    if to_count_before < 0:
        raise ValueError("recipient count cannot be negative")
    return TransferBalances(
        after_from=from_count_before - 1,
        after_to=to_count_before + 1,
    )


def partition_by_receipts(
    owned_ids: Sequence[int],
    receipt_dates: Mapping[int, Sequence[datetime]],
) -> tuple[list[int], list[int]]:
    """Split owned GoodJobs into (never received, received two or more times).

    GoodJobs received exactly once fall in neither group.
    """
    never_received: list[int] = []
    received_repeatedly: list[int] = []
    for good_job_id in sorted(owned_ids):
        receipts = receipt_dates.get(good_job_id, ())
        if not receipts:
            never_received.append(good_job_id)
        elif len(receipts) >= 2:
            received_repeatedly.append(good_job_id)
    return never_received, received_repeatedly


def select_release_candidate(
    owned_ids: Sequence[int],
    receipt_dates: Mapping[int, Sequence[datetime]],
) -> int | None:
    """Pick the GoodJob an owner gives away when none was named.

    1. A GoodJob the owner never received through a transfer (lowest id).
    2. Otherwise the re-received GoodJob whose first receipt is oldest.
    3. Otherwise None.
    """
    never_received, received_repeatedly = partition_by_receipts(
        owned_ids, receipt_dates,
    )
    if never_received:
        return never_received[0]
    if received_repeatedly:
        return min(
            received_repeatedly,
            key=lambda gid: (min(receipt_dates[gid]), gid),
        )
    return None
