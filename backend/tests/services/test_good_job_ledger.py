"""GoodJob Ledger — service tests against an in-memory database.

Tests cover:
    - create: owner assignment, admin rejection, unknown owner, no Transfer row
    - add_transfer: balances, ownership move, precondition order, rollback on
      failure, lost ownership race
    - get_by_owner / count_by_owner agree
    - get_received_before_good_job selection order
    - get_transfers / get_last_transfer ordering, delete removes history

Invariants:
    - Total GoodJobs owned across users never changes through transfers
    - A rejected transfer leaves no Transfer row and no ownership change
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from goodjob.core.errors import (
    AdminOwnershipError, BusinessRuleError, ConcurrencyError, NotOwnerError,
    ResourceNotFoundError,
)
from goodjob.models.transfer import Transfer
from goodjob.services.good_job_ledger import GoodJobLedger
from goodjob.services.user_directory import UserDirectory

T0 = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def _at(hours: int) -> datetime:
    return T0 + timedelta(hours=hours)


async def _transfer_rows(db) -> int:
    result = await db.execute(select(func.count()).select_from(Transfer))
    return result.scalar_one()


async def _received(db, user_id):
    return await UserDirectory(db).transfers_received(user_id)


async def _sent(db, user_id):
    return await UserDirectory(db).transfers_sent(user_id)


@pytest.fixture
def ledger(test_db):
    return GoodJobLedger(test_db)


# ─── create ──────────────────────────────────────────────────────

async def test_create_with_owner_sets_owner_and_date(ledger, users):
    alice = users["alice"]
    good_job = await ledger.create(initial_owner_id=alice.id)

    loaded = await ledger.get_by_id(good_job.id)
    assert loaded.current_owner_id == alice.id
    assert loaded.current_owner.name == "alice"
    assert loaded.last_transfer_date is not None


async def test_create_without_owner_is_unowned(ledger, users):
    good_job = await ledger.create()
    loaded = await ledger.get_by_id(good_job.id)
    assert loaded.current_owner is None
    assert loaded.last_transfer_date is None


async def test_create_keeps_given_generated_date(ledger, users):
    good_job = await ledger.create(generated_date=T0)
    loaded = await ledger.get_by_id(good_job.id)
    assert loaded.generated_date.replace(tzinfo=None) == T0.replace(tzinfo=None)


async def test_create_writes_no_transfer(ledger, users, test_db):
    await ledger.create(initial_owner_id=users["alice"].id)
    assert await _transfer_rows(test_db) == 0


async def test_create_for_admin_rejected_and_nothing_inserted(ledger, users):
    with pytest.raises(AdminOwnershipError):
        await ledger.create(initial_owner_id=users["admin"].id)
    assert await ledger.get_all() == []


async def test_create_for_unknown_owner_is_not_found(ledger, users):
    with pytest.raises(ResourceNotFoundError):
        await ledger.create(initial_owner_id=999)
    assert await ledger.get_all() == []


# ─── add_transfer ────────────────────────────────────────────────

async def test_transfer_records_balances_and_moves_owner(ledger, users):
    alice, bob = users["alice"], users["bob"]
    good_job = await ledger.create(initial_owner_id=alice.id)

    transfer = await ledger.add_transfer(good_job.id, alice.id, bob.id)

    assert transfer.from_user_id == alice.id
    assert transfer.to_user_id == bob.id
    assert transfer.balance_after_from == 0
    assert transfer.balance_after_to == 1
    owner = await ledger.get_current_owner(good_job.id)
    assert owner.id == bob.id


async def test_transfer_balances_match_counts_after_commit(ledger, users):
    alice, bob = users["alice"], users["bob"]
    first = await ledger.create(initial_owner_id=alice.id)
    await ledger.create(initial_owner_id=alice.id)
    await ledger.create(initial_owner_id=bob.id)

    transfer = await ledger.add_transfer(first.id, alice.id, bob.id)

    assert transfer.balance_after_from == await ledger.count_by_owner(alice.id) == 1
    assert transfer.balance_after_to == await ledger.count_by_owner(bob.id) == 2


async def test_transfer_updates_last_transfer_date(ledger, users):
    alice, bob = users["alice"], users["bob"]
    good_job = await ledger.create(initial_owner_id=alice.id)

    await ledger.add_transfer(good_job.id, alice.id, bob.id, date=_at(5))

    loaded = await ledger.get_by_id(good_job.id)
    assert loaded.last_transfer_date.replace(tzinfo=None) == _at(5).replace(tzinfo=None)


async def test_transfer_by_non_owner_changes_nothing(ledger, users, test_db):
    alice, bob, carol = users["alice"], users["bob"], users["carol"]
    good_job_id = (await ledger.create(initial_owner_id=alice.id)).id

    with pytest.raises(NotOwnerError):
        await ledger.add_transfer(good_job_id, bob.id, carol.id)

    # the rollback expired every instance in the session; only ids are reused
    assert await _transfer_rows(test_db) == 0
    assert (await ledger.get_by_id(good_job_id)).current_owner_id == alice.id


async def test_transfer_to_admin_rejected(ledger, users, test_db):
    alice = users["alice"]
    good_job_id = (await ledger.create(initial_owner_id=alice.id)).id

    with pytest.raises(AdminOwnershipError):
        await ledger.add_transfer(good_job_id, alice.id, users["admin"].id)

    assert await _transfer_rows(test_db) == 0
    assert (await ledger.get_by_id(good_job_id)).current_owner_id == alice.id


async def test_lost_ownership_race_rolls_back(ledger, users, test_db, monkeypatch):
    """Owner changed between the check and the UPDATE: nothing is written."""
    alice, bob, carol = users["alice"], users["bob"], users["carol"]
    good_job_id = (await ledger.create(initial_owner_id=alice.id)).id
    await ledger.create(initial_owner_id=bob.id)
    # let bob's stale view of the owner get past the checks
    monkeypatch.setattr(
        "goodjob.services.good_job_ledger.check_is_current_owner",
        lambda good_job, from_user_id: None,
    )
    monkeypatch.setattr(
        "goodjob.services.good_job_ledger.validate_transfer",
        lambda good_job, from_user_id, recipient: None,
    )

    with pytest.raises(ConcurrencyError) as exc_info:
        await ledger.add_transfer(good_job_id, bob.id, carol.id)

    assert exc_info.value.http_status == 409
    assert exc_info.value.context.good_job_id == good_job_id
    assert await _transfer_rows(test_db) == 0
    assert (await ledger.get_by_id(good_job_id)).current_owner_id == alice.id
    assert await ledger.count_by_owner(bob.id) == 1
    assert await ledger.count_by_owner(carol.id) == 0


async def test_transfer_to_self_rejected(ledger, users, test_db):
    alice = users["alice"]
    good_job = await ledger.create(initial_owner_id=alice.id)

    with pytest.raises(BusinessRuleError) as exc_info:
        await ledger.add_transfer(good_job.id, alice.id, alice.id)

    assert exc_info.value.code == "SELF_TRANSFER"
    assert await _transfer_rows(test_db) == 0


async def test_transfer_of_unknown_good_job_is_not_found(ledger, users):
    with pytest.raises(ResourceNotFoundError):
        await ledger.add_transfer(999, users["alice"].id, users["bob"].id)


async def test_transfer_to_unknown_user_is_not_found(ledger, users, test_db):
    alice = users["alice"]
    good_job = await ledger.create(initial_owner_id=alice.id)

    with pytest.raises(ResourceNotFoundError):
        await ledger.add_transfer(good_job.id, alice.id, 999)

    assert await _transfer_rows(test_db) == 0


async def test_ownership_check_runs_before_recipient_check(ledger, users):
    alice, bob = users["alice"], users["bob"]
    good_job = await ledger.create(initial_owner_id=alice.id)

    with pytest.raises(NotOwnerError):
        await ledger.add_transfer(good_job.id, bob.id, users["admin"].id)


async def test_second_session_sees_ownership_moved(test_session_factory, users):
    """A transfer from a stale view of the owner fails instead of double-spending."""
    alice, bob, carol = users["alice"], users["bob"], users["carol"]
    async with test_session_factory() as first, test_session_factory() as second:
        ledger_a, ledger_b = GoodJobLedger(first), GoodJobLedger(second)
        good_job = await ledger_a.create(initial_owner_id=alice.id)
        await ledger_b.get_by_id(good_job.id)

        await ledger_a.add_transfer(good_job.id, alice.id, bob.id)
        with pytest.raises(NotOwnerError):
            await ledger_b.add_transfer(good_job.id, alice.id, carol.id)

        assert (await ledger_b.get_by_id(good_job.id)).current_owner_id == bob.id


async def test_total_holdings_constant_across_transfers(ledger, users):
    alice, bob, carol = users["alice"], users["bob"], users["carol"]
    a1 = await ledger.create(initial_owner_id=alice.id)
    a2 = await ledger.create(initial_owner_id=alice.id)
    b1 = await ledger.create(initial_owner_id=bob.id)

    async def total() -> int:
        return sum([await ledger.count_by_owner(u.id) for u in (alice, bob, carol)])

    assert await total() == 3
    await ledger.add_transfer(a1.id, alice.id, carol.id)
    await ledger.add_transfer(b1.id, bob.id, alice.id)
    await ledger.add_transfer(a2.id, alice.id, bob.id)
    assert await total() == 3


# ─── Owner queries ───────────────────────────────────────────────

async def test_count_by_owner_equals_get_by_owner_length(ledger, users):
    alice, bob = users["alice"], users["bob"]
    for _ in range(3):
        await ledger.create(initial_owner_id=alice.id)
    await ledger.create(initial_owner_id=bob.id)

    for user in (alice, bob, users["carol"]):
        assert await ledger.count_by_owner(user.id) == len(await ledger.get_by_owner(user.id))


async def test_get_by_owner_orders_by_id(ledger, users):
    alice = users["alice"]
    created = [await ledger.create(initial_owner_id=alice.id) for _ in range(3)]
    owned = await ledger.get_by_owner(alice.id)
    assert [gj.id for gj in owned] == sorted(gj.id for gj in created)


async def test_get_by_id_unknown_is_not_found(ledger, users):
    with pytest.raises(ResourceNotFoundError):
        await ledger.get_by_id(12345)


# ─── get_received_before_good_job ────────────────────────────────

async def test_release_prefers_never_received(ledger, users):
    alice, bob = users["alice"], users["bob"]
    g1 = await ledger.create(initial_owner_id=alice.id)
    g2 = await ledger.create(initial_owner_id=alice.id)
    # g2 comes back to alice twice
    await ledger.add_transfer(g2.id, alice.id, bob.id, date=_at(1))
    await ledger.add_transfer(g2.id, bob.id, alice.id, date=_at(2))
    await ledger.add_transfer(g2.id, alice.id, bob.id, date=_at(3))
    await ledger.add_transfer(g2.id, bob.id, alice.id, date=_at(4))

    chosen = await ledger.get_received_before_good_job(alice.id)
    assert chosen.id == g1.id


async def test_release_falls_back_to_oldest_first_receipt(ledger, users):
    alice, bob = users["alice"], users["bob"]
    older = await ledger.create(initial_owner_id=bob.id)
    newer = await ledger.create(initial_owner_id=bob.id)

    await ledger.add_transfer(newer.id, bob.id, alice.id, date=_at(1))
    await ledger.add_transfer(older.id, bob.id, alice.id, date=_at(2))
    await ledger.add_transfer(newer.id, alice.id, bob.id, date=_at(3))
    await ledger.add_transfer(older.id, alice.id, bob.id, date=_at(4))
    await ledger.add_transfer(older.id, bob.id, alice.id, date=_at(5))
    await ledger.add_transfer(newer.id, bob.id, alice.id, date=_at(6))

    chosen = await ledger.get_received_before_good_job(alice.id)
    assert chosen.id == newer.id


async def test_release_none_when_only_received_once(ledger, users):
    alice, bob = users["alice"], users["bob"]
    good_job = await ledger.create(initial_owner_id=bob.id)
    await ledger.add_transfer(good_job.id, bob.id, alice.id)

    assert await ledger.get_received_before_good_job(alice.id) is None


async def test_release_none_when_nothing_owned(ledger, users):
    assert await ledger.get_received_before_good_job(users["carol"].id) is None


# ─── History & deletion ──────────────────────────────────────────

async def test_get_transfers_newest_first(ledger, users):
    alice, bob = users["alice"], users["bob"]
    good_job = await ledger.create(initial_owner_id=alice.id)
    first = await ledger.add_transfer(good_job.id, alice.id, bob.id, date=_at(1))
    second = await ledger.add_transfer(good_job.id, bob.id, alice.id, date=_at(2))

    history = await ledger.get_transfers(good_job.id)
    assert [t.id for t in history] == [second.id, first.id]
    assert history[0].from_user.name == "bob"
    assert (await ledger.get_last_transfer(good_job.id)).id == second.id


async def test_get_last_transfer_none_without_history(ledger, users):
    good_job = await ledger.create(initial_owner_id=users["alice"].id)
    assert await ledger.get_last_transfer(good_job.id) is None


async def test_get_transfers_unknown_good_job_is_not_found(ledger, users):
    with pytest.raises(ResourceNotFoundError):
        await ledger.get_transfers(404)


async def test_delete_removes_good_job_and_its_transfers(ledger, users, test_db):
    alice, bob = users["alice"], users["bob"]
    doomed = await ledger.create(initial_owner_id=alice.id)
    kept = await ledger.create(initial_owner_id=alice.id)
    await ledger.add_transfer(doomed.id, alice.id, bob.id)
    await ledger.add_transfer(kept.id, alice.id, bob.id)

    await ledger.delete(doomed.id)

    with pytest.raises(ResourceNotFoundError):
        await ledger.get_by_id(doomed.id)
    assert await _transfer_rows(test_db) == 1
    assert [gj.id for gj in await ledger.get_by_owner(bob.id)] == [kept.id]


async def test_delete_unknown_good_job_is_not_found(ledger, users):
    with pytest.raises(ResourceNotFoundError):
        await ledger.delete(777)


async def test_count_equals_receipts_minus_sends_plus_initial(ledger, users, test_db):
    alice, bob, carol = users["alice"], users["bob"], users["carol"]
    g1 = await ledger.create(initial_owner_id=alice.id)
    g2 = await ledger.create(initial_owner_id=alice.id)
    await ledger.create(initial_owner_id=bob.id)
    await ledger.create()
    await ledger.add_transfer(g1.id, alice.id, bob.id)
    await ledger.add_transfer(g1.id, bob.id, carol.id)
    await ledger.add_transfer(g2.id, alice.id, carol.id)
    await ledger.add_transfer(g2.id, carol.id, alice.id)

    initial = {alice.id: 2, bob.id: 1, carol.id: 0}
    for user in (alice, bob, carol):
        received = len(await _received(test_db, user.id))
        sent = len(await _sent(test_db, user.id))
        assert await ledger.count_by_owner(user.id) == received - sent + initial[user.id]


async def test_get_by_id_is_stable_without_mutation(ledger, users):
    good_job = await ledger.create(initial_owner_id=users["alice"].id)
    first = await ledger.get_by_id(good_job.id)
    owner_id, last_date = first.current_owner_id, first.last_transfer_date
    second = await ledger.get_by_id(good_job.id)
    assert (second.current_owner_id, second.last_transfer_date) == (owner_id, last_date)
