"""Tests for the economy coordinator: atomic commits, preconditions, races."""

import threading
import time
from datetime import datetime, timedelta, timezone

import pytest

from odomo import economy, storage
from odomo.economy import Mutation, apply_mutation
from odomo.engine import Tuning
from odomo.errors import Conflict, InvalidRequest, NotFound, PreconditionFailed, TerminalState
from odomo.models import InventoryEntry, ItemType, LifeState, Pet

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
TUNING = Tuning()


def _open(owner: str = "alice", balance: int = 0, pet: bool = True, **inventory: int):
    storage.create_owner(owner, balance)
    record = storage.get_owner(owner)
    if pet:
        record.pet = Pet(
            id="p1",
            owner_id=owner,
            birth_date=T0,
            last_interaction_at=T0,
            last_step_sync_at=T0,
        )
    for name, qty in inventory.items():
        record.inventory.append(InventoryEntry(item_type=ItemType[name], quantity=qty))
    with storage.owner_lock(owner):
        storage.save_owner(record)
    return record


def _at(hours: float) -> datetime:
    return T0 + timedelta(hours=hours)


# ── apply_mutation ───────────────────────────────────────


def test_apply_mutation_does_not_touch_input():
    record = _open(balance=50, ONIGIRI=1)
    before = record.model_copy(deep=True)
    updated = apply_mutation(record, Mutation(debit=20, add_items={ItemType.SOAP: 2}))
    assert record == before
    assert updated.account.balance == 30
    assert updated.entry(ItemType.SOAP).quantity == 2


def test_apply_mutation_insufficient_balance():
    record = _open(balance=10)
    with pytest.raises(PreconditionFailed) as exc:
        apply_mutation(record, Mutation(debit=11))
    assert "Need 11, have 10" in exc.value.message


def test_apply_mutation_credit_and_debit_combined():
    record = _open(balance=5)
    updated = apply_mutation(record, Mutation(credit=10, debit=15))
    assert updated.account.balance == 0


def test_apply_mutation_removing_missing_item():
    with pytest.raises(PreconditionFailed):
        apply_mutation(_open(), Mutation(remove_items={ItemType.RAMEN: 1}))


def test_apply_mutation_removes_empty_entries():
    updated = apply_mutation(_open(SOAP=1, RAMEN=2), Mutation(remove_items={ItemType.SOAP: 1}))
    assert [e.item_type for e in updated.inventory] == [ItemType.RAMEN]


def test_apply_mutation_rejects_negative_amounts():
    with pytest.raises(InvalidRequest):
        apply_mutation(_open(balance=10), Mutation(credit=-5))
    with pytest.raises(InvalidRequest):
        apply_mutation(_open("bob"), Mutation(add_items={ItemType.SOAP: -1}))


def test_apply_mutation_pet_update_without_pet():
    with pytest.raises(NotFound):
        apply_mutation(_open(pet=False), Mutation(pet={"xp": 3}))


def test_apply_mutation_create_pet_twice():
    record = _open()
    with pytest.raises(Conflict):
        apply_mutation(record, Mutation(create_pet=record.pet))


def test_apply_mutation_revalidates_pet_fields():
    with pytest.raises(ValueError):
        apply_mutation(_open(), Mutation(pet={"hunger": 150}))


def test_execute_without_account():
    with pytest.raises(NotFound):
        economy.execute("ghost", lambda record: Mutation())


def test_execute_plan_error_leaves_document_untouched():
    _open(balance=40)
    before = storage.load_raw("alice")

    def plan(record):
        raise PreconditionFailed("nope")

    with pytest.raises(PreconditionFailed):
        economy.execute("alice", plan)
    assert storage.load_raw("alice") == before


def test_execute_logs_rejected_mutation(caplog):
    _open(balance=5)
    with caplog.at_level("WARNING", logger="odomo.economy"):
        with pytest.raises(PreconditionFailed):
            economy.execute("alice", lambda record: Mutation(debit=10))
    assert "rejected mutation owner=alice: Insufficient Kobans. Need 10, have 5" in caplog.text


# ── Purchase ─────────────────────────────────────────────


def test_purchase():
    _open(balance=100)
    result = economy.purchase("alice", ItemType.ONIGIRI, 3, TUNING)
    assert result["total_cost"] == 30
    assert result["new_balance"] == 70
    assert result["new_quantity"] == 3

    result = economy.purchase("alice", ItemType.ONIGIRI, 2, TUNING)
    assert result["new_balance"] == 50
    assert result["new_quantity"] == 5
    assert storage.get_owner("alice").entry(ItemType.ONIGIRI).quantity == 5


def test_purchase_exact_balance():
    _open(balance=200)
    result = economy.purchase("alice", ItemType.SOUL_STONE, 1, TUNING)
    assert result["new_balance"] == 0


def test_failed_purchase_changes_nothing():
    _open(balance=20)
    before = storage.load_raw("alice")
    with pytest.raises(PreconditionFailed):
        economy.purchase("alice", ItemType.RAMEN, 1, TUNING)
    assert storage.load_raw("alice") == before
    record = storage.get_owner("alice")
    assert record.account.balance == 20
    assert record.entry(ItemType.RAMEN) is None


def test_purchase_invalid_quantity():
    _open(balance=100)
    with pytest.raises(InvalidRequest):
        economy.purchase("alice", ItemType.ONIGIRI, 0, TUNING)


def test_purchase_storage_failure_is_not_partially_applied(monkeypatch):
    _open(balance=100)

    def boom(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr("odomo.storage.core.os.replace", boom)
    with pytest.raises(OSError):
        economy.purchase("alice", ItemType.ONIGIRI, 2, TUNING)
    monkeypatch.undo()

    record = storage.get_owner("alice")
    assert record.account.balance == 100
    assert record.inventory == []


# ── Consumption ──────────────────────────────────────────


def test_consume_decrements_and_applies_effect():
    _open(ONIGIRI=2)
    updated, remaining = economy.consume("alice", ItemType.ONIGIRI, TUNING, _at(10))
    assert remaining == 1
    assert updated.pet.hunger == 95  # 75 live + 20
    assert updated.pet.hygiene == 80  # live value re-baselined
    assert updated.pet.last_interaction_at == _at(10)


def test_consuming_last_unit_removes_entry():
    _open(SOAP=1)
    _, remaining = economy.consume("alice", ItemType.SOAP, TUNING, _at(1))
    assert remaining == 0
    assert storage.get_owner("alice").inventory == []
    assert storage.load_raw("alice")["inventory"] == []


def test_consume_without_item():
    _open()
    before = storage.load_raw("alice")
    with pytest.raises(PreconditionFailed):
        economy.consume("alice", ItemType.MEDICINE, TUNING, _at(20))
    assert storage.load_raw("alice") == before


def test_consume_without_pet():
    _open(pet=False, ONIGIRI=1)
    with pytest.raises(NotFound):
        economy.consume("alice", ItemType.ONIGIRI, TUNING, _at(1))
    assert storage.get_owner("alice").entry(ItemType.ONIGIRI).quantity == 1


def test_consume_on_dead_pet_keeps_item():
    _open(ONIGIRI=1)
    with pytest.raises(TerminalState):
        economy.consume("alice", ItemType.ONIGIRI, TUNING, _at(40))
    assert storage.get_owner("alice").entry(ItemType.ONIGIRI).quantity == 1


def test_soul_stone_resurrects_and_is_spent():
    _open(SOUL_STONE=1)
    updated, remaining = economy.consume("alice", ItemType.SOUL_STONE, TUNING, _at(50))
    assert remaining == 0
    assert updated.pet.life_state == LifeState.ALIVE
    assert (updated.pet.hunger, updated.pet.happiness, updated.pet.hygiene) == (50, 50, 50)
    assert updated.pet.last_interaction_at == _at(50)


# ── Step sync ────────────────────────────────────────────


def test_step_rewards():
    assert economy.step_rewards(1234, TUNING) == (123, 12)
    assert economy.step_rewards(70, TUNING) == (7, 0)
    assert economy.step_rewards(5, TUNING) == (0, 0)


@pytest.mark.parametrize("steps", [0, -10, 12.5, "100", True])
def test_step_rewards_invalid(steps):
    with pytest.raises(InvalidRequest):
        economy.step_rewards(steps, TUNING)


def test_step_rewards_upper_bound():
    assert economy.step_rewards(economy.MAX_STEPS_PER_SYNC, TUNING) == (100_000, 10_000)
    with pytest.raises(InvalidRequest):
        economy.step_rewards(economy.MAX_STEPS_PER_SYNC + 1, TUNING)
    with pytest.raises(InvalidRequest):
        economy.step_rewards(10**30, TUNING)


def test_sync_zero_steps_changes_nothing():
    _open(balance=3)
    before = storage.load_raw("alice")
    with pytest.raises(InvalidRequest):
        economy.sync_steps("alice", 0, TUNING, _at(1))
    assert storage.load_raw("alice") == before


def test_sync_credits_and_levels():
    _open(balance=3)
    updated, result = economy.sync_steps("alice", 2500, TUNING, _at(2))
    assert result["xp_gained"] == 250
    assert result["kobans_gained"] == 25
    assert result["new_balance"] == 28
    assert result["leveled_up"] is True
    assert updated.pet.level == 2
    assert updated.pet.xp == 150
    assert updated.pet.last_step_sync_at == _at(2)


def test_sync_without_level_up_keeps_checkpoint():
    _open()
    updated, result = economy.sync_steps("alice", 300, TUNING, _at(5))
    assert result["leveled_up"] is False
    assert updated.pet.xp == 30
    assert updated.pet.hunger == 100
    assert updated.pet.last_interaction_at == T0


def test_sync_dead_pet_rejected():
    _open(balance=3)
    before = storage.load_raw("alice")
    with pytest.raises(TerminalState):
        economy.sync_steps("alice", 1000, TUNING, _at(40))
    assert storage.load_raw("alice") == before


def test_sync_without_pet():
    _open(pet=False)
    with pytest.raises(NotFound):
        economy.sync_steps("alice", 1000, TUNING, _at(1))


# ── Concurrency ──────────────────────────────────────────


def _slow_reads(monkeypatch, delay: float = 0.02):
    """Widen the read-check-write window so unsynchronized code would race."""
    real_get = storage.get_owner

    def slow_get(owner_id):
        record = real_get(owner_id)
        time.sleep(delay)
        return record

    monkeypatch.setattr(storage, "get_owner", slow_get)


def _race(n: int, action):
    barrier = threading.Barrier(n)
    outcomes: list[object] = []
    lock = threading.Lock()

    def worker():
        barrier.wait()
        try:
            action()
            result = "ok"
        except PreconditionFailed as e:
            result = e
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=worker) for _ in range(n)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return outcomes


def test_concurrent_purchases_cannot_double_spend(monkeypatch):
    _open(balance=10)
    _slow_reads(monkeypatch)
    outcomes = _race(2, lambda: economy.purchase("alice", ItemType.ONIGIRI, 1, TUNING))
    assert outcomes.count("ok") == 1
    assert sum(isinstance(o, PreconditionFailed) for o in outcomes) == 1
    record = storage.get_owner("alice")
    assert record.account.balance == 0
    assert record.entry(ItemType.ONIGIRI).quantity == 1


def test_many_concurrent_purchases(monkeypatch):
    _open(balance=100)
    _slow_reads(monkeypatch, delay=0.005)
    outcomes = _race(20, lambda: economy.purchase("alice", ItemType.ONIGIRI, 1, TUNING))
    assert outcomes.count("ok") == 10
    record = storage.get_owner("alice")
    assert record.account.balance == 0
    assert record.entry(ItemType.ONIGIRI).quantity == 10


def test_concurrent_consumption_of_one_item(monkeypatch):
    _open(ONIGIRI=1)
    _slow_reads(monkeypatch)
    outcomes = _race(3, lambda: economy.consume("alice", ItemType.ONIGIRI, TUNING, _at(1)))
    assert outcomes.count("ok") == 1
    assert storage.get_owner("alice").inventory == []


def test_different_owners_do_not_interfere():
    _open("alice", balance=10)
    _open("bob", balance=10)
    outcomes = []
    threads = [
        threading.Thread(target=lambda o=o: outcomes.append(economy.purchase(o, ItemType.ONIGIRI, 1, TUNING)))
        for o in ("alice", "bob")
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(outcomes) == 2
    assert storage.get_owner("alice").account.balance == 0
    assert storage.get_owner("bob").account.balance == 0
