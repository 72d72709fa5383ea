"""Economy transaction coordinator.

Every write to an owner's records goes through `execute()`:

  1. take the owner's lock
  2. load the owner document
  3. run the plan: it checks business preconditions against that snapshot
     and returns a Mutation (debit / credit / inventory deltas / pet updates)
  4. apply the mutation to a copy, checking balance and quantity sufficiency
  5. replace the stored document in one atomic write
  6. release the lock

Because the snapshot read in (2) cannot change until (5) finishes, two
operations for the same owner can never both pass a check against the same
balance or quantity. Any exception before (5) leaves the stored document as
it was; nothing is retried.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from fractions import Fraction
from typing import Any, Callable

from odomo import storage
from odomo.engine import (
    Progress,
    Tuning,
    apply_experience,
    catalogue_entry,
    compute_live,
    ensure_not_dead,
    purchase_cost,
    resolve_item,
)
from odomo.errors import Conflict, InvalidRequest, NotFound, OdomoError, PreconditionFailed
from odomo.models import InventoryEntry, ItemType, LiveStats, OwnerRecord, Pet

logger = logging.getLogger(__name__)

MAX_STEPS_PER_SYNC = 1_000_000


@dataclass
class Mutation:
    """Everything one operation changes for an owner, applied all-or-nothing."""

    debit: int = 0
    credit: int = 0
    add_items: dict[ItemType, int] = field(default_factory=dict)
    remove_items: dict[ItemType, int] = field(default_factory=dict)
    pet: dict[str, Any] = field(default_factory=dict)
    create_pet: Pet | None = None
    delete_pet: bool = False
    outcome: Any = None  # whatever the plan wants handed back to its caller


Plan = Callable[[OwnerRecord], Mutation]


def _check_amount(value: Any, what: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidRequest(f"{what} must be a non-negative integer, got {value!r}")


def apply_mutation(record: OwnerRecord, mutation: Mutation) -> OwnerRecord:
    """Return a new record with the mutation applied. `record` is never modified.

    Raises before producing anything if the balance or an inventory quantity
    would go negative, or if pet updates target a missing pet.
    """
    _check_amount(mutation.debit, "Debit")
    _check_amount(mutation.credit, "Credit")
    for items in (mutation.add_items, mutation.remove_items):
        for item_type, qty in items.items():
            _check_amount(qty, f"{item_type.value} quantity")

    updated = record.model_copy(deep=True)

    balance = updated.account.balance
    if balance + mutation.credit < mutation.debit:
        raise PreconditionFailed(
            f"Insufficient Kobans. Need {mutation.debit}, have {balance}"
        )
    updated.account.balance = balance + mutation.credit - mutation.debit

    for item_type, qty in mutation.remove_items.items():
        entry = updated.entry(item_type)
        if entry is None or entry.quantity < qty:
            raise PreconditionFailed(f"You don't have any {item_type.value}")
        entry.quantity -= qty
    updated.inventory = [e for e in updated.inventory if e.quantity > 0]

    for item_type, qty in mutation.add_items.items():
        if qty == 0:
            continue
        entry = updated.entry(item_type)
        if entry is None:
            updated.inventory.append(
                InventoryEntry(item_type=item_type, quantity=qty)
            )
        else:
            entry.quantity += qty
    updated.inventory.sort(key=lambda e: e.item_type.value)

    if mutation.delete_pet:
        if updated.pet is None:
            raise NotFound("Odomo not found")
        updated.pet = None
    if mutation.create_pet is not None:
        if updated.pet is not None:
            raise Conflict("User already has an Odomo")
        updated.pet = mutation.create_pet
    if mutation.pet:
        if updated.pet is None:
            raise NotFound("Odomo not found")
        updated.pet = updated.pet.model_copy(update=mutation.pet)

    # Re-validate the whole document so no invariant can be written broken.
    return OwnerRecord.model_validate(updated.model_dump())


def execute(owner_id: str, plan: Plan) -> tuple[OwnerRecord, Mutation]:
    """Run `plan` against the owner's current document and commit atomically."""
    with storage.owner_lock(owner_id):
        record = storage.get_owner(owner_id)
        if record is None:
            raise NotFound("Account not found")
        try:
            mutation = plan(record)
            updated = apply_mutation(record, mutation)
        except OdomoError as e:
            logger.warning("rejected mutation owner=%s: %s", owner_id, e.message)
            raise
        storage.save_owner(updated)
    logger.debug(
        "committed owner=%s debit=%d credit=%d add=%s remove=%s pet=%s",
        owner_id,
        mutation.debit,
        mutation.credit,
        {t.value: q for t, q in mutation.add_items.items()},
        {t.value: q for t, q in mutation.remove_items.items()},
        sorted(mutation.pet),
    )
    return updated, mutation


def require_pet(record: OwnerRecord) -> Pet:
    if record.pet is None:
        raise NotFound("Odomo not found. Create one first.")
    return record.pet


def progress_update(progress: Progress, live: LiveStats, now: datetime) -> dict[str, Any]:
    """Pet field updates for a progression result.

    A level-up raises happiness, which writes a new condition baseline; the
    other two stats are re-baselined from their live values and the decay
    clock restarts so nothing is decayed twice.
    """
    update: dict[str, Any] = {
        "xp": progress.xp,
        "level": progress.level,
        "stage": progress.stage,
    }
    if progress.happiness is not None:
        update.update(
            hunger=live.hunger,
            happiness=progress.happiness,
            hygiene=live.hygiene,
            life_state=live.life_state,
            last_interaction_at=now,
        )
    return update


# ── Operations ───────────────────────────────────────────


def purchase(owner_id: str, item_type: ItemType, quantity: int, tuning: Tuning) -> dict[str, Any]:
    """Debit price × quantity and add the items to the inventory."""
    total_cost = purchase_cost(tuning.catalogue, item_type, quantity)

    def plan(record: OwnerRecord) -> Mutation:
        return Mutation(debit=total_cost, add_items={item_type: quantity})

    updated, _ = execute(owner_id, plan)
    entry = updated.entry(item_type)
    logger.info(
        "purchase owner=%s item=%s qty=%d cost=%d balance=%d",
        owner_id, item_type.value, quantity, total_cost, updated.account.balance,
    )
    return {
        "item_type": item_type,
        "quantity_bought": quantity,
        "total_cost": total_cost,
        "new_balance": updated.account.balance,
        "new_quantity": entry.quantity if entry else 0,
    }


def consume(
    owner_id: str, item_type: ItemType, tuning: Tuning, now: datetime
) -> tuple[OwnerRecord, int]:
    """Use one unit of an item on the pet. Returns the committed record and
    the quantity left (0 when the entry was removed)."""
    catalogue_entry(tuning.catalogue, item_type)

    def plan(record: OwnerRecord) -> Mutation:
        entry = record.entry(item_type)
        if entry is None or entry.quantity <= 0:
            raise PreconditionFailed(f"You don't have any {item_type.value}")
        pet = require_pet(record)
        live = compute_live(pet, now, tuning)
        checkpoint = resolve_item(item_type, live, tuning)
        return Mutation(remove_items={item_type: 1}, pet=checkpoint.as_update(now))

    updated, _ = execute(owner_id, plan)
    entry = updated.entry(item_type)
    remaining = entry.quantity if entry else 0
    logger.info(
        "used item owner=%s item=%s remaining=%d state=%s",
        owner_id, item_type.value, remaining, updated.pet.life_state.value,
    )
    return updated, remaining


def step_rewards(steps: Any, tuning: Tuning) -> tuple[int, int]:
    """(xp, kobans) earned for a step count."""
    if isinstance(steps, bool) or not isinstance(steps, int):
        raise InvalidRequest("Steps must be an integer")
    if steps < 0:
        raise InvalidRequest("Steps cannot be negative")
    if steps == 0:
        raise InvalidRequest("Cannot sync 0 steps")
    if steps > MAX_STEPS_PER_SYNC:
        raise InvalidRequest(f"Cannot sync more than {MAX_STEPS_PER_SYNC} steps at once")
    # Fraction keeps 0.1 exact so e.g. 70 steps floor to 7, not 6
    xp = math.floor(Fraction(str(tuning.xp_per_step)) * steps)
    kobans = steps // 100 * tuning.kobans_per_100_steps
    return xp, kobans


def sync_steps(owner_id: str, steps: int, tuning: Tuning, now: datetime) -> tuple[OwnerRecord, dict[str, Any]]:
    """Credit Kobans and experience for walked steps in one commit."""
    xp_gained, kobans_gained = step_rewards(steps, tuning)

    def plan(record: OwnerRecord) -> Mutation:
        pet = require_pet(record)
        live = compute_live(pet, now, tuning)
        ensure_not_dead(live, "sync steps for")
        progress = apply_experience(live, xp_gained, tuning)
        update = progress_update(progress, live, now)
        update["last_step_sync_at"] = now
        return Mutation(credit=kobans_gained, pet=update, outcome=progress)

    updated, mutation = execute(owner_id, plan)
    progress: Progress = mutation.outcome
    logger.info(
        "synced steps owner=%s steps=%d xp=%d kobans=%d level=%d",
        owner_id, steps, xp_gained, kobans_gained, progress.level,
    )
    return updated, {
        "xp_gained": xp_gained,
        "kobans_gained": kobans_gained,
        "new_balance": updated.account.balance,
        "leveled_up": progress.leveled_up,
        "stage_evolved": progress.stage_evolved,
    }
