"""Pet session facade: the operations the HTTP layer (or any caller) uses.

Every mutating operation follows the same shape: load the owner document,
derive live stats, validate, compute deltas, commit through the economy
coordinator, and return live stats recomputed from the committed record.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable

from odomo import economy, storage
from odomo.economy import Mutation, progress_update, require_pet
from odomo.engine import MAX_XP_GRANT, Tuning, apply_experience, compute_live, interact
from odomo.errors import InvalidRequest, NotFound
from odomo.models import InteractionType, ItemType, LiveStats, OwnerRecord, Pet

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 50


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _inventory_view(record: OwnerRecord) -> list[dict[str, Any]]:
    return [e.model_dump(mode="json") for e in record.inventory]


class PetService:
    def __init__(
        self,
        tuning: Tuning | None = None,
        clock: Callable[[], datetime] | None = None,
        starting_balance: int = 0,
    ) -> None:
        self.tuning = tuning or Tuning()
        self.clock = clock or utcnow
        self.starting_balance = starting_balance

    def _load(self, owner_id: str) -> OwnerRecord:
        record = storage.get_owner(owner_id)
        if record is None:
            raise NotFound("Account not found")
        return record

    def _live(self, record: OwnerRecord, now: datetime) -> LiveStats:
        return compute_live(require_pet(record), now, self.tuning)

    # ── Accounts & inventory ─────────────────────────────

    def open_account(self, owner_id: str, balance: int | None = None) -> dict[str, Any]:
        """Register an owner. Authentication lives elsewhere; this only creates records."""
        if balance is None:
            balance = self.starting_balance
        if isinstance(balance, bool) or not isinstance(balance, int) or balance < 0:
            raise InvalidRequest("Starting balance must be a non-negative integer")
        record = storage.create_owner(owner_id, balance)
        return self._account_view(record)

    def get_account(self, owner_id: str) -> dict[str, Any]:
        return self._account_view(self._load(owner_id))

    def get_inventory(self, owner_id: str) -> list[dict[str, Any]]:
        return _inventory_view(self._load(owner_id))

    def _account_view(self, record: OwnerRecord) -> dict[str, Any]:
        return {
            "owner_id": record.account.owner_id,
            "balance": record.account.balance,
            "inventory": _inventory_view(record),
            "has_pet": record.pet is not None,
        }

    # ── Pet lifecycle ────────────────────────────────────

    def create(self, owner_id: str, name: str | None = None) -> LiveStats:
        name = (name or "").strip() or "Odomo"
        if len(name) > MAX_NAME_LENGTH:
            raise InvalidRequest(f"Name must be at most {MAX_NAME_LENGTH} characters")
        now = self.clock()
        pet = Pet(
            id=uuid.uuid4().hex,
            owner_id=owner_id,
            name=name,
            birth_date=now,
            last_interaction_at=now,
            last_step_sync_at=now,
        )
        updated, _ = economy.execute(owner_id, lambda record: Mutation(create_pet=pet))
        logger.info("born owner=%s pet=%s name=%s", owner_id, pet.id, name)
        return self._live(updated, now)

    def get_live_stats(self, owner_id: str) -> LiveStats:
        """Read-only; never takes the owner lock."""
        record = storage.get_owner(owner_id)
        if record is None or record.pet is None:
            raise NotFound("Odomo not found")
        return self._live(record, self.clock())

    def delete(self, owner_id: str) -> None:
        """Remove the pet. The account and inventory are kept."""
        economy.execute(owner_id, lambda record: Mutation(delete_pet=True))
        logger.info("deleted pet owner=%s", owner_id)

    # ── Care ─────────────────────────────────────────────

    def interact(
        self, owner_id: str, kind: InteractionType, amount: int | None = None
    ) -> LiveStats:
        if amount is None:
            amount = self.tuning.default_interaction_amount
        now = self.clock()

        def plan(record: OwnerRecord) -> Mutation:
            live = self._live(record, now)
            checkpoint = interact(live, kind, amount, self.tuning)
            if live.life_state != checkpoint.life_state:
                logger.info(
                    "transition owner=%s %s -> %s via %s",
                    owner_id, live.life_state.value, checkpoint.life_state.value, kind.value,
                )
            return Mutation(pet=checkpoint.as_update(now))

        updated, _ = economy.execute(owner_id, plan)
        return self._live(updated, now)

    def add_experience(self, owner_id: str, amount: int) -> LiveStats:
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 1:
            raise InvalidRequest("XP amount must be a positive integer")
        if amount > MAX_XP_GRANT:
            raise InvalidRequest(f"XP amount cannot exceed {MAX_XP_GRANT}")
        now = self.clock()

        def plan(record: OwnerRecord) -> Mutation:
            live = self._live(record, now)
            progress = apply_experience(live, amount, self.tuning)
            return Mutation(pet=progress_update(progress, live, now), outcome=progress)

        updated, _ = economy.execute(owner_id, plan)
        return self._live(updated, now)

    # ── Economy ──────────────────────────────────────────

    def buy_item(self, owner_id: str, item_type: ItemType, quantity: int = 1) -> dict[str, Any]:
        return economy.purchase(owner_id, item_type, quantity, self.tuning)

    def use_item(self, owner_id: str, item_type: ItemType) -> dict[str, Any]:
        now = self.clock()
        updated, remaining = economy.consume(owner_id, item_type, self.tuning, now)
        return {
            "item_used": item_type,
            "remaining_quantity": remaining,
            "pet": self._live(updated, now),
        }

    def sync_steps(self, owner_id: str, steps: int) -> dict[str, Any]:
        now = self.clock()
        updated, result = economy.sync_steps(owner_id, steps, self.tuning, now)
        return {**result, "pet": self._live(updated, now)}
