"""Core domain models.

Persisted records (Pet, Account, InventoryEntry, OwnerRecord) and the derived
LiveStats structure returned by every facade operation. Pydantic is used for
validation and serialisation at every data boundary.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class LifeState(str, Enum):
    ALIVE = "ALIVE"
    SICK = "SICK"
    DEAD = "DEAD"


class Stage(str, Enum):
    """Progression tiers, declared in evolution order."""

    TAMAGO = "TAMAGO"
    CHIBI = "CHIBI"
    GENIN = "GENIN"
    CHUNIN = "CHUNIN"
    JONIN = "JONIN"
    KAGE = "KAGE"

    @property
    def rank(self) -> int:
        return list(Stage).index(self)


class InteractionType(str, Enum):
    FEED = "FEED"
    CLEAN = "CLEAN"
    HEAL = "HEAL"


class ItemType(str, Enum):
    ONIGIRI = "ONIGIRI"
    RAMEN = "RAMEN"
    BENTO_ROYAL = "BENTO_ROYAL"
    SOAP = "SOAP"
    MEDICINE = "MEDICINE"
    SOUL_STONE = "SOUL_STONE"


class Pet(BaseModel):
    """Stored checkpoint of an owner's pet.

    hunger/happiness/hygiene/life_state are baselines as of
    last_interaction_at; the live values are derived by the decay model.
    """

    id: str
    owner_id: str
    name: str = "Odomo"
    level: int = Field(default=1, ge=1)
    xp: int = Field(default=0, ge=0)
    stage: Stage = Stage.TAMAGO
    evolution_variant: str | None = None
    hunger: float = Field(default=100.0, ge=0, le=100)
    happiness: float = Field(default=100.0, ge=0, le=100)
    hygiene: float = Field(default=100.0, ge=0, le=100)
    life_state: LifeState = LifeState.ALIVE
    birth_date: datetime
    last_interaction_at: datetime
    last_step_sync_at: datetime


class Account(BaseModel):
    owner_id: str
    balance: int = Field(default=0, ge=0)  # Kobans
    created_at: datetime


class InventoryEntry(BaseModel):
    item_type: ItemType
    quantity: int = Field(gt=0)


class OwnerRecord(BaseModel):
    """Everything one owner holds, persisted as a single document."""

    account: Account
    pet: Pet | None = None
    inventory: list[InventoryEntry] = Field(default_factory=list)

    def entry(self, item_type: ItemType) -> InventoryEntry | None:
        for e in self.inventory:
            if e.item_type == item_type:
                return e
        return None


class LiveStats(BaseModel):
    """A pet as it is right now: stored fields plus decayed condition."""

    id: str
    owner_id: str
    name: str
    level: int
    xp: int
    stage: Stage
    evolution_variant: str | None = None
    hunger: float
    happiness: float
    hygiene: float
    life_state: LifeState
    birth_date: datetime
    last_interaction_at: datetime
    last_step_sync_at: datetime
    time_since_last_interaction: float  # hours
    needs_attention: bool
    is_sick: bool
    is_dead: bool
