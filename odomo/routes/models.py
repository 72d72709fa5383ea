"""Pydantic request models for API endpoints."""

from pydantic import BaseModel, Field

from odomo.economy import MAX_STEPS_PER_SYNC
from odomo.engine import MAX_XP_GRANT
from odomo.models import InteractionType, ItemType


class CreatePet(BaseModel):
    name: str | None = Field(default=None, max_length=50)


class InteractBody(BaseModel):
    type: InteractionType
    amount: int = Field(default=30, ge=1, le=100)


class AddXpBody(BaseModel):
    amount: int = Field(ge=1, le=MAX_XP_GRANT)


class BuyItemBody(BaseModel):
    item_type: ItemType
    quantity: int = Field(default=1, ge=1)


class UseItemBody(BaseModel):
    item_type: ItemType


class SyncStepsBody(BaseModel):
    steps: int = Field(ge=0, le=MAX_STEPS_PER_SYNC)
