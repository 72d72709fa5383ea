"""Item catalogue and effect resolution.

Each catalogue entry has a price in Kobans and one effect variant:

  Consumable    stat deltas (hunger / happiness / hygiene), pet must not be dead
  Healing       SICK → ALIVE plus a happiness delta, pet must be sick
  Resurrection  DEAD → ALIVE with baselines reset, pet must be dead
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, PositiveInt

from odomo.errors import InvalidRequest
from odomo.models import ItemType, LiveStats

from . import lifecycle
from .lifecycle import Checkpoint

if TYPE_CHECKING:
    from .tuning import Tuning


class Consumable(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["consumable"] = "consumable"
    hunger: float = 0
    happiness: float = 0
    hygiene: float = 0


class Healing(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["healing"] = "healing"
    happiness: float = 0


class Resurrection(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["resurrection"] = "resurrection"


ItemEffect = Annotated[Union[Consumable, Healing, Resurrection], Field(discriminator="kind")]


class CatalogueEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    price: PositiveInt
    effect: ItemEffect


DEFAULT_CATALOGUE: dict[ItemType, CatalogueEntry] = {
    # Food
    ItemType.ONIGIRI: CatalogueEntry(price=10, effect=Consumable(hunger=20)),
    ItemType.RAMEN: CatalogueEntry(price=25, effect=Consumable(hunger=40, happiness=10)),
    ItemType.BENTO_ROYAL: CatalogueEntry(price=50, effect=Consumable(hunger=100, happiness=20)),
    # Hygiene
    ItemType.SOAP: CatalogueEntry(price=15, effect=Consumable(hygiene=50, happiness=5)),
    # Care
    ItemType.MEDICINE: CatalogueEntry(price=40, effect=Healing(happiness=15)),
    ItemType.SOUL_STONE: CatalogueEntry(price=200, effect=Resurrection()),
}


def catalogue_entry(catalogue: dict[ItemType, CatalogueEntry], item_type: ItemType) -> CatalogueEntry:
    entry = catalogue.get(item_type)
    if entry is None:
        raise InvalidRequest(f"Unknown item type: {item_type}")
    return entry


def purchase_cost(
    catalogue: dict[ItemType, CatalogueEntry], item_type: ItemType, quantity: Any
) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise InvalidRequest("Quantity must be at least 1")
    return catalogue_entry(catalogue, item_type).price * quantity


def list_catalogue(catalogue: dict[ItemType, CatalogueEntry]) -> list[dict[str, Any]]:
    """Catalogue as plain dicts for clients, ordered by item type."""
    return [
        {"item_type": item_type.value, **entry.model_dump()}
        for item_type, entry in sorted(catalogue.items(), key=lambda kv: kv[0].value)
    ]


def resolve_item(item_type: ItemType, live: LiveStats, tuning: Tuning) -> Checkpoint:
    """Validate lifecycle preconditions for using an item and compute the checkpoint."""
    effect = catalogue_entry(tuning.catalogue, item_type).effect
    if isinstance(effect, Resurrection):
        return lifecycle.resurrect(live, tuning.resurrection_baseline)
    if isinstance(effect, Healing):
        return lifecycle.heal(live, effect.happiness)
    if isinstance(effect, Consumable):
        lifecycle.ensure_not_dead(live, "use items on")
        return lifecycle.rebaseline(
            live,
            hunger=effect.hunger,
            happiness=effect.happiness,
            hygiene=effect.hygiene,
        )
    raise TypeError(f"Unhandled item effect: {effect!r}")
