"""Time-based reconstruction of a pet's live condition.

Stored condition values are a checkpoint; what the owner sees is derived from
that checkpoint and the hours elapsed since it was written.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from odomo.models import LifeState, LiveStats, Pet

if TYPE_CHECKING:
    from .tuning import Tuning


def as_utc(moment: datetime) -> datetime:
    """Treat naive datetimes (legacy records) as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def elapsed_hours(since: datetime, now: datetime) -> float:
    """Hours between two instants, never negative (backward clock skew → 0)."""
    seconds = (as_utc(now) - as_utc(since)).total_seconds()
    return max(0.0, seconds / 3600)


def derive_life_state(stored: LifeState, hours: float, tuning: Tuning) -> LifeState:
    if hours > tuning.dead_hours:
        return LifeState.DEAD
    if hours > tuning.sick_hours:
        return LifeState.SICK
    # decay never upgrades a sick or dead pet
    return stored


def _decayed(baseline: float, rate: float, hours: float) -> float:
    return max(0.0, min(100.0, baseline - rate * hours))


def compute_live(pet: Pet, now: datetime, tuning: Tuning) -> LiveStats:
    """Derive live stats from the stored checkpoint. Pure and idempotent."""
    hours = elapsed_hours(pet.last_interaction_at, now)
    hunger = _decayed(pet.hunger, tuning.decay.hunger, hours)
    happiness = _decayed(pet.happiness, tuning.decay.happiness, hours)
    hygiene = _decayed(pet.hygiene, tuning.decay.hygiene, hours)
    state = derive_life_state(pet.life_state, hours, tuning)
    threshold = tuning.attention_threshold

    return LiveStats(
        id=pet.id,
        owner_id=pet.owner_id,
        name=pet.name,
        level=pet.level,
        xp=pet.xp,
        stage=pet.stage,
        evolution_variant=pet.evolution_variant,
        hunger=round(hunger, 1),
        happiness=round(happiness, 1),
        hygiene=round(hygiene, 1),
        life_state=state,
        birth_date=pet.birth_date,
        last_interaction_at=pet.last_interaction_at,
        last_step_sync_at=pet.last_step_sync_at,
        time_since_last_interaction=round(hours, 1),
        needs_attention=hunger < threshold or happiness < threshold or hygiene < threshold,
        is_sick=state == LifeState.SICK,
        is_dead=state == LifeState.DEAD,
    )
