"""ALIVE / SICK / DEAD state machine and checkpoint computation.

Decay moves a pet ALIVE → SICK → DEAD on its own. The only ways back are a
heal (SICK → ALIVE) and a resurrection (DEAD → ALIVE, baselines reset).
Every transition produces a Checkpoint: the full set of baselines to store
together with a refreshed last_interaction_at.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from odomo.errors import InvalidRequest, PreconditionFailed, TerminalState
from odomo.models import InteractionType, LifeState, LiveStats

if TYPE_CHECKING:
    from .tuning import Tuning

MIN_AMOUNT = 1
MAX_AMOUNT = 100


@dataclass(frozen=True)
class Checkpoint:
    hunger: float
    happiness: float
    hygiene: float
    life_state: LifeState

    def as_update(self, now: datetime) -> dict[str, Any]:
        """Pet field updates for this checkpoint; always resets the decay clock."""
        return {
            "hunger": self.hunger,
            "happiness": self.happiness,
            "hygiene": self.hygiene,
            "life_state": self.life_state,
            "last_interaction_at": now,
        }


def clamp(value: float) -> float:
    return max(0.0, min(100.0, value))


def ensure_not_dead(live: LiveStats, action: str) -> None:
    if live.is_dead:
        raise TerminalState(f"Cannot {action} a dead Odomo. Use SOUL_STONE first.")


def rebaseline(
    live: LiveStats,
    *,
    hunger: float = 0,
    happiness: float = 0,
    hygiene: float = 0,
    life_state: LifeState | None = None,
) -> Checkpoint:
    """Checkpoint built from the live values plus deltas, clamped to [0, 100]."""
    return Checkpoint(
        hunger=clamp(live.hunger + hunger),
        happiness=clamp(live.happiness + happiness),
        hygiene=clamp(live.hygiene + hygiene),
        life_state=life_state or live.life_state,
    )


def validate_amount(amount: Any) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidRequest("Amount must be an integer")
    if not MIN_AMOUNT <= amount <= MAX_AMOUNT:
        raise InvalidRequest(f"Amount must be between {MIN_AMOUNT} and {MAX_AMOUNT}")
    return amount


def heal(live: LiveStats, happiness_bonus: float) -> Checkpoint:
    ensure_not_dead(live, "heal")
    if not live.is_sick:
        raise PreconditionFailed("Odomo is not sick")
    return rebaseline(live, happiness=happiness_bonus, life_state=LifeState.ALIVE)


def resurrect(live: LiveStats, baseline: float) -> Checkpoint:
    """Death is lossy: every baseline restarts at the same midpoint."""
    if not live.is_dead:
        raise PreconditionFailed("Odomo is not dead")
    return Checkpoint(
        hunger=baseline,
        happiness=baseline,
        hygiene=baseline,
        life_state=LifeState.ALIVE,
    )


def interact(live: LiveStats, kind: InteractionType, amount: int, tuning: Tuning) -> Checkpoint:
    if kind == InteractionType.HEAL:
        return heal(live, tuning.heal_happiness_bonus)

    amount = validate_amount(amount)
    ensure_not_dead(live, "interact with")
    bonus = tuning.interaction_happiness_bonus
    if kind == InteractionType.FEED:
        return rebaseline(live, hunger=amount, happiness=bonus)
    if kind == InteractionType.CLEAN:
        return rebaseline(live, hygiene=amount, happiness=bonus)
    raise InvalidRequest(f"Unknown interaction type: {kind}")
