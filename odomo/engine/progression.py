"""Experience, level-ups and stage evolution."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from odomo.errors import InvalidRequest
from odomo.models import LiveStats, Stage

from .lifecycle import clamp, ensure_not_dead

if TYPE_CHECKING:
    from .tuning import Tuning

# Largest single XP grant; bounds the level-up loop.
MAX_XP_GRANT = 1_000_000


@dataclass(frozen=True)
class Progress:
    xp: int
    level: int
    stage: Stage
    leveled_up: bool
    stage_evolved: bool
    levels_gained: int
    happiness: float | None  # new happiness when leveled up, else None


def xp_required(level: int, base: int = 100, exponent: float = 1.5) -> int:
    """XP needed to go from `level` to `level + 1`: floor(base · level^exponent)."""
    return math.floor(base * level ** exponent)


def stage_for_level(level: int, thresholds: dict[Stage, int]) -> Stage:
    reached = Stage.TAMAGO
    for stage in Stage:
        if level >= thresholds[stage]:
            reached = stage
    return reached


def apply_experience(live: LiveStats, gained_xp: int, tuning: Tuning) -> Progress:
    if isinstance(gained_xp, bool) or not isinstance(gained_xp, int) or gained_xp < 0:
        raise InvalidRequest("Experience must be a non-negative integer")
    if gained_xp > MAX_XP_GRANT:
        raise InvalidRequest(f"Experience grant cannot exceed {MAX_XP_GRANT}")
    ensure_not_dead(live, "add XP to")

    xp = live.xp + gained_xp
    level = live.level
    while True:
        needed = xp_required(level, tuning.xp_base, tuning.xp_exponent)
        if xp < needed:
            break
        xp -= needed
        level += 1

    stage = stage_for_level(level, tuning.stage_thresholds)
    if stage.rank < live.stage.rank:
        stage = live.stage

    levels_gained = level - live.level
    happiness = None
    if levels_gained:
        happiness = clamp(live.happiness + levels_gained * tuning.level_up_happiness_bonus)

    return Progress(
        xp=xp,
        level=level,
        stage=stage,
        leveled_up=levels_gained > 0,
        stage_evolved=stage != live.stage,
        levels_gained=levels_gained,
        happiness=happiness,
    )
