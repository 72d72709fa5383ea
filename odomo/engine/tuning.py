"""Game tuning: every constant the engine uses, as one immutable object."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PositiveFloat, PositiveInt, model_validator

from odomo.models import ItemType, Stage

from .items import DEFAULT_CATALOGUE, CatalogueEntry

DEFAULT_STAGE_THRESHOLDS: dict[Stage, int] = {
    Stage.TAMAGO: 0,
    Stage.CHIBI: 1,
    Stage.GENIN: 5,
    Stage.CHUNIN: 10,
    Stage.JONIN: 20,
    Stage.KAGE: 50,
}


class DecayRates(BaseModel):
    """Points lost per hour."""

    model_config = ConfigDict(frozen=True)

    hunger: float = Field(default=2.5, ge=0)
    happiness: float = Field(default=1.5, ge=0)
    hygiene: float = Field(default=2.0, ge=0)


class Tuning(BaseModel):
    model_config = ConfigDict(frozen=True)

    decay: DecayRates = Field(default_factory=DecayRates)
    sick_hours: PositiveFloat = 16
    dead_hours: PositiveFloat = 32
    attention_threshold: float = 30

    xp_base: PositiveInt = 100
    xp_exponent: PositiveFloat = 1.5
    stage_thresholds: dict[Stage, int] = Field(
        default_factory=lambda: dict(DEFAULT_STAGE_THRESHOLDS)
    )
    level_up_happiness_bonus: float = 5

    default_interaction_amount: int = Field(default=30, ge=1, le=100)
    interaction_happiness_bonus: float = 5
    heal_happiness_bonus: float = 10
    resurrection_baseline: float = Field(default=50, ge=0, le=100)

    xp_per_step: float = Field(default=0.1, ge=0)
    kobans_per_100_steps: int = Field(default=1, ge=0)

    catalogue: dict[ItemType, CatalogueEntry] = Field(
        default_factory=lambda: dict(DEFAULT_CATALOGUE)
    )

    @model_validator(mode="after")
    def _check_consistency(self) -> "Tuning":
        if self.dead_hours <= self.sick_hours:
            raise ValueError("dead_hours must be greater than sick_hours")
        missing = [s.value for s in Stage if s not in self.stage_thresholds]
        if missing:
            raise ValueError(f"stage_thresholds missing: {', '.join(missing)}")
        levels = [self.stage_thresholds[s] for s in Stage]
        if levels[0] != 0:
            raise ValueError("the first stage must start at level 0")
        if any(a >= b for a, b in zip(levels, levels[1:])):
            raise ValueError("stage_thresholds must be strictly ascending")
        return self

    @classmethod
    def from_overrides(cls, overrides: dict[str, Any] | None = None) -> "Tuning":
        """Build tuning from a partial dict (e.g. the `tuning` key of config.json).

        decay, stage_thresholds and catalogue are merged key by key over the
        defaults; every other key replaces its default.
        """
        overrides = dict(overrides or {})
        base = cls()
        if "decay" in overrides:
            overrides["decay"] = {**base.decay.model_dump(), **overrides["decay"]}
        if "stage_thresholds" in overrides:
            overrides["stage_thresholds"] = {
                **{s.value: v for s, v in base.stage_thresholds.items()},
                **overrides["stage_thresholds"],
            }
        if "catalogue" in overrides:
            overrides["catalogue"] = {
                **{t.value: e.model_dump() for t, e in base.catalogue.items()},
                **overrides["catalogue"],
            }
        return cls.model_validate(overrides)
