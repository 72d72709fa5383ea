"""Pure game engine: decay, lifecycle, progression and items.

Nothing in here touches storage or the clock; callers pass `now` and a
Tuning instance explicitly.
"""

from .decay import compute_live, derive_life_state, elapsed_hours  # noqa: F401
from .items import (  # noqa: F401
    DEFAULT_CATALOGUE,
    CatalogueEntry,
    Consumable,
    Healing,
    Resurrection,
    catalogue_entry,
    list_catalogue,
    purchase_cost,
    resolve_item,
)
from .lifecycle import (  # noqa: F401
    Checkpoint,
    ensure_not_dead,
    heal,
    interact,
    rebaseline,
    resurrect,
    validate_amount,
)
from .progression import MAX_XP_GRANT, Progress, apply_experience, stage_for_level, xp_required  # noqa: F401
from .tuning import DEFAULT_STAGE_THRESHOLDS, DecayRates, Tuning  # noqa: F401
