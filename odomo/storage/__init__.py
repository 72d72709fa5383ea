"""File-based JSON storage, one document per owner.

Data layout:
  data/
    owners/
      <owner_id>.json    Owner document:
                           account    {owner_id, balance, created_at}
                           pet        stored checkpoint or null
                           inventory  [{item_type, quantity}], quantity ≥ 1
    config.json          App settings (starting balance, tuning overrides)

Atomicity: every write replaces a whole owner document with os.replace, so
the account, pet and inventory of one owner always change together.

Isolation: writers hold the owner's lock (owner_lock) from the read that
their preconditions are checked against until the replace. Readers never
lock; they see the previous document or the next one.

Config: get_config() returns defaults merged with stored values.
update_config() applies partial updates, tuning merged key-by-key.
"""

# Re-export all public symbols so `from odomo import storage` keeps working.

from .core import (  # noqa: F401
    data_dir,
    init_storage,
    owner_path,
    owners_dir,
    validate_owner_id,
    write_json_atomic,
)

from .records import (  # noqa: F401
    create_owner,
    delete_owner,
    get_owner,
    list_owner_ids,
    load_raw,
    owner_lock,
    save_owner,
)

from .config import (  # noqa: F401
    get_config,
    update_config,
)
