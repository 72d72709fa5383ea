"""Owner documents: one JSON file per owner holding account, pet and inventory.

Keeping an owner's three record kinds in one document makes a multi-record
commit a single atomic file replace. Writers must hold the owner's lock from
`owner_lock()` across read-check-write; readers never lock.
"""

import json
import logging
import threading
import weakref
from datetime import datetime, timezone

from odomo.errors import Conflict
from odomo.models import Account, OwnerRecord

from .core import owner_path, owners_dir, validate_owner_id, write_json_atomic

logger = logging.getLogger(__name__)

# Entries live only while some caller holds a reference to the lock.
_locks: weakref.WeakValueDictionary[str, threading.Lock] = weakref.WeakValueDictionary()
_locks_guard = threading.Lock()


def reset_locks() -> None:
    with _locks_guard:
        _locks.clear()


def owner_lock(owner_id: str) -> threading.Lock:
    """The process-wide mutex serializing writes for one owner."""
    validate_owner_id(owner_id)
    with _locks_guard:
        lock = _locks.get(owner_id)
        if lock is None:
            lock = _locks[owner_id] = threading.Lock()
        return lock


def get_owner(owner_id: str) -> OwnerRecord | None:
    path = owner_path(owner_id)
    if not path.is_file():
        return None
    return OwnerRecord.model_validate_json(path.read_text())


def save_owner(record: OwnerRecord) -> None:
    """Persist the whole document atomically. Caller holds the owner lock."""
    path = owner_path(record.account.owner_id)
    write_json_atomic(path, record.model_dump(mode="json"))
    logger.debug("saved owner=%s", record.account.owner_id)


def create_owner(owner_id: str, balance: int = 0) -> OwnerRecord:
    """Open an account with an empty inventory and no pet."""
    with owner_lock(owner_id):
        if owner_path(owner_id).is_file():
            raise Conflict("Account already exists")
        record = OwnerRecord(
            account=Account(
                owner_id=owner_id,
                balance=balance,
                created_at=datetime.now(timezone.utc),
            ),
        )
        save_owner(record)
    logger.info("opened account owner=%s balance=%d", owner_id, balance)
    return record


def list_owner_ids() -> list[str]:
    return sorted(path.stem for path in owners_dir().glob("*.json"))


def delete_owner(owner_id: str) -> bool:
    with owner_lock(owner_id):
        path = owner_path(owner_id)
        if not path.is_file():
            return False
        path.unlink()
    return True


def load_raw(owner_id: str) -> dict | None:
    """The stored JSON as-is, for debugging and tests."""
    path = owner_path(owner_id)
    if not path.is_file():
        return None
    return json.loads(path.read_text())
