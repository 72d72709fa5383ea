"""Storage initialization, path helpers, and owner id validation."""

import json
import os
import re
from pathlib import Path
from typing import Any

from odomo.errors import InvalidRequest

_data_dir: Path | None = None

_OWNER_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.@-]{0,127}$")


def validate_owner_id(owner_id: str) -> str:
    """Owner ids double as file names, so only a safe alphabet is accepted.

    "user-42" → "user-42", "../etc" → InvalidRequest
    """
    if not isinstance(owner_id, str) or not _OWNER_ID_RE.match(owner_id):
        raise InvalidRequest(f"Invalid owner id: {owner_id!r}")
    return owner_id


def init_storage(data_dir: Path) -> None:
    global _data_dir
    from . import records as _records_mod

    _data_dir = data_dir
    _data_dir.mkdir(parents=True, exist_ok=True)
    owners_dir().mkdir(exist_ok=True)
    _records_mod.reset_locks()


def data_dir() -> Path:
    assert _data_dir is not None, "Call init_storage() before using storage"
    return _data_dir


def owners_dir() -> Path:
    return data_dir() / "owners"


def owner_path(owner_id: str) -> Path:
    return owners_dir() / f"{validate_owner_id(owner_id)}.json"


def write_json_atomic(path: Path, data: Any) -> None:
    """Write JSON so readers see either the old file or the new one, never a mix.

    The payload goes to a sibling temp file which is fsynced and then moved
    over the target with os.replace. If anything fails before the replace the
    target is untouched and the temp file is removed.
    """
    tmp = path.with_name(f".{path.name}.tmp")
    try:
        with open(tmp, "w") as f:
            f.write(json.dumps(data, indent=2))
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
