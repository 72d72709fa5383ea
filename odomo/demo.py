"""Create demo owners for development/testing."""

import shutil
from datetime import datetime, timedelta, timezone

from odomo import storage
from odomo.models import ItemType
from odomo.pets import PetService

DEMO_OWNERS = [
    {
        "owner_id": "demo-happy",
        "name": "Mochi",
        "balance": 500,
        "inventory": {ItemType.ONIGIRI: 3, ItemType.SOAP: 1},
        "hours_ago": 2,
        "steps": 25_000,
    },
    {
        "owner_id": "demo-sick",
        "name": "Kuro",
        "balance": 120,
        "inventory": {ItemType.MEDICINE: 1},
        "hours_ago": 20,
        "steps": 0,
    },
    {
        "owner_id": "demo-dead",
        "name": "Hana",
        "balance": 250,
        "inventory": {ItemType.SOUL_STONE: 1},
        "hours_ago": 40,
        "steps": 0,
    },
]


def create_demo_data() -> list[str]:
    """Wipe existing owners and create one pet per lifecycle state.

    Pets are created through PetService with a clock set in the past, so the
    live state (ALIVE / SICK / DEAD) follows from real decay when read now.
    """
    if storage.owners_dir().exists():
        shutil.rmtree(storage.owners_dir())
    storage.owners_dir().mkdir(parents=True, exist_ok=True)

    now = datetime.now(timezone.utc)
    for demo in DEMO_OWNERS:
        then = now - timedelta(hours=demo["hours_ago"])
        pets = PetService(clock=lambda then=then: then)
        owner = demo["owner_id"]
        pets.open_account(owner, demo["balance"])
        pets.create(owner, demo["name"])
        if demo["steps"]:
            pets.sync_steps(owner, demo["steps"])
        for item_type, qty in demo["inventory"].items():
            pets.buy_item(owner, item_type, qty)

    return [d["owner_id"] for d in DEMO_OWNERS]
