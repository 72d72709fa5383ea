"""FastAPI API endpoints under /api.

Endpoint groups: health/settings/items, account + inventory, pet, sync.
Every endpoint except health, items and settings acts on the owner named
by the X-Owner-Id header.
"""

from fastapi import APIRouter

from .account import router as account_router
from .pet import router as pet_router
from .settings import router as settings_router
from .sync import router as sync_router

router = APIRouter()
router.include_router(settings_router)
router.include_router(account_router)
router.include_router(pet_router)
router.include_router(sync_router)
